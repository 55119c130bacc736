"""Database schema DDL definitions and initialization utilities.

Tables:
  - documents: key/value JSON documents (rate snapshot cache, last write wins)
  - favorites: per-user favorite currency pairs
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

DOCUMENTS_DDL = f"""
CREATE TABLE IF NOT EXISTS documents (
    key TEXT PRIMARY KEY, -- e.g. 'default-app-id/cache/rates'
    value TEXT NOT NULL, -- JSON object
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

FAVORITES_DDL = f"""
CREATE TABLE IF NOT EXISTS favorites (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    from_currency TEXT NOT NULL,
    to_currency TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

DDL_ORDER: Sequence[str] = (
    DOCUMENTS_DDL,
    FAVORITES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
