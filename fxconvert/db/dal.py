"""Data Access Layer for the converter's document store.

Responsibilities
----------------
- Read/write JSON documents keyed by a fixed path (rate snapshot cache).
- CRUD helpers for per-user favorite pairs.

Calls are synchronous and short; async callers wrap them with
``asyncio.to_thread``.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Documents
    def get_document(self, key: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM documents WHERE key = ?", (key,))
            row = cur.fetchone()
        if not row:
            return None
        return json.loads(row[0])

    def set_document(self, key: str, value: Dict[str, Any]) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO documents (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = ({UTC_NOW_SQL})
                """,
                (key, payload),
            )

    # ------------------------------------------------------------------
    # Favorites
    def list_favorites(self, user_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, from_currency, to_currency, created_at
                FROM favorites
                WHERE user_id = ?
                ORDER BY created_at ASC, id ASC
                """,
                (user_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def add_favorite(self, user_id: str, from_currency: str, to_currency: str) -> str:
        fav_id = uuid.uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO favorites (id, user_id, from_currency, to_currency)
                VALUES (?, ?, ?, ?)
                """,
                (fav_id, user_id, from_currency, to_currency),
            )
        return fav_id

    def delete_favorite(self, user_id: str, fav_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM favorites WHERE id = ? AND user_id = ?",
                (fav_id, user_id),
            )
            return cur.rowcount > 0
