from __future__ import annotations

"""Rate snapshot cache backends.

Purpose:
    Keep the last successfully fetched rate store so a session can still
    convert when the quote service is unreachable.

Design:
    - One document under a fixed key (``{app_id}/cache/rates``); every save
      overwrites it, no versioning.
    - ``SQLiteRateCache`` persists to the ``documents`` table; sqlite calls run
      in a worker thread so the event loop stays free.
    - ``InMemoryRateCache`` backs API-only mode and tests.
    - Backend errors are raised as ``PersistenceFailure``; callers decide
      whether to surface them.
"""
import asyncio
import logging
import sqlite3
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from fxconvert.core.errors import PersistenceFailure
from fxconvert.models.constants import CACHE_DOC_KEY
from fxconvert.models.rates import RateSnapshot
from .base import RateCache

if TYPE_CHECKING:  # pragma: no cover
    from fxconvert.core.config import Settings
    from fxconvert.db.dal import Database

logger = logging.getLogger("fxconvert.rates.cache")


def cache_key(app_id: str) -> str:
    return f"{app_id}/{CACHE_DOC_KEY}"


class SQLiteRateCache(RateCache):
    def __init__(self, db: "Database", app_id: str):
        self._db = db
        self._key = cache_key(app_id)

    async def save(self, snapshot: RateSnapshot) -> None:
        doc = {
            "rates": snapshot.rates_json,
            "timestamp": snapshot.timestamp.isoformat(),
            "base": snapshot.base_currency,
        }
        try:
            await asyncio.to_thread(self._db.set_document, self._key, doc)
        except sqlite3.Error as e:
            raise PersistenceFailure(f"could not save rate snapshot: {e}") from e

    async def load(self) -> Optional[RateSnapshot]:
        try:
            doc = await asyncio.to_thread(self._db.get_document, self._key)
        except (sqlite3.Error, ValueError) as e:
            raise PersistenceFailure(f"could not load rate snapshot: {e}") from e
        if doc is None:
            return None
        try:
            return RateSnapshot(
                rates_json=doc["rates"],
                timestamp=doc["timestamp"],
                base_currency=doc["base"],
            )
        except (KeyError, ValidationError) as e:
            raise PersistenceFailure(f"stored rate snapshot is corrupt: {e}") from e


class InMemoryRateCache(RateCache):
    def __init__(self, snapshot: Optional[RateSnapshot] = None):
        self._snapshot = snapshot
        self.saves = 0

    async def save(self, snapshot: RateSnapshot) -> None:
        self._snapshot = snapshot
        self.saves += 1

    async def load(self) -> Optional[RateSnapshot]:
        return self._snapshot


def make_rate_cache(settings: "Settings", db: Optional["Database"] = None) -> RateCache:
    if settings.persistence_enabled and db is not None:
        return SQLiteRateCache(db, settings.app_id)
    logger.info("persistence disabled; rate cache is process-local")
    return InMemoryRateCache()
