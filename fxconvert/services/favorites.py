from __future__ import annotations

"""Per-user favorite currency pairs with live snapshots.

``FavoritesService`` wraps a ``FavoritesStore`` for one signed-in user. Every
successful add/remove republishes the full set to all open subscriptions, so
consumers simply re-render whatever they receive. Ordering within a snapshot
carries no meaning.

Uniqueness of (from, to) is not enforced here; ``toggle`` on the session is
where a pair is added only when absent.
"""
import asyncio
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Dict, List, Optional, Set

from fxconvert.core.errors import NotAuthenticated, PersistenceFailure
from fxconvert.models.favorites import FavoritePair, pair_key

if TYPE_CHECKING:  # pragma: no cover
    from fxconvert.db.dal import Database

logger = logging.getLogger("fxconvert.favorites")

_CLOSED = object()


class FavoritesStore(ABC):
    @abstractmethod
    async def list(self, user_id: str) -> List[FavoritePair]:
        raise NotImplementedError

    @abstractmethod
    async def add(self, user_id: str, from_currency: str, to_currency: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def remove(self, user_id: str, fav_id: str) -> None:
        raise NotImplementedError


class SQLiteFavoritesStore(FavoritesStore):
    def __init__(self, db: "Database"):
        self._db = db

    async def list(self, user_id: str) -> List[FavoritePair]:
        try:
            rows = await asyncio.to_thread(self._db.list_favorites, user_id)
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Error loading favorites: {e}") from e
        return [FavoritePair(**row) for row in rows]

    async def add(self, user_id: str, from_currency: str, to_currency: str) -> str:
        try:
            return await asyncio.to_thread(
                self._db.add_favorite, user_id, from_currency, to_currency
            )
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Failed to save favorite: {e}") from e

    async def remove(self, user_id: str, fav_id: str) -> None:
        try:
            await asyncio.to_thread(self._db.delete_favorite, user_id, fav_id)
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Failed to remove favorite: {e}") from e


class InMemoryFavoritesStore(FavoritesStore):
    def __init__(self) -> None:
        self._rows: Dict[str, Dict[str, FavoritePair]] = {}
        self._seq = 0

    async def list(self, user_id: str) -> List[FavoritePair]:
        return list(self._rows.get(user_id, {}).values())

    async def add(self, user_id: str, from_currency: str, to_currency: str) -> str:
        self._seq += 1
        fav_id = f"fav-{self._seq}"
        self._rows.setdefault(user_id, {})[fav_id] = FavoritePair(
            id=fav_id,
            from_currency=from_currency,
            to_currency=to_currency,
            created_at=datetime.now(timezone.utc),
        )
        return fav_id

    async def remove(self, user_id: str, fav_id: str) -> None:
        self._rows.get(user_id, {}).pop(fav_id, None)


class FavoritesSubscription:
    """Async iterator of full favorite sets; ``close()`` ends iteration."""

    def __init__(self, service: "FavoritesService"):
        self._service = service
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def push(self, snapshot: List[FavoritePair]) -> None:
        if not self.closed:
            self._queue.put_nowait(list(snapshot))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._service._subscribers.discard(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "FavoritesSubscription":
        return self

    async def __anext__(self) -> List[FavoritePair]:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "FavoritesSubscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class FavoritesService:
    def __init__(self, store: FavoritesStore, user_id: Optional[str]):
        self._store = store
        self._user_id = user_id
        self._subscribers: Set[FavoritesSubscription] = set()
        self._current: List[FavoritePair] = []

    @property
    def owner(self) -> Optional[str]:
        return self._user_id

    @property
    def user_id(self) -> str:
        if not self._user_id:
            raise NotAuthenticated(
                "Please wait for authentication to complete before saving favorites."
            )
        return self._user_id

    def projection(self) -> Dict[str, str]:
        """Last published set as ``{"FROM/TO": id}``."""
        return {fav.pair: fav.id for fav in self._current}

    def has(self, from_currency: str, to_currency: str) -> bool:
        return pair_key(from_currency, to_currency) in self.projection()

    async def list(self) -> List[FavoritePair]:
        self._current = await self._store.list(self.user_id)
        return list(self._current)

    async def subscribe(self) -> FavoritesSubscription:
        user_id = self.user_id
        sub = FavoritesSubscription(self)
        self._subscribers.add(sub)
        try:
            self._current = await self._store.list(user_id)
        except PersistenceFailure:
            sub.close()
            raise
        sub.push(self._current)
        return sub

    async def add(self, from_currency: str, to_currency: str) -> str:
        fav_id = await self._store.add(
            self.user_id, from_currency.upper(), to_currency.upper()
        )
        logger.info("favorite %s added", pair_key(from_currency, to_currency))
        await self._publish()
        return fav_id

    async def remove(self, fav_id: str) -> None:
        await self._store.remove(self.user_id, fav_id)
        logger.info("favorite %s removed", fav_id)
        await self._publish()

    async def _publish(self) -> None:
        self._current = await self._store.list(self.user_id)
        for sub in list(self._subscribers):
            sub.push(self._current)

    def close(self) -> None:
        for sub in list(self._subscribers):
            sub.close()
