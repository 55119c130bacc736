from __future__ import annotations

"""Live rate fetcher for the Frankfurter-compatible quote service.

``fetch_rates`` issues ``GET {api}/latest?from={base}`` with bounded attempts and
exponential backoff (1s, 2s, 4s, ... between attempts, no jitter). A success
schedules a write-through of the new snapshot to the rate cache in the
background; that write never affects the caller's result.
"""
import asyncio
import logging
from typing import Optional, Set

import httpx

from fxconvert.models.rates import RateSnapshot
from fxconvert.services.http_client import HttpError, Sleep, get_with_retry
from .base import RateCache
from .store import RateStore

logger = logging.getLogger("fxconvert.rates.fetcher")


class RemoteRateFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_base_url: str,
        cache: Optional[RateCache] = None,
        *,
        backoff: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self._client = client
        self._api = api_base_url.rstrip("/")
        self._cache = cache
        self._backoff = backoff
        self._sleep = sleep
        # Strong refs so pending cache writes are not garbage collected
        self._pending: Set[asyncio.Task] = set()

    async def fetch_rates(self, base: str, max_retries: int = 3) -> RateStore:
        base = base.upper()
        try:
            store = await get_with_retry(
                self._client,
                f"{self._api}/latest",
                lambda data: RateStore.from_payload(data, base),
                params={"from": base},
                attempts=max_retries,
                backoff=self._backoff,
                sleep=self._sleep,
            )
        except HttpError:
            logger.error(
                "failed to fetch live rates for base %s after %d attempts",
                base,
                max_retries,
            )
            raise
        logger.info(
            "rates fetched for base %s (%d currencies)",
            store.base,
            len(store),
            extra={"base": store.base},
        )
        self._schedule_cache_write(store)
        return store

    def _schedule_cache_write(self, store: RateStore) -> None:
        if self._cache is None:
            return
        task = asyncio.create_task(self._write_through(store))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_through(self, store: RateStore) -> None:
        try:
            await self._cache.save(RateSnapshot.from_store(store))  # type: ignore[union-attr]
            logger.info("rates cached for base %s", store.base)
        except Exception:
            logger.exception("error saving rates cache")

    async def drain(self) -> None:
        """Wait for pending cache writes (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
