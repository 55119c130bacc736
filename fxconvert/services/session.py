from __future__ import annotations

"""Session context: the one place that owns mutable converter state.

Holds the current rate store, offline flag, identity and favorites, and
composes the fetcher, cache, conversion engine and trend analyzer:

    refresh_rates()  live fetch -> cache fallback -> critical alert
    convert()        pure conversion over the current store
    trend()          on-demand history, superseding any in-flight request
    toggle_favorite() check-then-act add/remove of a pair

Failures are turned into alerts at this boundary; the session itself never
stops, and a rate-less session keeps answering with ``NotReady``.
"""
import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Dict, Optional

import httpx

from fxconvert.core.errors import (
    ConverterError,
    NotAuthenticated,
    PersistenceFailure,
    TransportFailure,
)
from fxconvert.models.favorites import FavoriteToggleOut, pair_key
from fxconvert.models.rates import RatesStatus
from fxconvert.models.trend import SUPERSEDED, TrendEmpty
from fxconvert.services.alerts import AlertQueue
from fxconvert.services.favorites import (
    FavoritesService,
    FavoritesStore,
    FavoritesSubscription,
    SQLiteFavoritesStore,
)
from fxconvert.services.http_client import Sleep
from fxconvert.services.identity import IdentityService
from fxconvert.services.rates.base import RateCache
from fxconvert.services.rates.cache_service import make_rate_cache
from fxconvert.services.rates.conversion import (
    ConversionResult,
    convert as convert_amount,
    normalize_currency,
)
from fxconvert.services.rates.fetcher import RemoteRateFetcher
from fxconvert.services.rates.store import RateStore
from fxconvert.services.trend import HistoricalTrendAnalyzer, TrendResult, utc_today

if TYPE_CHECKING:  # pragma: no cover
    import datetime as dt

    from fxconvert.core.config import Settings
    from fxconvert.db.dal import Database

logger = logging.getLogger("fxconvert.session")


class SessionContext:
    def __init__(
        self,
        settings: "Settings",
        fetcher: RemoteRateFetcher,
        cache: RateCache,
        analyzer: HistoricalTrendAnalyzer,
        identity: Optional[IdentityService] = None,
        favorites_store: Optional[FavoritesStore] = None,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.cache = cache
        self.analyzer = analyzer
        self.identity = identity or IdentityService()
        self.favorites_store = favorites_store
        self.favorites: Optional[FavoritesService] = None
        self.alerts = AlertQueue(maxlen=settings.alerts_max)

        self.store: Optional[RateStore] = None
        self.offline = False
        # Latest projection delivered by the favorites subscription
        self.favorites_view: Dict[str, str] = {}

        self._fetch_seq = 0
        self._trend_task: Optional[asyncio.Task] = None
        self._toggle_lock = asyncio.Lock()
        self._favorites_sub: Optional[FavoritesSubscription] = None
        self._favorites_task: Optional[asyncio.Task] = None

    # Rates -------------------------------------------------------
    @property
    def has_rates(self) -> bool:
        return self.store is not None

    @property
    def online(self) -> bool:
        return self.has_rates and not self.offline

    def _replace_store(self, store: Optional[RateStore], offline: bool) -> None:
        # Single reference swap; readers keep whichever map they already hold
        self.store = store
        self.offline = offline

    async def refresh_rates(self) -> bool:
        """Fetch live rates, falling back to the cache. True when rates are usable."""
        self._fetch_seq += 1
        seq = self._fetch_seq
        self._supersede_trend()
        try:
            store = await self.fetcher.fetch_rates(
                self.settings.base_currency, self.settings.fetch_max_retries
            )
        except TransportFailure:
            logger.error("Failed to fetch live rates. Attempting to load cache.")
            return await self._load_cached(seq)
        if seq != self._fetch_seq:
            logger.info(
                "discarding rates from superseded fetch #%d", seq, extra={"fetch_seq": seq}
            )
            return self.has_rates
        self._replace_store(store, offline=False)
        return True

    async def _load_cached(self, seq: int) -> bool:
        try:
            snapshot = await self.cache.load()
        except PersistenceFailure:
            logger.exception("error loading rates cache")
            snapshot = None
        if seq != self._fetch_seq:
            logger.info("discarding cache fallback from superseded fetch #%d", seq)
            return self.has_rates
        if snapshot is None:
            self._replace_store(None, offline=False)
            self.alerts.push(
                "Critical error: Cannot load live rates or cache. Check API/Internet.",
                level="critical",
            )
            return False
        self._replace_store(snapshot.to_store(), offline=True)
        self.alerts.push(
            "Loaded exchange rates from cache "
            f"(Last updated: {snapshot.timestamp.strftime('%H:%M:%S')})."
        )
        return True

    async def initialize(self) -> bool:
        """Sign in, load rates once and start the favorites listener."""
        if self.favorites_store is not None and not self.identity.is_ready:
            try:
                self.identity.sign_in(self.settings.auth_token)
            except ValueError:
                logger.exception("sign-in failed; favorites disabled")
        if not self.has_rates:
            await self.refresh_rates()
        await self.start_favorites()
        return self.has_rates

    # Conversion --------------------------------------------------
    def convert(self, amount: object, from_currency: str, to_currency: str) -> ConversionResult:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        try:
            return convert_amount(amount, from_currency, to_currency, self.store)
        except ConverterError as e:
            self.alerts.push(e.message, level="warn")
            raise

    def is_favorite(self, from_currency: str, to_currency: str) -> bool:
        if self.favorites is None:
            return False
        return self.favorites.has(from_currency, to_currency)

    # Trend -------------------------------------------------------
    def _supersede_trend(self) -> None:
        previous, self._trend_task = self._trend_task, None
        if previous is not None and not previous.done():
            previous.cancel()

    async def trend(
        self, from_currency: str, to_currency: str, days: Optional[int] = None
    ) -> TrendResult:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        self._supersede_trend()
        task = asyncio.create_task(
            self.analyzer.analyze(
                from_currency,
                to_currency,
                days or self.settings.trend_days,
                online=self.online,
            )
        )
        self._trend_task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._trend_task is not task:
                return TrendEmpty(reason=SUPERSEDED)
            raise
        except TransportFailure:
            logger.exception("Error fetching historical rates")
            self.alerts.push(
                "Error retrieving historical data. API limit or error.", level="warn"
            )
            raise

    # Favorites ---------------------------------------------------
    def require_favorites(self) -> FavoritesService:
        if self.favorites_store is None:
            raise PersistenceFailure("Favorites are unavailable in API-only mode.")
        if not self.identity.is_ready:
            raise NotAuthenticated(
                "Please wait for authentication to complete before saving favorites."
            )
        if self.favorites is None or self.favorites.owner != self.identity.user_id:
            self.favorites = FavoritesService(self.favorites_store, self.identity.user_id)
        return self.favorites

    async def start_favorites(self) -> None:
        if self.favorites_store is None or not self.identity.is_ready:
            return
        if self._favorites_task is not None and not self._favorites_task.done():
            return
        try:
            self._favorites_sub = await self.require_favorites().subscribe()
        except PersistenceFailure as e:
            self.alerts.push(f"Error loading favorites: {e.message}", level="warn")
            return
        self._favorites_task = asyncio.create_task(self._listen(self._favorites_sub))

    async def _listen(self, sub: FavoritesSubscription) -> None:
        async for snapshot in sub:
            self.favorites_view = {fav.pair: fav.id for fav in snapshot}
            logger.debug("favorites updated: %d pairs", len(snapshot))

    async def toggle_favorite(self, from_currency: str, to_currency: str) -> FavoriteToggleOut:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        key = pair_key(from_currency, to_currency)
        async with self._toggle_lock:
            favorites = self.require_favorites()
            try:
                current = {fav.pair: fav.id for fav in await favorites.list()}
                if key in current:
                    await favorites.remove(current[key])
                    self.alerts.push(f"'{key}' removed from favorites.")
                    return FavoriteToggleOut(pair=key, is_favorite=False)
                fav_id = await favorites.add(from_currency, to_currency)
            except PersistenceFailure as e:
                self.alerts.push(e.message, level="warn")
                raise
            self.alerts.push(f"'{key}' added to favorites!")
            return FavoriteToggleOut(pair=key, is_favorite=True, id=fav_id)

    # Status / lifecycle ------------------------------------------
    def status(self) -> RatesStatus:
        return RatesStatus(
            loaded=self.has_rates,
            offline=self.offline,
            base_currency=self.store.base if self.store else self.settings.base_currency,
            fetched_at=self.store.fetched_at if self.store else None,
            currencies=sorted(self.store) if self.store else [],
            user=self.identity.display_name(),
            anonymous=self.identity.anonymous,
        )

    async def close(self) -> None:
        if self._trend_task is not None and not self._trend_task.done():
            self._trend_task.cancel()
        if self.favorites is not None:
            self.favorites.close()
        if self._favorites_task is not None:
            await asyncio.gather(self._favorites_task, return_exceptions=True)
        await self.fetcher.drain()


def build_session(
    settings: "Settings",
    client: httpx.AsyncClient,
    db: Optional["Database"] = None,
    *,
    sleep: Sleep = asyncio.sleep,
    today: Callable[[], "dt.date"] = utc_today,
) -> SessionContext:
    cache = make_rate_cache(settings, db)
    fetcher = RemoteRateFetcher(
        client,
        settings.api_base,
        cache,
        backoff=settings.backoff_base_seconds,
        sleep=sleep,
    )
    analyzer = HistoricalTrendAnalyzer(client, settings.api_base, today=today)
    favorites_store = (
        SQLiteFavoritesStore(db) if settings.persistence_enabled and db is not None else None
    )
    return SessionContext(settings, fetcher, cache, analyzer, favorites_store=favorites_store)
