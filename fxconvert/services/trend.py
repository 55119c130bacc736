from __future__ import annotations

"""Historical trend analysis for a currency pair.

Fetches ``GET {api}/{start}..{end}?from=FROM&to=TO`` for the last ``days``
calendar days (UTC) and reduces the series to a start/end comparison.

Outcomes:
    - ``TrendSummary`` when at least two usable points exist.
    - ``TrendEmpty`` when offline, when the service has no series, or when
      fewer than two points carry a rate for the target currency.
    - ``TransportFailure`` (raised) for network, HTTP or payload errors.

No caching: every call hits the quote service.
"""
import datetime as dt
import logging
from typing import Any, Callable, Dict, List, Mapping, Union

import httpx

from fxconvert.models.constants import TREND_DECREASED, TREND_INCREASED, TREND_STABLE
from fxconvert.models.trend import (
    INSUFFICIENT_DATA,
    NO_DATA,
    REQUIRES_LIVE,
    HistoricalPoint,
    TrendEmpty,
    TrendSummary,
)
from fxconvert.services.http_client import HttpError, get_json
from fxconvert.services.money import round2

logger = logging.getLogger("fxconvert.trend")

TrendResult = Union[TrendSummary, TrendEmpty]


def utc_today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def date_range(days: int, today: dt.date) -> tuple[dt.date, dt.date]:
    return today - dt.timedelta(days=days), today


def extract_points(series: Mapping[str, Any], to_currency: str) -> List[HistoricalPoint]:
    """Points carrying a positive ``to_currency`` rate, oldest first."""
    points: List[HistoricalPoint] = []
    for day, quotes in series.items():
        if not isinstance(quotes, Mapping):
            continue
        rate = quotes.get(to_currency)
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
            continue
        points.append(HistoricalPoint(date=dt.date.fromisoformat(day), rate=float(rate)))
    # Service ordering is not trusted; sort on the parsed date
    points.sort(key=lambda p: p.date)
    return points


def summarize_series(
    from_currency: str, to_currency: str, series: Mapping[str, Any]
) -> TrendResult:
    if not series:
        return TrendEmpty(reason=NO_DATA, point_count=0)
    points = extract_points(series, to_currency)
    if len(points) < 2:
        return TrendEmpty(reason=INSUFFICIENT_DATA, point_count=len(points))
    start, end = points[0], points[-1]
    change = end.rate - start.rate
    if change > 0:
        direction = TREND_INCREASED
    elif change < 0:
        direction = TREND_DECREASED
    else:
        direction = TREND_STABLE
    return TrendSummary(
        from_currency=from_currency,
        to_currency=to_currency,
        start_point=start,
        end_point=end,
        absolute_change=change,
        percent_change=round2(change / start.rate * 100),
        direction=direction,
        point_count=len(points),
    )


class HistoricalTrendAnalyzer:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_base_url: str,
        today: Callable[[], dt.date] = utc_today,
    ):
        self._client = client
        self._api = api_base_url.rstrip("/")
        self._today = today

    async def analyze(
        self, from_currency: str, to_currency: str, days: int = 7, online: bool = True
    ) -> TrendResult:
        if not online:
            return TrendEmpty(reason=REQUIRES_LIVE)
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        start, end = date_range(days, self._today())
        url = f"{self._api}/{start.isoformat()}..{end.isoformat()}"
        data: Dict[str, Any] = await get_json(
            self._client, url, params={"from": from_currency, "to": to_currency}
        )
        series = data.get("rates") or {}
        if not isinstance(series, Mapping):
            raise HttpError(f"Malformed historical payload from {url}")
        try:
            result = summarize_series(from_currency, to_currency, series)
        except ValueError as e:  # bad date keys
            raise HttpError(f"Malformed historical payload from {url}: {e}") from e
        logger.debug(
            "trend %s/%s over %d days: %s", from_currency, to_currency, days, result.status
        )
        return result
