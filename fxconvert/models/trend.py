from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field


class HistoricalPoint(BaseModel):
    date: dt.date
    rate: float = Field(..., gt=0)


class TrendSummary(BaseModel):
    status: Literal["ok"] = "ok"
    from_currency: str
    to_currency: str
    start_point: HistoricalPoint
    end_point: HistoricalPoint
    absolute_change: float
    percent_change: float
    direction: Literal["increased", "decreased", "stable"]
    point_count: int


class TrendEmpty(BaseModel):
    """Not enough history to show a trend; informational, not an error."""

    status: Literal["empty"] = "empty"
    reason: str
    point_count: int = 0


REQUIRES_LIVE = "requires live connection"
INSUFFICIENT_DATA = "insufficient data"
NO_DATA = "no data"
SUPERSEDED = "superseded"
