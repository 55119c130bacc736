from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, Query

from fxconvert.models.constants import DEFAULT_FROM, DEFAULT_TO
from fxconvert.models.trend import TrendEmpty, TrendSummary
from fxconvert.services.session import SessionContext
from .rates import get_session

router = APIRouter(prefix="/trend", tags=["trend"])


@router.get(
    "",
    response_model=Union[TrendSummary, TrendEmpty],
    summary="Rate trend for a pair over recent days",
)
async def get_trend(
    from_currency: str = Query(DEFAULT_FROM, alias="from"),
    to_currency: str = Query(DEFAULT_TO, alias="to"),
    days: int | None = Query(None, ge=1, le=365),
    session: SessionContext = Depends(get_session),
):
    return await session.trend(from_currency, to_currency, days)
