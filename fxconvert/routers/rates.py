from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from fxconvert.models.constants import DEFAULT_FROM, DEFAULT_TO, SUPPORTED_CURRENCIES
from fxconvert.models.rates import ConversionOut, RatesStatus
from fxconvert.services.session import SessionContext

"""Rates router: status, manual refresh, supported currencies and conversion.

Endpoints:
    - GET /currencies        -> supported codes with display names
    - GET /rates/status      -> loaded/offline flags, base, fetched-at, user
    - POST /rates/refresh    -> re-run live fetch with cache fallback
    - GET /convert           -> converted total and display rate for a pair

Swapping a pair is a client concern: call /convert with the codes exchanged.
"""

router = APIRouter(tags=["rates"])


def get_session(request: Request) -> SessionContext:
    return request.app.state.session


@router.get("/currencies", summary="List supported currencies")
async def list_currencies():
    return {
        "currencies": [
            {"code": code, "name": name} for code, name in SUPPORTED_CURRENCIES.items()
        ],
        "defaults": {"from": DEFAULT_FROM, "to": DEFAULT_TO},
    }


@router.get("/rates/status", response_model=RatesStatus, summary="Rate store status")
async def rates_status(session: SessionContext = Depends(get_session)):
    return session.status()


@router.post("/rates/refresh", response_model=RatesStatus, summary="Refetch live rates")
async def refresh_rates(session: SessionContext = Depends(get_session)):
    await session.refresh_rates()
    return session.status()


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert(
    amount: str = Query(..., description="Amount in the source currency"),
    from_currency: str = Query(DEFAULT_FROM, alias="from"),
    to_currency: str = Query(DEFAULT_TO, alias="to"),
    session: SessionContext = Depends(get_session),
):
    result = session.convert(amount, from_currency, to_currency)
    return ConversionOut(
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        amount=result.amount,
        rate=result.rate,
        total=result.total,
        rate_display=result.rate_display,
        total_display=result.total_display,
        offline=session.offline,
        is_favorite=session.is_favorite(result.from_currency, result.to_currency),
    )
