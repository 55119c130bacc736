from fastapi import APIRouter, Depends

from fxconvert.services.session import SessionContext
from .rates import get_session

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness plus rate availability")
async def health(session: SessionContext = Depends(get_session)):
    return {
        "status": "ok",
        "rates_loaded": session.has_rates,
        "offline": session.offline,
    }
