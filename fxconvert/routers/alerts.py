from fastapi import APIRouter, Depends, Query

from fxconvert.services.session import SessionContext
from .rates import get_session

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", summary="Pending user notifications")
async def list_alerts(
    keep: bool = Query(False, description="Leave alerts queued after reading"),
    session: SessionContext = Depends(get_session),
):
    items = session.alerts.peek() if keep else session.alerts.drain()
    return {"alerts": items}
