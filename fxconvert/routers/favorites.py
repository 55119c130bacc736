from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from fxconvert.models.favorites import FavoritePair, FavoritePairIn, FavoriteToggleOut
from fxconvert.services.session import SessionContext
from .rates import get_session

"""Favorites router for the signed-in user.

Endpoints:
    - GET /favorites              -> current pairs
    - GET /favorites/projection   -> {"FROM/TO": id}
    - POST /favorites             -> add pair (no duplicate check)
    - POST /favorites/toggle      -> add when absent, remove when present
    - DELETE /favorites/{id}      -> remove by id
"""

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[FavoritePair], summary="List favorite pairs")
async def list_favorites(session: SessionContext = Depends(get_session)):
    return await session.require_favorites().list()


@router.get("/projection", summary="Favorite pairs keyed by 'FROM/TO'")
async def favorites_projection(session: SessionContext = Depends(get_session)):
    favorites = session.require_favorites()
    await favorites.list()
    return favorites.projection()


@router.post("", status_code=201, summary="Add a favorite pair")
async def add_favorite(
    payload: FavoritePairIn, session: SessionContext = Depends(get_session)
):
    fav_id = await session.require_favorites().add(
        payload.from_currency, payload.to_currency
    )
    return {"status": "ok", "id": fav_id}


@router.post("/toggle", response_model=FavoriteToggleOut, summary="Toggle a favorite pair")
async def toggle_favorite(
    payload: FavoritePairIn, session: SessionContext = Depends(get_session)
):
    return await session.toggle_favorite(payload.from_currency, payload.to_currency)


@router.delete("/{fav_id}", summary="Remove a favorite pair")
async def delete_favorite(fav_id: str, session: SessionContext = Depends(get_session)):
    favorites = session.require_favorites()
    await favorites.list()
    if fav_id not in favorites.projection().values():
        raise HTTPException(status_code=404, detail="favorite not found")
    await favorites.remove(fav_id)
    return {"status": "deleted", "id": fav_id}
