from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .constants import CURRENCIES


class FavoritePairIn(BaseModel):
    from_currency: str = Field(..., description="Source currency code (e.g. USD)")
    to_currency: str = Field(..., description="Target currency code (e.g. NGN)")

    @field_validator("from_currency", "to_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = v.upper()
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v


class FavoritePair(FavoritePairIn):
    id: str
    created_at: datetime

    @property
    def pair(self) -> str:
        return pair_key(self.from_currency, self.to_currency)


class FavoriteToggleOut(BaseModel):
    pair: str
    is_favorite: bool
    id: str | None = None


def pair_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency.upper()}/{to_currency.upper()}"
