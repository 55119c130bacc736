from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Dict

from pydantic import BaseModel, Field, field_validator


if TYPE_CHECKING:  # pragma: no cover
    from fxconvert.services.rates.store import RateStore


class RateSnapshot(BaseModel):
    """Persisted copy of a full rate store (last write wins)."""

    rates_json: str
    timestamp: datetime
    base_currency: str

    @field_validator("base_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = v.upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("base currency must be a 3-letter code")
        return v

    @field_validator("rates_json")
    @classmethod
    def valid_rates_json(cls, v: str) -> str:
        data = json.loads(v)
        if not isinstance(data, dict):
            raise ValueError("rates_json must encode an object")
        return v

    @property
    def rates(self) -> Dict[str, object]:
        # Raw values; RateStore drops the unusable ones
        return json.loads(self.rates_json)

    @classmethod
    def from_store(cls, store: "RateStore") -> "RateSnapshot":
        return cls(
            rates_json=json.dumps(store.as_dict(), sort_keys=True),
            timestamp=datetime.now(timezone.utc),
            base_currency=store.base,
        )

    def to_store(self) -> "RateStore":
        from fxconvert.services.rates.store import RateStore

        return RateStore(self.base_currency, self.rates, fetched_at=self.timestamp)


class ConversionOut(BaseModel):
    from_currency: str
    to_currency: str
    amount: float = Field(..., gt=0)
    rate: float
    total: float
    rate_display: str
    total_display: str
    offline: bool
    is_favorite: bool = False


class RatesStatus(BaseModel):
    loaded: bool
    offline: bool
    base_currency: str
    fetched_at: datetime | None = None
    currencies: list[str] = Field(default_factory=list)
    user: str
    anonymous: bool = True
