from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional

from fxconvert.core.errors import (
    InvalidAmount,
    MissingRate,
    NotReady,
    UnsupportedCurrency,
)
from fxconvert.models.constants import CURRENCIES
from fxconvert.services.money import fmt2, fmt4, round2, round4

"""Currency conversion over a single-base rate store.

Responsibilities:
    - Validate in a fixed order: rates loaded, amount usable, both rates present.
    - Route every conversion through the base currency:
      ``amount / store[from] * store[to]``; the display rate is
      ``store[to] / store[from]``.
    - Round once for display (rate 4 dp, total 2 dp) while keeping the raw
      values for chained computations.

Pure functions: nothing here reads or mutates session state.
"""


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: float
    raw_rate: float
    raw_total: float

    @property
    def rate(self) -> float:
        return round4(self.raw_rate)

    @property
    def total(self) -> float:
        return round2(self.raw_total)

    @property
    def rate_display(self) -> str:
        return f"1 {self.from_currency} = {fmt4(self.raw_rate)} {self.to_currency}"

    @property
    def total_display(self) -> str:
        return fmt2(self.raw_total)


def normalize_currency(code: str) -> str:
    code = (code or "").strip().upper()
    if code not in CURRENCIES:
        raise UnsupportedCurrency(f"Unsupported currency: {code or '<empty>'}")
    return code


def parse_amount(value: object) -> float:
    """Coerce user input to a finite positive float or raise InvalidAmount."""
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidAmount("Please enter a valid amount.") from None
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmount("Please enter a valid amount.")
    return amount


def convert(
    amount: object,
    from_currency: str,
    to_currency: str,
    store: Optional[Mapping[str, float]],
) -> ConversionResult:
    if not store:
        raise NotReady("Still loading rates. Please wait a moment.")
    value = parse_amount(amount)
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()
    if from_currency not in store or to_currency not in store:
        raise MissingRate(
            f"Cannot convert: The exchange rate for {from_currency} or {to_currency} "
            "is missing from the API data. This is likely a temporary API issue."
        )
    from_rate = store[from_currency]
    to_rate = store[to_currency]
    total = value / from_rate * to_rate
    if not math.isfinite(total):
        raise InvalidAmount("Amount is too large to convert.")
    return ConversionResult(
        from_currency=from_currency,
        to_currency=to_currency,
        amount=value,
        raw_rate=to_rate / from_rate,
        raw_total=total,
    )
