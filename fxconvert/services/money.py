"""Money / rounding helpers.

Centralized so conversion, trend and display code use identical rounding
semantics.
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext


def _quantize(value: float, places: int) -> float:
    if not math.isfinite(value):
        return value
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # Room for every integer digit plus the requested decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        return float(exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    return _quantize(value, 2)


def round4(value: float) -> float:
    return _quantize(value, 4)


def fmt2(value: float) -> str:
    return f"{round2(value):.2f}"


def fmt4(value: float) -> str:
    return f"{round4(value):.4f}"
