from __future__ import annotations

"""In-memory rate store.

A ``RateStore`` is an immutable snapshot: code -> rate relative to ``base``.
Sessions replace it wholesale on every successful fetch or cache load, so a
reader holding a reference always sees one complete map.
"""
import logging
import math
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

logger = logging.getLogger("fxconvert.rates")


class RateStore(Mapping[str, float]):
    def __init__(
        self,
        base: str,
        rates: Mapping[str, float],
        fetched_at: Optional[datetime] = None,
    ):
        base = base.upper()
        clean: Dict[str, float] = {}
        for code, value in rates.items():
            try:
                rate = float(value)
            except (TypeError, ValueError):
                logger.warning("dropping non-numeric rate %r for %s", value, code)
                continue
            if not math.isfinite(rate) or rate <= 0:
                logger.warning("dropping non-positive rate %r for %s", value, code)
                continue
            clean[code.upper()] = rate
        # The quote service leaves the base out of its own list; pin it either way.
        clean[base] = 1.0
        self._base = base
        self._rates = MappingProxyType(clean)
        self._fetched_at = fetched_at or datetime.now(timezone.utc)

    @classmethod
    def from_payload(cls, payload: Mapping[str, object], base: str) -> "RateStore":
        """Build from a ``/latest`` body ``{base, date, rates}``."""
        rates = payload.get("rates")
        if not isinstance(rates, Mapping):
            raise ValueError("payload has no 'rates' object")
        payload_base = payload.get("base") or base
        return cls(str(payload_base), rates)

    @property
    def base(self) -> str:
        return self._base

    @property
    def fetched_at(self) -> datetime:
        return self._fetched_at

    def as_dict(self) -> Dict[str, float]:
        return dict(self._rates)

    def __getitem__(self, code: str) -> float:
        return self._rates[code.upper()]

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._rates

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"RateStore(base={self._base!r}, currencies={len(self)})"
