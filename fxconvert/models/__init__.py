"""Pydantic domain models for the currency converter."""

from .constants import (
    CURRENCIES,
    SUPPORTED_CURRENCIES,
)  # re-export
from .rates import RateSnapshot, ConversionOut, RatesStatus
from .favorites import FavoritePair, FavoritePairIn, FavoriteToggleOut, pair_key
from .trend import HistoricalPoint, TrendSummary, TrendEmpty

__all__ = [
    "CURRENCIES",
    "SUPPORTED_CURRENCIES",
    "RateSnapshot",
    "ConversionOut",
    "RatesStatus",
    "FavoritePair",
    "FavoritePairIn",
    "FavoriteToggleOut",
    "pair_key",
    "HistoricalPoint",
    "TrendSummary",
    "TrendEmpty",
]
