"""Domain constants for validation.

The supported list doubles as the currency picker contents; the API base is
the currency every stored rate is expressed against.
"""

from typing import Dict, Set

SUPPORTED_CURRENCIES: Dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "NGN": "Nigerian Naira",
    "JPY": "Japanese Yen",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "ZAR": "South African Rand",
    "INR": "Indian Rupee",
}
CURRENCIES: Set[str] = set(SUPPORTED_CURRENCIES)

DEFAULT_FROM = "USD"
DEFAULT_TO = "NGN"

# Single well-known document key for the last-known rate snapshot
CACHE_DOC_KEY = "cache/rates"

TREND_INCREASED = "increased"
TREND_DECREASED = "decreased"
TREND_STABLE = "stable"
