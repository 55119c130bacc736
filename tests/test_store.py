"""Tests for the immutable rate store."""
import pytest

from fxconvert.services.rates.store import RateStore


def test_base_rate_injected():
    store = RateStore("usd", {"EUR": 0.9})
    assert store.base == "USD"
    assert store["USD"] == 1.0
    assert store["eur"] == 0.9
    assert "EUR" in store and "GBP" not in store


def test_base_rate_pinned_when_service_returns_it():
    store = RateStore("USD", {"USD": 1.02, "EUR": 0.9})
    assert store["USD"] == 1.0


def test_invalid_rates_dropped():
    store = RateStore("USD", {"EUR": 0, "GBP": -1.0, "JPY": "abc", "NGN": "1500"})
    assert set(store) == {"USD", "NGN"}
    assert store["NGN"] == 1500.0


def test_from_payload_uses_payload_base():
    store = RateStore.from_payload({"base": "EUR", "rates": {"USD": 1.08}}, "USD")
    assert store.base == "EUR"
    assert store.as_dict() == {"USD": 1.08, "EUR": 1.0}


def test_from_payload_requires_rates_object():
    with pytest.raises(ValueError):
        RateStore.from_payload({"base": "USD"}, "USD")


def test_store_is_read_only():
    store = RateStore("USD", {"EUR": 0.9})
    with pytest.raises(TypeError):
        store._rates["EUR"] = 2.0  # type: ignore[index]
    copy = store.as_dict()
    copy["EUR"] = 2.0
    assert store["EUR"] == 0.9
