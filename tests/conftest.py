"""Pytest configuration and fixtures."""
import datetime as dt
from typing import Dict, List, Optional

import httpx
import pytest

from fxconvert.core.config import Settings

LATEST_RATES = {"EUR": 0.92, "GBP": 0.79, "NGN": 1500.0, "JPY": 150.0, "INR": 83.0}
TODAY = dt.date(2026, 10, 18)


class FakeQuoteService:
    """Stand-in for the quote service behind an ``httpx.MockTransport``."""

    def __init__(
        self,
        rates: Optional[Dict[str, float]] = None,
        fail_latest: int = 0,
        history: Optional[Dict[str, Dict[str, float]]] = None,
        history_status: int = 200,
    ):
        self.rates = dict(LATEST_RATES if rates is None else rates)
        self.fail_latest = fail_latest
        self.history = history if history is not None else {}
        self.history_status = history_status
        self.requests: List[httpx.Request] = []

    @property
    def latest_calls(self) -> int:
        return sum(1 for r in self.requests if r.url.path == "/latest")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/latest":
            if self.fail_latest > 0:
                self.fail_latest -= 1
                return httpx.Response(503, json={"message": "unavailable"})
            base = request.url.params.get("from", "USD")
            return httpx.Response(
                200, json={"base": base, "date": TODAY.isoformat(), "rates": self.rates}
            )
        if ".." in request.url.path:
            if self.history_status != 200:
                return httpx.Response(self.history_status, json={"message": "error"})
            return httpx.Response(200, json={"rates": self.history})
        return httpx.Response(404, json={"message": "not found"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def quotes():
    return FakeQuoteService()


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def settings(tmp_path):
    s = Settings(
        data_dir=tmp_path,
        db_path=tmp_path / "test.sqlite3",
        debug=False,
        exchange_api_base_url="https://quotes.test",
        auth_token="user-1234567890",
    )
    s.init_post_load()
    return s


@pytest.fixture
def api_only_settings(tmp_path):
    s = Settings(
        data_dir=tmp_path,
        db_path=tmp_path / "unused.sqlite3",
        debug=False,
        persistence_enabled=False,
        exchange_api_base_url="https://quotes.test",
    )
    s.init_post_load()
    return s
