"""End-to-end tests for the HTTP API with a stubbed quote service."""
import pytest
from fastapi.testclient import TestClient

from fxconvert.main import create_app
from conftest import TODAY, FakeQuoteService, RecordingSleep


def _client(settings, quotes, sleeper=None):
    app = create_app(
        settings_override=settings,
        transport=quotes.transport(),
        sleep=sleeper or RecordingSleep(),
        today=lambda: TODAY,
    )
    return TestClient(app)


def test_root_and_health(settings, quotes):
    with _client(settings, quotes) as client:
        assert client.get("/").json()["message"] == "Currency Converter API"
        body = client.get("/health").json()
        assert body == {"status": "ok", "rates_loaded": True, "offline": False}


def test_currencies(settings, quotes):
    with _client(settings, quotes) as client:
        body = client.get("/currencies").json()
    codes = [c["code"] for c in body["currencies"]]
    assert codes[:4] == ["USD", "EUR", "GBP", "NGN"]
    assert body["defaults"] == {"from": "USD", "to": "NGN"}


def test_convert(settings, quotes):
    with _client(settings, quotes) as client:
        resp = client.get("/convert", params={"amount": "20", "from": "eur", "to": "NGN"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 32608.7
    assert body["total_display"] == "32608.70"
    assert body["rate_display"] == "1 EUR = 1630.4348 NGN"
    assert body["offline"] is False
    assert body["is_favorite"] is False


def test_convert_large_amount(settings, quotes):
    with _client(settings, quotes) as client:
        resp = client.get("/convert", params={"amount": "1e30", "from": "USD", "to": "NGN"})
    assert resp.status_code == 200
    assert resp.json()["total"] > 1e30


@pytest.mark.parametrize(
    "params,status,error",
    [
        ({"amount": "0"}, 422, "invalid_amount"),
        ({"amount": "abc"}, 422, "invalid_amount"),
        ({"amount": "1e308"}, 422, "invalid_amount"),
        ({"amount": "5", "to": "CAD"}, 422, "missing_rate"),
        ({"amount": "5", "to": "XYZ"}, 422, "unsupported_currency"),
    ],
)
def test_convert_errors(settings, quotes, params, status, error):
    with _client(settings, quotes) as client:
        resp = client.get("/convert", params=params)
    assert resp.status_code == status
    assert resp.json()["error"] == error


def test_rates_unavailable_keeps_serving(settings):
    quotes = FakeQuoteService(fail_latest=99)
    sleeper = RecordingSleep()
    with _client(settings, quotes, sleeper) as client:
        status = client.get("/rates/status").json()
        assert status["loaded"] is False
        resp = client.get("/convert", params={"amount": "5"})
        assert resp.status_code == 503
        assert resp.json()["error"] == "not_ready"
        alerts = client.get("/alerts").json()["alerts"]
        assert alerts[0]["level"] == "critical"
        assert client.get("/alerts").json()["alerts"] == []
    assert sleeper.delays == [1.0, 2.0]


def test_restart_falls_back_to_cached_rates(settings):
    with _client(settings, FakeQuoteService()) as client:
        assert client.get("/rates/status").json()["offline"] is False

    with _client(settings, FakeQuoteService(fail_latest=99)) as client:
        status = client.get("/rates/status").json()
        assert status["loaded"] is True
        assert status["offline"] is True
        body = client.get("/convert", params={"amount": "1", "from": "USD", "to": "NGN"}).json()
        assert body["total"] == 1500.0
        assert body["offline"] is True
        trend = client.get("/trend", params={"from": "USD", "to": "EUR"}).json()
        assert trend == {"status": "empty", "reason": "requires live connection", "point_count": 0}


def test_refresh_recovers_live_rates(settings):
    quotes = FakeQuoteService(fail_latest=3)
    with _client(settings, quotes) as client:
        assert client.get("/rates/status").json()["loaded"] is False
        status = client.post("/rates/refresh").json()
        assert status["loaded"] is True
        assert status["offline"] is False
        assert "NGN" in status["currencies"]


def test_trend(settings):
    quotes = FakeQuoteService(history={"2026-10-18": {"EUR": 1.20}, "2026-10-11": {"EUR": 1.10}})
    with _client(settings, quotes) as client:
        body = client.get("/trend", params={"from": "USD", "to": "EUR"}).json()
    assert body["status"] == "ok"
    assert body["direction"] == "increased"
    assert body["percent_change"] == 9.09
    assert body["start_point"] == {"date": "2026-10-11", "rate": 1.1}


def test_trend_failure_is_bad_gateway(settings):
    quotes = FakeQuoteService(history_status=500)
    with _client(settings, quotes) as client:
        resp = client.get("/trend", params={"from": "USD", "to": "EUR"})
    assert resp.status_code == 502
    assert resp.json()["error"] == "transport_failure"


def test_favorites_flow(settings, quotes):
    with _client(settings, quotes) as client:
        status = client.get("/rates/status").json()
        assert status["user"] == "User: user-123..."
        assert status["anonymous"] is False
        on = client.post("/favorites/toggle", json={"from_currency": "usd", "to_currency": "ngn"})
        assert on.json()["is_favorite"] is True
        fav_id = on.json()["id"]
        assert client.get("/favorites/projection").json() == {"USD/NGN": fav_id}
        assert client.get("/convert", params={"amount": "1"}).json()["is_favorite"] is True
        listed = client.get("/favorites").json()
        assert [(f["from_currency"], f["to_currency"]) for f in listed] == [("USD", "NGN")]
        off = client.post("/favorites/toggle", json={"from_currency": "USD", "to_currency": "NGN"})
        assert off.json() == {"pair": "USD/NGN", "is_favorite": False, "id": None}
        assert client.get("/favorites").json() == []

        added = client.post("/favorites", json={"from_currency": "EUR", "to_currency": "GBP"})
        assert added.status_code == 201
        new_id = added.json()["id"]
        assert client.delete(f"/favorites/{new_id}").json()["status"] == "deleted"
        assert client.delete(f"/favorites/{new_id}").status_code == 404


def test_favorite_payload_validation(settings, quotes):
    with _client(settings, quotes) as client:
        resp = client.post("/favorites/toggle", json={"from_currency": "USD", "to_currency": "BTC"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_api_only_mode_rejects_favorites(api_only_settings, quotes):
    with _client(api_only_settings, quotes) as client:
        resp = client.get("/favorites")
    assert resp.status_code == 503
    assert resp.json()["error"] == "persistence_failure"


def test_unknown_route(settings, quotes):
    with _client(settings, quotes) as client:
        resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_request_id_is_echoed_or_generated(settings, quotes):
    with _client(settings, quotes) as client:
        echoed = client.get("/health", headers={"x-request-id": "abc-123"})
        fresh = client.get("/health")
    assert echoed.headers["x-request-id"] == "abc-123"
    assert len(fresh.headers["x-request-id"]) == 32
