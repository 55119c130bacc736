"""Tests for settings, logging and migrations."""
import json
import logging

import pytest

from fxconvert.core.config import Settings
from fxconvert.core.logging import JsonFormatter, RequestIdFilter, request_id_ctx
from fxconvert.db.dal import Database
from fxconvert.db.migrate import CURRENT_SCHEMA_VERSION, apply_migrations
from fxconvert.services.alerts import AlertQueue


def test_settings_defaults(tmp_path):
    s = Settings(data_dir=tmp_path / "data")
    s.init_post_load()
    assert s.db_path == tmp_path / "data" / "app.sqlite3"
    assert (tmp_path / "data").is_dir()
    assert s.api_base == "https://api.frankfurter.app"
    assert s.base_currency == "USD"
    assert s.fetch_max_retries == 3
    assert s.backoff_base_seconds == 1.0


def test_settings_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("FETCH_MAX_RETRIES", "5")
    monkeypatch.setenv("BASE_CURRENCY", "eur")
    s = Settings(data_dir=tmp_path)
    s.init_post_load()
    assert s.fetch_max_retries == 5
    assert s.base_currency == "EUR"


def test_settings_reject_zero_retries(tmp_path):
    s = Settings(data_dir=tmp_path, fetch_max_retries=0)
    with pytest.raises(ValueError):
        s.init_post_load()


def test_migrations_idempotent(tmp_path):
    path = tmp_path / "m.sqlite3"
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    db = Database(path)
    db.set_document("k", {"a": 1})
    db.set_document("k", {"a": 2})
    assert db.get_document("k") == {"a": 2}
    with db._connect() as conn:
        names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='index'")}
    assert "idx_favorites_user" in names


def test_json_formatter_includes_request_id():
    record = logging.LogRecord("fxconvert.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
    token = request_id_ctx.set("rid-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx.reset(token)
    out = json.loads(JsonFormatter().format(record))
    assert out["message"] == "hello x"
    assert out["request_id"] == "rid-1"
    assert out["level"] == "INFO"


def test_json_formatter_adds_service_and_structured_fields():
    record = logging.LogRecord("fxconvert.http", logging.WARNING, __file__, 1, "retry", (), None)
    record.attempt = 2
    record.url = "https://quotes.test/latest"
    record.unrelated = "dropped"
    out = json.loads(JsonFormatter(service="Currency Converter").format(record))
    assert out["service"] == "Currency Converter"
    assert out["attempt"] == 2
    assert out["url"] == "https://quotes.test/latest"
    assert "unrelated" not in out


def test_alert_queue_bounded_and_validated():
    alerts = AlertQueue(maxlen=2)
    alerts.push("a")
    alerts.push("b", level="warn")
    alerts.push("c", level="critical")
    assert [a["message"] for a in alerts.peek()] == ["b", "c"]
    with pytest.raises(ValueError):
        alerts.push("d", level="debug")
    assert len(alerts.drain()) == 2
    assert len(alerts) == 0
