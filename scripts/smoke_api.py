import json
import os
import tempfile

from fastapi.testclient import TestClient

from fxconvert.core.config import Settings
from fxconvert.main import create_app

"""Smoke test for the HTTP API against the real quote service.
Converts the default pair, asks for the 7-day trend and toggles the pair as a
favorite twice, printing every response.
"""


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(db_path=os.path.join(d, "api.db"))
        app = create_app(settings_override=settings)
        with TestClient(app) as client:
            out = {
                "status": client.get("/rates/status").json(),
                "convert": client.get("/convert", params={"amount": "250"}).json(),
                "swapped": client.get(
                    "/convert", params={"amount": "250", "from": "NGN", "to": "USD"}
                ).json(),
                "trend": client.get("/trend").json(),
                "toggle_on": client.post(
                    "/favorites/toggle", json={"from_currency": "USD", "to_currency": "NGN"}
                ).json(),
                "toggle_off": client.post(
                    "/favorites/toggle", json={"from_currency": "USD", "to_currency": "NGN"}
                ).json(),
                "alerts": client.get("/alerts").json(),
            }
        print(json.dumps(out, indent=2, default=str))


if __name__ == "__main__":
    run()
