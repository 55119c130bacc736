"""Smoke script for live fetch + cache fallback.

Demonstrates:
 1. Live fetch from the configured quote service writes the snapshot cache.
 2. A second session whose quote service is unreachable loads that snapshot
    and reports offline mode.

NOTE: This is a lightweight diagnostic and not a formal test; step 1 needs
network access.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from pprint import pprint

import httpx

from fxconvert.core.config import Settings
from fxconvert.db.dal import Database
from fxconvert.db.migrate import apply_migrations
from fxconvert.services.session import build_session


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("offline", request=request)


async def run(settings: Settings) -> None:
    apply_migrations(settings.db_path)  # type: ignore[arg-type]
    db = Database(settings.db_path)  # type: ignore[arg-type]
    out = {}

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        live = build_session(settings, client, db)
        await live.initialize()
        out["live"] = live.status().model_dump(mode="json")
        if live.has_rates:
            out["live_convert"] = live.convert(100, "USD", "NGN").total_display
        await live.close()

    async def no_wait(_: float) -> None:
        return None

    transport = httpx.MockTransport(_unreachable)
    async with httpx.AsyncClient(transport=transport) as client:
        cached = build_session(settings, client, db, sleep=no_wait)
        await cached.initialize()
        out["cached"] = cached.status().model_dump(mode="json")
        out["alerts"] = cached.alerts.drain()
        await cached.close()

    pprint(out)


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as d:
        s = Settings(data_dir=Path(d), db_path=Path(os.path.join(d, "smoke.db")))
        s.init_post_load()
        asyncio.run(run(s))
