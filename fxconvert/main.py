import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .db.dal import Database
from .db.migrate import apply_migrations
from .routers import alerts, favorites, health, rates, trend
from .services.http_client import Sleep, make_client
from .services.session import build_session
from .services.trend import utc_today

logger = logging.getLogger("fxconvert")


def create_app(
    settings_override: Settings | None = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
    today: Callable = utc_today,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    transport / sleep / today: stand-ins for the quote service, backoff waits
    and the calendar so tests never touch the network or the clock.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug, service=settings.app_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = None
        if settings.persistence_enabled:
            try:
                apply_migrations(settings.db_path)  # type: ignore[arg-type]
                db = Database(settings.db_path)  # type: ignore[arg-type]
            except Exception:
                # Degrade to API-only mode rather than refusing to start
                logger.exception("failed to apply migrations on startup")
        client = make_client(settings.http_timeout_seconds, transport=transport)
        session = build_session(settings, client, db, sleep=sleep, today=today)
        if settings.persistence_enabled and db is None:
            session.alerts.push(
                "Application failed to initialize database features. "
                "Functioning in API-only mode.",
                level="warn",
            )
        app.state.session = session
        await session.initialize()
        try:
            yield
        finally:
            await session.close()
            await client.aclose()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.ConverterError, errors.converter_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(rates.router)
    app.include_router(trend.router)
    app.include_router(favorites.router)
    app.include_router(alerts.router)

    @app.get("/")
    async def root():
        return {"message": "Currency Converter API", "version": settings.version}

    return app


app = create_app()
