"""Error taxonomy and FastAPI exception handlers.

Domain failures derive from ``ConverterError``; each carries the machine
readable ``code`` and HTTP status the API renders it with. Handlers return the
same ``{"error": ..., "detail": ...}`` envelope for every failure kind.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("fxconvert.errors")


class ConverterError(Exception):
    code: str = "converter_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class NotReady(ConverterError):
    """Rates are not loaded yet; retry later."""

    code = "not_ready"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class InvalidAmount(ConverterError):
    code = "invalid_amount"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class UnsupportedCurrency(ConverterError):
    code = "unsupported_currency"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class MissingRate(ConverterError):
    """The quote service omitted a requested currency."""

    code = "missing_rate"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class TransportFailure(ConverterError):
    code = "transport_failure"
    status_code = status.HTTP_502_BAD_GATEWAY


class PersistenceFailure(ConverterError):
    code = "persistence_failure"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class NotAuthenticated(ConverterError):
    code = "not_authenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


def converter_error_handler(request: Request, exc: ConverterError):  # type: ignore
    logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


def not_found_handler(request: Request, exc):  # type: ignore
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "not_found",
            "detail": exc.detail
            if exc.detail and exc.detail != "Not Found"
            else f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
