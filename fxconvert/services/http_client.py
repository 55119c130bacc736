from __future__ import annotations

"""Async HTTP client util with retry.

One shared ``httpx.AsyncClient`` per session; tests hand in a client built on
``httpx.MockTransport``. Focus: GET JSON with bounded attempts and exponential
backoff between them.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import httpx

from fxconvert.core.errors import TransportFailure

logger = logging.getLogger("fxconvert.http")

Sleep = Callable[[float], Awaitable[None]]
T = TypeVar("T")


class HttpError(TransportFailure):
    pass


def make_client(timeout: float = 5.0, **kwargs: Any) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, **kwargs)


def backoff_delay(attempt: int, backoff: float) -> float:
    """Delay after failed attempt ``attempt`` (0-based): 1x, 2x, 4x ``backoff``."""
    return backoff * (2**attempt)


async def get_json(
    client: httpx.AsyncClient, url: str, *, params: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    try:
        resp = await client.get(url, params=params)
    except httpx.HTTPError as e:
        raise HttpError(f"Request to {url} failed: {e}") from e
    if not resp.is_success:
        raise HttpError(f"HTTP {resp.status_code} for {resp.request.url}")
    try:
        data = resp.json()
    except ValueError as e:
        raise HttpError(f"Invalid JSON from {url}: {e}") from e
    if not isinstance(data, dict):
        raise HttpError(f"Unexpected JSON payload from {url}")
    return data


async def get_with_retry(
    client: httpx.AsyncClient,
    url: str,
    parse: Callable[[Dict[str, Any]], T],
    *,
    params: Optional[Dict[str, str]] = None,
    attempts: int = 1,
    backoff: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """GET ``url`` up to ``attempts`` times; a payload ``parse`` rejects counts as a failure."""
    last_err: Optional[Exception] = None
    for attempt in range(attempts):
        try:
            data = await get_json(client, url, params=params)
            return parse(data)
        except (HttpError, ValueError, KeyError, TypeError) as e:
            last_err = e
            logger.warning(
                "attempt %d/%d failed for %s: %s",
                attempt + 1,
                attempts,
                url,
                e,
                extra={"attempt": attempt + 1, "attempts": attempts, "url": url},
            )
            if attempt == attempts - 1:
                break
            await sleep(backoff_delay(attempt, backoff))
    raise HttpError(f"Failed to fetch {url} after {attempts} attempts: {last_err}")
