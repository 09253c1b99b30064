"""Retry with exponential backoff for provider calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Callable, TypeVar

import httpx

from .errors import AuthError, UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_HTTP_CODES = {429, 500, 502, 503, 504}


async def retry_async(
    fn: Callable[..., Awaitable[T]],
    *args,
    max_retries: int = 0,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    label: str = "api_call",
    **kwargs,
) -> T:
    """Await fn with retries and exponential backoff.

    Retries on transient errors (rate limits, server errors, network issues).
    Non-retryable errors (auth, bad request) are raised immediately.
    With max_retries=0 this is a single attempt.
    """
    last_exc = None
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)
        except Exception as exc:
            last_exc = exc
            if not _is_retryable(exc) or attempt == max_retries:
                raise
            delay = min(base_delay * (2 ** attempt), max_delay)
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %.1fs",
                label, attempt + 1, max_retries + 1, exc, delay,
            )
            await asyncio.sleep(delay)

    raise last_exc  # type: ignore[misc]


def _is_retryable(exc: Exception) -> bool:
    """Check if an exception is transient and worth retrying."""
    if isinstance(exc, AuthError):
        return False

    if isinstance(exc, UpstreamError):
        if exc.status_code is None:
            return isinstance(exc.__cause__, httpx.TransportError)
        return exc.status_code in TRANSIENT_HTTP_CODES

    return False
