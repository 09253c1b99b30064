"""Calendly API v2 client."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from ..config import ProviderConfig, RetryConfig
from ..errors import AuthError, ConfigurationError, LinkCreationError, UpstreamError
from ..models import (
    AccountIdentity,
    AvailableTime,
    EventType,
    SchedulingLink,
    format_timestamp,
)
from ..retry import retry_async
from ..window import day_window
from .base import SchedulingProvider

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 2000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CalendlyClient(SchedulingProvider):
    """Calendly integration. One outbound HTTP call per operation."""

    def __init__(
        self,
        config: ProviderConfig,
        timezone: str = "UTC",
        retry: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.tz = ZoneInfo(timezone)
        self.retry = retry or RetryConfig()
        self.transport = transport
        self.clock = clock

    def _headers(self) -> dict[str, str]:
        if not self.config.has_token:
            raise ConfigurationError("Calendly integration not configured: no API token")
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
        }

    async def _send(self, method: str, path: str, step: str, **kwargs) -> httpx.Response:
        headers = self._headers()
        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                transport=self.transport,
            ) as client:
                return await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Calendly %s unreachable: %s", step, e)
            raise UpstreamError(f"Calendly {step} request failed: {e}", step=step) from e

    async def _read(self, method: str, path: str, step: str, **kwargs) -> dict[str, Any]:
        """Issue a read call, retrying transient failures per RetryConfig."""
        async def attempt():
            response = await self._send(method, path, step, **kwargs)
            if response.is_success:
                try:
                    return response.json()
                except ValueError as e:
                    raise UpstreamError(f"Calendly {step} returned invalid JSON", step=step) from e
            body = response.text[:MAX_ERROR_BODY]
            logger.error("Calendly %s failed: %s %s", step, response.status_code, body)
            if response.status_code in (401, 403):
                raise AuthError(f"Calendly rejected the API token ({step})", response.status_code)
            raise UpstreamError(
                f"Calendly {step} returned {response.status_code}",
                status_code=response.status_code,
                body=body,
                step=step,
            )

        return await retry_async(
            attempt,
            max_retries=self.retry.max_retries,
            base_delay=self.retry.base_delay,
            max_delay=self.retry.max_delay,
            label=f"calendly.{step}",
        )

    async def fetch_identity(self) -> AccountIdentity:
        try:
            data = await self._read("GET", "/users/me", "identity")
        except UpstreamError as e:
            if e.status_code is None:
                raise
            # Any rejection of /users/me means the credential is unusable
            raise AuthError(f"Calendly auth failed: {e}", e.status_code) from e
        identity = AccountIdentity.from_api(data.get("resource") or {})
        logger.debug("Authenticated as %s", identity.uri)
        return identity

    async def list_event_types(self, account_uri: str) -> list[EventType]:
        data = await self._read(
            "GET", "/event_types", "event_types",
            params={"user": account_uri, "active": "true"},
        )
        event_types = [EventType.from_api(item) for item in data.get("collection") or []]
        active = [et for et in event_types if et.active]
        logger.info("Found %d active event types for %s", len(active), account_uri)
        return active

    async def list_available_times(self, event_type_uri: str, day: date) -> list[AvailableTime]:
        start, end = day_window(day, self.tz, self.clock())
        data = await self._read(
            "GET", "/event_type_available_times", "available_times",
            params={
                "event_type": event_type_uri,
                "start_time": format_timestamp(start, "milliseconds"),
                "end_time": format_timestamp(end, "milliseconds"),
            },
        )
        times = [AvailableTime.from_api(item) for item in data.get("collection") or []]
        logger.info("Found %d available times for %s on %s", len(times), event_type_uri, day)
        return times

    async def create_single_use_link(self, event_type_uri: str, ttl: timedelta) -> SchedulingLink:
        """Create a single-use link. Never retried: creation is a one-shot side effect."""
        expires_at = format_timestamp(self.clock() + ttl)
        payload = {
            "max_event_count": 1,
            "expires_at": expires_at,
            "owner": event_type_uri,
            "owner_type": "EventType",
        }
        try:
            response = await self._send("POST", "/scheduling_links", "link_creation", json=payload)
        except UpstreamError as e:
            raise LinkCreationError(str(e), step="link_creation") from e

        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY]
            logger.error("Calendly link error for %s: %s %s", event_type_uri, response.status_code, body)
            raise LinkCreationError(
                "Could not create booking link",
                status_code=response.status_code,
                body=body,
                step="link_creation",
            )

        try:
            resource = response.json().get("resource") or {}
        except ValueError as e:
            raise LinkCreationError("Calendly returned invalid JSON", step="link_creation") from e
        booking_url = resource.get("booking_url")
        if not booking_url:
            raise LinkCreationError("Calendly returned no booking_url", step="link_creation")

        logger.info("Created single-use link for %s (expires %s)", event_type_uri, expires_at)
        return SchedulingLink(
            booking_url=booking_url,
            expires_at=expires_at,
        )
