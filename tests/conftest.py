"""Shared fixtures: a scripted Calendly API behind httpx.MockTransport."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from slotlink.config import ProviderConfig, RetryConfig
from slotlink.provider.calendly import CalendlyClient

FIXED_NOW = datetime(2025, 3, 10, 15, 30, tzinfo=timezone.utc)
USER_URI = "https://api.calendly.com/users/U1"


def fixed_clock() -> datetime:
    return FIXED_NOW


class CalendlyStub:
    """Fake Calendly API. Records every request it receives."""

    def __init__(
        self,
        event_types: list[dict[str, Any]] | None = None,
        times: list[dict[str, Any]] | None = None,
        link: dict[str, Any] | None = None,
        statuses: dict[str, int] | None = None,
    ):
        self.identity = {
            "uri": USER_URI,
            "name": "Acct Owner",
            "slug": "acct",
            "email": "owner@example.com",
            "scheduling_url": "https://calendly.com/acct",
            "timezone": "UTC",
        }
        self.event_types = event_types if event_types is not None else [
            {"uri": "ET1", "name": "30 Minute Meeting", "duration": 30,
             "slug": "30min-meeting", "scheduling_url": "https://calendly.com/acct/30min",
             "active": True},
        ]
        self.times = times or []
        self.link = link or {
            "booking_url": "https://calendly.com/acct/ET1/",
            "owner": "ET1",
            "owner_type": "EventType",
        }
        self.statuses = statuses or {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        status = self.statuses.get(path, 200)
        if status >= 400:
            return httpx.Response(status, json={"title": "Error", "message": f"stub {status}"})
        if path == "/users/me":
            return httpx.Response(200, json={"resource": self.identity})
        if path == "/event_types":
            return httpx.Response(200, json={"collection": self.event_types, "pagination": {}})
        if path == "/event_type_available_times":
            return httpx.Response(200, json={"collection": self.times})
        if path == "/scheduling_links":
            return httpx.Response(201, json={"resource": self.link})
        return httpx.Response(404, json={"message": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def stub():
    return CalendlyStub()


@pytest.fixture
def provider_config():
    return ProviderConfig(token="test-token")


def make_client(
    stub: CalendlyStub,
    config: ProviderConfig | None = None,
    timezone: str = "UTC",
    retry: RetryConfig | None = None,
    clock=fixed_clock,
) -> CalendlyClient:
    return CalendlyClient(
        config or ProviderConfig(token="test-token"),
        timezone=timezone,
        retry=retry,
        transport=stub.transport,
        clock=clock,
    )
