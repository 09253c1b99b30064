"""Slot-link orchestration: event type -> single-use link -> pre-filled deep link."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta, timezone
from urllib.parse import quote
from zoneinfo import ZoneInfo

from ..config import BookingConfig
from ..errors import InternalError, NoEventTypesError, SlotLinkError
from ..models import BookingRequest, DeepLinkResult, EventType, parse_timestamp
from ..provider.base import SchedulingProvider

logger = logging.getLogger(__name__)

PREFERRED_SLUG = "30min"
PREFERRED_NAME = "30"
PREFERRED_DURATION = 30

# Characters encodeURIComponent leaves alone, beyond quote()'s defaults
_URI_COMPONENT_SAFE = "!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def select_event_type(event_types: Sequence[EventType]) -> EventType:
    """Pick the standard short meeting type.

    Priority: slug contains "30min", then name contains "30" (case-insensitive),
    then a 30 minute duration, then the first event type in provider order.
    """
    if not event_types:
        raise NoEventTypesError("No active event types available")

    rules = (
        lambda et: PREFERRED_SLUG in (et.slug or ""),
        lambda et: PREFERRED_NAME in (et.name or "").lower(),
        lambda et: et.duration == PREFERRED_DURATION,
    )
    for rule in rules:
        for et in event_types:
            if rule(et):
                return et
    return event_types[0]


def build_deep_link(
    booking_url: str,
    slot_time: str,
    day: str,
    name: str,
    email: str,
    tz: ZoneInfo | timezone = timezone.utc,
) -> str:
    """Pin a scheduling link to one slot and pre-fill the invitee.

    ``month``/``date`` come from the UTC form of ``day``, not from ``slot_time``.
    """
    day_utc = parse_timestamp(day, tz).astimezone(timezone.utc)
    base = booking_url.rstrip("/")
    return (
        f"{base}/{encode_component(slot_time)}"
        f"?month={day_utc.strftime('%Y-%m')}&date={day_utc.strftime('%Y-%m-%d')}"
        f"&name={encode_component(name)}"
        f"&email={encode_component(email)}"
    )


class SlotLinkOrchestrator:
    """Turns a BookingRequest into a slot-pinned, pre-filled booking URL."""

    def __init__(self, provider: SchedulingProvider, config: BookingConfig | None = None):
        self.provider = provider
        self.config = config or BookingConfig()
        self.tz = ZoneInfo(self.config.timezone)

    @property
    def link_ttl(self) -> timedelta:
        return timedelta(hours=self.config.link_ttl_hours)

    async def resolve_event_type(self) -> EventType:
        """Identity -> active event types -> selection."""
        identity = await self.provider.fetch_identity()
        event_types = await self.provider.list_event_types(identity.uri)
        if not event_types:
            logger.error("Account %s has no active event types", identity.uri)
            raise NoEventTypesError(f"No active event types for {identity.uri}")
        target = select_event_type(event_types)
        logger.info("Selected event type %s (%s)", target.uri, target.slug or target.name)
        return target

    async def create_booking_link(self, request: BookingRequest) -> DeepLinkResult:
        try:
            target = await self.resolve_event_type()
            link = await self.provider.create_single_use_link(target.uri, self.link_ttl)
            deep_link = build_deep_link(
                link.booking_url,
                request.time,
                request.date,
                request.invitee.name,
                request.invitee.email,
                tz=self.tz,
            )
        except SlotLinkError:
            raise
        except Exception as e:
            raise InternalError(f"Booking link failed: {e}") from e

        logger.info("Built deep link for slot %s on %s", request.time, target.uri)
        return DeepLinkResult(
            booking_url=deep_link,
            expires_at=link.expires_at,
            event_type_uri=target.uri,
        )
