"""Abstract base for scheduling providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, timedelta

from ..models import AccountIdentity, AvailableTime, EventType, SchedulingLink


class SchedulingProvider(ABC):
    """Base class for scheduling backends (Calendly, etc.)."""

    @abstractmethod
    async def fetch_identity(self) -> AccountIdentity:
        """Return the account the credential belongs to."""
        ...

    @abstractmethod
    async def list_event_types(self, account_uri: str) -> list[EventType]:
        """List the account's active event types, in provider order."""
        ...

    @abstractmethod
    async def list_available_times(self, event_type_uri: str, day: date) -> list[AvailableTime]:
        """List open slots for an event type on one calendar day."""
        ...

    @abstractmethod
    async def create_single_use_link(self, event_type_uri: str, ttl: timedelta) -> SchedulingLink:
        """Create a link good for exactly one booking, expiring after ttl."""
        ...
