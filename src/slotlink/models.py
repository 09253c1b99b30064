"""Core data models for slotlink."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import UpstreamError, ValidationError


def format_timestamp(dt: datetime, timespec: str = "seconds") -> str:
    """Render an aware datetime as UTC ISO-8601 with a trailing 'Z'."""
    return dt.astimezone(timezone.utc).isoformat(timespec=timespec).replace("+00:00", "Z")


def parse_timestamp(value: str, tz: ZoneInfo | timezone = timezone.utc) -> datetime:
    """Parse an ISO-8601 date or timestamp into an aware datetime.

    Date-only strings ("2025-03-10") are midnight UTC. Timestamps without an
    offset are interpreted in ``tz``.
    """
    value = value.strip()
    if not value:
        raise ValueError("empty timestamp")
    if "T" not in value and " " not in value:
        return datetime.combine(date.fromisoformat(value), time(0, 0), tzinfo=timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _require(payload: dict[str, Any], key: str, kind: str) -> Any:
    try:
        return payload[key]
    except (KeyError, TypeError):
        raise UpstreamError(f"Malformed {kind} payload: missing '{key}'", step=kind)


@dataclass(frozen=True)
class EventType:
    """A bookable meeting template owned by the account."""

    uri: str
    name: str = ""
    duration: int = 0  # minutes
    slug: str = ""
    scheduling_url: str = ""
    active: bool = True

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> EventType:
        return cls(
            uri=_require(payload, "uri", "event_type"),
            name=payload.get("name") or "",
            duration=int(payload.get("duration") or 0),
            slug=payload.get("slug") or "",
            scheduling_url=payload.get("scheduling_url") or "",
            active=bool(payload.get("active", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AvailableTime:
    """One open slot for an event type."""

    start_time: str
    invitee_start_time: str = ""
    status: str = "available"
    scheduling_url: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> AvailableTime:
        start = _require(payload, "start_time", "available_time")
        return cls(
            start_time=start,
            invitee_start_time=payload.get("invitee_start_time") or start,
            status=payload.get("status") or "available",
            scheduling_url=payload.get("scheduling_url") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AccountIdentity:
    """The authenticated Calendly account."""

    uri: str
    name: str = ""
    slug: str = ""
    email: str = ""
    scheduling_url: str = ""
    timezone: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> AccountIdentity:
        return cls(
            uri=_require(payload, "uri", "identity"),
            name=payload.get("name") or "",
            slug=payload.get("slug") or "",
            email=payload.get("email") or "",
            scheduling_url=payload.get("scheduling_url") or "",
            timezone=payload.get("timezone") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SchedulingLink:
    """A single-use booking link. Owned by the provider once created."""

    booking_url: str
    expires_at: str


@dataclass
class Invitee:
    name: str
    email: str


class InviteeIn(BaseModel):
    name: str
    email: str

    @field_validator("name", "email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ScheduleEventIn(BaseModel):
    """JSON body of POST /schedule-event."""

    date: str
    time: str
    invitee: InviteeIn
    description: str | None = None

    @field_validator("date", "time")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


@dataclass
class BookingRequest:
    """A visitor's request to book one slot."""

    date: str  # calendar day, "YYYY-MM-DD" or ISO timestamp
    time: str  # ISO timestamp of the chosen slot
    invitee: Invitee
    description: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> BookingRequest:
        """Build a request from a decoded JSON body, rejecting missing fields."""
        try:
            body = ScheduleEventIn.model_validate(payload)
        except PydanticValidationError as e:
            missing = [".".join(str(p) for p in err["loc"]) for err in e.errors() if err["loc"]]
            detail = f": {', '.join(missing)}" if missing else ""
            raise ValidationError(f"Missing required fields{detail}")

        request = cls(
            date=body.date,
            time=body.time,
            invitee=Invitee(name=body.invitee.name, email=body.invitee.email),
            description=body.description or "",
        )
        request.validate()
        return request

    def validate(self) -> None:
        """Check that date and time parse. Consistency between them is not checked."""
        for label, value in (("date", self.date), ("time", self.time)):
            try:
                parse_timestamp(value)
            except ValueError:
                raise ValidationError(f"Invalid {label}: {value!r}")


@dataclass
class DeepLinkResult:
    booking_url: str
    expires_at: str
    event_type_uri: str = field(default="", compare=False)

    def to_response(self) -> dict[str, Any]:
        return {"success": True, "booking_url": self.booking_url, "expires_at": self.expires_at}
