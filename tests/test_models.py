"""Tests for request parsing and provider payload models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from slotlink.errors import UpstreamError, ValidationError
from slotlink.models import (
    AccountIdentity,
    BookingRequest,
    EventType,
    ScheduleEventIn,
    format_timestamp,
    parse_timestamp,
)


def test_parse_plain_date_is_utc_midnight():
    assert parse_timestamp("2025-03-10") == datetime(2025, 3, 10, tzinfo=timezone.utc)


def test_parse_zulu_timestamp():
    assert parse_timestamp("2025-03-10T15:30:00Z") == datetime(2025, 3, 10, 15, 30, tzinfo=timezone.utc)


def test_format_timestamp_uses_z_suffix():
    dt = datetime(2025, 3, 10, 17, 30, 0, 123456, tzinfo=timezone.utc)
    assert format_timestamp(dt) == "2025-03-10T17:30:00Z"
    assert format_timestamp(dt, "milliseconds") == "2025-03-10T17:30:00.123Z"


def test_booking_request_keeps_invitee_values_verbatim():
    req = BookingRequest.from_payload({
        "date": "2025-03-10",
        "time": "2025-03-10T15:30:00Z",
        "invitee": {"name": " Ada Lovelace ", "email": "ada@example.com"},
        "description": "Intro call",
    })
    assert req.invitee.name == " Ada Lovelace "
    assert req.description == "Intro call"


def test_booking_request_lists_missing_fields():
    with pytest.raises(ValidationError) as exc_info:
        BookingRequest.from_payload({"date": "2025-03-10", "invitee": {"name": "Ada"}})
    assert "time" in str(exc_info.value)
    assert "invitee.email" in str(exc_info.value)


def test_booking_request_rejects_non_object():
    with pytest.raises(ValidationError):
        BookingRequest.from_payload(["2025-03-10"])


def test_booking_request_does_not_cross_check_date_and_time():
    req = BookingRequest.from_payload({
        "date": "2025-03-10",
        "time": "2025-06-01T09:00:00Z",
        "invitee": {"name": "Ada", "email": "ada@example.com"},
    })
    assert req.date == "2025-03-10"


def test_event_type_from_api_defaults():
    et = EventType.from_api({"uri": "ET1"})
    assert et.name == ""
    assert et.duration == 0
    assert et.active is True


def test_identity_without_uri_is_upstream_error():
    with pytest.raises(UpstreamError):
        AccountIdentity.from_api({"name": "nobody"})


def test_booking_request_rejects_non_string_fields():
    with pytest.raises(ValidationError) as exc_info:
        BookingRequest.from_payload({
            "date": "2025-03-10",
            "time": 1741620600,
            "invitee": {"name": "Ada", "email": "ada@example.com"},
        })
    assert str(exc_info.value) == "Missing required fields: time"


def test_booking_request_blank_invitee_name():
    with pytest.raises(ValidationError) as exc_info:
        BookingRequest.from_payload({
            "date": "2025-03-10",
            "time": "2025-03-10T15:30:00Z",
            "invitee": {"name": "   ", "email": "ada@example.com"},
        })
    assert str(exc_info.value) == "Missing required fields: invitee.name"


def test_schedule_event_body_model():
    body = ScheduleEventIn.model_validate({
        "date": "2025-03-10",
        "time": "2025-03-10T15:30:00Z",
        "invitee": {"name": "Ada", "email": "ada@example.com"},
    })
    assert body.invitee.email == "ada@example.com"
    assert body.description is None
