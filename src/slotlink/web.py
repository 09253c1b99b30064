"""HTTP facade using FastAPI. Validates input and maps failures to status codes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Config
from .core.booking import SlotLinkOrchestrator
from .errors import (
    AuthError,
    ConfigurationError,
    InternalError,
    LinkCreationError,
    NoEventTypesError,
    UpstreamError,
    ValidationError,
)
from .models import BookingRequest
from .provider.base import SchedulingProvider
from .provider.calendly import CalendlyClient, utc_now
from .window import resolve_day

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def _error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse({"error": error}, status_code=status_code)


def create_app(
    config: Config,
    provider: SchedulingProvider | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Build the app. A provider can be injected; otherwise a CalendlyClient is built from config."""
    if provider is None:
        provider = CalendlyClient(
            config.provider,
            timezone=config.booking.timezone,
            retry=config.retry,
            clock=clock,
        )
    orchestrator = SlotLinkOrchestrator(provider, config.booking)

    app = FastAPI(title="slotlink", version=__version__)
    app.state.provider = provider
    app.state.orchestrator = orchestrator

    if config.web.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.web.allowed_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type"],
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/user")
    async def get_user():
        try:
            identity = await provider.fetch_identity()
        except Exception as e:
            logger.error("Calendly user lookup failed: %s", e)
            return _message(500, "Failed to fetch user info")
        return identity.to_dict()

    @app.get("/event-types")
    async def get_event_types(userUri: Optional[str] = None):
        if not userUri:
            logger.info("Rejected event-types request: missing userUri")
            return _message(400, "User URI is required")
        try:
            event_types = await provider.list_event_types(userUri)
        except Exception as e:
            logger.error("Calendly event types failed for %s: %s", userUri, e)
            return _message(500, "Failed to fetch event types")
        return [et.to_dict() for et in event_types]

    @app.get("/available-times")
    async def get_available_times(
        eventTypeUri: Optional[str] = None,
        date: Optional[str] = None,
    ):
        if not eventTypeUri or not date:
            logger.info(
                "Rejected available-times request: eventTypeUri=%r date=%r", eventTypeUri, date
            )
            return _message(400, "eventTypeUri and date are required")
        try:
            day = resolve_day(date, orchestrator.tz)
        except ValueError:
            logger.info("Rejected available-times request: invalid date %r", date)
            return _message(400, f"Invalid date: {date}")
        try:
            times = await provider.list_available_times(eventTypeUri, day)
        except Exception as e:
            logger.error("Calendly available times failed for %s on %s: %s", eventTypeUri, day, e)
            return _message(500, "Failed to fetch available times")
        return [t.to_dict() for t in times]

    @app.post("/schedule-event")
    async def schedule_event(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        try:
            booking = BookingRequest.from_payload(payload)
        except ValidationError as e:
            logger.info("Rejected booking request: %s", e)
            return _error(400, str(e))

        try:
            result = await orchestrator.create_booking_link(booking)
        except ConfigurationError as e:
            logger.error("schedule-event misconfigured: %s", e)
            return _error(500, "Calendly integration not configured")
        except AuthError as e:
            logger.error("schedule-event auth failed: %s", e)
            return _error(401, "Calendly auth failed")
        except LinkCreationError as e:
            logger.error("schedule-event link creation failed (%s): %s", e.status_code, e.body or e)
            return _error(502, "Could not create booking link")
        except NoEventTypesError as e:
            logger.error("schedule-event: %s", e)
            return _error(500, "No event types available")
        except UpstreamError as e:
            logger.error("schedule-event upstream failure at %s (%s): %s", e.step, e.status_code, e.body or e)
            return _error(500, "Internal server error")
        except InternalError as e:
            logger.error("schedule-event error: %s", e, exc_info=True)
            return _error(500, "Internal server error")
        return result.to_response()

    return app
