"""Error taxonomy shared by the provider client, orchestrator and web facade."""

from __future__ import annotations


class SlotLinkError(Exception):
    """Base class for every error raised by slotlink."""


class ValidationError(SlotLinkError):
    """Caller input is missing or malformed. Never reaches the provider."""


class ConfigurationError(SlotLinkError):
    """Local configuration is incomplete (e.g. no provider credential)."""


class AuthError(SlotLinkError):
    """The provider rejected the bearer credential."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(SlotLinkError):
    """The provider answered with a non-success status or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        step: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.step = step


class LinkCreationError(UpstreamError):
    """Creating the single-use scheduling link failed."""


class NoEventTypesError(SlotLinkError):
    """The account has no active event types to book against."""


class InternalError(SlotLinkError):
    """Unexpected failure somewhere in the booking chain."""
