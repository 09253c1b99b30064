"""Scheduling providers."""

from .base import SchedulingProvider
from .calendly import CalendlyClient

__all__ = ["CalendlyClient", "SchedulingProvider"]
