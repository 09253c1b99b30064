"""slotlink: single-use, slot-pinned booking links for Calendly."""

__version__ = "0.1.0"
