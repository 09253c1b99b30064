"""Booking orchestration."""
