"""Utility helpers for the Firetrack application."""

from .audit import record_audit
from .context import PayloadError, current_actor_name, payload, reference_date, reference_year

__all__ = [
    "PayloadError",
    "current_actor_name",
    "payload",
    "record_audit",
    "reference_date",
    "reference_year",
]
