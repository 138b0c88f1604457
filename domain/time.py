"""
Domain time utilities (pure).

Centralized timestamp validation and the default clock used by services.

Every timestamp stored on a Purchase (payments, documents, timeline
milestones, workflow completions) goes through `require_utc_timestamp` so
error messages stay consistent across the domain model.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from .errors import PurchaseValidationError

Clock = Callable[[], datetime]


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforce that a timestamp is UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise PurchaseValidationError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise PurchaseValidationError(f"{name} must be a UTC timestamp (offset 0)")


def utc_now() -> datetime:
    """Default clock: the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)
