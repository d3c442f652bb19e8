"""Expiry policy for listings.

Every function here is pure: callers pass ``now`` explicitly and nothing is
written back. Expiry is evaluated lazily at read time; there is no sweeper.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Protocol

from dopelist.core.settings import settings
from dopelist.db.time import ensure_utc

_SECONDS_PER_HOUR = 3600
_HOURS_PER_DAY = 24


class VisibilityState(StrEnum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class ListingTimes(Protocol):
    """Attributes the policy reads from a listing."""

    active: bool
    expires_at: datetime
    comments_close_at: datetime


def expires_at_from(start: datetime) -> datetime:
    """Return the expiry for a listing created or renewed at ``start``."""
    return ensure_utc(start) + timedelta(days=settings.listing_duration_days)


def comments_close_at_from(start: datetime) -> datetime:
    """Return when the comment window of a listing created at ``start`` closes."""
    return ensure_utc(start) + timedelta(hours=settings.comments_window_hours)


def visibility_state(listing: ListingTimes, now: datetime) -> VisibilityState:
    """Classify a listing as active, expiring soon, or expired at ``now``."""
    expires_at = ensure_utc(listing.expires_at)
    now = ensure_utc(now)
    if not listing.active or now >= expires_at:
        return VisibilityState.EXPIRED
    if expires_at - now < timedelta(hours=settings.expiring_soon_hours):
        return VisibilityState.EXPIRING_SOON
    return VisibilityState.ACTIVE


def is_visible(listing: ListingTimes, now: datetime) -> bool:
    return visibility_state(listing, now) is not VisibilityState.EXPIRED


def is_editable(listing: ListingTimes, now: datetime) -> bool:
    """Return True while owners may change the listing; renewal is the only way back."""
    return is_visible(listing, now)


def comments_open(listing: ListingTimes, now: datetime) -> bool:
    """Return True while comments are accepted.

    Only the comment window is considered here; the active flag is checked
    separately by the comment handler.
    """
    return ensure_utc(now) < ensure_utc(listing.comments_close_at)


def format_time_left(expires_at: datetime, now: datetime) -> str:
    """Render the remaining listing time, e.g. ``"3d 4h left"`` or ``"5h left"``."""
    seconds = (ensure_utc(expires_at) - ensure_utc(now)).total_seconds()
    if seconds <= 0:
        return "expired"
    hours = int(seconds // _SECONDS_PER_HOUR)
    days, remaining_hours = divmod(hours, _HOURS_PER_DAY)
    if days >= 1:
        return f"{days}d {remaining_hours}h left"
    return f"{hours}h left"


def comments_time_left(comments_close_at: datetime, now: datetime) -> str:
    """Render the remaining comment window, rounding partial hours up."""
    seconds = (ensure_utc(comments_close_at) - ensure_utc(now)).total_seconds()
    hours = math.ceil(seconds / _SECONDS_PER_HOUR)
    if hours <= 0:
        return "Closed"
    if hours == 1:
        return "1 hour left"
    return f"{hours} hours left"
