# mypy: ignore-errors
"""Tests for the pure listing expiry policy."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from dopelist.services import expiry
from dopelist.services.expiry import VisibilityState

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeListing:
    active: bool
    expires_at: datetime
    comments_close_at: datetime


def _listing(expires_in: timedelta, active: bool = True, comments_in: timedelta | None = None):
    return FakeListing(
        active=active,
        expires_at=NOW + expires_in,
        comments_close_at=NOW + (comments_in if comments_in is not None else expires_in),
    )


def test_expires_seven_days_after_start() -> None:
    assert expiry.expires_at_from(NOW) == NOW + timedelta(days=7)


def test_naive_start_is_treated_as_utc() -> None:
    naive = NOW.replace(tzinfo=None)
    assert expiry.expires_at_from(naive) == NOW + timedelta(days=7)


@pytest.mark.parametrize(
    ("expires_in", "active", "expected"),
    [
        (timedelta(days=5), True, VisibilityState.ACTIVE),
        (timedelta(hours=48), True, VisibilityState.ACTIVE),
        (timedelta(hours=47, minutes=59), True, VisibilityState.EXPIRING_SOON),
        (timedelta(minutes=1), True, VisibilityState.EXPIRING_SOON),
        (timedelta(0), True, VisibilityState.EXPIRED),
        (timedelta(days=-1), True, VisibilityState.EXPIRED),
        (timedelta(days=5), False, VisibilityState.EXPIRED),
    ],
)
def test_visibility_state(expires_in, active, expected) -> None:
    assert expiry.visibility_state(_listing(expires_in, active), NOW) is expected


def test_visible_until_the_exact_expiry_instant() -> None:
    listing = _listing(timedelta(seconds=1))
    assert expiry.is_visible(listing, NOW)
    assert not expiry.is_visible(listing, NOW + timedelta(seconds=1))


def test_editable_only_while_visible() -> None:
    assert expiry.is_editable(_listing(timedelta(hours=1)), NOW)
    assert not expiry.is_editable(_listing(timedelta(hours=-1)), NOW)
    assert not expiry.is_editable(_listing(timedelta(days=3), active=False), NOW)


def test_comments_window_is_independent_of_expiry() -> None:
    listing = _listing(timedelta(days=3), comments_in=timedelta(0))
    assert not expiry.comments_open(listing, NOW)
    listing = _listing(timedelta(days=-1), comments_in=timedelta(hours=2))
    assert expiry.comments_open(listing, NOW)


@pytest.mark.parametrize(
    ("remaining", "expected"),
    [
        (timedelta(days=3, hours=4, minutes=59), "3d 4h left"),
        (timedelta(days=1), "1d 0h left"),
        (timedelta(hours=23, minutes=59), "23h left"),
        (timedelta(minutes=30), "0h left"),
        (timedelta(0), "expired"),
        (timedelta(hours=-2), "expired"),
    ],
)
def test_format_time_left(remaining, expected) -> None:
    assert expiry.format_time_left(NOW + remaining, NOW) == expected


@pytest.mark.parametrize(
    ("remaining", "expected"),
    [
        (timedelta(hours=5), "5 hours left"),
        (timedelta(hours=4, minutes=1), "5 hours left"),
        (timedelta(minutes=20), "1 hour left"),
        (timedelta(0), "Closed"),
        (timedelta(hours=-3), "Closed"),
    ],
)
def test_comments_time_left(remaining, expected) -> None:
    assert expiry.comments_time_left(NOW + remaining, NOW) == expected
