"""Cleaning-schedule helpers.

Intervals travel over the wire in seconds but are chosen and shown in
whole days.  An item's status is derived from how many days remain until
its next cleaning date: a partial day counts as a full one, so an item
due in two hours has one day left.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from closetcare.models import CleaningStatus, ClothingItem

SECONDS_PER_DAY = 24 * 60 * 60

DEFAULT_INTERVAL_DAYS = 7
DEFAULT_INTERVAL_SECONDS = DEFAULT_INTERVAL_DAYS * SECONDS_PER_DAY

# Choices offered when adding an item or editing its interval.
INTERVAL_PRESETS_DAYS: tuple[int, ...] = (3, 7, 14, 30)

# Items with this many days left or fewer are due soon.
DUE_SOON_DAYS = 3

DATE_FORMAT = "%b %d, %Y"


def days_to_seconds(days: int) -> int:
    """Convert a whole-day interval into seconds.

    Raises
    ------
    ValueError
        If *days* is not a positive integer.
    """
    if isinstance(days, bool) or not isinstance(days, int) or days < 1:
        raise ValueError(f"interval must be a positive number of days, got {days!r}")
    return days * SECONDS_PER_DAY


def interval_days(seconds: int) -> int:
    """Return *seconds* as a whole number of days (rounded)."""
    return round(seconds / SECONDS_PER_DAY)


def days_until_cleaning(next_cleaning_date: datetime, now: datetime | None = None) -> int:
    """Days from *now* until *next_cleaning_date*, rounding partial days up.

    Zero or a negative number means cleaning is due or overdue.
    """
    now = now or datetime.now(timezone.utc)
    if next_cleaning_date.tzinfo is None:
        next_cleaning_date = next_cleaning_date.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    delta = (next_cleaning_date - now).total_seconds()
    return math.ceil(delta / SECONDS_PER_DAY)


def cleaning_status(days_left: int) -> CleaningStatus:
    if days_left <= 0:
        return CleaningStatus.OVERDUE
    if days_left <= DUE_SOON_DAYS:
        return CleaningStatus.DUE_SOON
    return CleaningStatus.OK


def describe_status(days_left: int) -> str:
    """Human label for an item with *days_left* days until cleaning.

    >>> describe_status(0)
    'Needs cleaning'
    >>> describe_status(2)
    'Due soon (2 days)'
    >>> describe_status(10)
    '10 days left'
    """
    status = cleaning_status(days_left)
    if status is CleaningStatus.OVERDUE:
        return "Needs cleaning"
    if status is CleaningStatus.DUE_SOON:
        return f"Due soon ({days_left} days)"
    return f"{days_left} days left"


def item_status(item: ClothingItem, now: datetime | None = None) -> tuple[CleaningStatus, int] | None:
    """Return ``(status, days_left)`` for *item*, or ``None`` without a next date."""
    if item.next_cleaning_date is None:
        return None
    days_left = days_until_cleaning(item.next_cleaning_date, now)
    return cleaning_status(days_left), days_left


def format_date(value: datetime | None) -> str:
    """Format a timestamp like ``Jan 05, 2025``; ``-`` when unknown."""
    if value is None:
        return "-"
    return value.strftime(DATE_FORMAT)
