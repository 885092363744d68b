"""Tests for closetcare.schedule."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from closetcare.models import CleaningStatus, ClothingItem
from closetcare.schedule import (
    DEFAULT_INTERVAL_SECONDS,
    INTERVAL_PRESETS_DAYS,
    cleaning_status,
    days_to_seconds,
    days_until_cleaning,
    describe_status,
    format_date,
    interval_days,
    item_status,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class TestIntervals:
    def test_default_is_one_week(self):
        assert DEFAULT_INTERVAL_SECONDS == 604800

    def test_presets(self):
        assert INTERVAL_PRESETS_DAYS == (3, 7, 14, 30)

    def test_days_to_seconds(self):
        assert days_to_seconds(3) == 259200

    @pytest.mark.parametrize("days", [0, -1, 1.5, True])
    def test_invalid_days(self, days):
        with pytest.raises(ValueError):
            days_to_seconds(days)

    def test_interval_days_rounds(self):
        assert interval_days(1209600) == 14
        assert interval_days(1209600 + 3600) == 14

    @given(st.integers(min_value=1, max_value=3650))
    def test_days_survive_conversion(self, days):
        assert interval_days(days_to_seconds(days)) == days


class TestDaysUntilCleaning:
    def test_partial_day_rounds_up(self):
        assert days_until_cleaning(NOW + timedelta(hours=2), NOW) == 1

    def test_exact_days(self):
        assert days_until_cleaning(NOW + timedelta(days=5), NOW) == 5

    def test_past_date(self):
        assert days_until_cleaning(NOW - timedelta(days=2, hours=1), NOW) == -2

    def test_same_moment(self):
        assert days_until_cleaning(NOW, NOW) == 0

    def test_naive_dates_are_utc(self):
        naive_now = NOW.replace(tzinfo=None)
        assert days_until_cleaning(naive_now + timedelta(days=1), naive_now) == 1


class TestStatus:
    @pytest.mark.parametrize(
        "days, expected",
        [
            (-3, CleaningStatus.OVERDUE),
            (0, CleaningStatus.OVERDUE),
            (1, CleaningStatus.DUE_SOON),
            (3, CleaningStatus.DUE_SOON),
            (4, CleaningStatus.OK),
        ],
    )
    def test_thresholds(self, days, expected):
        assert cleaning_status(days) is expected

    def test_labels(self):
        assert describe_status(-1) == "Needs cleaning"
        assert describe_status(3) == "Due soon (3 days)"
        assert describe_status(12) == "12 days left"

    def test_item_status(self):
        item = ClothingItem("1", "Hat", "Hats", next_cleaning_date=NOW + timedelta(days=2))
        assert item_status(item, NOW) == (CleaningStatus.DUE_SOON, 2)

    def test_item_without_next_date(self):
        assert item_status(ClothingItem("1", "Hat", "Hats"), NOW) is None


def test_format_date():
    assert format_date(datetime(2026, 1, 5, tzinfo=timezone.utc)) == "Jan 05, 2026"
    assert format_date(None) == "-"
