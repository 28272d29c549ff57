"""
Tests for core.time — clocks used for order and payment timestamps.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.time import FixedClock, SystemClock


class TestSystemClock:
    def test_returns_utc_datetime(self):
        dt = SystemClock().now_utc()
        assert dt.tzinfo == timezone.utc

    def test_today_matches_now(self):
        clock = SystemClock()
        assert clock.today() in (
            clock.now_utc().date(),
            clock.now_utc().date() - timedelta(days=1),
        )


class TestFixedClock:
    def test_returns_fixed_time(self):
        fixed = datetime(2026, 3, 1, 23, 59, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        assert clock.now_utc() == fixed
        assert clock.today() == date(2026, 3, 1)

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2026, 1, 1))

    def test_normalises_offset_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        clock = FixedClock(datetime(2026, 3, 2, 1, 0, tzinfo=plus_two))
        assert clock.now_utc().tzinfo == timezone.utc
        assert clock.today() == date(2026, 3, 1)

    def test_advance_rolls_date(self):
        clock = FixedClock(datetime(2026, 3, 1, 23, 59, 0, tzinfo=timezone.utc))
        moved = clock.advance(120)
        assert moved == clock.now_utc()
        assert clock.today() == date(2026, 3, 2)
