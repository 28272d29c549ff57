"""
Shopdesk Core Time — Clocks
===========================
Services that stamp records (order created_at, payment_date, customer
and coupon creation) take a Clock instead of calling datetime.now().
Production wiring passes SystemClock; tests pin time with FixedClock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now_utc(self) -> datetime:
        ...  # pragma: no cover

    def today(self) -> date:
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock time in UTC."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now_utc().date()


class FixedClock:
    """
    Pinned, manually advanced time.

        clock = FixedClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        clock.advance(60)   # one minute later
    """

    def __init__(self, at: datetime) -> None:
        if at.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime.")
        self._at = at.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._at

    def today(self) -> date:
        return self._at.date()

    def advance(self, seconds: float) -> datetime:
        self._at += timedelta(seconds=seconds)
        return self._at
