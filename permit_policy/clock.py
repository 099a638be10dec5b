"""
Permit Policy Engine: Clock Protocol
=======================================
No date.today() inside evaluation logic.
The validation date is read from an injectable Clock, once
per validate() call, so tests can pin "today".
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Injectable source of the validation date."""

    def today(self) -> date:
        ...  # pragma: no cover


class SystemClock:
    """Production clock, local calendar date."""

    def today(self) -> date:
        return datetime.now().date()


class FixedClock:
    """
    Test clock that always returns the same date.

    Usage:
        clock = FixedClock(date(2025, 1, 15))
        assert clock.today().day == 15
    """

    def __init__(self, fixed_date: date) -> None:
        if isinstance(fixed_date, datetime):
            fixed_date = fixed_date.date()
        if not isinstance(fixed_date, date):
            raise ValueError("FixedClock requires a date.")
        self._fixed_date = fixed_date

    def today(self) -> date:
        return self._fixed_date

    def advance(self, days: int) -> None:
        self._fixed_date = self._fixed_date + timedelta(days=days)
