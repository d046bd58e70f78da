# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for MotoLedger.

This module defines a Period value object and helpers to derive the
calendar-month periods used by the dashboard (current month, previous month
with year rollover, the last N months) from a reference date.

Month membership is always decided by calendar month and year equality,
never by a rolling 30-day window.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .models import Transaction


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def resolve_reference(reference_date: Optional[date]) -> date:
    """Return ``reference_date`` or today's date when it is None."""
    return reference_date if reference_date is not None else _today()


def month_period(year: int, month: int) -> Period:
    """Full calendar month, labelled 'YYYY-MM'."""
    last_day = monthrange(year, month)[1]
    return Period(
        start=date(year, month, 1),
        end=date(year, month, last_day),
        label=f"{year:04d}-{month:02d}",
    )


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move (year, month) by ``offset`` months, rolling the year over."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def current_month(reference_date: Optional[date] = None) -> Period:
    """Calendar month containing the reference date (today by default)."""
    ref = resolve_reference(reference_date)
    return month_period(ref.year, ref.month)


def previous_month(reference_date: Optional[date] = None) -> Period:
    """
    Calendar month immediately before the reference month.

    January rolls back to December of the previous year.
    """
    ref = resolve_reference(reference_date)
    year, month = shift_month(ref.year, ref.month, -1)
    return month_period(year, month)


def last_months(reference_date: Optional[date] = None, months: int = 6) -> list[Period]:
    """
    The ``months`` calendar months ending with the reference month.

    Periods are returned oldest first.

    Raises:
        ValueError: if ``months`` is lower than 1.
    """
    if months < 1:
        raise ValueError("months must be at least 1.")

    ref = resolve_reference(reference_date)
    periods = []
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(ref.year, ref.month, -offset)
        periods.append(month_period(year, month))
    return periods


def filter_transactions_by_period(
    transactions: Iterable[Transaction], period: Period
) -> list[Transaction]:
    """Keep the transactions dated within [period.start, period.end]."""
    return [t for t in transactions if period.contains(t.date)]

