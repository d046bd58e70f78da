# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Month-over-month comparison of recorded cash flow.

``compare_months()`` puts the calendar month of a reference date next to the
month before it and computes the growth of income, expenses and profit.

Per-month figures only reflect transactions recorded in the ledger:

    income   = sum of INCOME amounts in the month
    expenses = sum of every non-income amount in the month
    profit   = income - expenses

Unlike ``engine.aggregate()``, the employees' fixed payroll is NOT part of
``expenses`` here: the comparison covers recorded cash flow only.

Growth of a (current, previous) pair:

    previous == 0  ->  100 if current > 0 else 0
    otherwise      ->  (current - previous) / previous * 100

``monthly_series()`` extends the same per-month figures to the last N months
as a long-format DataFrame suitable for charts and CSV export.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

import pandas as pd

from .models import ZERO, Transaction
from .periods import (
    Period,
    current_month,
    filter_transactions_by_period,
    last_months,
    previous_month,
    resolve_reference,
)

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MonthTotals:
    """Recorded income, expenses and profit of one calendar month."""

    label: str
    income: Decimal
    expenses: Decimal
    profit: Decimal


@dataclass(frozen=True)
class MonthComparison:
    """Current month versus previous month, with growth percentages."""

    current: MonthTotals
    previous: MonthTotals
    income_growth_pct: Decimal
    expense_growth_pct: Decimal
    profit_growth_pct: Decimal

    @property
    def series(self) -> tuple[MonthTotals, MonthTotals]:
        """Two-point time series (previous, current) for charting."""
        return (self.previous, self.current)


def growth_pct(current: Decimal, previous: Decimal) -> Decimal:
    """
    Percentage growth from ``previous`` to ``current``.

    A zero base never raises: growth is 100 when the current value is
    positive and 0 otherwise.
    """
    if previous == ZERO:
        return _HUNDRED if current > ZERO else ZERO
    return (current - previous) / previous * _HUNDRED


def month_totals(transactions: Iterable[Transaction], period: Period) -> MonthTotals:
    """Recorded totals of the transactions dated within ``period``."""
    income = ZERO
    expenses = ZERO
    for t in filter_transactions_by_period(transactions, period):
        if t.type.is_income:
            income += t.amount
        else:
            expenses += t.amount

    return MonthTotals(
        label=period.label,
        income=income,
        expenses=expenses,
        profit=income - expenses,
    )


def compare_months(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
) -> MonthComparison:
    """
    Compare the reference calendar month with the month before it.

    Args:
        transactions: Ledger transactions. Fixed payroll is never included.
        reference_date: Any day of the "current" month; today when None.

    Returns:
        A MonthComparison whose growth figures follow ``growth_pct``.
    """
    ref = resolve_reference(reference_date)
    rows = list(transactions)

    current = month_totals(rows, current_month(ref))
    previous = month_totals(rows, previous_month(ref))

    return MonthComparison(
        current=current,
        previous=previous,
        income_growth_pct=growth_pct(current.income, previous.income),
        expense_growth_pct=growth_pct(current.expenses, previous.expenses),
        profit_growth_pct=growth_pct(current.profit, previous.profit),
    )


def monthly_series(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
    months: int = 6,
) -> pd.DataFrame:
    """
    Recorded totals for the last ``months`` calendar months.

    Returns
    -------
    pandas.DataFrame
        One row per month, oldest first, with columns:
            period_label, start, end, income, expenses, profit
        Amounts are floats rounded to 2 decimals (display values).
    """
    rows = list(transactions)
    records = []
    for period in last_months(reference_date, months):
        totals = month_totals(rows, period)
        records.append(
            {
                "period_label": period.label,
                "start": period.start,
                "end": period.end,
                "income": round(float(totals.income), 2),
                "expenses": round(float(totals.expenses), 2),
                "profit": round(float(totals.profit), 2),
            }
        )
    return pd.DataFrame(
        records,
        columns=["period_label", "start", "end", "income", "expenses", "profit"],
    )
