# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard orchestration.

``build_dashboard()`` runs every engine and comparison function over one
ledger snapshot and gathers the results in a single ``DashboardReport``.

Results are memoized on (snapshot, reference date, settings). A snapshot is
an immutable value carrying the ledger version, so any committed mutation
produces a different key and the report is recomputed.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Optional

from .comparison import MonthComparison, compare_months
from .engine import (
    DEFAULT_CATEGORY,
    FIXED_PAYROLL_LABEL,
    TOP_CATEGORIES,
    CashDeskSummary,
    CategoryTotal,
    EmployeeExpenseTotal,
    ExpenseComposition,
    ShopExpenseSummary,
    Stats,
    aggregate,
    cash_desk_summary,
    category_breakdown,
    composition_breakdown,
    employee_expense_totals,
    recent_transactions,
    shop_expense_summary,
)
from .logging_utils import get_logger
from .models import LedgerSnapshot, Transaction
from .periods import resolve_reference

logger = get_logger(__name__)


@dataclass(frozen=True)
class DashboardSettings:
    """
    Presentation settings of the dashboard.

    Frozen so that it can be part of the memoization key.
    """

    top_categories: int = TOP_CATEGORIES
    default_category: str = DEFAULT_CATEGORY
    fixed_payroll_label: str = FIXED_PAYROLL_LABEL
    recent_limit: int = 5
    comparison_months: int = 6


DEFAULT_DASHBOARD_SETTINGS = DashboardSettings()


@dataclass(frozen=True)
class DashboardReport:
    """Everything the dashboard screen shows for one snapshot and one date."""

    version: int
    reference_date: date
    stats: Stats
    categories: tuple[CategoryTotal, ...]
    composition: ExpenseComposition
    comparison: MonthComparison
    cash_desk: CashDeskSummary
    shop_expenses: ShopExpenseSummary
    employee_totals: tuple[EmployeeExpenseTotal, ...]
    recent: tuple[Transaction, ...]


@lru_cache(maxsize=32)
def _build_dashboard_cached(
    snapshot: LedgerSnapshot,
    reference_date: date,
    settings: DashboardSettings,
) -> DashboardReport:
    logger.debug(
        "Computing dashboard for ledger version %s on %s.",
        snapshot.version,
        reference_date,
    )
    transactions = snapshot.transactions
    employees = snapshot.employees

    stats = aggregate(transactions, employees)
    categories = category_breakdown(
        transactions,
        employees,
        top_n=settings.top_categories,
        default_category=settings.default_category,
        fixed_payroll_label=settings.fixed_payroll_label,
    )

    return DashboardReport(
        version=snapshot.version,
        reference_date=reference_date,
        stats=stats,
        categories=tuple(categories),
        composition=composition_breakdown(stats),
        comparison=compare_months(transactions, reference_date),
        cash_desk=cash_desk_summary(transactions, reference_date),
        shop_expenses=shop_expense_summary(transactions, reference_date),
        employee_totals=tuple(employee_expense_totals(transactions, employees)),
        recent=tuple(recent_transactions(transactions, settings.recent_limit)),
    )


def build_dashboard(
    snapshot: LedgerSnapshot,
    reference_date: Optional[date] = None,
    settings: DashboardSettings = DEFAULT_DASHBOARD_SETTINGS,
) -> DashboardReport:
    """
    Build (or reuse) the dashboard report of a snapshot.

    Args:
        snapshot: Ledger snapshot, as returned by ``db.load_snapshot``.
        reference_date: Day used for the monthly figures; today when None.
        settings: Presentation settings (top-N, labels, limits).

    Returns:
        A DashboardReport. Repeated calls with an equal snapshot, date and
        settings return the same object.
    """
    ref = resolve_reference(reference_date)
    return _build_dashboard_cached(snapshot, ref, settings)


def clear_dashboard_cache() -> None:
    """Drop every memoized dashboard report."""
    _build_dashboard_cached.cache_clear()
