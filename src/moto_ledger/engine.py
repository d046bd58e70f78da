# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core financial aggregation engine for MotoLedger.

Every function in this module is pure: it receives transactions and
employees (usually the content of a ``LedgerSnapshot``), never mutates them,
and returns a fresh value.

1. Dashboard statistics
   --------------------
   ``aggregate()`` computes the headline figures of the dashboard:

       total_income      = sum of INCOME amounts
       shop_expense      = sum of EXPENSE_SHOP / EXPENSE_COMMON / EXPENSE_FIXED
       employee_expense  = sum of EXPENSE_EMPLOYEE amounts
       total_fixed_payroll = sum of every employee's fixed salary
       total_expense     = shop_expense + employee_expense + total_fixed_payroll
       net_balance       = total_income - total_expense

   Fixed payroll comes from the employee configuration, not from the ledger.
   It is counted exactly once per employee per call. Recording a salary as a
   transaction as well would count it twice; avoiding that is up to the
   caller.

2. Breakdowns
   ----------
   - ``category_breakdown()``: top expense categories (bar chart).
   - ``composition_breakdown()``: shop / employee extras / fixed salaries
     split (donut chart).
   - ``employee_expense_totals()``: recorded expenses per employee.

3. Desk summaries
   --------------
   ``cash_desk_summary()`` and ``shop_expense_summary()`` give the day/month
   and month/all-time figures shown on the cashier and shop-expense screens.

Monthly comparisons live in ``comparison.py``.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .models import (
    ZERO,
    Employee,
    EmployeeExpense,
    Transaction,
    TransactionType,
)
from .periods import (
    current_month,
    filter_transactions_by_period,
    resolve_reference,
)

DEFAULT_CATEGORY = "Outros"
FIXED_PAYROLL_LABEL = "Salário Base"
UNKNOWN_EMPLOYEE_LABEL = "Funcionário desconhecido"
TOP_CATEGORIES = 6


@dataclass(frozen=True)
class Stats:
    """Headline dashboard figures."""

    total_income: Decimal
    shop_expense: Decimal
    employee_expense: Decimal
    total_fixed_payroll: Decimal
    total_expense: Decimal
    net_balance: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    """Total amount of one expense category."""

    category: str
    total: Decimal


@dataclass(frozen=True)
class ExpenseComposition:
    """
    Three-bucket split of the total expense.

    All three values are always present, even when zero.
    """

    shop: Decimal
    employee_extras: Decimal
    fixed_salaries: Decimal

    @property
    def total(self) -> Decimal:
        return self.shop + self.employee_extras + self.fixed_salaries

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "Shop": self.shop,
            "EmployeeExtras": self.employee_extras,
            "FixedSalaries": self.fixed_salaries,
        }

    def shares(self) -> dict[str, Decimal]:
        """Percentage of the total for each bucket (all zero if total is 0)."""
        total = self.total
        if total == ZERO:
            return {key: ZERO for key in self.as_dict()}
        return {key: value / total * 100 for key, value in self.as_dict().items()}


@dataclass(frozen=True)
class EmployeeExpenseTotal:
    """Recorded expenses of one employee (advances, commissions, bonuses)."""

    employee_id: int
    name: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class CashDeskSummary:
    """Income received on the reference day and in its calendar month."""

    day_total: Decimal
    month_total: Decimal


@dataclass(frozen=True)
class ShopExpenseSummary:
    """Shop expenses of the reference calendar month and of all time."""

    month_total: Decimal
    all_time_total: Decimal


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def total_fixed_payroll(employees: Iterable[Employee]) -> Decimal:
    """Sum of the fixed salaries of all employees."""
    return _sum(e.fixed_salary for e in employees)


def aggregate(
    transactions: Iterable[Transaction],
    employees: Iterable[Employee],
) -> Stats:
    """
    Compute the dashboard statistics for a ledger snapshot.

    Args:
        transactions: Ledger transactions (any kind).
        employees: Employees whose fixed salaries form the fixed payroll.

    Returns:
        A Stats instance. Empty inputs give all-zero figures.
    """
    income = ZERO
    shop = ZERO
    employee = ZERO

    for t in transactions:
        kind = t.type.kind
        if kind is TransactionType.INCOME:
            income += t.amount
        elif kind is TransactionType.EXPENSE_SHOP:
            shop += t.amount
        else:
            employee += t.amount

    fixed_payroll = total_fixed_payroll(employees)
    total_expense = shop + employee + fixed_payroll

    return Stats(
        total_income=income,
        shop_expense=shop,
        employee_expense=employee,
        total_fixed_payroll=fixed_payroll,
        total_expense=total_expense,
        net_balance=income - total_expense,
    )


def category_breakdown(
    transactions: Iterable[Transaction],
    employees: Iterable[Employee] = (),
    *,
    top_n: int = TOP_CATEGORIES,
    default_category: str = DEFAULT_CATEGORY,
    fixed_payroll_label: str = FIXED_PAYROLL_LABEL,
) -> list[CategoryTotal]:
    """
    Group expenses by category and return the largest ones.

    Steps:
        1. Sum every non-income transaction by category, in first-encountered
           order. Missing or empty categories fall under ``default_category``.
        2. Add the fixed payroll under ``fixed_payroll_label`` when it is
           greater than zero. If a category already uses that label the two
           amounts are merged.
        3. Sort by total, descending. The sort is stable, so equal totals keep
           their grouping order.
        4. Keep the first ``top_n`` groups.
    """
    totals: dict[str, Decimal] = {}
    for t in transactions:
        if t.type.is_income:
            continue
        label = (t.category or "").strip() or default_category
        totals[label] = totals.get(label, ZERO) + t.amount

    fixed_payroll = total_fixed_payroll(employees)
    if fixed_payroll > ZERO:
        totals[fixed_payroll_label] = (
            totals.get(fixed_payroll_label, ZERO) + fixed_payroll
        )

    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(category=name, total=value) for name, value in ordered[:top_n]]


def composition_breakdown(stats: Stats) -> ExpenseComposition:
    """Split the total expense into its three components."""
    return ExpenseComposition(
        shop=stats.shop_expense,
        employee_extras=stats.employee_expense,
        fixed_salaries=stats.total_fixed_payroll,
    )


def employee_expense_totals(
    transactions: Iterable[Transaction],
    employees: Iterable[Employee],
) -> list[EmployeeExpenseTotal]:
    """
    Recorded expense per employee.

    Every configured employee appears (with zero when nothing was recorded),
    in configuration order. Expenses pointing to an employee id that no
    longer exists are listed after them under ``UNKNOWN_EMPLOYEE_LABEL``.
    """
    names: dict[int, str] = {e.id: e.name for e in employees}
    totals: dict[int, Decimal] = {employee_id: ZERO for employee_id in names}
    counts: dict[int, int] = {employee_id: 0 for employee_id in names}

    for t in transactions:
        if not isinstance(t, EmployeeExpense):
            continue
        totals[t.employee_id] = totals.get(t.employee_id, ZERO) + t.amount
        counts[t.employee_id] = counts.get(t.employee_id, 0) + 1

    return [
        EmployeeExpenseTotal(
            employee_id=employee_id,
            name=names.get(employee_id, UNKNOWN_EMPLOYEE_LABEL),
            total=total,
            count=counts[employee_id],
        )
        for employee_id, total in totals.items()
    ]


def cash_desk_summary(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
) -> CashDeskSummary:
    """Income of the reference day and of the reference calendar month."""
    day = resolve_reference(reference_date)
    month = current_month(day)

    income = [t for t in transactions if t.type.is_income]
    in_month = filter_transactions_by_period(income, month)

    return CashDeskSummary(
        day_total=_sum(t.amount for t in in_month if t.date == day),
        month_total=_sum(t.amount for t in in_month),
    )


def shop_expense_summary(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
) -> ShopExpenseSummary:
    """Shop expenses (all legacy variants) of the month and of all time."""
    shop = [t for t in transactions if t.type.kind is TransactionType.EXPENSE_SHOP]
    month = current_month(reference_date)

    return ShopExpenseSummary(
        month_total=_sum(t.amount for t in filter_transactions_by_period(shop, month)),
        all_time_total=_sum(t.amount for t in shop),
    )


def recent_transactions(
    transactions: Iterable[Transaction],
    limit: int = 5,
) -> list[Transaction]:
    """Newest transactions first (ties broken by the highest id)."""
    ordered = sorted(transactions, key=lambda t: (t.date, t.id), reverse=True)
    return ordered[:limit]

