# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for MotoLedger.

This module turns the results of the engine, the comparator and the fee
calculator into pandas DataFrames ready for console display
(``df.to_string(index=False)``) or CSV export. It also lists the shop
records: clients, the parts and services catalogue, and budgets.

Amounts are converted to floats rounded to 2 decimals here, and only here:
the domain values stay ``Decimal`` everywhere else.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

import pandas as pd

from .budgets import Budget, warranty_active
from .comparison import MonthComparison
from .engine import (
    UNKNOWN_EMPLOYEE_LABEL,
    CashDeskSummary,
    CategoryTotal,
    EmployeeExpenseTotal,
    ExpenseComposition,
    ShopExpenseSummary,
    Stats,
)
from .fees import Settlement
from .inventory import Product, Service, margin_pct
from .models import Employee, EmployeeExpense, Transaction
from .receivables import Client, installment_amount


def _amount(value: Decimal) -> float:
    return round(float(value), 2)


def _renumber_display_order(
    df: pd.DataFrame, start: int = 10, step: int = 10
) -> pd.DataFrame:
    """Reassign display_order to be strictly sequential: start, start+step, ...
    Preserves the current order of the lines (as it appears in df).
    """
    df = df.copy()
    df = df.reset_index(drop=True)
    df["display_order"] = [start + i * step for i in range(len(df))]
    return df


def stats_to_dataframe(stats: Stats) -> pd.DataFrame:
    """
    Headline dashboard figures as a (key, label, amount) table.

    Rows follow the dashboard cards order: income, expenses detail, total
    expense and net balance.
    """
    rows = [
        ("total_income", "Total income", stats.total_income),
        ("shop_expense", "Shop expenses", stats.shop_expense),
        ("employee_expense", "Employee extras", stats.employee_expense),
        ("total_fixed_payroll", "Fixed payroll", stats.total_fixed_payroll),
        ("total_expense", "Total expense", stats.total_expense),
        ("net_balance", "Net balance", stats.net_balance),
    ]
    return pd.DataFrame(
        [{"key": k, "label": label, "amount": _amount(v)} for k, label, v in rows],
        columns=["key", "label", "amount"],
    )


def categories_to_dataframe(categories: Iterable[CategoryTotal]) -> pd.DataFrame:
    """Expense categories, largest first, with a display_order column."""
    df = pd.DataFrame(
        [{"category": c.category, "total": _amount(c.total)} for c in categories],
        columns=["category", "total"],
    )
    df = _renumber_display_order(df)
    return df[["display_order", "category", "total"]]


def composition_to_dataframe(composition: ExpenseComposition) -> pd.DataFrame:
    """The three expense buckets with their amount and share of the total."""
    shares = composition.shares()
    return pd.DataFrame(
        [
            {
                "bucket": bucket,
                "amount": _amount(value),
                "share_pct": round(float(shares[bucket]), 1),
            }
            for bucket, value in composition.as_dict().items()
        ],
        columns=["bucket", "amount", "share_pct"],
    )


def comparison_to_dataframe(comparison: MonthComparison) -> pd.DataFrame:
    """
    Current vs previous month, one row per metric.

    Columns: metric, previous, current, growth_pct. The previous/current
    column headers are kept generic; the month labels are in the
    ``previous_label`` / ``current_label`` columns.
    """
    previous = comparison.previous
    current = comparison.current
    rows = [
        ("income", previous.income, current.income, comparison.income_growth_pct),
        (
            "expenses",
            previous.expenses,
            current.expenses,
            comparison.expense_growth_pct,
        ),
        ("profit", previous.profit, current.profit, comparison.profit_growth_pct),
    ]
    return pd.DataFrame(
        [
            {
                "metric": metric,
                "previous_label": previous.label,
                "previous": _amount(prev),
                "current_label": current.label,
                "current": _amount(curr),
                "growth_pct": round(float(growth), 1),
            }
            for metric, prev, curr, growth in rows
        ],
        columns=[
            "metric",
            "previous_label",
            "previous",
            "current_label",
            "current",
            "growth_pct",
        ],
    )


def desk_summaries_to_dataframe(
    cash_desk: CashDeskSummary,
    shop_expenses: ShopExpenseSummary,
) -> pd.DataFrame:
    """Cashier and shop-expense screen figures as a (label, amount) table."""
    rows = [
        ("Income today", cash_desk.day_total),
        ("Income this month", cash_desk.month_total),
        ("Shop expenses this month", shop_expenses.month_total),
        ("Shop expenses all time", shop_expenses.all_time_total),
    ]
    return pd.DataFrame(
        [{"label": label, "amount": _amount(v)} for label, v in rows],
        columns=["label", "amount"],
    )


_TRANSACTION_VIEW_COLUMNS = [
    "id",
    "date",
    "type",
    "description",
    "category",
    "amount",
    "employee",
    "payment_method",
    "installments",
]


def transactions_to_dataframe(
    transactions: Iterable[Transaction],
    employees: Iterable[Employee] = (),
) -> pd.DataFrame:
    """
    Transactions as a flat table, in the given order.

    The ``type`` column shows the stored type (legacy variants included).
    The ``employee`` column holds the employee name for EXPENSE_EMPLOYEE rows.
    """
    names = {e.id: e.name for e in employees}

    rows = []
    for t in transactions:
        employee = None
        if isinstance(t, EmployeeExpense):
            employee = names.get(t.employee_id, UNKNOWN_EMPLOYEE_LABEL)
        rows.append(
            {
                "id": t.id,
                "date": t.date.isoformat(),
                "type": t.type.value,
                "description": t.description,
                "category": t.category or "",
                "amount": _amount(t.amount),
                "employee": employee or "",
                "payment_method": t.payment_method or "",
                "installments": t.installments if t.installments is not None else "",
            }
        )
    return pd.DataFrame(rows, columns=_TRANSACTION_VIEW_COLUMNS)


def employees_to_dataframe(employees: Iterable[Employee]) -> pd.DataFrame:
    """Employees configuration table."""
    return pd.DataFrame(
        [
            {
                "id": e.id,
                "name": e.name,
                "role": e.role,
                "fixed_salary": _amount(e.fixed_salary),
                "commission_rate": float(e.commission_rate),
                "bonus": _amount(e.bonus),
                "phone": e.phone or "",
            }
            for e in employees
        ],
        columns=[
            "id",
            "name",
            "role",
            "fixed_salary",
            "commission_rate",
            "bonus",
            "phone",
        ],
    )


def employee_totals_to_dataframe(
    totals: Iterable[EmployeeExpenseTotal],
) -> pd.DataFrame:
    """Recorded expenses per employee."""
    return pd.DataFrame(
        [
            {
                "employee_id": t.employee_id,
                "name": t.name,
                "count": t.count,
                "total": _amount(t.total),
            }
            for t in totals
        ],
        columns=["employee_id", "name", "count", "total"],
    )


def settlement_to_dataframe(gross_amount: Decimal, settlement: Settlement) -> pd.DataFrame:
    """Fee calculator result as a (label, value) table."""
    breakdown = settlement.breakdown
    rows = [
        ("Method", settlement.label),
        ("Rate (%)", f"{settlement.rate:.2f}"),
        ("Gross amount", f"{_amount(gross_amount):.2f}"),
        ("Acquirer fee", f"{_amount(breakdown.fee_amount):.2f}"),
        ("Advance fee", f"{_amount(breakdown.advance_amount):.2f}"),
        ("Net amount", f"{_amount(breakdown.net_amount):.2f}"),
    ]
    return pd.DataFrame(
        [{"label": label, "value": value} for label, value in rows],
        columns=["label", "value"],
    )


# ---------------------------------------------------------------------------
# Shop records
# ---------------------------------------------------------------------------


def clients_to_dataframe(clients: Iterable[Client]) -> pd.DataFrame:
    """Clients with their receivable and installment value."""
    return pd.DataFrame(
        [
            {
                "id": c.id,
                "name": c.name,
                "kind": c.kind.value,
                "motorcycle": c.motorcycle,
                "value": _amount(c.value),
                "installments": c.installments,
                "installment_value": _amount(installment_amount(c)),
                "due_date": c.due_date.isoformat(),
                "status": c.status.value,
            }
            for c in clients
        ],
        columns=[
            "id",
            "name",
            "kind",
            "motorcycle",
            "value",
            "installments",
            "installment_value",
            "due_date",
            "status",
        ],
    )


def products_to_dataframe(products: Iterable[Product]) -> pd.DataFrame:
    """Parts catalogue; ``low_stock`` flags products at or below their minimum."""
    return pd.DataFrame(
        [
            {
                "id": p.id,
                "name": p.name,
                "quantity": p.quantity,
                "min_stock": p.min_stock,
                "cost_price": _amount(p.cost_price),
                "sell_price": _amount(p.sell_price),
                "margin_pct": round(float(margin_pct(p)), 1),
                "low_stock": "yes" if p.is_low_stock else "",
            }
            for p in products
        ],
        columns=[
            "id",
            "name",
            "quantity",
            "min_stock",
            "cost_price",
            "sell_price",
            "margin_pct",
            "low_stock",
        ],
    )


def services_to_dataframe(services: Iterable[Service]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": s.id,
                "name": s.name,
                "price": _amount(s.price),
                "description": s.description or "",
            }
            for s in services
        ],
        columns=["id", "name", "price", "description"],
    )


def budgets_to_dataframe(budgets: Iterable[Budget], on: date) -> pd.DataFrame:
    """Budgets with their total and whether the warranty is still running on ``on``."""
    return pd.DataFrame(
        [
            {
                "id": b.id,
                "date": b.date.isoformat(),
                "client": b.client_name,
                "motorcycle": b.motorcycle,
                "items": len(b.items),
                "total": _amount(b.total_value),
                "status": b.status.value,
                "warranty_until": b.warranty_date.isoformat() if b.warranty_date else "",
                "warranty_active": "yes" if warranty_active(b, on) else "",
            }
            for b in budgets
        ],
        columns=[
            "id",
            "date",
            "client",
            "motorcycle",
            "items",
            "total",
            "status",
            "warranty_until",
            "warranty_active",
        ],
    )
