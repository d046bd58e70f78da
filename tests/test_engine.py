from datetime import date
from decimal import Decimal

import pytest

from moto_ledger.engine import (
    UNKNOWN_EMPLOYEE_LABEL,
    aggregate,
    cash_desk_summary,
    category_breakdown,
    composition_breakdown,
    employee_expense_totals,
    recent_transactions,
    shop_expense_summary,
)
from moto_ledger.models import Employee, ShopExpense, make_transaction


def tx(tx_id, tx_type, amount, day, category=None, employee_id=None):
    """Helper to build a transaction with a minimal set of fields."""
    return make_transaction(
        id=tx_id,
        date=day,
        description=f"tx {tx_id}",
        amount=Decimal(str(amount)),
        type=tx_type,
        employee_id=employee_id,
        category=category,
    )


def employee(emp_id, salary, name=None):
    return Employee(
        id=emp_id,
        name=name or f"Employee {emp_id}",
        role="Mecânico",
        fixed_salary=Decimal(str(salary)),
    )


def scenario():
    transactions = [
        tx(1, "INCOME", 450, date(2023, 10, 1)),
        tx(2, "EXPENSE_SHOP", 1200, date(2023, 10, 2)),
        tx(3, "EXPENSE_SHOP", 300, date(2023, 10, 5)),
        tx(4, "EXPENSE_EMPLOYEE", 150, date(2023, 10, 12), employee_id=3),
    ]
    employees = [
        employee(1, 4000),
        employee(2, 4000),
        employee(3, 0),
        employee(4, 1800),
        employee(5, 2200),
        employee(6, 3000),
    ]
    return transactions, employees


def test_aggregate_end_to_end_scenario() -> None:
    """Reference scenario: 450 income against 16650 of total expense."""
    transactions, employees = scenario()

    stats = aggregate(transactions, employees)

    assert stats.total_income == Decimal("450")
    assert stats.shop_expense == Decimal("1500")
    assert stats.employee_expense == Decimal("150")
    assert stats.total_fixed_payroll == Decimal("15000")
    assert stats.total_expense == Decimal("16650")
    assert stats.net_balance == Decimal("-16200")
    assert stats.total_income - stats.total_expense == stats.net_balance


def test_aggregate_empty_inputs_are_all_zero() -> None:
    """No transactions and no employees give all-zero figures."""
    stats = aggregate([], [])

    assert stats.total_income == 0
    assert stats.shop_expense == 0
    assert stats.employee_expense == 0
    assert stats.total_fixed_payroll == 0
    assert stats.total_expense == 0
    assert stats.net_balance == 0


def test_adding_employee_adds_exactly_fixed_salary() -> None:
    """A new employee adds its salary to payroll and total expense only."""
    transactions, employees = scenario()
    before = aggregate(transactions, employees)
    after = aggregate(transactions, employees + [employee(7, "1234.56")])

    assert after.total_fixed_payroll - before.total_fixed_payroll == Decimal("1234.56")
    assert after.total_expense - before.total_expense == Decimal("1234.56")
    assert after.shop_expense == before.shop_expense
    assert after.employee_expense == before.employee_expense


def test_legacy_types_aggregate_like_shop_expense() -> None:
    """EXPENSE_COMMON and EXPENSE_FIXED count exactly like EXPENSE_SHOP."""
    day = date(2025, 2, 10)
    legacy = [
        tx(1, "EXPENSE_COMMON", 80, day, category="Peças"),
        tx(2, "EXPENSE_FIXED", 900, day, category="Aluguel"),
    ]
    modern = [
        tx(1, "EXPENSE_SHOP", 80, day, category="Peças"),
        tx(2, "EXPENSE_SHOP", 900, day, category="Aluguel"),
    ]

    assert aggregate(legacy, []) == aggregate(modern, [])
    assert category_breakdown(legacy) == category_breakdown(modern)
    assert shop_expense_summary(legacy, day) == shop_expense_summary(modern, day)


def test_category_breakdown_top_six_sorted() -> None:
    """At most 6 categories, sorted by total descending, payroll included."""
    day = date(2025, 3, 1)
    transactions = [
        tx(i, "EXPENSE_SHOP", 100 * i, day, category=f"Cat {i}") for i in range(1, 9)
    ]
    transactions.append(tx(99, "INCOME", 10_000, day, category="Vendas"))

    result = category_breakdown(transactions, [employee(1, 450)])

    assert len(result) == 6
    totals = [c.total for c in result]
    assert totals == sorted(totals, reverse=True)
    assert [c.category for c in result[:3]] == ["Cat 8", "Cat 7", "Cat 6"]
    assert "Vendas" not in {c.category for c in result}
    assert any(c.category == "Salário Base" and c.total == 450 for c in result)


def test_category_breakdown_default_label_and_stable_ties() -> None:
    """Missing categories fall under 'Outros'; ties keep first-seen order."""
    day = date(2025, 3, 1)
    transactions = [
        tx(1, "EXPENSE_SHOP", 50, day, category="Peças"),
        tx(2, "EXPENSE_SHOP", 30, day),
        tx(3, "EXPENSE_EMPLOYEE", 20, day, category="", employee_id=1),
        tx(4, "EXPENSE_SHOP", 50, day, category="Ferramentas"),
    ]

    result = category_breakdown(transactions)

    assert [(c.category, c.total) for c in result] == [
        ("Peças", Decimal("50")),
        ("Outros", Decimal("50")),
        ("Ferramentas", Decimal("50")),
    ]


def test_category_breakdown_merges_payroll_label_collision() -> None:
    """A recorded 'Salário Base' category is merged with the fixed payroll."""
    day = date(2025, 3, 1)
    transactions = [tx(1, "EXPENSE_SHOP", 200, day, category="Salário Base")]

    result = category_breakdown(transactions, [employee(1, 1000)])

    assert len(result) == 1
    assert result[0].total == Decimal("1200")


def test_category_breakdown_no_payroll_group_when_zero() -> None:
    """Employees with zero salary do not create the payroll group."""
    result = category_breakdown([], [employee(1, 0)])

    assert result == []


def test_composition_breakdown_always_has_three_buckets() -> None:
    """Composition exposes the three buckets and their shares."""
    transactions, employees = scenario()
    composition = composition_breakdown(aggregate(transactions, employees))

    assert composition.as_dict() == {
        "Shop": Decimal("1500"),
        "EmployeeExtras": Decimal("150"),
        "FixedSalaries": Decimal("15000"),
    }
    assert float(sum(composition.shares().values())) == pytest.approx(100.0)

    empty = composition_breakdown(aggregate([], []))
    assert set(empty.as_dict()) == {"Shop", "EmployeeExtras", "FixedSalaries"}
    assert all(v == 0 for v in empty.shares().values())


def test_employee_expense_totals_with_dangling_id() -> None:
    """Every employee is listed; unknown ids appear under a fallback label."""
    day = date(2025, 4, 2)
    transactions = [
        tx(1, "EXPENSE_EMPLOYEE", 100, day, employee_id=1),
        tx(2, "EXPENSE_EMPLOYEE", 40, day, employee_id=1),
        tx(3, "EXPENSE_EMPLOYEE", 70, day, employee_id=42),
        tx(4, "EXPENSE_SHOP", 500, day),
    ]

    totals = employee_expense_totals(
        transactions, [employee(1, 0, "Ana"), employee(2, 0, "Bruno")]
    )

    assert [(t.name, t.total, t.count) for t in totals] == [
        ("Ana", Decimal("140"), 2),
        ("Bruno", Decimal("0"), 0),
        (UNKNOWN_EMPLOYEE_LABEL, Decimal("70"), 1),
    ]


def test_cash_desk_summary_day_and_month() -> None:
    """Cashier figures cover the reference day and its calendar month."""
    transactions = [
        tx(1, "INCOME", 100, date(2025, 5, 10)),
        tx(2, "INCOME", 50, date(2025, 5, 10)),
        tx(3, "INCOME", 25, date(2025, 5, 2)),
        tx(4, "INCOME", 999, date(2024, 5, 10)),
        tx(5, "EXPENSE_SHOP", 70, date(2025, 5, 10)),
    ]

    summary = cash_desk_summary(transactions, date(2025, 5, 10))

    assert summary.day_total == Decimal("150")
    assert summary.month_total == Decimal("175")


def test_shop_expense_summary_month_and_all_time() -> None:
    """Shop expenses of the month and of all time, legacy types included."""
    transactions = [
        tx(1, "EXPENSE_SHOP", 100, date(2025, 6, 1)),
        tx(2, "EXPENSE_COMMON", 40, date(2025, 6, 30)),
        tx(3, "EXPENSE_FIXED", 900, date(2025, 5, 5)),
        tx(4, "EXPENSE_EMPLOYEE", 60, date(2025, 6, 3), employee_id=1),
    ]

    summary = shop_expense_summary(transactions, date(2025, 6, 15))

    assert summary.month_total == Decimal("140")
    assert summary.all_time_total == Decimal("1040")


def test_recent_transactions_newest_first() -> None:
    """Most recent transactions come first, ties broken by highest id."""
    transactions = [
        tx(1, "INCOME", 1, date(2025, 1, 1)),
        tx(2, "INCOME", 1, date(2025, 1, 3)),
        tx(3, "INCOME", 1, date(2025, 1, 3)),
        tx(4, "INCOME", 1, date(2025, 1, 2)),
    ]

    assert [t.id for t in recent_transactions(transactions, limit=3)] == [3, 2, 4]


def test_blank_category_falls_under_default_label() -> None:
    """Whitespace-only categories are grouped with missing ones."""
    day = date(2025, 3, 1)
    transactions = [
        ShopExpense(id=1, date=day, description="Cola", amount=Decimal("10"), category="  "),
        tx(2, "EXPENSE_SHOP", 5, day),
        tx(3, "EXPENSE_SHOP", 7, day, category=" "),
    ]

    result = category_breakdown(transactions)

    assert [(c.category, c.total) for c in result] == [("Outros", Decimal("22"))]
