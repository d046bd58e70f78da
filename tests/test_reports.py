from datetime import date
from decimal import Decimal

import moto_ledger.periods as periods
from moto_ledger.models import Employee, LedgerSnapshot, make_transaction
from moto_ledger.reports import (
    DashboardSettings,
    build_dashboard,
    clear_dashboard_cache,
)


def make_snapshot(version: int = 1) -> LedgerSnapshot:
    transactions = tuple(
        make_transaction(
            id=i,
            date=date(2025, 5, i),
            description=f"Despesa {i}",
            amount=Decimal(10 * i),
            type="EXPENSE_SHOP",
            category=f"Cat {i}",
        )
        for i in range(1, 9)
    ) + (
        make_transaction(
            id=9,
            date=date(2025, 5, 9),
            description="Venda",
            amount=Decimal("500"),
            type="INCOME",
        ),
    )
    employees = (Employee(id=1, name="Ana", role="Caixa", fixed_salary=Decimal("1000")),)
    return LedgerSnapshot(version=version, transactions=transactions, employees=employees)


def test_build_dashboard_gathers_every_section() -> None:
    """The report carries stats, breakdowns, comparison and summaries."""
    clear_dashboard_cache()

    report = build_dashboard(make_snapshot(), date(2025, 5, 9))

    assert report.version == 1
    assert report.reference_date == date(2025, 5, 9)
    assert report.stats.total_income == Decimal("500")
    assert report.stats.total_expense == Decimal("1360")
    assert len(report.categories) == 6
    assert report.categories[0].category == "Salário Base"
    assert report.composition.fixed_salaries == Decimal("1000")
    assert report.comparison.current.expenses == Decimal("360")
    assert report.cash_desk.day_total == Decimal("500")
    assert report.shop_expenses.month_total == Decimal("360")
    assert [t.id for t in report.recent] == [9, 8, 7, 6, 5]


def test_build_dashboard_is_memoized_per_snapshot() -> None:
    """Equal inputs reuse the same report; a new version recomputes it."""
    clear_dashboard_cache()
    ref = date(2025, 5, 9)

    first = build_dashboard(make_snapshot(version=1), ref)
    again = build_dashboard(make_snapshot(version=1), ref)
    bumped = build_dashboard(make_snapshot(version=2), ref)

    assert first is again
    assert bumped is not first
    assert bumped.version == 2


def test_build_dashboard_respects_settings() -> None:
    """Settings change the top-N, the labels and the recent limit."""
    clear_dashboard_cache()
    settings = DashboardSettings(
        top_categories=3,
        default_category="Other",
        fixed_payroll_label="Payroll",
        recent_limit=2,
    )

    report = build_dashboard(make_snapshot(), date(2025, 5, 9), settings)

    assert [c.category for c in report.categories] == ["Payroll", "Cat 8", "Cat 7"]
    assert len(report.recent) == 2


def test_build_dashboard_defaults_to_today(monkeypatch) -> None:
    """Without a reference date, today's date is used and cached as such."""
    clear_dashboard_cache()
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 5, 20))

    report = build_dashboard(make_snapshot())

    assert report.reference_date == date(2025, 5, 20)
    assert report.cash_desk.day_total == 0
    assert report.cash_desk.month_total == Decimal("500")
