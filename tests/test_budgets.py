from datetime import date
from decimal import Decimal

import pytest

from moto_ledger.budgets import (
    Budget,
    BudgetStatus,
    ItemKind,
    approve,
    budget_total,
    complete,
    item_from_product,
    item_from_service,
    set_status,
    warranty_active,
)
from moto_ledger.inventory import Product, Service


def make_budget(**kwargs) -> Budget:
    oil = Product(
        id=1,
        name="Óleo 10W40",
        quantity=20,
        min_stock=5,
        cost_price=Decimal("25"),
        sell_price=Decimal("42.50"),
    )
    labour = Service(id=7, name="Troca de óleo", price=Decimal("60"))
    fields = {
        "id": 1,
        "client_id": 3,
        "client_name": "João",
        "motorcycle": "CG 160",
        "date": date(2025, 3, 1),
        "items": (item_from_product(oil, quantity=2), item_from_service(labour)),
    }
    fields.update(kwargs)
    return Budget(**fields)


def test_items_and_total() -> None:
    """Product lines use the sell price; services are billed once."""
    budget = make_budget()
    product_line, service_line = budget.items

    assert product_line.kind is ItemKind.PRODUCT
    assert product_line.total_price == Decimal("85.00")
    assert service_line.kind is ItemKind.SERVICE
    assert service_line.quantity == 1
    assert budget.total_value == Decimal("145.00")
    assert budget_total([]) == 0


def test_item_from_product_rejects_zero_quantity() -> None:
    """Quantities lower than 1 are rejected."""
    product = Product(
        id=1, name="Vela", quantity=1, min_stock=0, cost_price=Decimal("5"), sell_price=Decimal("9")
    )

    with pytest.raises(ValueError):
        item_from_product(product, quantity=0)


def test_approve_starts_ninety_day_warranty() -> None:
    """Approval sets the status and a warranty end 90 days later."""
    approved = approve(make_budget(), date(2025, 3, 10))

    assert approved.status is BudgetStatus.APPROVED
    assert approved.warranty_date == date(2025, 6, 8)


def test_existing_warranty_date_is_kept() -> None:
    """Completing an approved budget does not extend the warranty."""
    approved = approve(make_budget(), date(2025, 3, 10))
    completed = complete(approved, date(2025, 4, 1))

    assert completed.status is BudgetStatus.COMPLETED
    assert completed.warranty_date == date(2025, 6, 8)


def test_pending_status_has_no_warranty() -> None:
    """A pending budget gets no warranty date."""
    pending = set_status(make_budget(), BudgetStatus.PENDING, date(2025, 3, 10))

    assert pending.warranty_date is None
    assert warranty_active(pending, date(2025, 3, 10)) is False


def test_custom_warranty_days_and_activity() -> None:
    """The warranty length is configurable; the end date is inclusive."""
    approved = approve(make_budget(), date(2025, 1, 1), warranty_days=30)

    assert approved.warranty_date == date(2025, 1, 31)
    assert warranty_active(approved, date(2025, 1, 31)) is True
    assert warranty_active(approved, date(2025, 2, 1)) is False


def test_approve_restarts_an_existing_warranty() -> None:
    """Approving again starts a fresh warranty from the approval day."""
    completed = complete(make_budget(), date(2025, 1, 1), warranty_days=30)
    reapproved = approve(completed, date(2025, 3, 1), warranty_days=30)

    assert completed.warranty_date == date(2025, 1, 31)
    assert reapproved.status is BudgetStatus.APPROVED
    assert reapproved.warranty_date == date(2025, 3, 31)
