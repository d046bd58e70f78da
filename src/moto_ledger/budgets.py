# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Budgets (quotes) and service warranty.

A budget lists parts and services for a client's motorcycle. Its total is the
sum of the item totals. When a budget moves to APPROVED or COMPLETED, a
warranty starts: it ends ``warranty_days`` (90 by default) after the status
change. Editing or completing a budget that already has a warranty date keeps
it; approving always restarts the warranty from the approval day.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from .inventory import Product, Service
from .models import ZERO
from .periods import resolve_reference

DEFAULT_WARRANTY_DAYS = 90


class ItemKind(str, Enum):
    PRODUCT = "PRODUCT"
    SERVICE = "SERVICE"


class BudgetStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class BudgetItem:
    """One line of a budget: a product or a service from the catalogue."""

    kind: ItemKind
    item_id: int
    name: str
    quantity: int
    unit_price: Decimal

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Budget:
    id: int
    client_id: int
    client_name: str
    motorcycle: str
    date: date
    items: tuple[BudgetItem, ...] = field(default_factory=tuple)
    status: BudgetStatus = BudgetStatus.PENDING
    plate: Optional[str] = None
    notes: Optional[str] = None
    warranty_date: Optional[date] = None

    @property
    def total_value(self) -> Decimal:
        return budget_total(self.items)


def item_from_product(product: Product, quantity: int = 1) -> BudgetItem:
    """Budget line for ``quantity`` units of a product, at its sell price."""
    if quantity < 1:
        raise ValueError("Quantity must be at least 1.")
    return BudgetItem(
        kind=ItemKind.PRODUCT,
        item_id=product.id,
        name=product.name,
        quantity=quantity,
        unit_price=product.sell_price,
    )


def item_from_service(service: Service) -> BudgetItem:
    """Budget line for a service. Services are always billed once."""
    return BudgetItem(
        kind=ItemKind.SERVICE,
        item_id=service.id,
        name=service.name,
        quantity=1,
        unit_price=service.price,
    )


def budget_total(items: Iterable[BudgetItem]) -> Decimal:
    return sum((item.total_price for item in items), ZERO)


def set_status(
    budget: Budget,
    status: BudgetStatus,
    changed_on: Optional[date] = None,
    warranty_days: int = DEFAULT_WARRANTY_DAYS,
) -> Budget:
    """
    Return a copy of ``budget`` with a new status.

    Moving to APPROVED or COMPLETED starts the warranty unless the budget
    already has a warranty date. Moving back to PENDING keeps any existing
    warranty date untouched.
    """
    status = BudgetStatus(status)
    warranty_date = budget.warranty_date

    if status is not BudgetStatus.PENDING and warranty_date is None:
        day = resolve_reference(changed_on)
        warranty_date = day + timedelta(days=warranty_days)

    return replace(budget, status=status, warranty_date=warranty_date)


def approve(
    budget: Budget,
    approved_on: Optional[date] = None,
    warranty_days: int = DEFAULT_WARRANTY_DAYS,
) -> Budget:
    """Approve a budget and restart its warranty from ``approved_on``."""
    day = resolve_reference(approved_on)
    return replace(
        budget,
        status=BudgetStatus.APPROVED,
        warranty_date=day + timedelta(days=warranty_days),
    )


def complete(
    budget: Budget,
    completed_on: Optional[date] = None,
    warranty_days: int = DEFAULT_WARRANTY_DAYS,
) -> Budget:
    return set_status(budget, BudgetStatus.COMPLETED, completed_on, warranty_days)


def warranty_active(budget: Budget, on: Optional[date] = None) -> bool:
    """True while ``on`` (today by default) is on or before the warranty end."""
    if budget.warranty_date is None:
        return False
    return resolve_reference(on) <= budget.warranty_date
