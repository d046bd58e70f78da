# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Parts inventory and service catalogue."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .models import ZERO


@dataclass(frozen=True)
class Product:
    """A part held in stock."""

    id: int
    name: str
    quantity: int
    min_stock: int
    cost_price: Decimal
    sell_price: Decimal

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock


@dataclass(frozen=True)
class Service:
    """A labour service offered by the shop (fixed price)."""

    id: int
    name: str
    price: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class StockValuation:
    """Value of the stock on hand at cost and at sale price."""

    cost_value: Decimal
    sale_value: Decimal

    @property
    def potential_profit(self) -> Decimal:
        return self.sale_value - self.cost_value


def low_stock(products: Iterable[Product]) -> list[Product]:
    """Products whose quantity is at or below their minimum stock."""
    return [p for p in products if p.is_low_stock]


def margin_pct(product: Product) -> Decimal:
    """Markup over cost, in percent (0 when the cost price is 0)."""
    if product.cost_price <= ZERO:
        return ZERO
    return (product.sell_price - product.cost_price) / product.cost_price * 100


def stock_valuation(products: Iterable[Product]) -> StockValuation:
    """
    Cost and sale value of the stock on hand.

    Negative quantities (stock errors) count as zero.
    """
    cost = ZERO
    sale = ZERO
    for p in products:
        quantity = max(p.quantity, 0)
        cost += p.cost_price * quantity
        sale += p.sell_price * quantity
    return StockValuation(cost_value=cost, sale_value=sale)
