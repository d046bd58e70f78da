# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Client receivables.

A client record carries the amount still owed to the shop for a service
(``value``), a due date and the number of installments agreed. These helpers
compute the installment amount and the totals shown on the clients screen.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from .models import ZERO
from .periods import resolve_reference


class ClientKind(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


@dataclass(frozen=True)
class Client:
    """A client and the receivable attached to it."""

    id: int
    name: str
    kind: ClientKind
    phone: str
    motorcycle: str
    value: Decimal
    due_date: date
    installments: int = 1
    status: PaymentStatus = PaymentStatus.PENDING


def installment_amount(client: Client) -> Decimal:
    """
    Value of one installment.

    An installment count lower than 1 is treated as a single payment.
    """
    count = client.installments if client.installments >= 1 else 1
    return client.value / count


def mark_paid(client: Client) -> Client:
    return replace(client, status=PaymentStatus.PAID)


def mark_pending(client: Client) -> Client:
    return replace(client, status=PaymentStatus.PENDING)


def pending_receivables(clients: Iterable[Client]) -> Decimal:
    """Total value still owed by clients whose status is PENDING."""
    return sum(
        (c.value for c in clients if c.status is PaymentStatus.PENDING),
        ZERO,
    )


def overdue_clients(
    clients: Iterable[Client],
    reference_date: Optional[date] = None,
) -> list[Client]:
    """
    Pending clients whose due date is strictly before the reference date.

    Sorted by due date, oldest first.
    """
    ref = resolve_reference(reference_date)
    overdue = [
        c for c in clients if c.status is PaymentStatus.PENDING and c.due_date < ref
    ]
    return sorted(overdue, key=lambda c: (c.due_date, c.id))
