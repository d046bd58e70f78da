from datetime import date
from decimal import Decimal

from moto_ledger.receivables import (
    Client,
    ClientKind,
    PaymentStatus,
    installment_amount,
    mark_paid,
    mark_pending,
    overdue_clients,
    pending_receivables,
)


def client(cid, value, due, installments=1, status=PaymentStatus.PENDING) -> Client:
    return Client(
        id=cid,
        name=f"Cliente {cid}",
        kind=ClientKind.INDIVIDUAL,
        phone="",
        motorcycle="Fazer 250",
        value=Decimal(value),
        due_date=due,
        installments=installments,
        status=status,
    )


def test_installment_amount() -> None:
    """The value is split evenly; fewer than 1 installment means 1."""
    assert installment_amount(client(1, "900", date(2025, 1, 1), installments=3)) == Decimal("300")
    assert installment_amount(client(2, "900", date(2025, 1, 1), installments=0)) == Decimal("900")


def test_pending_receivables_ignores_paid_clients() -> None:
    """Only PENDING clients count toward the receivables total."""
    clients = [
        client(1, "100", date(2025, 1, 1)),
        client(2, "250.50", date(2025, 2, 1)),
        client(3, "999", date(2025, 1, 1), status=PaymentStatus.PAID),
    ]

    assert pending_receivables(clients) == Decimal("350.50")
    assert pending_receivables([]) == 0


def test_mark_paid_and_pending() -> None:
    """Status toggles return new client values."""
    original = client(1, "100", date(2025, 1, 1))
    paid = mark_paid(original)

    assert paid.status is PaymentStatus.PAID
    assert original.status is PaymentStatus.PENDING
    assert mark_pending(paid).status is PaymentStatus.PENDING


def test_overdue_clients_sorted_by_due_date() -> None:
    """Pending clients due strictly before the reference date, oldest first."""
    clients = [
        client(1, "100", date(2025, 3, 10)),
        client(2, "100", date(2025, 2, 1)),
        client(3, "100", date(2025, 3, 15)),
        client(4, "100", date(2025, 1, 1), status=PaymentStatus.PAID),
    ]

    overdue = overdue_clients(clients, date(2025, 3, 15))

    assert [c.id for c in overdue] == [2, 1]
