# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain model for MotoLedger.

This module defines the value objects shared by every other module:

- ``TransactionType``: the five stored transaction types, including the two
  legacy shop-expense variants (``EXPENSE_COMMON`` and ``EXPENSE_FIXED``)
  which are aliases of ``EXPENSE_SHOP`` for every aggregate.
- The transaction tagged union:

      Transaction = IncomeTransaction | ShopExpense | EmployeeExpense

  Each kind is a frozen dataclass carrying only the fields relevant to it.
  Only ``EmployeeExpense`` has an ``employee_id``.
- ``Employee``: payroll configuration (fixed salary, commission, bonus).
- ``LedgerSnapshot``: a versioned, immutable and hashable view of the
  ledger. It is the only input of the aggregation and comparison functions.

Amounts are ``decimal.Decimal`` values in the shop's local currency.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

ZERO = Decimal("0")


class TransactionType(str, Enum):
    """Stored transaction types."""

    INCOME = "INCOME"
    EXPENSE_SHOP = "EXPENSE_SHOP"
    EXPENSE_COMMON = "EXPENSE_COMMON"
    EXPENSE_FIXED = "EXPENSE_FIXED"
    EXPENSE_EMPLOYEE = "EXPENSE_EMPLOYEE"

    @property
    def kind(self) -> "TransactionType":
        """Normalized type used for aggregation (legacy aliases collapsed)."""
        if self in _SHOP_EXPENSE_TYPES:
            return TransactionType.EXPENSE_SHOP
        return self

    @property
    def is_income(self) -> bool:
        return self is TransactionType.INCOME

    @classmethod
    def parse(cls, value: Union[str, "TransactionType"]) -> "TransactionType":
        """Coerce a raw value (any casing, surrounding spaces) into a type."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unsupported transaction type: {value!r}") from exc


_SHOP_EXPENSE_TYPES = frozenset(
    {
        TransactionType.EXPENSE_SHOP,
        TransactionType.EXPENSE_COMMON,
        TransactionType.EXPENSE_FIXED,
    }
)


def to_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """
    Convert a numeric value into a Decimal.

    Floats go through ``str()`` so that ``2.18`` becomes ``Decimal("2.18")``
    rather than its binary approximation. ``None`` and empty strings become 0.

    Raises:
        ValueError: if the value cannot be interpreted as a number.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, int):
        return Decimal(value)

    text = str(value).strip()
    if not text:
        return ZERO
    try:
        result = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    return result


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IncomeTransaction:
    """Money received by the shop (services, part sales, card settlements)."""

    id: int
    date: date
    description: str
    amount: Decimal
    category: Optional[str] = None
    payment_method: Optional[str] = None
    installments: Optional[int] = None

    @property
    def type(self) -> TransactionType:
        return TransactionType.INCOME


@dataclass(frozen=True)
class ShopExpense:
    """
    Operating expense of the shop (rent, parts, tools, utilities).

    ``stored_type`` keeps the legacy variant the row was recorded with
    (``EXPENSE_SHOP``, ``EXPENSE_COMMON`` or ``EXPENSE_FIXED``) so that an
    update writes back the same value. Aggregates only look at ``kind``.
    """

    id: int
    date: date
    description: str
    amount: Decimal
    category: Optional[str] = None
    payment_method: Optional[str] = None
    installments: Optional[int] = None
    stored_type: TransactionType = TransactionType.EXPENSE_SHOP

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "stored_type", TransactionType.parse(self.stored_type)
        )
        if self.stored_type not in _SHOP_EXPENSE_TYPES:
            raise ValueError(
                f"Invalid type for a shop expense: {self.stored_type.value}"
            )

    @property
    def type(self) -> TransactionType:
        return self.stored_type


@dataclass(frozen=True)
class EmployeeExpense:
    """Payment made to an employee (advance, commission, bonus, overtime)."""

    id: int
    date: date
    description: str
    amount: Decimal
    employee_id: int
    category: Optional[str] = None
    payment_method: Optional[str] = None
    installments: Optional[int] = None

    @property
    def type(self) -> TransactionType:
        return TransactionType.EXPENSE_EMPLOYEE


Transaction = Union[IncomeTransaction, ShopExpense, EmployeeExpense]


def make_transaction(
    *,
    id: int,
    date: date,
    description: str,
    amount: Union[Decimal, int, float, str],
    type: Union[TransactionType, str],
    employee_id: Optional[int] = None,
    category: Optional[str] = None,
    payment_method: Optional[str] = None,
    installments: Optional[int] = None,
) -> Transaction:
    """
    Build the transaction kind matching ``type``.

    This is the single place where the ``employee_id`` invariant is enforced:
    an employee id is required for ``EXPENSE_EMPLOYEE`` and rejected for every
    other type.

    Raises:
        ValueError: on an unknown type, an invalid amount, or a violation of
            the employee_id invariant.
    """
    tx_type = TransactionType.parse(type)
    value = to_decimal(amount)
    category = (category or "").strip() or None

    if tx_type is TransactionType.EXPENSE_EMPLOYEE:
        if employee_id is None:
            raise ValueError("An EXPENSE_EMPLOYEE transaction requires employee_id.")
        return EmployeeExpense(
            id=id,
            date=date,
            description=description,
            amount=value,
            employee_id=int(employee_id),
            category=category,
            payment_method=payment_method,
            installments=installments,
        )

    if employee_id is not None:
        raise ValueError(
            f"employee_id is only allowed on EXPENSE_EMPLOYEE, got {tx_type.value}."
        )

    if tx_type is TransactionType.INCOME:
        return IncomeTransaction(
            id=id,
            date=date,
            description=description,
            amount=value,
            category=category,
            payment_method=payment_method,
            installments=installments,
        )

    return ShopExpense(
        id=id,
        date=date,
        description=description,
        amount=value,
        category=category,
        payment_method=payment_method,
        installments=installments,
        stored_type=tx_type,
    )


# ---------------------------------------------------------------------------
# Employees and snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Employee:
    """
    Employee payroll configuration.

    ``fixed_salary`` is a standing monthly cost added to every aggregate; it
    is configuration, not a ledger entry. ``commission_rate`` (0-100) and
    ``bonus`` are informational and never applied automatically.
    """

    id: int
    name: str
    role: str
    fixed_salary: Decimal = ZERO
    commission_rate: Decimal = ZERO
    bonus: Decimal = ZERO
    phone: Optional[str] = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    Immutable, internally consistent view of the ledger.

    ``version`` is bumped by the store on every committed mutation. Since all
    fields are immutable, a snapshot is hashable and can key a cache.
    """

    version: int
    transactions: tuple[Transaction, ...] = ()
    employees: tuple[Employee, ...] = ()

    def employee_by_id(self, employee_id: int) -> Optional[Employee]:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None
