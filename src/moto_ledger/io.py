# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for MotoLedger.

This module reads transactions and employees from CSV files, normalizes them
into pandas DataFrames and converts those frames into domain objects.

Transactions CSV
----------------
Required columns (case-insensitive):

    date, description, amount, type

Optional columns:

    id, employee_id, category, payment_method, installments

``employeeId`` and ``paymentMethod`` (camelCase) are accepted as aliases.
``type`` is one of INCOME, EXPENSE_SHOP, EXPENSE_COMMON, EXPENSE_FIXED or
EXPENSE_EMPLOYEE.

Employees CSV
-------------
Required columns:

    name, role

Optional columns:

    id, fixed_salary (alias: salary), commission_rate (alias: commission),
    bonus, phone

Error policy
------------
A file whose columns do not match the expected structure raises ValueError.
Individual rows that cannot be converted (bad date, bad amount, unknown type,
employee_id inconsistent with the type) are skipped with a logged warning.
"""

import os
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

import pandas as pd

from .db import NewEmployee, NewTransaction
from .logging_utils import get_logger
from .models import (
    ZERO,
    Employee,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    make_transaction,
    to_decimal,
)

logger = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

TRANSACTION_COLUMNS = [
    "id",
    "date",
    "description",
    "amount",
    "type",
    "employee_id",
    "category",
    "payment_method",
    "installments",
]

EMPLOYEE_COLUMNS = [
    "id",
    "name",
    "role",
    "fixed_salary",
    "commission_rate",
    "bonus",
    "phone",
]

_TRANSACTION_ALIASES = {
    "employeeid": "employee_id",
    "paymentmethod": "payment_method",
}

_EMPLOYEE_ALIASES = {
    "salary": "fixed_salary",
    "fixedsalary": "fixed_salary",
    "commission": "commission_rate",
    "commissionrate": "commission_rate",
}


def _normalize_columns(df: pd.DataFrame, aliases: Mapping[str, str]) -> pd.DataFrame:
    """Lowercase/strip column names and apply aliases (without overwriting)."""
    df = df.copy()
    df.columns = [str(c).lower().strip() for c in df.columns]
    renames = {
        alias: target
        for alias, target in aliases.items()
        if alias in df.columns and target not in df.columns
    }
    return df.rename(columns=renames)


def _read_csv(path: PathLike) -> pd.DataFrame:
    # Everything is read as text; amounts are converted to Decimal row by row.
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def _text(value: Any) -> Optional[str]:
    """Return a stripped string, or None for missing/empty values."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _text_column(series: pd.Series) -> pd.Series:
    """Apply ``_text`` and keep the result as an object column holding None."""
    # Series.map on a string column turns None back into NaN.
    return pd.Series(
        [_text(value) for value in series], index=series.index, dtype=object
    )


def _optional_int(value: Any) -> Optional[int]:
    text = _text(value)
    if text is None:
        return None
    # "3.0" is what a spreadsheet export sometimes gives for 3
    number = Decimal(text)
    if number != number.to_integral_value():
        raise ValueError(f"Expected an integer, got {text!r}.")
    return int(number)


def _row_date(value: Any) -> date:
    if value is None or pd.isna(value):
        raise ValueError("Missing or invalid date.")
    return pd.Timestamp(value).date()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def read_transactions(path: PathLike) -> pd.DataFrame:
    """
    Read transactions from a CSV file and normalize them.

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly the ``TRANSACTION_COLUMNS`` columns. The
        ``date`` column is datetime64[ns] (NaT for unparsable dates); every
        other column holds text, with missing optional values as None.

    Raises
    ------
    ValueError
        If a required column is missing.
    """
    df = _normalize_columns(_read_csv(path), _TRANSACTION_ALIASES)

    required = {"date", "description", "amount", "type"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            "Invalid transactions CSV structure. Missing column(s): "
            + ", ".join(sorted(missing))
            + ". Expected at least: date, description, amount, type "
            "(column names are case-insensitive)."
        )

    for col in TRANSACTION_COLUMNS:
        if col not in df.columns:
            df[col] = None

    out = df[TRANSACTION_COLUMNS].copy()
    out["date"] = pd.to_datetime(out["date"], errors="coerce")
    for col in TRANSACTION_COLUMNS:
        if col != "date":
            out[col] = _text_column(out[col])
    out["description"] = out["description"].where(out["description"].notna(), "")

    return out


def _transaction_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    raw_amount = _text(row.get("amount"))
    if raw_amount is None:
        raise ValueError("Missing amount.")
    amount = to_decimal(raw_amount)
    if amount < ZERO:
        raise ValueError(f"Negative amount {amount}.")

    return {
        "date": _row_date(row.get("date")),
        "description": _text(row.get("description")) or "",
        "amount": amount,
        "type": TransactionType.parse(_text(row.get("type")) or ""),
        "employee_id": _optional_int(row.get("employee_id")),
        "category": _text(row.get("category")),
        "payment_method": _text(row.get("payment_method")),
        "installments": _optional_int(row.get("installments")),
    }


def frame_to_new_transactions(df: pd.DataFrame) -> list[NewTransaction]:
    """
    Convert a ``read_transactions`` frame into NewTransaction objects.

    Any ``id`` column is ignored: the database assigns identifiers.
    Invalid rows are skipped with a warning.
    """
    items: list[NewTransaction] = []
    for position, row in enumerate(df.to_dict("records"), start=1):
        try:
            fields = _transaction_fields(row)
            make_transaction(id=0, **fields)
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Skipping transaction row %d: %s", position, exc)
            continue
        items.append(NewTransaction(**fields))
    return items


def frame_to_transactions(df: pd.DataFrame) -> list[Transaction]:
    """
    Convert a ``read_transactions`` frame into Transaction objects.

    Rows keep their ``id`` when the column is filled; otherwise the 1-based
    row position is used. Invalid rows are skipped with a warning.
    """
    items: list[Transaction] = []
    for position, row in enumerate(df.to_dict("records"), start=1):
        try:
            tx_id = _optional_int(row.get("id"))
            items.append(
                make_transaction(
                    id=tx_id if tx_id is not None else position,
                    **_transaction_fields(row),
                )
            )
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Skipping transaction row %d: %s", position, exc)
    return items


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


def read_employees(path: PathLike) -> pd.DataFrame:
    """
    Read employees from a CSV file and normalize them.

    Returns
    -------
    pandas.DataFrame
        A DataFrame with exactly the ``EMPLOYEE_COLUMNS`` columns, as text
        (None for missing optional values).

    Raises
    ------
    ValueError
        If the ``name`` or ``role`` column is missing.
    """
    df = _normalize_columns(_read_csv(path), _EMPLOYEE_ALIASES)

    missing = {"name", "role"} - set(df.columns)
    if missing:
        raise ValueError(
            "Invalid employees CSV structure. Missing column(s): "
            + ", ".join(sorted(missing))
            + ". Expected at least: name, role."
        )

    for col in EMPLOYEE_COLUMNS:
        if col not in df.columns:
            df[col] = None

    out = df[EMPLOYEE_COLUMNS].copy()
    for col in EMPLOYEE_COLUMNS:
        out[col] = _text_column(out[col])

    return out


def _employee_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    name = _text(row.get("name"))
    if name is None:
        raise ValueError("Missing employee name.")

    fields = {
        "name": name,
        "role": _text(row.get("role")) or "",
        "fixed_salary": to_decimal(_text(row.get("fixed_salary"))),
        "commission_rate": to_decimal(_text(row.get("commission_rate"))),
        "bonus": to_decimal(_text(row.get("bonus"))),
        "phone": _text(row.get("phone")),
    }
    for key in ("fixed_salary", "commission_rate", "bonus"):
        if fields[key] < ZERO:
            raise ValueError(f"Negative {key} {fields[key]}.")
    return fields


def frame_to_new_employees(df: pd.DataFrame) -> list[NewEmployee]:
    """Convert a ``read_employees`` frame into NewEmployee objects."""
    items: list[NewEmployee] = []
    for position, row in enumerate(df.to_dict("records"), start=1):
        try:
            items.append(NewEmployee(**_employee_fields(row)))
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Skipping employee row %d: %s", position, exc)
    return items


def frame_to_employees(df: pd.DataFrame) -> list[Employee]:
    """Convert a ``read_employees`` frame into Employee objects."""
    items: list[Employee] = []
    for position, row in enumerate(df.to_dict("records"), start=1):
        try:
            emp_id = _optional_int(row.get("id"))
            items.append(
                Employee(
                    id=emp_id if emp_id is not None else position,
                    **_employee_fields(row),
                )
            )
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Skipping employee row %d: %s", position, exc)
    return items


def snapshot_from_csv(
    transactions_path: PathLike,
    employees_path: Optional[PathLike] = None,
) -> LedgerSnapshot:
    """
    Build a ledger snapshot straight from CSV files, without a database.

    The snapshot version is 0.
    """
    transactions = frame_to_transactions(read_transactions(transactions_path))
    employees = (
        frame_to_employees(read_employees(employees_path))
        if employees_path is not None
        else []
    )
    return LedgerSnapshot(
        version=0,
        transactions=tuple(transactions),
        employees=tuple(employees),
    )
