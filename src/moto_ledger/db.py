# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer (ledger store) for MotoLedger.

This module is the single source of truth for transactions and employees,
and also keeps the shop records (clients, catalogue and budgets).
It exposes a small repository interface over SQLite:

- ``load_snapshot()`` reads the whole ledger as an immutable, versioned
  ``LedgerSnapshot`` (the "get" side);
- ``insert_*``, ``update_*`` and ``delete_*`` functions commit one mutation
  each (the "commit" side).

Every mutation and the bump of the ledger version run inside the same SQLite
transaction, and a snapshot is read inside a single read transaction, so a
snapshot never exposes a partial write.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) ledger_meta
   Key/value table. The ``version`` key holds the ledger version, an integer
   incremented on every committed mutation.

2) employees
   - id                  INTEGER PRIMARY KEY AUTOINCREMENT
   - name                TEXT    NOT NULL
   - role                TEXT    NOT NULL
   - fixed_salary_cents  INTEGER NOT NULL DEFAULT 0
   - commission_rate     TEXT    NOT NULL DEFAULT '0'   -- decimal percentage
   - bonus_cents         INTEGER NOT NULL DEFAULT 0
   - phone               TEXT

3) transactions
   - id              INTEGER PRIMARY KEY AUTOINCREMENT
   - date            TEXT    NOT NULL  -- ISO date "YYYY-MM-DD"
   - description     TEXT    NOT NULL
   - amount_cents    INTEGER NOT NULL  -- non-negative amount in cents
   - type            TEXT    NOT NULL  -- INCOME | EXPENSE_SHOP | EXPENSE_COMMON
                                       -- | EXPENSE_FIXED | EXPENSE_EMPLOYEE
   - employee_id     INTEGER           -- set iff type = EXPENSE_EMPLOYEE
   - category        TEXT
   - payment_method  TEXT
   - installments    INTEGER
   - created_at      TEXT    NOT NULL  -- UTC timestamp
   - updated_at      TEXT              -- UTC timestamp of the last update

   ``employee_id`` carries no foreign key: deleting an employee keeps the
   history, and the engine reports such rows under an "unknown employee".

4) clients
   - id, name, kind (INDIVIDUAL | COMPANY), phone, motorcycle
   - value_cents, due_date, installments, status (PENDING | PAID)

5) products / services
   - products: name, quantity, min_stock, cost_price_cents, sell_price_cents
   - services: name, price_cents, description

6) budgets / budget_items
   - budgets: client_id, client_name, motorcycle, plate, date, status,
     notes, warranty_date, created_at
   - budget_items: budget_id (ON DELETE CASCADE), position, kind, item_id,
     name, quantity, unit_price_cents

   Shop records (clients, catalogue, budgets) are not part of the ledger
   snapshot and do not change the ledger version.

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- Amounts are stored as integer cents and converted back to Decimal.
- All timestamps are stored as ISO-8601 text (UTC).
- Foreign key enforcement is explicitly enabled.
- Schema creation is idempotent and runs before every public operation.
"""

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Optional

from .budgets import Budget, BudgetItem, BudgetStatus, ItemKind
from .inventory import Product, Service
from .logging_utils import get_logger
from .models import (
    ZERO,
    Employee,
    EmployeeExpense,
    LedgerSnapshot,
    ShopExpense,
    Transaction,
    TransactionType,
    make_transaction,
    to_decimal,
)
from .receivables import Client, ClientKind, PaymentStatus

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for MotoLedger.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class NewTransaction:
    """
    Data required to record a new transaction.

    The id is assigned by the database. The employee_id invariant is checked
    before anything is written.
    """

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    employee_id: Optional[int] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None
    installments: Optional[int] = None


@dataclass(frozen=True)
class NewEmployee:
    """Data required to register a new employee."""

    name: str
    role: str
    fixed_salary: Decimal = ZERO
    commission_rate: Decimal = ZERO
    bonus: Decimal = ZERO
    phone: Optional[str] = None


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of a bulk import.

    Attributes
    ----------
    rows_inserted:
        Number of rows written to the database.
    version:
        Ledger version after the import.
    """

    rows_inserted: int
    version: int


@dataclass(frozen=True)
class NewClient:
    """Data required to register a client and the amount they owe."""

    name: str
    kind: ClientKind
    motorcycle: str
    value: Decimal
    due_date: date
    phone: str = ""
    installments: int = 1


@dataclass(frozen=True)
class NewProduct:
    name: str
    quantity: int
    min_stock: int
    cost_price: Decimal
    sell_price: Decimal


@dataclass(frozen=True)
class NewService:
    name: str
    price: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class NewBudget:
    """
    Data required to record a budget.

    A new budget always starts PENDING, without a warranty date.
    """

    client_id: int
    client_name: str
    motorcycle: str
    date: date
    items: tuple[BudgetItem, ...]
    plate: Optional[str] = None
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection with foreign keys enabled.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    conn = sqlite3.connect(cfg.path)
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS ledger_meta (
            key   TEXT PRIMARY KEY,
            value INTEGER NOT NULL
        );
        """
    )
    conn.execute(
        "INSERT OR IGNORE INTO ledger_meta (key, value) VALUES ('version', 0);"
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS employees (
            id                 INTEGER PRIMARY KEY AUTOINCREMENT,
            name               TEXT    NOT NULL,
            role               TEXT    NOT NULL,
            fixed_salary_cents INTEGER NOT NULL DEFAULT 0,
            commission_rate    TEXT    NOT NULL DEFAULT '0',
            bonus_cents        INTEGER NOT NULL DEFAULT 0,
            phone              TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id             INTEGER PRIMARY KEY AUTOINCREMENT,
            date           TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            description    TEXT    NOT NULL,
            amount_cents   INTEGER NOT NULL,
            type           TEXT    NOT NULL,
            employee_id    INTEGER,
            category       TEXT,
            payment_method TEXT,
            installments   INTEGER,
            created_at     TEXT    NOT NULL,
            updated_at     TEXT,

            CHECK ((type = 'EXPENSE_EMPLOYEE') = (employee_id IS NOT NULL))
        );
        """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_transactions_date
            ON transactions(date);
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS clients (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            name         TEXT    NOT NULL,
            kind         TEXT    NOT NULL,
            phone        TEXT    NOT NULL DEFAULT '',
            motorcycle   TEXT    NOT NULL DEFAULT '',
            value_cents  INTEGER NOT NULL,
            due_date     TEXT    NOT NULL,
            installments INTEGER NOT NULL DEFAULT 1,
            status       TEXT    NOT NULL DEFAULT 'PENDING'
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS products (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            name             TEXT    NOT NULL,
            quantity         INTEGER NOT NULL DEFAULT 0,
            min_stock        INTEGER NOT NULL DEFAULT 0,
            cost_price_cents INTEGER NOT NULL DEFAULT 0,
            sell_price_cents INTEGER NOT NULL DEFAULT 0
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS services (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            name        TEXT    NOT NULL,
            price_cents INTEGER NOT NULL DEFAULT 0,
            description TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS budgets (
            id            INTEGER PRIMARY KEY AUTOINCREMENT,
            client_id     INTEGER NOT NULL,
            client_name   TEXT    NOT NULL,
            motorcycle    TEXT    NOT NULL DEFAULT '',
            plate         TEXT,
            date          TEXT    NOT NULL,
            status        TEXT    NOT NULL DEFAULT 'PENDING',
            notes         TEXT,
            warranty_date TEXT,
            created_at    TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS budget_items (
            budget_id        INTEGER NOT NULL,
            position         INTEGER NOT NULL,
            kind             TEXT    NOT NULL,
            item_id          INTEGER NOT NULL,
            name             TEXT    NOT NULL,
            quantity         INTEGER NOT NULL,
            unit_price_cents INTEGER NOT NULL,

            PRIMARY KEY (budget_id, position),
            FOREIGN KEY (budget_id) REFERENCES budgets(id) ON DELETE CASCADE
        );
        """
    )

    conn.commit()


def _to_cents(value: Decimal) -> int:
    """Convert a monetary Decimal into integer cents (half-up rounding)."""
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _from_cents(cents: int) -> Decimal:
    """Convert integer cents back into a two-decimal Decimal."""
    return Decimal(int(cents)).scaleb(-2)


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _read_version(conn: sqlite3.Connection) -> int:
    row = conn.execute(
        "SELECT value FROM ledger_meta WHERE key = 'version';"
    ).fetchone()
    return int(row[0])


def _bump_version(conn: sqlite3.Connection) -> int:
    """Increment the ledger version inside the caller's transaction."""
    conn.execute("UPDATE ledger_meta SET value = value + 1 WHERE key = 'version';")
    return _read_version(conn)


def _validate_new_transaction(new_tx: NewTransaction) -> None:
    """Run the domain factory on the new data (raises ValueError if invalid)."""
    make_transaction(
        id=0,
        date=new_tx.date,
        description=new_tx.description,
        amount=new_tx.amount,
        type=new_tx.type,
        employee_id=new_tx.employee_id,
        category=new_tx.category,
    )
    if to_decimal(new_tx.amount) < ZERO:
        raise ValueError("Transaction amount cannot be negative.")


_TRANSACTION_COLUMNS = (
    "id, date, description, amount_cents, type, employee_id, "
    "category, payment_method, installments"
)


def _row_to_transaction(row: tuple) -> Transaction:
    """
    Convert a database row into the matching transaction kind.

    Expected row layout (``_TRANSACTION_COLUMNS``):
      (id, date, description, amount_cents, type, employee_id,
       category, payment_method, installments)
    """
    (
        tx_id,
        date_str,
        description,
        amount_cents,
        type_str,
        employee_id,
        category,
        payment_method,
        installments,
    ) = row

    return make_transaction(
        id=int(tx_id),
        date=date.fromisoformat(date_str),
        description=description,
        amount=_from_cents(amount_cents),
        type=type_str,
        employee_id=employee_id,
        category=category,
        payment_method=payment_method,
        installments=installments,
    )


_EMPLOYEE_COLUMNS = (
    "id, name, role, fixed_salary_cents, commission_rate, bonus_cents, phone"
)


def _row_to_employee(row: tuple) -> Employee:
    """Convert a database row (``_EMPLOYEE_COLUMNS`` layout) into an Employee."""
    emp_id, name, role, salary_cents, commission_rate, bonus_cents, phone = row
    return Employee(
        id=int(emp_id),
        name=name,
        role=role,
        fixed_salary=_from_cents(salary_cents),
        commission_rate=to_decimal(commission_rate),
        bonus=_from_cents(bonus_cents),
        phone=phone,
    )


def _insert_transaction_row(cur: sqlite3.Cursor, new_tx: NewTransaction) -> int:
    cur.execute(
        """
        INSERT INTO transactions (
            date,
            description,
            amount_cents,
            type,
            employee_id,
            category,
            payment_method,
            installments,
            created_at,
            updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, NULL);
        """,
        (
            new_tx.date.isoformat(),
            new_tx.description,
            _to_cents(new_tx.amount),
            TransactionType.parse(new_tx.type).value,
            new_tx.employee_id,
            new_tx.category or None,
            new_tx.payment_method,
            new_tx.installments,
            _now_utc_iso(),
        ),
    )
    return int(cur.lastrowid)


def _insert_employee_row(cur: sqlite3.Cursor, new_emp: NewEmployee) -> int:
    cur.execute(
        """
        INSERT INTO employees (
            name,
            role,
            fixed_salary_cents,
            commission_rate,
            bonus_cents,
            phone
        )
        VALUES (?, ?, ?, ?, ?, ?);
        """,
        (
            new_emp.name,
            new_emp.role,
            _to_cents(new_emp.fixed_salary),
            str(to_decimal(new_emp.commission_rate)),
            _to_cents(new_emp.bonus),
            new_emp.phone,
        ),
    )
    return int(cur.lastrowid)


# ---------------------------------------------------------------------------
# Public API: schema and snapshots
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates tables and indexes if they are missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def get_version(cfg: DatabaseConfig) -> int:
    """Return the current ledger version."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        return _read_version(conn)
    finally:
        conn.close()


def load_snapshot(cfg: DatabaseConfig) -> LedgerSnapshot:
    """
    Read the whole ledger as an immutable, versioned snapshot.

    Version, transactions and employees are read inside one transaction.
    Transactions are ordered by date then id; employees by id.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        conn.execute("BEGIN;")
        version = _read_version(conn)
        tx_rows = conn.execute(
            f"SELECT {_TRANSACTION_COLUMNS} FROM transactions ORDER BY date, id;"
        ).fetchall()
        emp_rows = conn.execute(
            f"SELECT {_EMPLOYEE_COLUMNS} FROM employees ORDER BY id;"
        ).fetchall()
        conn.commit()
    finally:
        conn.close()

    return LedgerSnapshot(
        version=version,
        transactions=tuple(_row_to_transaction(r) for r in tx_rows),
        employees=tuple(_row_to_employee(r) for r in emp_rows),
    )


def has_transactions(cfg: DatabaseConfig) -> bool:
    """
    Return True if the ledger contains at least one transaction.

    Useful to warn the user when the dashboard is requested on an empty DB.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("SELECT 1 FROM transactions LIMIT 1;")
        return cur.fetchone() is not None
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Public API: transactions
# ---------------------------------------------------------------------------


def get_transaction_by_id(cfg: DatabaseConfig, transaction_id: int) -> Optional[Transaction]:
    """Load a single transaction by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"SELECT {_TRANSACTION_COLUMNS} FROM transactions WHERE id = ?;",
            (transaction_id,),
        ).fetchone()
    finally:
        conn.close()

    if row is None:
        return None
    return _row_to_transaction(row)


def insert_transaction(cfg: DatabaseConfig, new_tx: NewTransaction) -> Transaction:
    """
    Record a new transaction and bump the ledger version.

    Raises
    ------
    ValueError
        If the data violates the domain invariants (unknown type, negative
        amount, employee_id present/missing for the given type).
    """
    _validate_new_transaction(new_tx)
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        tx_id = _insert_transaction_row(cur, new_tx)
        version = _bump_version(conn)
        conn.commit()
    finally:
        conn.close()

    logger.debug("Inserted transaction #%s (ledger version %s).", tx_id, version)

    result = get_transaction_by_id(cfg, tx_id)
    if result is None:
        msg = f"Transaction #{tx_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_transaction(cfg: DatabaseConfig, transaction: Transaction) -> Transaction:
    """
    Replace an existing transaction (full replace by id).

    Raises
    ------
    ValueError
        If no transaction with this id exists, or if the amount is negative.
    """
    if transaction.amount < ZERO:
        raise ValueError("Transaction amount cannot be negative.")

    init_database(cfg)

    employee_id = (
        transaction.employee_id if isinstance(transaction, EmployeeExpense) else None
    )
    stored_type = (
        transaction.stored_type
        if isinstance(transaction, ShopExpense)
        else transaction.type
    )

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            UPDATE transactions
               SET date           = ?,
                   description    = ?,
                   amount_cents   = ?,
                   type           = ?,
                   employee_id    = ?,
                   category       = ?,
                   payment_method = ?,
                   installments   = ?,
                   updated_at     = ?
             WHERE id = ?;
            """,
            (
                transaction.date.isoformat(),
                transaction.description,
                _to_cents(transaction.amount),
                stored_type.value,
                employee_id,
                transaction.category or None,
                transaction.payment_method,
                transaction.installments,
                _now_utc_iso(),
                transaction.id,
            ),
        )
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Transaction #{transaction.id} not found.")
        _bump_version(conn)
        conn.commit()
    finally:
        conn.close()

    result = get_transaction_by_id(cfg, transaction.id)
    if result is None:
        msg = f"Transaction #{transaction.id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_transaction(cfg: DatabaseConfig, transaction_id: int) -> None:
    """
    Remove a transaction by id.

    Raises
    ------
    ValueError
        If no transaction with this id exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute("DELETE FROM transactions WHERE id = ?;", (transaction_id,))
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Transaction #{transaction_id} not found.")
        _bump_version(conn)
        conn.commit()
    finally:
        conn.close()


def import_transactions(
    cfg: DatabaseConfig,
    new_transactions: Iterable[NewTransaction],
) -> ImportStats:
    """
    Insert a batch of transactions in a single commit.

    Either every row is written (and the version bumped once) or none is.

    Raises
    ------
    ValueError
        If any row violates the domain invariants.
    """
    items = list(new_transactions)
    for new_tx in items:
        _validate_new_transaction(new_tx)

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        for new_tx in items:
            _insert_transaction_row(cur, new_tx)
        version = _bump_version(conn) if items else _read_version(conn)
        conn.commit()
    finally:
        conn.close()

    logger.info("Imported %d transaction(s) (ledger version %s).", len(items), version)
    return ImportStats(rows_inserted=len(items), version=version)


# ---------------------------------------------------------------------------
# Public API: employees
# ---------------------------------------------------------------------------


def get_employee_by_id(cfg: DatabaseConfig, employee_id: int) -> Optional[Employee]:
    """Load a single employee by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE id = ?;",
            (employee_id,),
        ).fetchone()
    finally:
        conn.close()

    if row is None:
        return None
    return _row_to_employee(row)


def insert_employee(cfg: DatabaseConfig, new_emp: NewEmployee) -> Employee:
    """Register a new employee and bump the ledger version."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        emp_id = _insert_employee_row(cur, new_emp)
        _bump_version(conn)
        conn.commit()
    finally:
        conn.close()

    result = get_employee_by_id(cfg, emp_id)
    if result is None:
        msg = f"Employee #{emp_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_employee(cfg: DatabaseConfig, employee: Employee) -> Employee:
    """
    Replace an existing employee (full replace by id).

    Raises
    ------
    ValueError
        If no employee with this id exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            UPDATE employees
               SET name               = ?,
                   role               = ?,
                   fixed_salary_cents = ?,
                   commission_rate    = ?,
                   bonus_cents        = ?,
                   phone              = ?
             WHERE id = ?;
            """,
            (
                employee.name,
                employee.role,
                _to_cents(employee.fixed_salary),
                str(to_decimal(employee.commission_rate)),
                _to_cents(employee.bonus),
                employee.phone,
                employee.id,
            ),
        )
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Employee #{employee.id} not found.")
        _bump_version(conn)
        conn.commit()
    finally:
        conn.close()

    result = get_employee_by_id(cfg, employee.id)
    if result is None:
        msg = f"Employee #{employee.id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_employee(cfg: DatabaseConfig, employee_id: int) -> None:
    """
    Remove an employee by id.

    Transactions that reference the employee are kept as they are.

    Raises
    ------
    ValueError
        If no employee with this id exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute("DELETE FROM employees WHERE id = ?;", (employee_id,))
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Employee #{employee_id} not found.")
        _bump_version(conn)
        conn.commit()
    finally:
        conn.close()


def import_employees(
    cfg: DatabaseConfig,
    new_employees: Iterable[NewEmployee],
) -> ImportStats:
    """Insert a batch of employees in a single commit."""
    items = list(new_employees)
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        for new_emp in items:
            _insert_employee_row(cur, new_emp)
        version = _bump_version(conn) if items else _read_version(conn)
        conn.commit()
    finally:
        conn.close()

    logger.info("Imported %d employee(s) (ledger version %s).", len(items), version)
    return ImportStats(rows_inserted=len(items), version=version)


# ---------------------------------------------------------------------------
# Public API: clients (receivables)
# ---------------------------------------------------------------------------

_CLIENT_COLUMNS = (
    "id, name, kind, phone, motorcycle, value_cents, due_date, installments, status"
)


def _row_to_client(row: tuple) -> Client:
    (
        client_id,
        name,
        kind,
        phone,
        motorcycle,
        value_cents,
        due_date,
        installments,
        status,
    ) = row
    return Client(
        id=int(client_id),
        name=name,
        kind=ClientKind(kind),
        phone=phone or "",
        motorcycle=motorcycle or "",
        value=_from_cents(value_cents),
        due_date=date.fromisoformat(due_date),
        installments=int(installments),
        status=PaymentStatus(status),
    )


def list_clients(cfg: DatabaseConfig) -> list[Client]:
    """Return every client, ordered by due date then id."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            f"SELECT {_CLIENT_COLUMNS} FROM clients ORDER BY due_date, id;"
        ).fetchall()
    finally:
        conn.close()

    return [_row_to_client(r) for r in rows]


def get_client_by_id(cfg: DatabaseConfig, client_id: int) -> Optional[Client]:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"SELECT {_CLIENT_COLUMNS} FROM clients WHERE id = ?;", (client_id,)
        ).fetchone()
    finally:
        conn.close()

    return _row_to_client(row) if row is not None else None


def insert_client(cfg: DatabaseConfig, new_client: NewClient) -> Client:
    """
    Register a client with a PENDING receivable.

    Raises
    ------
    ValueError
        If the value is negative or the installment count is lower than 1.
    """
    if to_decimal(new_client.value) < ZERO:
        raise ValueError("Client value cannot be negative.")
    if new_client.installments < 1:
        raise ValueError("Installments must be at least 1.")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO clients (
                name, kind, phone, motorcycle, value_cents, due_date,
                installments, status
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                new_client.name,
                ClientKind(new_client.kind).value,
                new_client.phone or "",
                new_client.motorcycle,
                _to_cents(new_client.value),
                new_client.due_date.isoformat(),
                new_client.installments,
                PaymentStatus.PENDING.value,
            ),
        )
        client_id = int(cur.lastrowid)
        conn.commit()
    finally:
        conn.close()

    result = get_client_by_id(cfg, client_id)
    if result is None:
        msg = f"Client #{client_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_client_status(cfg: DatabaseConfig, client: Client) -> Client:
    """
    Persist the payment status of ``client``.

    Raises
    ------
    ValueError
        If no client with this id exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            "UPDATE clients SET status = ? WHERE id = ?;",
            (PaymentStatus(client.status).value, client.id),
        )
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Client #{client.id} not found.")
        conn.commit()
    finally:
        conn.close()

    return client


# ---------------------------------------------------------------------------
# Public API: catalogue (products and services)
# ---------------------------------------------------------------------------

_PRODUCT_COLUMNS = "id, name, quantity, min_stock, cost_price_cents, sell_price_cents"
_SERVICE_COLUMNS = "id, name, price_cents, description"


def _row_to_product(row: tuple) -> Product:
    product_id, name, quantity, min_stock, cost_cents, sell_cents = row
    return Product(
        id=int(product_id),
        name=name,
        quantity=int(quantity),
        min_stock=int(min_stock),
        cost_price=_from_cents(cost_cents),
        sell_price=_from_cents(sell_cents),
    )


def _row_to_service(row: tuple) -> Service:
    service_id, name, price_cents, description = row
    return Service(
        id=int(service_id),
        name=name,
        price=_from_cents(price_cents),
        description=description,
    )


def list_products(cfg: DatabaseConfig) -> list[Product]:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products ORDER BY name, id;"
        ).fetchall()
    finally:
        conn.close()

    return [_row_to_product(r) for r in rows]


def list_services(cfg: DatabaseConfig) -> list[Service]:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            f"SELECT {_SERVICE_COLUMNS} FROM services ORDER BY name, id;"
        ).fetchall()
    finally:
        conn.close()

    return [_row_to_service(r) for r in rows]


def get_product_by_id(cfg: DatabaseConfig, product_id: int) -> Optional[Product]:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = ?;", (product_id,)
        ).fetchone()
    finally:
        conn.close()

    return _row_to_product(row) if row is not None else None


def get_service_by_id(cfg: DatabaseConfig, service_id: int) -> Optional[Service]:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"SELECT {_SERVICE_COLUMNS} FROM services WHERE id = ?;", (service_id,)
        ).fetchone()
    finally:
        conn.close()

    return _row_to_service(row) if row is not None else None


def insert_product(cfg: DatabaseConfig, new_product: NewProduct) -> Product:
    """
    Add a product to the catalogue.

    Raises
    ------
    ValueError
        If a price is negative.
    """
    if new_product.cost_price < ZERO or new_product.sell_price < ZERO:
        raise ValueError("Product prices cannot be negative.")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO products (
                name, quantity, min_stock, cost_price_cents, sell_price_cents
            )
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                new_product.name,
                new_product.quantity,
                new_product.min_stock,
                _to_cents(new_product.cost_price),
                _to_cents(new_product.sell_price),
            ),
        )
        product_id = int(cur.lastrowid)
        conn.commit()
    finally:
        conn.close()

    result = get_product_by_id(cfg, product_id)
    if result is None:
        msg = f"Product #{product_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def insert_service(cfg: DatabaseConfig, new_service: NewService) -> Service:
    """Add a service to the catalogue."""
    if new_service.price < ZERO:
        raise ValueError("Service price cannot be negative.")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO services (name, price_cents, description) VALUES (?, ?, ?);",
            (new_service.name, _to_cents(new_service.price), new_service.description),
        )
        service_id = int(cur.lastrowid)
        conn.commit()
    finally:
        conn.close()

    result = get_service_by_id(cfg, service_id)
    if result is None:
        msg = f"Service #{service_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


# ---------------------------------------------------------------------------
# Public API: budgets
# ---------------------------------------------------------------------------

_BUDGET_COLUMNS = (
    "id, client_id, client_name, motorcycle, plate, date, status, notes, warranty_date"
)


def _load_budget_items(conn: sqlite3.Connection, budget_id: int) -> tuple[BudgetItem, ...]:
    rows = conn.execute(
        """
        SELECT kind, item_id, name, quantity, unit_price_cents
          FROM budget_items
         WHERE budget_id = ?
         ORDER BY position;
        """,
        (budget_id,),
    ).fetchall()
    return tuple(
        BudgetItem(
            kind=ItemKind(kind),
            item_id=int(item_id),
            name=name,
            quantity=int(quantity),
            unit_price=_from_cents(price_cents),
        )
        for kind, item_id, name, quantity, price_cents in rows
    )


def _row_to_budget(conn: sqlite3.Connection, row: tuple) -> Budget:
    (
        budget_id,
        client_id,
        client_name,
        motorcycle,
        plate,
        date_str,
        status,
        notes,
        warranty_date,
    ) = row
    return Budget(
        id=int(budget_id),
        client_id=int(client_id),
        client_name=client_name,
        motorcycle=motorcycle or "",
        date=date.fromisoformat(date_str),
        items=_load_budget_items(conn, int(budget_id)),
        status=BudgetStatus(status),
        plate=plate,
        notes=notes,
        warranty_date=date.fromisoformat(warranty_date) if warranty_date else None,
    )


def list_budgets(cfg: DatabaseConfig) -> list[Budget]:
    """Return every budget with its items, newest first."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        rows = conn.execute(
            f"SELECT {_BUDGET_COLUMNS} FROM budgets ORDER BY date DESC, id DESC;"
        ).fetchall()
        return [_row_to_budget(conn, r) for r in rows]
    finally:
        conn.close()


def get_budget_by_id(cfg: DatabaseConfig, budget_id: int) -> Optional[Budget]:
    init_database(cfg)

    conn = _connect(cfg)
    try:
        row = conn.execute(
            f"SELECT {_BUDGET_COLUMNS} FROM budgets WHERE id = ?;", (budget_id,)
        ).fetchone()
        return _row_to_budget(conn, row) if row is not None else None
    finally:
        conn.close()


def insert_budget(cfg: DatabaseConfig, new_budget: NewBudget) -> Budget:
    """
    Record a PENDING budget and its items in one transaction.

    Raises
    ------
    ValueError
        If the budget has no item.
    """
    if not new_budget.items:
        raise ValueError("A budget needs at least one item.")

    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO budgets (
                client_id, client_name, motorcycle, plate, date, status,
                notes, warranty_date, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, NULL, ?);
            """,
            (
                new_budget.client_id,
                new_budget.client_name,
                new_budget.motorcycle,
                new_budget.plate,
                new_budget.date.isoformat(),
                BudgetStatus.PENDING.value,
                new_budget.notes,
                _now_utc_iso(),
            ),
        )
        budget_id = int(cur.lastrowid)
        cur.executemany(
            """
            INSERT INTO budget_items (
                budget_id, position, kind, item_id, name, quantity, unit_price_cents
            )
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            [
                (
                    budget_id,
                    position,
                    ItemKind(item.kind).value,
                    item.item_id,
                    item.name,
                    item.quantity,
                    _to_cents(item.unit_price),
                )
                for position, item in enumerate(new_budget.items, start=1)
            ],
        )
        conn.commit()
    finally:
        conn.close()

    result = get_budget_by_id(cfg, budget_id)
    if result is None:
        msg = f"Budget #{budget_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_budget_status(cfg: DatabaseConfig, budget: Budget) -> Budget:
    """
    Persist the status and warranty date of ``budget``.

    Raises
    ------
    ValueError
        If no budget with this id exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            "UPDATE budgets SET status = ?, warranty_date = ? WHERE id = ?;",
            (
                BudgetStatus(budget.status).value,
                budget.warranty_date.isoformat() if budget.warranty_date else None,
                budget.id,
            ),
        )
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Budget #{budget.id} not found.")
        conn.commit()
    finally:
        conn.close()

    return budget


def delete_budget(cfg: DatabaseConfig, budget_id: int) -> None:
    """
    Remove a budget; its items go with it (ON DELETE CASCADE).

    Raises
    ------
    ValueError
        If no budget with this id exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute("DELETE FROM budgets WHERE id = ?;", (budget_id,))
        if cur.rowcount == 0:
            conn.rollback()
            raise ValueError(f"Budget #{budget_id} not found.")
        conn.commit()
    finally:
        conn.close()
