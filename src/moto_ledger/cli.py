# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for MotoLedger.

This module wires together the building blocks of MotoLedger:

- application configuration (database, dashboard settings, fee schedule),
- the SQLite ledger store and CSV import,
- the aggregation engine and the period comparator (through
  ``reports.build_dashboard``),
- the fee calculator,
- the shop records (clients, catalogue, budgets),
- view helpers (tabular rendering).

The CLI is thin: it does not implement financial logic itself. It loads a
ledger snapshot, hands it to the pure components and prints the resulting
DataFrames with ``to_string(index=False)``.


Commands
--------

dashboard [--date YYYY-MM-DD] [--transactions CSV [--employees CSV]]
    Headline figures, top expense categories, expense composition,
    month-over-month comparison, cashier / shop-expense figures, per-employee
    totals and the most recent transactions. With ``--transactions`` the
    dashboard is computed straight from CSV files, without the database.
    This is also what runs when no command is given.

compare [--date YYYY-MM-DD] [--months N]
    Current vs previous calendar month, followed by the recorded totals of
    the last N months.

fee --amount X (--rate R | [--acquirer A] --method pix|debit|credit
    [--brand B] [--installment]) [--advance]
    Net amount the shop receives for a card/Pix sale.

transactions list|add|update|delete|import
employees list|add|update|delete|import
    Manage the ledger stored in the database.

clients list|add|pay|reopen
    Clients and their installment receivables (pending total, overdue list).

inventory list|add-product|add-service
    Parts and services catalogue, low-stock alert and stock valuation.

budgets list|add|approve|complete|delete
    Budgets priced from the catalogue. Approving restarts the service
    warranty, whose length comes from [budgets].warranty_days.

Global options: --config PATH, --log-level LEVEL, --version.


Examples
--------

    python -m moto_ledger.cli dashboard --date 2025-03-15
    python -m moto_ledger.cli fee --amount 1000 --method credit --brand visa
    python -m moto_ledger.cli transactions add --date 2025-03-02 \\
        --description "Troca de óleo" --amount 150 --type INCOME
    python -m moto_ledger.cli employees import data/input/employees.csv
"""

import argparse
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from . import __version__
from .budgets import approve, complete, item_from_product, item_from_service
from .comparison import monthly_series
from .config import AppConfig, load_app_config
from .db import (
    NewBudget,
    NewClient,
    NewEmployee,
    NewProduct,
    NewService,
    NewTransaction,
    delete_budget,
    delete_employee,
    delete_transaction,
    get_budget_by_id,
    get_client_by_id,
    get_employee_by_id,
    get_product_by_id,
    get_service_by_id,
    get_transaction_by_id,
    has_transactions,
    import_employees,
    import_transactions,
    init_database,
    insert_budget,
    insert_client,
    insert_employee,
    insert_product,
    insert_service,
    insert_transaction,
    list_budgets,
    list_clients,
    list_products,
    list_services,
    load_snapshot,
    update_budget_status,
    update_client_status,
    update_employee,
    update_transaction,
)
from .fees import PAYMENT_METHODS, Settlement, compute_net, settle
from .inventory import low_stock, stock_valuation
from .io import (
    frame_to_new_employees,
    frame_to_new_transactions,
    read_employees,
    read_transactions,
    snapshot_from_csv,
)
from .logging_utils import configure_root_logger, get_logger
from .models import (
    ZERO,
    Employee,
    EmployeeExpense,
    TransactionType,
    make_transaction,
    to_decimal,
)
from .periods import filter_transactions_by_period, month_period, resolve_reference
from .receivables import (
    ClientKind,
    installment_amount,
    mark_paid,
    mark_pending,
    overdue_clients,
    pending_receivables,
)
from .reports import build_dashboard
from .views import (
    budgets_to_dataframe,
    categories_to_dataframe,
    clients_to_dataframe,
    comparison_to_dataframe,
    composition_to_dataframe,
    desk_summaries_to_dataframe,
    employee_totals_to_dataframe,
    employees_to_dataframe,
    products_to_dataframe,
    services_to_dataframe,
    settlement_to_dataframe,
    stats_to_dataframe,
    transactions_to_dataframe,
)

logger = get_logger(__name__)

_TYPE_CHOICES = [t.value for t in TransactionType]


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------


def _decimal_arg(value: str) -> Decimal:
    """argparse type for monetary amounts and percentages."""
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc


def _date_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid date: {value!r}, expected YYYY-MM-DD"
        ) from exc


def _month_arg(value: str) -> tuple[int, int]:
    """argparse type for a calendar month written YYYY-MM."""
    try:
        year_raw, month_raw = value.split("-")
        year, month = int(year_raw), int(month_raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid month: {value!r}, expected YYYY-MM"
        ) from exc
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"invalid month: {value!r}")
    return year, month


def _product_item_arg(value: str) -> tuple[int, int]:
    """argparse type for a budget product line written ID or ID:QUANTITY."""
    product_raw, _, quantity_raw = value.partition(":")
    try:
        return int(product_raw), int(quantity_raw or 1)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"invalid product item: {value!r}, expected ID or ID:QUANTITY"
        ) from exc


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_transaction_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--date", type=_date_arg, required=required)
    parser.add_argument("--description", required=required)
    parser.add_argument("--amount", type=_decimal_arg, required=required)
    parser.add_argument(
        "--type",
        dest="tx_type",
        type=str.upper,
        choices=_TYPE_CHOICES,
        required=required,
        help="Transaction type.",
    )
    parser.add_argument(
        "--employee-id",
        dest="employee_id",
        type=int,
        help="Employee id (required for EXPENSE_EMPLOYEE, rejected otherwise).",
    )
    parser.add_argument("--category")
    parser.add_argument("--payment-method", dest="payment_method")
    parser.add_argument("--installments", type=int)


def _add_employee_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required)
    parser.add_argument("--role", required=required)
    parser.add_argument(
        "--salary",
        dest="fixed_salary",
        type=_decimal_arg,
        help="Fixed monthly salary.",
    )
    parser.add_argument(
        "--commission",
        dest="commission_rate",
        type=_decimal_arg,
        help="Commission rate in percent (informational).",
    )
    parser.add_argument("--bonus", type=_decimal_arg)
    parser.add_argument("--phone")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m moto_ledger.cli",
        description=(
            "MotoLedger - Back-office & Financial Dashboard for motorcycle shops. "
            "Aggregates the transaction ledger into dashboard figures, monthly "
            "comparisons and card-fee settlements."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of moto_ledger and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'moto_ledger_config.toml' in the current directory is used when "
            "it exists, otherwise the built-in defaults."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Override the [logging].level setting (DEBUG, INFO, WARNING, ...).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # dashboard
    # ------------------------------------------------------------------
    dashboard = subparsers.add_parser(
        "dashboard",
        help="Show the financial dashboard (default command).",
    )
    dashboard.add_argument(
        "--date",
        type=_date_arg,
        help="Reference date for the monthly figures (default: today).",
    )
    dashboard.add_argument(
        "--transactions",
        dest="transactions_csv",
        metavar="CSV_PATH",
        help="Compute the dashboard from this CSV file instead of the database.",
    )
    dashboard.add_argument(
        "--employees",
        dest="employees_csv",
        metavar="CSV_PATH",
        help="Employees CSV used together with --transactions.",
    )

    # ------------------------------------------------------------------
    # compare
    # ------------------------------------------------------------------
    compare = subparsers.add_parser(
        "compare",
        help="Compare the current calendar month with the previous one.",
    )
    compare.add_argument("--date", type=_date_arg, help="Reference date.")
    compare.add_argument(
        "--months",
        type=int,
        help="Number of months in the history table (default from config).",
    )

    # ------------------------------------------------------------------
    # fee
    # ------------------------------------------------------------------
    fee = subparsers.add_parser(
        "fee",
        help="Compute the net amount received for a card/Pix sale.",
    )
    fee.add_argument("--amount", type=_decimal_arg, required=True)
    fee.add_argument(
        "--rate",
        type=_decimal_arg,
        help="Explicit fee rate in percent (bypasses the rate schedule).",
    )
    fee.add_argument(
        "--acquirer",
        help="Acquirer key from the fee schedule (default: the first one).",
    )
    fee.add_argument("--method", type=str.lower, choices=list(PAYMENT_METHODS))
    fee.add_argument("--brand", help="Card brand for credit payments (visa, ...).")
    fee.add_argument(
        "--installment",
        action="store_true",
        help="Use the installment rate instead of the single-payment rate.",
    )
    fee.add_argument(
        "--advance",
        action="store_true",
        help="Apply the advance-payment fee.",
    )

    # ------------------------------------------------------------------
    # transactions
    # ------------------------------------------------------------------
    transactions = subparsers.add_parser(
        "transactions",
        help="Manage the transactions stored in the database.",
    )
    tx_sub = transactions.add_subparsers(
        dest="transactions_command",
        metavar="transactions-command",
    )

    tx_list = tx_sub.add_parser("list", help="List transactions.")
    tx_list.add_argument(
        "--month",
        type=_month_arg,
        help="Only list transactions of this calendar month (YYYY-MM).",
    )
    tx_list.add_argument("--type", dest="tx_type", type=str.upper, choices=_TYPE_CHOICES)
    tx_list.add_argument("--limit", type=int, help="Maximum number of rows to show.")

    tx_add = tx_sub.add_parser("add", help="Record a new transaction.")
    _add_transaction_fields(tx_add, required=True)

    tx_update = tx_sub.add_parser(
        "update",
        help="Replace a transaction; fields that are not given keep their value.",
    )
    tx_update.add_argument("id", type=int)
    _add_transaction_fields(tx_update, required=False)

    tx_delete = tx_sub.add_parser("delete", help="Delete a transaction.")
    tx_delete.add_argument("id", type=int)

    tx_import = tx_sub.add_parser("import", help="Import transactions from CSV.")
    tx_import.add_argument("csv_path")

    # ------------------------------------------------------------------
    # employees
    # ------------------------------------------------------------------
    employees = subparsers.add_parser(
        "employees",
        help="Manage the employees stored in the database.",
    )
    emp_sub = employees.add_subparsers(
        dest="employees_command",
        metavar="employees-command",
    )

    emp_sub.add_parser("list", help="List employees and their recorded expenses.")

    emp_add = emp_sub.add_parser("add", help="Register a new employee.")
    _add_employee_fields(emp_add, required=True)

    emp_update = emp_sub.add_parser(
        "update",
        help="Replace an employee; fields that are not given keep their value.",
    )
    emp_update.add_argument("id", type=int)
    _add_employee_fields(emp_update, required=False)

    emp_delete = emp_sub.add_parser("delete", help="Delete an employee.")
    emp_delete.add_argument("id", type=int)

    emp_import = emp_sub.add_parser("import", help="Import employees from CSV.")
    emp_import.add_argument("csv_path")

    # ------------------------------------------------------------------
    # clients
    # ------------------------------------------------------------------
    clients = subparsers.add_parser(
        "clients",
        help="Manage clients and their installment receivables.",
    )
    cl_sub = clients.add_subparsers(dest="clients_command", metavar="clients-command")

    cl_list = cl_sub.add_parser("list", help="List clients and pending receivables.")
    cl_list.add_argument(
        "--overdue",
        action="store_true",
        help="Only list pending clients whose due date has passed.",
    )
    cl_list.add_argument("--date", type=_date_arg, help="Reference date (default: today).")

    cl_add = cl_sub.add_parser("add", help="Register a client with a receivable.")
    cl_add.add_argument("--name", required=True)
    cl_add.add_argument(
        "--kind",
        type=str.upper,
        choices=[k.value for k in ClientKind],
        default=ClientKind.INDIVIDUAL.value,
    )
    cl_add.add_argument("--phone", default="")
    cl_add.add_argument("--motorcycle", default="")
    cl_add.add_argument("--value", type=_decimal_arg, required=True)
    cl_add.add_argument("--due-date", dest="due_date", type=_date_arg, required=True)
    cl_add.add_argument("--installments", type=int, default=1)

    cl_pay = cl_sub.add_parser("pay", help="Mark a client's receivable as paid.")
    cl_pay.add_argument("id", type=int)

    cl_reopen = cl_sub.add_parser("reopen", help="Mark a client's receivable as pending.")
    cl_reopen.add_argument("id", type=int)

    # ------------------------------------------------------------------
    # inventory
    # ------------------------------------------------------------------
    inventory = subparsers.add_parser(
        "inventory",
        help="Manage the parts and services catalogue.",
    )
    inv_sub = inventory.add_subparsers(
        dest="inventory_command",
        metavar="inventory-command",
    )

    inv_list = inv_sub.add_parser("list", help="List products, services and stock value.")
    inv_list.add_argument(
        "--low",
        action="store_true",
        help="Only list products at or below their minimum stock.",
    )

    inv_product = inv_sub.add_parser("add-product", help="Add a part to the catalogue.")
    inv_product.add_argument("--name", required=True)
    inv_product.add_argument("--quantity", type=int, default=0)
    inv_product.add_argument("--min-stock", dest="min_stock", type=int, default=0)
    inv_product.add_argument("--cost", type=_decimal_arg, required=True)
    inv_product.add_argument("--price", type=_decimal_arg, required=True)

    inv_service = inv_sub.add_parser("add-service", help="Add a service to the catalogue.")
    inv_service.add_argument("--name", required=True)
    inv_service.add_argument("--price", type=_decimal_arg, required=True)
    inv_service.add_argument("--description")

    # ------------------------------------------------------------------
    # budgets
    # ------------------------------------------------------------------
    budgets = subparsers.add_parser(
        "budgets",
        help="Manage budgets (quotes) and their service warranty.",
    )
    bud_sub = budgets.add_subparsers(dest="budgets_command", metavar="budgets-command")

    bud_list = bud_sub.add_parser("list", help="List budgets.")
    bud_list.add_argument(
        "--date",
        type=_date_arg,
        help="Date used to tell whether a warranty is active (default: today).",
    )

    bud_add = bud_sub.add_parser("add", help="Record a pending budget for a client.")
    bud_add.add_argument("--client-id", dest="client_id", type=int, required=True)
    bud_add.add_argument("--date", type=_date_arg, help="Budget date (default: today).")
    bud_add.add_argument(
        "--product",
        dest="products",
        action="append",
        type=_product_item_arg,
        default=[],
        metavar="ID[:QTY]",
        help="Product line; may be repeated.",
    )
    bud_add.add_argument(
        "--service",
        dest="services",
        action="append",
        type=int,
        default=[],
        metavar="ID",
        help="Service line; may be repeated.",
    )
    bud_add.add_argument(
        "--motorcycle",
        help="Motorcycle (default: the one registered for the client).",
    )
    bud_add.add_argument("--plate")
    bud_add.add_argument("--notes")

    for name, help_text in (
        ("approve", "Approve a budget and restart its warranty."),
        ("complete", "Mark a budget as completed."),
    ):
        status_parser = bud_sub.add_parser(name, help=help_text)
        status_parser.add_argument("id", type=int)
        status_parser.add_argument(
            "--date",
            type=_date_arg,
            help="Day of the status change (default: today).",
        )

    bud_delete = bud_sub.add_parser("delete", help="Delete a budget.")
    bud_delete.add_argument("id", type=int)

    return ap


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _print_section(title: str, df) -> None:
    print()
    print(f"=== {title} ===")
    if df.empty:
        print("(no data)")
    else:
        print(df.to_string(index=False))


def _handle_dashboard(args: argparse.Namespace, config: AppConfig) -> None:
    """
    Handle the 'dashboard' command.

    Loads a snapshot (database or CSV files), builds the dashboard report and
    prints every section.
    """
    if getattr(args, "transactions_csv", None):
        snapshot = snapshot_from_csv(args.transactions_csv, args.employees_csv)
        source = args.transactions_csv
    else:
        if getattr(args, "employees_csv", None):
            raise ValueError("--employees requires --transactions.")
        init_database(config.database)
        if not has_transactions(config.database):
            print(
                "Warning: the ledger is empty, use 'transactions add' or "
                "'transactions import' to record transactions."
            )
        snapshot = load_snapshot(config.database)
        source = f"ledger version {snapshot.version}"

    report = build_dashboard(snapshot, getattr(args, "date", None), config.dashboard)

    print(f"{config.shop_name}: dashboard on {report.reference_date.isoformat()}")
    print(f"Source: {source} | Currency: {config.currency}")

    _print_section("Summary", stats_to_dataframe(report.stats))
    _print_section("Top expense categories", categories_to_dataframe(report.categories))
    _print_section("Expense composition", composition_to_dataframe(report.composition))
    _print_section("Month over month", comparison_to_dataframe(report.comparison))
    _print_section(
        "Cashier & shop expenses",
        desk_summaries_to_dataframe(report.cash_desk, report.shop_expenses),
    )
    _print_section(
        "Employee expenses",
        employee_totals_to_dataframe(report.employee_totals),
    )
    _print_section(
        "Recent transactions",
        transactions_to_dataframe(report.recent, snapshot.employees),
    )


def _handle_compare(args: argparse.Namespace, config: AppConfig) -> None:
    """Handle the 'compare' command."""
    months = args.months if args.months is not None else config.dashboard.comparison_months
    if months < 1:
        raise ValueError("--months must be at least 1.")

    snapshot = load_snapshot(config.database)
    report = build_dashboard(snapshot, args.date, config.dashboard)

    _print_section("Month over month", comparison_to_dataframe(report.comparison))
    _print_section(
        f"Last {months} month(s)",
        monthly_series(snapshot.transactions, report.reference_date, months),
    )


def _handle_fee(args: argparse.Namespace, config: AppConfig) -> None:
    """
    Handle the 'fee' command.

    With --rate the explicit percentage is used; otherwise the rate is looked
    up in the configured fee schedule.
    """
    schedule = config.fee_schedule

    if args.rate is not None:
        breakdown = compute_net(
            args.amount,
            args.rate,
            apply_advance=args.advance,
            advance_rate_percent=schedule.advance_rate,
        )
        settlement = Settlement(breakdown=breakdown, rate=args.rate, label="Custom rate")
    else:
        if args.method is None:
            raise ValueError("Either --rate or --method must be provided.")
        if not schedule.acquirers:
            raise ValueError("No acquirer is configured in the fee schedule.")
        acquirer = args.acquirer or next(iter(schedule.acquirers))
        settlement = settle(
            schedule,
            args.amount,
            acquirer,
            args.method,
            brand=args.brand,
            installment=args.installment,
            apply_advance=args.advance,
        )

    print(settlement_to_dataframe(args.amount, settlement).to_string(index=False))
    if args.advance:
        print()
        print(f"Advance rate applied: {schedule.advance_rate:.2f} % of the gross amount.")


def _handle_transactions_list(args: argparse.Namespace, config: AppConfig) -> None:
    snapshot = load_snapshot(config.database)
    rows = list(snapshot.transactions)

    if args.month is not None:
        period = month_period(*args.month)
        rows = filter_transactions_by_period(rows, period)
        print(
            f"Applied period: {period.label} "
            f"({period.start.isoformat()} → {period.end.isoformat()})"
        )
    if args.tx_type is not None:
        rows = [t for t in rows if t.type.value == args.tx_type]

    # Newest first
    rows.sort(key=lambda t: (t.date, t.id), reverse=True)
    if args.limit is not None:
        rows = rows[: args.limit]

    if not rows:
        print("No transactions found for the given criteria.")
        return

    df = transactions_to_dataframe(rows, snapshot.employees)
    print()
    print(df.to_string(index=False))
    print()
    print(f"Total transactions: {len(df)} | Total amount: {df['amount'].sum():.2f}")


def _handle_transactions_add(args: argparse.Namespace, config: AppConfig) -> None:
    created = insert_transaction(
        config.database,
        NewTransaction(
            date=args.date,
            description=args.description,
            amount=args.amount,
            type=TransactionType.parse(args.tx_type),
            employee_id=args.employee_id,
            category=args.category,
            payment_method=args.payment_method,
            installments=args.installments,
        ),
    )
    print(f"Recorded transaction #{created.id}.")


def _handle_transactions_update(args: argparse.Namespace, config: AppConfig) -> None:
    existing = get_transaction_by_id(config.database, args.id)
    if existing is None:
        raise ValueError(f"Transaction #{args.id} not found.")

    tx_type = TransactionType.parse(args.tx_type) if args.tx_type else existing.type

    employee_id = args.employee_id
    if (
        employee_id is None
        and tx_type is TransactionType.EXPENSE_EMPLOYEE
        and isinstance(existing, EmployeeExpense)
    ):
        employee_id = existing.employee_id

    def _pick(new, old):
        return new if new is not None else old

    replacement = make_transaction(
        id=existing.id,
        date=_pick(args.date, existing.date),
        description=_pick(args.description, existing.description),
        amount=_pick(args.amount, existing.amount),
        type=tx_type,
        employee_id=employee_id,
        category=_pick(args.category, existing.category),
        payment_method=_pick(args.payment_method, existing.payment_method),
        installments=_pick(args.installments, existing.installments),
    )
    update_transaction(config.database, replacement)
    print(f"Updated transaction #{existing.id}.")


def _handle_transactions_import(args: argparse.Namespace, config: AppConfig) -> None:
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    print(f"Importing transactions from {csv_path} into the database...")
    df = read_transactions(csv_path)
    items = frame_to_new_transactions(df)
    stats = import_transactions(config.database, items)
    skipped = len(df) - stats.rows_inserted
    print(
        f"Imported {stats.rows_inserted} transaction(s), skipped {skipped} "
        f"invalid row(s). Ledger version: {stats.version}."
    )


def _handle_transactions_command(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "transactions_command", None)

    if subcmd == "list":
        _handle_transactions_list(args, config)
    elif subcmd == "add":
        _handle_transactions_add(args, config)
    elif subcmd == "update":
        _handle_transactions_update(args, config)
    elif subcmd == "delete":
        delete_transaction(config.database, args.id)
        print(f"Deleted transaction #{args.id}.")
    elif subcmd == "import":
        _handle_transactions_import(args, config)
    else:
        print(
            "No transactions subcommand specified. "
            "Available subcommands are: 'list', 'add', 'update', 'delete', 'import'."
        )


def _handle_employees_list(config: AppConfig) -> None:
    snapshot = load_snapshot(config.database)
    if not snapshot.employees:
        print("No employees registered.")
        return

    _print_section("Employees", employees_to_dataframe(snapshot.employees))
    report = build_dashboard(snapshot, settings=config.dashboard)
    _print_section(
        "Recorded employee expenses",
        employee_totals_to_dataframe(report.employee_totals),
    )
    print()
    print(f"Total fixed payroll: {report.stats.total_fixed_payroll:.2f}")


def _handle_employees_add(args: argparse.Namespace, config: AppConfig) -> None:
    created = insert_employee(
        config.database,
        NewEmployee(
            name=args.name,
            role=args.role,
            fixed_salary=args.fixed_salary if args.fixed_salary is not None else ZERO,
            commission_rate=(
                args.commission_rate if args.commission_rate is not None else ZERO
            ),
            bonus=args.bonus if args.bonus is not None else ZERO,
            phone=args.phone,
        ),
    )
    print(f"Registered employee #{created.id} ({created.name}).")


def _handle_employees_update(args: argparse.Namespace, config: AppConfig) -> None:
    existing = get_employee_by_id(config.database, args.id)
    if existing is None:
        raise ValueError(f"Employee #{args.id} not found.")

    def _pick(new, old):
        return new if new is not None else old

    update_employee(
        config.database,
        Employee(
            id=existing.id,
            name=_pick(args.name, existing.name),
            role=_pick(args.role, existing.role),
            fixed_salary=_pick(args.fixed_salary, existing.fixed_salary),
            commission_rate=_pick(args.commission_rate, existing.commission_rate),
            bonus=_pick(args.bonus, existing.bonus),
            phone=_pick(args.phone, existing.phone),
        ),
    )
    print(f"Updated employee #{existing.id}.")


def _handle_employees_import(args: argparse.Namespace, config: AppConfig) -> None:
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    df = read_employees(csv_path)
    items = frame_to_new_employees(df)
    stats = import_employees(config.database, items)
    skipped = len(df) - stats.rows_inserted
    print(
        f"Imported {stats.rows_inserted} employee(s), skipped {skipped} "
        f"invalid row(s). Ledger version: {stats.version}."
    )


def _handle_employees_command(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "employees_command", None)

    if subcmd == "list":
        _handle_employees_list(config)
    elif subcmd == "add":
        _handle_employees_add(args, config)
    elif subcmd == "update":
        _handle_employees_update(args, config)
    elif subcmd == "delete":
        delete_employee(config.database, args.id)
        print(f"Deleted employee #{args.id}.")
    elif subcmd == "import":
        _handle_employees_import(args, config)
    else:
        print(
            "No employees subcommand specified. "
            "Available subcommands are: 'list', 'add', 'update', 'delete', 'import'."
        )


def _handle_clients_list(args: argparse.Namespace, config: AppConfig) -> None:
    clients = list_clients(config.database)
    reference = resolve_reference(args.date)

    rows = overdue_clients(clients, reference) if args.overdue else clients
    if not rows:
        print("No clients found for the given criteria.")
        return

    _print_section(
        "Overdue clients" if args.overdue else "Clients",
        clients_to_dataframe(rows),
    )
    print()
    print(
        f"Pending receivables: {pending_receivables(clients):.2f} | "
        f"Overdue on {reference.isoformat()}: {len(overdue_clients(clients, reference))}"
    )


def _handle_clients_add(args: argparse.Namespace, config: AppConfig) -> None:
    created = insert_client(
        config.database,
        NewClient(
            name=args.name,
            kind=ClientKind(args.kind),
            phone=args.phone,
            motorcycle=args.motorcycle,
            value=args.value,
            due_date=args.due_date,
            installments=args.installments,
        ),
    )
    print(
        f"Registered client #{created.id} ({created.name}), "
        f"{created.installments} x {installment_amount(created):.2f}."
    )


def _handle_clients_status(args: argparse.Namespace, config: AppConfig) -> None:
    client = get_client_by_id(config.database, args.id)
    if client is None:
        raise ValueError(f"Client #{args.id} not found.")

    changed = mark_paid(client) if args.clients_command == "pay" else mark_pending(client)
    update_client_status(config.database, changed)
    print(f"Client #{changed.id} is now {changed.status.value}.")


def _handle_clients_command(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "clients_command", None)

    if subcmd == "list":
        _handle_clients_list(args, config)
    elif subcmd == "add":
        _handle_clients_add(args, config)
    elif subcmd in ("pay", "reopen"):
        _handle_clients_status(args, config)
    else:
        print(
            "No clients subcommand specified. "
            "Available subcommands are: 'list', 'add', 'pay', 'reopen'."
        )


def _handle_inventory_list(args: argparse.Namespace, config: AppConfig) -> None:
    products = list_products(config.database)
    services = list_services(config.database)

    shown = low_stock(products) if args.low else products
    _print_section(
        "Low stock" if args.low else "Products",
        products_to_dataframe(shown),
    )
    if not args.low:
        _print_section("Services", services_to_dataframe(services))

    valuation = stock_valuation(products)
    print()
    print(
        f"Stock at cost: {valuation.cost_value:.2f} | "
        f"Stock at sale price: {valuation.sale_value:.2f} | "
        f"Potential profit: {valuation.potential_profit:.2f}"
    )


def _handle_inventory_command(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "inventory_command", None)

    if subcmd == "list":
        _handle_inventory_list(args, config)
    elif subcmd == "add-product":
        product = insert_product(
            config.database,
            NewProduct(
                name=args.name,
                quantity=args.quantity,
                min_stock=args.min_stock,
                cost_price=args.cost,
                sell_price=args.price,
            ),
        )
        print(f"Added product #{product.id} ({product.name}).")
    elif subcmd == "add-service":
        service = insert_service(
            config.database,
            NewService(name=args.name, price=args.price, description=args.description),
        )
        print(f"Added service #{service.id} ({service.name}).")
    else:
        print(
            "No inventory subcommand specified. "
            "Available subcommands are: 'list', 'add-product', 'add-service'."
        )


def _handle_budgets_add(args: argparse.Namespace, config: AppConfig) -> None:
    """
    Handle 'budgets add'.

    Lines are priced from the catalogue at the time the budget is recorded.
    """
    client = get_client_by_id(config.database, args.client_id)
    if client is None:
        raise ValueError(f"Client #{args.client_id} not found.")

    items = []
    for product_id, quantity in args.products:
        product = get_product_by_id(config.database, product_id)
        if product is None:
            raise ValueError(f"Product #{product_id} not found.")
        items.append(item_from_product(product, quantity))
    for service_id in args.services:
        service = get_service_by_id(config.database, service_id)
        if service is None:
            raise ValueError(f"Service #{service_id} not found.")
        items.append(item_from_service(service))

    created = insert_budget(
        config.database,
        NewBudget(
            client_id=client.id,
            client_name=client.name,
            motorcycle=args.motorcycle or client.motorcycle,
            date=resolve_reference(args.date),
            items=tuple(items),
            plate=args.plate.upper() if args.plate else None,
            notes=args.notes,
        ),
    )
    print(f"Recorded budget #{created.id} for {created.client_name}: {created.total_value:.2f}.")


def _handle_budgets_status(args: argparse.Namespace, config: AppConfig) -> None:
    """Handle 'budgets approve' and 'budgets complete' (warranty from config)."""
    budget = get_budget_by_id(config.database, args.id)
    if budget is None:
        raise ValueError(f"Budget #{args.id} not found.")

    change = approve if args.budgets_command == "approve" else complete
    changed = change(budget, args.date, warranty_days=config.warranty_days)
    update_budget_status(config.database, changed)
    print(
        f"Budget #{changed.id} is now {changed.status.value}; "
        f"warranty until {changed.warranty_date.isoformat()}."
    )


def _handle_budgets_command(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "budgets_command", None)

    if subcmd == "list":
        budgets = list_budgets(config.database)
        if not budgets:
            print("No budgets recorded.")
            return
        _print_section(
            "Budgets",
            budgets_to_dataframe(budgets, resolve_reference(args.date)),
        )
    elif subcmd == "add":
        _handle_budgets_add(args, config)
    elif subcmd in ("approve", "complete"):
        _handle_budgets_status(args, config)
    elif subcmd == "delete":
        delete_budget(config.database, args.id)
        print(f"Deleted budget #{args.id}.")
    else:
        print(
            "No budgets subcommand specified. Available subcommands are: "
            "'list', 'add', 'approve', 'complete', 'delete'."
        )


_HANDLERS = {
    "compare": _handle_compare,
    "fee": _handle_fee,
    "transactions": _handle_transactions_command,
    "employees": _handle_employees_command,
    "clients": _handle_clients_command,
    "inventory": _handle_inventory_command,
    "budgets": _handle_budgets_command,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the MotoLedger CLI.

    This function parses command-line arguments, loads the configuration,
    configures logging and dispatches to the selected command. Invalid input
    (ValueError) and missing files end the program with a readable message
    instead of a traceback.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"moto_ledger version {__version__}")
        return

    try:
        config = load_app_config(args.config_path)
        configure_root_logger(args.log_level or config.log_level)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Error: {exc}") from exc

    logger.debug("Using database %s", config.database.path)

    handler = _HANDLERS.get(args.command, _handle_dashboard)
    try:
        handler(args, config)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
