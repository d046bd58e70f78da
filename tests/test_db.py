import sqlite3
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from moto_ledger.budgets import (
    BudgetStatus,
    ItemKind,
    approve,
    item_from_product,
    item_from_service,
)
from moto_ledger.db import (
    DatabaseConfig,
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
    get_product_by_id,
    get_service_by_id,
    get_transaction_by_id,
    get_version,
    has_transactions,
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
from moto_ledger.models import EmployeeExpense, ShopExpense, TransactionType
from moto_ledger.receivables import ClientKind, PaymentStatus, mark_paid


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    db_path = tmp_path / "db" / "test_ledger.sqlite"
    return DatabaseConfig(engine="sqlite", path=db_path)


def new_income(amount="100.00", day=date(2025, 1, 10)) -> NewTransaction:
    return NewTransaction(
        date=day,
        description="Revisão completa",
        amount=Decimal(amount),
        type=TransactionType.INCOME,
        category="Serviços",
        payment_method="Pix",
    )


def test_init_database_creates_file_and_schema(tmp_path):
    """init_database should create the SQLite file and an empty ledger."""
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    assert cfg.path.exists()

    assert has_transactions(cfg) is False
    assert get_version(cfg) == 0


def test_unsupported_engine_is_rejected(tmp_path):
    """Only the sqlite engine is supported."""
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.db")

    with pytest.raises(ValueError):
        init_database(cfg)


def test_insert_and_load_snapshot_round_trip(tmp_path):
    """Inserted transactions come back with their Decimal amounts and kinds."""
    cfg = make_tmp_db_cfg(tmp_path)

    emp = insert_employee(
        cfg,
        NewEmployee(
            name="Carlos",
            role="Mecânico",
            fixed_salary=Decimal("1800"),
            commission_rate=Decimal("5.5"),
        ),
    )
    income = insert_transaction(cfg, new_income("1234.56"))
    advance = insert_transaction(
        cfg,
        NewTransaction(
            date=date(2025, 1, 12),
            description="Vale",
            amount=Decimal("150"),
            type=TransactionType.EXPENSE_EMPLOYEE,
            employee_id=emp.id,
        ),
    )
    legacy = insert_transaction(
        cfg,
        NewTransaction(
            date=date(2025, 1, 5),
            description="Aluguel",
            amount=Decimal("900"),
            type=TransactionType.EXPENSE_FIXED,
        ),
    )

    snap = load_snapshot(cfg)

    assert snap.version == 4
    assert [t.id for t in snap.transactions] == [legacy.id, income.id, advance.id]
    assert income.amount == Decimal("1234.56")
    assert isinstance(advance, EmployeeExpense) and advance.employee_id == emp.id
    assert isinstance(legacy, ShopExpense)
    assert legacy.type is TransactionType.EXPENSE_FIXED
    assert snap.employees[0].fixed_salary == Decimal("1800")
    assert snap.employees[0].commission_rate == Decimal("5.5")


def test_insert_rejects_invariant_violations(tmp_path):
    """Negative amounts and misplaced employee ids are rejected before writing."""
    cfg = make_tmp_db_cfg(tmp_path)

    with pytest.raises(ValueError):
        insert_transaction(cfg, new_income("-1"))
    with pytest.raises(ValueError):
        insert_transaction(
            cfg,
            NewTransaction(
                date=date(2025, 1, 1),
                description="Vale",
                amount=Decimal("10"),
                type=TransactionType.EXPENSE_EMPLOYEE,
            ),
        )

    assert has_transactions(cfg) is False
    assert get_version(cfg) == 0


def test_schema_check_constraint_guards_employee_id(tmp_path):
    """The table itself refuses an employee id on a non-employee row."""
    cfg = make_tmp_db_cfg(tmp_path)
    init_database(cfg)

    conn = sqlite3.connect(cfg.path)
    try:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO transactions (date, description, amount_cents, type, "
                "employee_id, created_at) VALUES ('2025-01-01', 'x', 100, 'INCOME', 1, "
                "'2025-01-01T00:00:00+00:00');"
            )
    finally:
        conn.close()


def test_update_is_full_replace_and_bumps_version(tmp_path):
    """update_transaction replaces every field of an existing row."""
    cfg = make_tmp_db_cfg(tmp_path)
    created = insert_transaction(cfg, new_income())
    version_before = get_version(cfg)

    updated = update_transaction(
        cfg,
        replace(created, description="Troca de pneu", amount=Decimal("80.5"), category=None),
    )

    assert updated.description == "Troca de pneu"
    assert updated.amount == Decimal("80.50")
    assert updated.category is None
    assert get_version(cfg) == version_before + 1


def test_update_and_delete_unknown_ids_raise(tmp_path):
    """Unknown ids raise ValueError and leave the version untouched."""
    cfg = make_tmp_db_cfg(tmp_path)
    created = insert_transaction(cfg, new_income())
    version = get_version(cfg)

    with pytest.raises(ValueError):
        update_transaction(cfg, replace(created, id=999))
    with pytest.raises(ValueError):
        delete_transaction(cfg, 999)
    with pytest.raises(ValueError):
        delete_employee(cfg, 999)

    assert get_version(cfg) == version


def test_delete_transaction(tmp_path):
    """Deleted transactions disappear from later snapshots."""
    cfg = make_tmp_db_cfg(tmp_path)
    created = insert_transaction(cfg, new_income())

    delete_transaction(cfg, created.id)

    assert get_transaction_by_id(cfg, created.id) is None
    assert load_snapshot(cfg).transactions == ()


def test_deleting_employee_keeps_history(tmp_path):
    """Employee expenses survive the deletion of their employee."""
    cfg = make_tmp_db_cfg(tmp_path)
    emp = insert_employee(cfg, NewEmployee(name="Ana", role="Caixa"))
    insert_transaction(
        cfg,
        NewTransaction(
            date=date(2025, 2, 1),
            description="Comissão",
            amount=Decimal("42"),
            type=TransactionType.EXPENSE_EMPLOYEE,
            employee_id=emp.id,
        ),
    )

    delete_employee(cfg, emp.id)
    snap = load_snapshot(cfg)

    assert snap.employees == ()
    assert snap.transactions[0].employee_id == emp.id


def test_update_employee(tmp_path):
    """update_employee replaces the stored employee."""
    cfg = make_tmp_db_cfg(tmp_path)
    emp = insert_employee(cfg, NewEmployee(name="Ana", role="Caixa"))

    updated = update_employee(cfg, replace(emp, fixed_salary=Decimal("2200.10")))

    assert updated.fixed_salary == Decimal("2200.10")
    with pytest.raises(ValueError):
        update_employee(cfg, replace(emp, id=emp.id + 100))


def test_import_transactions_is_atomic(tmp_path):
    """A batch bumps the version once; an invalid row rejects the whole batch."""
    cfg = make_tmp_db_cfg(tmp_path)

    stats = import_transactions(cfg, [new_income("10"), new_income("20")])

    assert stats.rows_inserted == 2
    assert stats.version == 1
    assert len(load_snapshot(cfg).transactions) == 2

    with pytest.raises(ValueError):
        import_transactions(cfg, [new_income("5"), new_income("-5")])

    assert len(load_snapshot(cfg).transactions) == 2
    assert get_version(cfg) == 1


def test_amounts_are_rounded_to_cents(tmp_path):
    """Amounts are stored as integer cents with half-up rounding."""
    cfg = make_tmp_db_cfg(tmp_path)

    created = insert_transaction(cfg, new_income("10.005"))

    assert created.amount == Decimal("10.01")


def test_clients_and_receivable_status(tmp_path):
    """Clients are stored in cents and their status can be switched."""
    cfg = make_tmp_db_cfg(tmp_path)

    created = insert_client(
        cfg,
        NewClient(
            name="Oficina Parceira",
            kind=ClientKind.COMPANY,
            motorcycle="XRE 300",
            value=Decimal("1200.005"),
            due_date=date(2025, 4, 10),
            installments=3,
        ),
    )
    assert created.value == Decimal("1200.01")
    assert created.status is PaymentStatus.PENDING

    update_client_status(cfg, mark_paid(created))

    assert get_client_by_id(cfg, created.id).status is PaymentStatus.PAID
    assert [c.name for c in list_clients(cfg)] == ["Oficina Parceira"]
    assert get_version(cfg) == 0


def test_client_validation_and_unknown_id(tmp_path):
    """Negative values and zero installments are rejected."""
    cfg = make_tmp_db_cfg(tmp_path)
    base = NewClient(
        name="João",
        kind=ClientKind.INDIVIDUAL,
        motorcycle="CG 160",
        value=Decimal("100"),
        due_date=date(2025, 1, 1),
    )

    with pytest.raises(ValueError):
        insert_client(cfg, replace(base, value=Decimal("-1")))
    with pytest.raises(ValueError):
        insert_client(cfg, replace(base, installments=0))

    ghost = mark_paid(insert_client(cfg, base))
    with pytest.raises(ValueError, match="not found"):
        update_client_status(cfg, replace(ghost, id=999))


def test_catalogue_products_and_services(tmp_path):
    """Products and services round-trip with their prices."""
    cfg = make_tmp_db_cfg(tmp_path)

    product = insert_product(
        cfg,
        NewProduct(
            name="Pastilha de freio",
            quantity=2,
            min_stock=3,
            cost_price=Decimal("18.90"),
            sell_price=Decimal("35"),
        ),
    )
    service = insert_service(cfg, NewService(name="Revisão", price=Decimal("120")))

    assert get_product_by_id(cfg, product.id) == product
    assert product.is_low_stock
    assert list_services(cfg) == [service]
    assert list_products(cfg)[0].sell_price == Decimal("35.00")
    assert get_service_by_id(cfg, 999) is None


def test_budget_items_status_and_cascade_delete(tmp_path):
    """A budget keeps its item lines; deleting it removes them too."""
    cfg = make_tmp_db_cfg(tmp_path)
    product = insert_product(
        cfg,
        NewProduct(
            name="Óleo",
            quantity=10,
            min_stock=2,
            cost_price=Decimal("25"),
            sell_price=Decimal("42.50"),
        ),
    )
    service = insert_service(cfg, NewService(name="Troca de óleo", price=Decimal("60")))

    new_budget = NewBudget(
        client_id=1,
        client_name="João",
        motorcycle="CG 160",
        date=date(2025, 3, 1),
        items=(item_from_product(product, 2), item_from_service(service)),
        plate="ABC1D23",
    )
    budget = insert_budget(cfg, new_budget)
    assert budget.status is BudgetStatus.PENDING
    assert budget.total_value == Decimal("145.00")
    assert [i.kind for i in budget.items] == [ItemKind.PRODUCT, ItemKind.SERVICE]

    update_budget_status(cfg, approve(budget, date(2025, 3, 10), warranty_days=30))
    stored = get_budget_by_id(cfg, budget.id)
    assert stored.status is BudgetStatus.APPROVED
    assert stored.warranty_date == date(2025, 4, 9)

    delete_budget(cfg, budget.id)
    assert list_budgets(cfg) == []
    conn = sqlite3.connect(cfg.path)
    try:
        assert conn.execute("SELECT COUNT(*) FROM budget_items;").fetchone()[0] == 0
    finally:
        conn.close()

    with pytest.raises(ValueError):
        insert_budget(cfg, replace(new_budget, items=()))
