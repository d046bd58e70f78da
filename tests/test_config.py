from decimal import Decimal

import pytest

from moto_ledger.config import load_app_config
from moto_ledger.fees import DEFAULT_FEE_SCHEDULE


def write_config(tmp_path, content: str):
    path = tmp_path / "moto_ledger_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    """Every section is parsed and paths are resolved next to the file."""
    path = write_config(
        tmp_path,
        """
[shop]
name = "Oficina Teste"
currency = "BRL"

[database]
engine = "sqlite"
path = "data/ledger.sqlite"

[dashboard]
top_categories = 4
default_category = "Other"
fixed_payroll_label = "Payroll"
recent_limit = 10
comparison_months = 12

[budgets]
warranty_days = 30

[logging]
level = "debug"

[fees]
advance_rate = 2.0

[fees.acquirers.stone]
label = "Stone"
pix = 0.0
debit = 1.1

[fees.acquirers.stone.credit.visa]
label = "Visa"
spot = 3.0
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.shop_name == "Oficina Teste"
    assert cfg.database.path == (tmp_path / "data" / "ledger.sqlite").resolve()
    assert cfg.dashboard.top_categories == 4
    assert cfg.dashboard.default_category == "Other"
    assert cfg.dashboard.fixed_payroll_label == "Payroll"
    assert cfg.dashboard.recent_limit == 10
    assert cfg.dashboard.comparison_months == 12
    assert cfg.warranty_days == 30
    assert cfg.log_level == "DEBUG"
    assert cfg.fee_schedule.advance_rate == Decimal("2.0")
    assert cfg.fee_schedule.rate_for("stone", "pix") == Decimal("0.0")
    assert cfg.fee_schedule.rate_for("stone", "debit") == Decimal("1.1")
    # Installment rate falls back to the single-payment rate.
    assert cfg.fee_schedule.rate_for("stone", "credit", "visa", installment=True) == Decimal("3.0")
    with pytest.raises(ValueError):
        cfg.fee_schedule.rate_for("rede", "pix")


def test_empty_config_uses_defaults(tmp_path):
    """An empty file gives the built-in defaults."""
    cfg = load_app_config(str(write_config(tmp_path, "")))

    assert cfg.dashboard.top_categories == 6
    assert cfg.dashboard.default_category == "Outros"
    assert cfg.fee_schedule is DEFAULT_FEE_SCHEDULE
    assert cfg.warranty_days == 90
    assert cfg.database.path == (tmp_path / "data" / "db" / "moto_ledger.sqlite").resolve()


def test_fees_section_without_acquirers_keeps_default_table(tmp_path):
    """Only the advance rate changes when no acquirer table is given."""
    cfg = load_app_config(str(write_config(tmp_path, "[fees]\nadvance_rate = 1.99\n")))

    assert cfg.fee_schedule.advance_rate == Decimal("1.99")
    assert cfg.fee_schedule.rate_for("rede", "pix") == Decimal("0.49")


def test_missing_explicit_config_raises(tmp_path):
    """An explicit path that does not exist raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_missing_default_config_falls_back(tmp_path, monkeypatch):
    """Without --config and without a default file, defaults are used."""
    monkeypatch.chdir(tmp_path)

    cfg = load_app_config()

    assert cfg.shop_name == "MotoLedger"
    assert cfg.database.engine == "sqlite"


def test_invalid_values_raise(tmp_path):
    """Malformed TOML and invalid numbers raise ValueError."""
    with pytest.raises(ValueError):
        load_app_config(str(write_config(tmp_path, "[dashboard\n")))
    with pytest.raises(ValueError):
        load_app_config(str(write_config(tmp_path, "[dashboard]\ntop_categories = 'x'\n")))
    with pytest.raises(ValueError):
        load_app_config(str(write_config(tmp_path, "[budgets]\nwarranty_days = 0\n")))
    with pytest.raises(ValueError):
        load_app_config(
            str(write_config(tmp_path, "[fees.acquirers.x.credit.visa]\nlabel = 'Visa'\n"))
        )
