# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for MotoLedger.

This module is responsible for:
- loading the application configuration from a TOML file,
- turning the [fees] section into a FeeSchedule,
- exposing typed dataclasses used by the rest of the application.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from .db import DatabaseConfig
from .fees import DEFAULT_FEE_SCHEDULE, AcquirerRates, BrandRates, FeeSchedule
from .logging_utils import get_logger
from .models import to_decimal
from .reports import DEFAULT_DASHBOARD_SETTINGS, DashboardSettings

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "moto_ledger_config.toml"
DEFAULT_DB_PATH = "data/db/moto_ledger.sqlite"


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for MotoLedger.

    This aggregates:
    - the shop identity and presentation currency,
    - the database configuration (where the ledger is stored),
    - the dashboard settings (top-N categories, labels, limits),
    - the card-acquirer fee schedule,
    - the budget warranty length and the logging level.
    """

    shop_name: str = "MotoLedger"
    currency: str = "BRL"
    database: DatabaseConfig = field(
        default_factory=lambda: DatabaseConfig(
            engine="sqlite", path=Path(DEFAULT_DB_PATH).resolve()
        )
    )
    dashboard: DashboardSettings = DEFAULT_DASHBOARD_SETTINGS
    fee_schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE
    warranty_days: int = 90
    log_level: str = "WARNING"


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a sub-table, or an empty mapping when missing or malformed."""
    value = data.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _positive_int(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc
    if value < 1:
        raise ValueError(f"'{where}.{key}' must be at least 1, got {value}.")
    return value


def _optional_rate(raw: Any, where: str) -> Optional[Decimal]:
    if raw is None:
        return None
    try:
        return to_decimal(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid rate for '{where}': {raw!r}.") from exc


def _parse_dashboard(raw: Mapping[str, Any]) -> DashboardSettings:
    """Extract the [dashboard] settings, falling back to the defaults."""
    section = _section(raw, "dashboard")
    defaults = DEFAULT_DASHBOARD_SETTINGS

    return DashboardSettings(
        top_categories=_positive_int(
            section, "top_categories", defaults.top_categories, "dashboard"
        ),
        default_category=str(
            section.get("default_category") or defaults.default_category
        ),
        fixed_payroll_label=str(
            section.get("fixed_payroll_label") or defaults.fixed_payroll_label
        ),
        recent_limit=_positive_int(
            section, "recent_limit", defaults.recent_limit, "dashboard"
        ),
        comparison_months=_positive_int(
            section, "comparison_months", defaults.comparison_months, "dashboard"
        ),
    )


def _parse_fee_schedule(raw: Mapping[str, Any]) -> FeeSchedule:
    """
    Build the FeeSchedule from the [fees] section.

    Expected layout::

        [fees]
        advance_rate = 1.50

        [fees.acquirers.rede]
        label = "Rede"
        pix = 0.49
        debit = 0.99

        [fees.acquirers.rede.credit.visa]
        label = "Visa"
        spot = 2.83
        installment = 2.39

    Without a [fees] section the default schedule is returned. When the
    section exists but defines no acquirer, the default acquirers are kept
    and only the advance rate is overridden.
    """
    section = _section(raw, "fees")
    if not section:
        return DEFAULT_FEE_SCHEDULE

    advance_rate = _optional_rate(section.get("advance_rate"), "fees.advance_rate")
    if advance_rate is None:
        advance_rate = DEFAULT_FEE_SCHEDULE.advance_rate

    acquirers_section = _section(section, "acquirers")
    if not acquirers_section:
        return FeeSchedule(
            acquirers=DEFAULT_FEE_SCHEDULE.acquirers,
            advance_rate=advance_rate,
        )

    acquirers: dict[str, AcquirerRates] = {}
    for key, acquirer_raw in acquirers_section.items():
        if not isinstance(acquirer_raw, Mapping):
            raise ValueError(f"[fees.acquirers.{key}] must be a table.")
        where = f"fees.acquirers.{key}"

        credit: dict[str, BrandRates] = {}
        for brand_key, brand_raw in _section(acquirer_raw, "credit").items():
            if not isinstance(brand_raw, Mapping):
                raise ValueError(f"[{where}.credit.{brand_key}] must be a table.")
            spot = _optional_rate(brand_raw.get("spot"), f"{where}.credit.{brand_key}")
            if spot is None:
                raise ValueError(f"Missing 'spot' rate in [{where}.credit.{brand_key}].")
            installment = _optional_rate(
                brand_raw.get("installment"), f"{where}.credit.{brand_key}"
            )
            credit[str(brand_key).lower()] = BrandRates(
                label=str(brand_raw.get("label") or brand_key),
                spot=spot,
                installment=installment if installment is not None else spot,
            )

        acquirers[str(key).lower()] = AcquirerRates(
            label=str(acquirer_raw.get("label") or key),
            pix=_optional_rate(acquirer_raw.get("pix"), f"{where}.pix"),
            debit=_optional_rate(acquirer_raw.get("debit"), f"{where}.debit"),
            credit=credit,
        )

    return FeeSchedule(acquirers=acquirers, advance_rate=advance_rate)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the MotoLedger application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [shop]
        Shop name and presentation currency.

    [database]
        Database engine and SQLite file path.

    [dashboard]
        top_categories, default_category, fixed_payroll_label,
        recent_limit and comparison_months.

    [budgets]
        warranty_days granted when a budget is approved or completed.

    [fees]
        advance_rate and the [fees.acquirers.<key>] rate tables.

    [logging]
        level (DEBUG, INFO, WARNING, ...).

    Notes
    -----
    - Every section is optional.
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.
    - When ``config_path`` is None and ``moto_ledger_config.toml`` does not
      exist in the working directory, the built-in defaults are returned. An
      explicit path that does not exist raises FileNotFoundError.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            logger.info("No %s found, using built-in defaults.", DEFAULT_CONFIG_FILE)
            return AppConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Shop section
    shop_section = _section(raw, "shop")
    shop_name = str(shop_section.get("name") or "MotoLedger")
    currency = str(shop_section.get("currency") or "BRL")

    # 2) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    db_path = (base_dir / str(db_path_raw)).resolve()

    database_config = DatabaseConfig(engine=db_engine, path=db_path)

    # 3) Dashboard and fees
    dashboard = _parse_dashboard(raw)
    fee_schedule = _parse_fee_schedule(raw)

    # 4) Budgets
    budgets_section = _section(raw, "budgets")
    warranty_days = _positive_int(budgets_section, "warranty_days", 90, "budgets")

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or "WARNING").upper()

    return AppConfig(
        shop_name=shop_name,
        currency=currency,
        database=database_config,
        dashboard=dashboard,
        fee_schedule=fee_schedule,
        warranty_days=warranty_days,
        log_level=log_level,
    )
