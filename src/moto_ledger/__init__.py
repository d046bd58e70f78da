# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
MotoLedger
----------

Back-office and financial dashboard for a motorcycle-parts shop. The project
turns a raw transaction ledger into dashboard figures and keeps the shop's
day-to-day records.

Main capabilities:
- dashboard statistics (income, shop and employee expenses, fixed payroll,
  net balance),
- top expense categories and expense composition,
- month-over-month comparison and multi-month history,
- card-acquirer fee calculator with configurable rate tables,
- SQLite ledger store with versioned snapshots and CSV import,
- client receivables, budgets with service warranty, parts inventory.

Computation (engine, comparison, fees), storage (SQLite), configuration
(TOML) and presentation (CLI) are kept in separate modules.


Version: 0.1.0

Usage:
    python -m moto_ledger.cli --help
"""

__all__ = [
    "engine",
    "comparison",
    "fees",
    "reports",
    "views",
    "io",
    "receivables",
    "budgets",
    "inventory",
]

__version__ = "0.1.0"
