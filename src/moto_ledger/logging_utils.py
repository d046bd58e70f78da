# MotoLedger - Back-office & Financial Dashboard for motorcycle shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Logging helpers for MotoLedger.

Modules obtain their logger through ``get_logger(__name__)``. The root logger
is configured once per process (handler + formatter); later calls to
``configure_root_logger`` only adjust the level, so reloading modules or
running the CLI several times in the same interpreter never stacks handlers.
"""

import logging
from typing import Optional, Union

_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: Optional[logging.Handler] = None


def _coerce_level(level: Union[int, str]) -> int:
    """Return a numeric logging level from an int or a level name."""
    if isinstance(level, int):
        return level

    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return value


def configure_root_logger(level: Union[int, str] = logging.WARNING) -> None:
    """Install the MotoLedger handler on the root logger and set its level."""
    global _handler

    root_logger = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root_logger.addHandler(_handler)

    root_logger.setLevel(_coerce_level(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger."""
    return logging.getLogger(name)
