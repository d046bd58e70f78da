import logging

import pytest

import moto_ledger.logging_utils as logging_utils


@pytest.fixture
def clean_root_logger(monkeypatch):
    """Restore the root logger after the test."""
    root = logging.getLogger()
    previous_level = root.level
    monkeypatch.setattr(logging_utils, "_handler", None)
    yield root
    if logging_utils._handler is not None:
        root.removeHandler(logging_utils._handler)
    root.setLevel(previous_level)


def test_configure_root_logger_installs_one_handler(clean_root_logger) -> None:
    """Calling configure twice adds a single handler and updates the level."""
    before = len(clean_root_logger.handlers)

    logging_utils.configure_root_logger("info")
    logging_utils.configure_root_logger(logging.DEBUG)

    assert len(clean_root_logger.handlers) == before + 1
    assert clean_root_logger.level == logging.DEBUG


def test_unknown_level_is_rejected(clean_root_logger) -> None:
    """Level names are validated."""
    with pytest.raises(ValueError):
        logging_utils.configure_root_logger("LOUD")


def test_get_logger_returns_named_logger() -> None:
    """get_logger is a thin wrapper around logging.getLogger."""
    assert logging_utils.get_logger("moto_ledger.engine").name == "moto_ledger.engine"
