import io
import logging

import pytest

from expense_tracker import logging_setup


@pytest.fixture
def fresh_package_logger(monkeypatch):
    logger = logging.getLogger("expense_tracker")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    monkeypatch.setattr(logging_setup, "_handler", None)
    logger.handlers = []
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_parse_level(monkeypatch):
    monkeypatch.delenv("EXPENSE_TRACKER_LOG_LEVEL", raising=False)
    assert logging_setup._parse_level(None) == logging.INFO
    assert logging_setup._parse_level("debug") == logging.DEBUG
    assert logging_setup._parse_level("30") == 30
    assert logging_setup._parse_level(logging.ERROR) == logging.ERROR
    assert logging_setup._parse_level("nonsense") == logging.INFO

    monkeypatch.setenv("EXPENSE_TRACKER_LOG_LEVEL", "warning")
    assert logging_setup._parse_level(None) == logging.WARNING
    assert logging_setup._parse_level("") == logging.WARNING
    assert logging_setup._parse_level("error") == logging.ERROR


def test_get_logger_installs_null_handler(fresh_package_logger):
    logger = logging_setup.get_logger("expense_tracker.records")
    assert logger.name == "expense_tracker.records"
    assert any(isinstance(h, logging.NullHandler) for h in fresh_package_logger.handlers)
    assert not logging_setup.is_configured()


def test_configure_logging_once(fresh_package_logger):
    logging_setup.get_logger("expense_tracker.store")
    stream = io.StringIO()
    returned = logging_setup.configure_logging("DEBUG", fmt="%(levelname)s %(message)s", stream=stream)
    logging_setup.configure_logging("ERROR", stream=io.StringIO())

    assert returned is fresh_package_logger
    assert logging_setup.is_configured()
    assert len(fresh_package_logger.handlers) == 1
    assert not any(isinstance(h, logging.NullHandler) for h in fresh_package_logger.handlers)
    logging_setup.get_logger("expense_tracker.store").debug("hello")
    assert stream.getvalue() == "DEBUG hello\n"


def test_configure_logging_force_replaces_handler(fresh_package_logger):
    first = io.StringIO()
    second = io.StringIO()
    logging_setup.configure_logging("INFO", fmt="%(message)s", stream=first)
    logging_setup.configure_logging("WARNING", fmt="%(message)s", stream=second, force=True)

    assert len(fresh_package_logger.handlers) == 1
    log = logging_setup.get_logger("expense_tracker.views")
    log.info("dropped")
    log.warning("kept")
    assert first.getvalue() == ""
    assert second.getvalue() == "kept\n"
