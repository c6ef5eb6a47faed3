"""
Unit tests for the logging module.

Covers:
- Logger creation and retrieval (get_logger, ensure_logger)
- Logger configuration (setup_logger)
- JSON formatter output (JsonFormatter)
- Edge cases and error handling
"""
import json
import logging

import pytest

from grantcore.logging import JsonFormatter, ensure_logger, get_logger, setup_logger


@pytest.fixture
def dummy_settings():
    class DummySettings:
        DEBUG = False
        LOG_LEVEL = "WARNING"
        LOG_FORMAT = None
        LOG_JSON_FORMAT = False

    return DummySettings()


def test_get_logger_returns_logger(dummy_settings):
    logger = get_logger("grantcore.test.module", dummy_settings)
    assert isinstance(logger, logging.Logger)
    assert logger.name == "grantcore.test.module"
    assert logger.level == logging.WARNING


def test_get_logger_debug_overrides_level(dummy_settings):
    dummy_settings.DEBUG = True
    logger = get_logger("grantcore.test.debug", dummy_settings)
    assert logger.level == logging.DEBUG


def test_get_logger_json_from_settings(dummy_settings):
    dummy_settings.LOG_JSON_FORMAT = True
    logger = get_logger("grantcore.test.json", dummy_settings)
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)


def test_get_logger_without_settings():
    logger = get_logger("grantcore.test.plain")
    assert logger.level == logging.INFO


def test_ensure_logger_returns_existing_logger(dummy_settings):
    logger = get_logger("grantcore.test.ensure", dummy_settings)
    ensured = ensure_logger(logger, "grantcore.test.ensure", dummy_settings)
    assert ensured is logger


def test_ensure_logger_creates_new_logger(dummy_settings):
    ensured = ensure_logger(None, "grantcore.test.ensure2", dummy_settings)
    assert isinstance(ensured, logging.Logger)
    assert ensured.name == "grantcore.test.ensure2"


def test_ensure_logger_raises_without_name():
    with pytest.raises(ValueError):
        ensure_logger()


def test_setup_logger_removes_existing_handlers():
    logger = logging.getLogger("grantcore.test.handler")
    logger.handlers.clear()
    logger.addHandler(logging.StreamHandler())
    setup_logger("grantcore.test.handler")
    assert len(logger.handlers) == 1  # Only the new handler remains


def test_setup_logger_invalid_level():
    logger = setup_logger("grantcore.test.invalid", level="NOTALEVEL")
    assert logger.level == logging.INFO


def test_json_formatter_output():
    formatter = JsonFormatter()
    record = logging.LogRecord(
        name="grantcore.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Granted %s",
        args=("read:any",),
        exc_info=None,
    )
    record.role = "admin"
    data = json.loads(formatter.format(record))
    assert data["message"] == "Granted read:any"
    assert data["level"] == "INFO"
    assert data["logger"] == "grantcore.test"
    assert data["role"] == "admin"
    assert "timestamp" in data
    assert "args" not in data
