import io
import logging

import pytest

from statement_entities.logging_setup import (
    configure_logging,
    get_logger,
    parse_level,
    reset_logging,
    verbosity_level,
)


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        ("debug", logging.DEBUG),
        (" Info ", logging.INFO),
        ("15", 15),
        (logging.ERROR, logging.ERROR),
        (None, logging.WARNING),
        ("bogus", logging.WARNING),
    ],
)
def test_parse_level(level, expected):
    assert parse_level(level) == expected


def test_parse_level_falls_back_to_env(monkeypatch):
    monkeypatch.setenv("STATEMENT_ENTITIES_LOG_LEVEL", "info")
    assert parse_level(None) == logging.INFO
    monkeypatch.setenv("STATEMENT_ENTITIES_LOG_LEVEL", "nonsense")
    assert parse_level(None) == logging.WARNING


def test_verbosity_level():
    assert verbosity_level(0) is None
    assert verbosity_level(1) == logging.INFO
    assert verbosity_level(3) == logging.DEBUG


def test_configure_replaces_previous_handler():
    first, second = io.StringIO(), io.StringIO()
    configure_logging("INFO", stream=first, fmt="%(name)s %(message)s")
    logger = configure_logging("INFO", stream=second, fmt="%(name)s %(message)s")

    get_logger("statement_entities.workspace").info("applied 2 mappings")

    assert len(logger.handlers) == 1
    assert first.getvalue() == ""
    assert second.getvalue() == "statement_entities.workspace applied 2 mappings\n"


def test_silent_until_configured():
    reset_logging()
    logger = get_logger("statement_entities.trim_rules")
    root = logging.getLogger("statement_entities")
    assert any(isinstance(h, logging.NullHandler) for h in root.handlers)
    assert logger.name == "statement_entities.trim_rules"
