"""Tests for logging configuration."""

import logging

from diet_coach.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("diet_coach")
    logger.handlers.clear()

    configure_logging()
    configure_logging()

    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_configure_logging_applies_level() -> None:
    logger = logging.getLogger("diet_coach")

    configure_logging("debug")
    assert logger.level == logging.DEBUG

    configure_logging()
    assert logger.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
