"""Tests for logging configuration."""

import logging

from food_api.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("food_api")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_debug_flag_sets_level() -> None:
    logger = logging.getLogger("food_api")

    configure_logging(debug=True)
    assert logger.level == logging.DEBUG

    configure_logging()
    assert logger.level == logging.INFO


def test_http_client_loggers_are_quieted() -> None:
    configure_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
