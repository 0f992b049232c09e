"""
Tests for the shared logger factory
"""
import logging
import sys

from chainbase import get_logger
from tests.utility import getrand_custom_chain


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_logger_writes_to_file(tmp_path):
    """
    A log file in a missing directory is created, and records use the given format
    """
    log_file = tmp_path / "logs" / "chainbase.log"
    logger = get_logger(f"chainbase.{getrand_custom_chain()}", "INFO", log_file=log_file,
                        format_string="%(levelname)s %(message)s")
    try:
        logger.debug("not written")
        logger.info("Selected chain 'regtest'")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.read_text().splitlines() == ["INFO Selected chain 'regtest'"]
    finally:
        _close(logger)


def test_logger_handlers_not_duplicated():
    name = f"chainbase.{getrand_custom_chain()}"
    logger = get_logger(name, "WARNING")
    try:
        assert get_logger(name) is logger
        assert len(logger.handlers) == 1, "Second call should not add another handler"
        assert logger.level == logging.WARNING
        assert logger.handlers[0].stream is sys.stdout
    finally:
        _close(logger)
