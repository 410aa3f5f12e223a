"""Tests for the logging setup module."""

import logging

from cardscan.utils.logger import get_logger, setup_logging


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def test_setup_creates_handler(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("DEBUG")
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

        # Cleanup
        root.handlers.clear()
        root.setLevel(logging.WARNING)

    def test_setup_idempotent(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("INFO")
        count = len(root.handlers)
        setup_logging("INFO")
        assert len(root.handlers) == count

        root.handlers.clear()
        root.setLevel(logging.WARNING)

    def test_setup_invalid_level_defaults_to_info(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("NONEXISTENT")
        assert root.level == logging.INFO

        root.handlers.clear()
        root.setLevel(logging.WARNING)

    def test_noisy_libraries_quieted(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("DEBUG")
        assert logging.getLogger("PIL").level == logging.INFO

        root.handlers.clear()
        root.setLevel(logging.WARNING)


class TestGetLogger:
    """Tests for the get_logger function."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("cardscan.test")
        assert logger.name == "cardscan.test"
        assert isinstance(logger, logging.Logger)

    def test_same_name_returns_same_logger(self) -> None:
        assert get_logger("cardscan.same") is get_logger("cardscan.same")
