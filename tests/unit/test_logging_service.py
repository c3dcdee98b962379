"""Tests for log setup."""

import logging

import pytest

from autofee.services.config import AppConfig
from autofee.services.logging import configure_logging, parse_log_level


@pytest.fixture
def root_logger():
    """Root logger, restored to its previous handlers and level afterwards."""
    logger = logging.getLogger()
    original_handlers = logger.handlers.copy()
    original_level = logger.level
    yield logger
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    for handler in original_handlers:
        logger.addHandler(handler)
    logger.setLevel(original_level)


class TestParseLogLevel:
    @pytest.mark.parametrize(
        "name, expected",
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), (" error ", logging.ERROR)],
    )
    def test_known_names(self, name, expected):
        assert parse_log_level(name) == expected

    def test_unknown_name_falls_back_to_info(self):
        assert parse_log_level("LOUD") == logging.INFO


class TestConfigureLogging:
    def test_creates_log_directory(self, root_logger, tmp_path):
        log_file = tmp_path / "nested" / "autofee.log"

        configure_logging(AppConfig(log_file=str(log_file)))

        assert log_file.parent.is_dir()

    def test_file_and_stderr_handlers(self, root_logger, tmp_path):
        configure_logging(AppConfig(log_file=str(tmp_path / "autofee.log")))

        kinds = sorted(type(h).__name__ for h in root_logger.handlers)
        assert kinds == ["FileHandler", "StreamHandler"]

    def test_level_from_config(self, root_logger, tmp_path):
        configure_logging(AppConfig(log_file=str(tmp_path / "autofee.log"), log_level="warning"))

        assert root_logger.level == logging.WARNING

    def test_reconfiguring_replaces_handlers(self, root_logger, tmp_path):
        config = AppConfig(log_file=str(tmp_path / "autofee.log"))

        configure_logging(config)
        configure_logging(config)

        assert len(root_logger.handlers) == 2

    def test_records_reach_log_file(self, root_logger, tmp_path):
        log_file = tmp_path / "autofee.log"
        configure_logging(AppConfig(log_file=str(log_file)))

        logging.getLogger("autofee.services.bills_service").info("Calculated 2 unit bills")
        for handler in root_logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "autofee.services.bills_service - INFO - Calculated 2 unit bills" in text
