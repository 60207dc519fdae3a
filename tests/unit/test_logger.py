"""
Tests for logging configuration.
"""

import logging

import colorlog
import pytest

from dutchswap.utils.logger import (
    LOG_FILE,
    ROOT_LOGGER,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


def root_handlers():
    return logging.getLogger(ROOT_LOGGER).handlers


class TestConfiguration:
    """Tests for handler setup."""

    def test_get_logger_configures_console_once(self):
        log = get_logger("registry")
        get_logger("settlement")

        assert log.name == "dutchswap.registry"
        assert len(root_handlers()) == 1
        assert isinstance(root_handlers()[0].formatter, colorlog.ColoredFormatter)

    def test_level_applied(self):
        configure_logging(level=logging.WARNING)
        assert logging.getLogger(ROOT_LOGGER).level == logging.WARNING

    def test_second_configure_is_noop(self):
        configure_logging(level=logging.DEBUG)
        configure_logging(level=logging.ERROR)

        assert logging.getLogger(ROOT_LOGGER).level == logging.DEBUG
        assert len(root_handlers()) == 1

    def test_log_file_written(self, tmp_path):
        log_dir = tmp_path / "logs"
        configure_logging(level=logging.INFO, log_dir=log_dir)

        get_logger("storage").info("persisted auction 0")
        for handler in root_handlers():
            handler.flush()

        assert "persisted auction 0" in (log_dir / LOG_FILE).read_text(encoding="utf-8")

    def test_reset_drops_handlers(self, tmp_path):
        configure_logging(log_dir=tmp_path)
        assert len(root_handlers()) == 2

        reset_logging()
        assert root_handlers() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
