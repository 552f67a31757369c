"""Tests for logging setup."""
import logging
from contextlib import contextmanager

import pytest

from topicboard.logging_config import NOISY_LOGGERS, configure_logging, parse_level


@contextmanager
def bare_root():
    """Run with no root handlers, restoring pytest's capture handlers afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    saved_http = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    root.handlers = []
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
        for name, level in saved_http.items():
            logging.getLogger(name).setLevel(level)


class TestParseLevel:

    @pytest.mark.parametrize("raw,expected", [
        ("info", logging.INFO),
        ("WARNING", logging.WARNING),
        (" debug ", logging.DEBUG),
        (logging.ERROR, logging.ERROR),
        ("30", 30),
    ])
    def test_valid(self, raw, expected):
        assert parse_level(raw) == expected

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            parse_level("chatty")


class TestConfigureLogging:

    def test_console_only_by_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with bare_root() as root:
            configure_logging("info")
            handlers, level = root.handlers[:], root.level

        assert len(handlers) == 1
        assert level == logging.INFO
        assert not (tmp_path / "logs").exists()

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "nested" / "topicboard.log"

        with bare_root() as root:
            configure_logging(logging.INFO, str(log_file))
            logging.getLogger("topicboard.test").info("hello file")
            for handler in root.handlers:
                handler.flush()
            handler_count = len(root.handlers)

        assert handler_count == 2
        assert "hello file" in log_file.read_text()

    def test_idempotent(self):
        with bare_root() as root:
            configure_logging()
            configure_logging()
            handler_count = len(root.handlers)

        assert handler_count == 1

    def test_http_loggers_quiet_unless_debug(self):
        with bare_root():
            configure_logging("info")
            levels = [logging.getLogger(n).level for n in NOISY_LOGGERS]

        assert levels == [logging.WARNING] * len(NOISY_LOGGERS)

    def test_http_loggers_follow_debug(self):
        with bare_root():
            configure_logging("debug")
            levels = [logging.getLogger(n).level for n in NOISY_LOGGERS]

        assert levels == [logging.DEBUG] * len(NOISY_LOGGERS)
