"""
Tests for logging configuration.
"""

import logging

import pytest

from siteprep.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    ENV_LEVEL,
    _parse_level,
    console_formatter,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger(monkeypatch):
    for name in (ENV_LEVEL, ENV_FILE, ENV_FILE_LEVEL):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLevel:
    @pytest.mark.parametrize(
        "name,expected",
        [("DEBUG", logging.DEBUG), ("info", logging.INFO), (" error ", logging.ERROR), ("", logging.WARNING), (None, logging.WARNING), ("LOUD", logging.WARNING)],
    )
    def test_levels(self, name, expected):
        assert _parse_level(name) == expected


class TestConsoleFormatter:
    def test_debug_shows_source_location(self):
        assert "%(lineno)d" in console_formatter(logging.DEBUG)._fmt

    def test_info_shows_logger_name(self):
        formatter = console_formatter(logging.INFO)
        assert "%(name)s" in formatter._fmt
        assert "%(lineno)d" not in formatter._fmt

    @pytest.mark.parametrize("level", [logging.WARNING, logging.ERROR])
    def test_quiet_levels_are_minimal(self, level):
        assert console_formatter(level)._fmt == "%(levelname)s: %(message)s"


class TestSetupLogging:
    def test_console_only(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_defaults_to_warning(self):
        setup_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_env_level_used_without_flag(self, monkeypatch):
        monkeypatch.setenv(ENV_LEVEL, "debug")
        setup_logging()
        assert logging.getLogger().level == logging.DEBUG

    def test_flag_beats_env(self, monkeypatch):
        monkeypatch.setenv(ENV_LEVEL, "DEBUG")
        setup_logging("ERROR")
        assert logging.getLogger().level == logging.ERROR

    def test_transcript_with_own_level(self, tmp_path):
        log_file = tmp_path / "siteprep.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2

        logging.getLogger("siteprep.test").debug("written to file only")
        for handler in root.handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text(encoding="utf-8")

    def test_transcript_from_env_creates_directory_and_appends(self, tmp_path, monkeypatch):
        log_file = tmp_path / "logs" / "siteprep.log"
        monkeypatch.setenv(ENV_FILE, str(log_file))
        monkeypatch.setenv(ENV_FILE_LEVEL, "INFO")

        for message in ("first run", "second run"):
            setup_logging()
            logging.getLogger("siteprep.test").info(message)
            for handler in logging.getLogger().handlers:
                handler.flush()
                if isinstance(handler, logging.FileHandler):
                    handler.close()

        text = log_file.read_text(encoding="utf-8")
        assert "first run" in text
        assert "second run" in text
