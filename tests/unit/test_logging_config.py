"""Unit tests for logging configuration."""

import logging
from unittest.mock import Mock

from rabbithole.logging_config import (
    ColoredFormatter,
    log_subprocess_call,
    log_timing,
    setup_logging,
)


class TestLoggingSetup:
    """Console levels follow --verbose/--debug."""

    def test_default_logging_level(self):
        """Test default logging is WARNING level."""
        logger = setup_logging(verbose=False, debug=False)
        assert logger.level == logging.WARNING

    def test_verbose_logging_level(self):
        """Test --verbose enables INFO level."""
        logger = setup_logging(verbose=True, debug=False)
        assert logger.level == logging.INFO

    def test_debug_logging_level(self):
        """Test --debug enables DEBUG level."""
        logger = setup_logging(verbose=False, debug=True)
        assert logger.level == logging.DEBUG

    def test_debug_overrides_verbose(self):
        logger = setup_logging(verbose=True, debug=True)
        assert logger.level == logging.DEBUG

    def test_logger_name(self):
        assert setup_logging().name == "rabbithole"
        assert setup_logging() is logging.getLogger("rabbithole")

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1


class TestLogFile:
    """Hotkey invocations log to a file."""

    def test_file_receives_info_by_default(self, tmp_path):
        log_file = tmp_path / "logs" / "rabbithole.log"
        logger = setup_logging(log_file=log_file)

        logger.info("opened research window")
        logger.debug("noise")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "opened research window" in content
        assert "noise" not in content
        assert logger.level == logging.INFO

    def test_file_receives_debug_with_debug(self, tmp_path):
        log_file = tmp_path / "rabbithole.log"
        logger = setup_logging(debug=True, log_file=log_file)

        logger.debug("poll attempt")
        for handler in logger.handlers:
            handler.flush()

        assert "poll attempt" in log_file.read_text()

    def test_unwritable_log_file_is_not_fatal(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        logger = setup_logging(log_file=blocker / "rabbithole.log")
        assert len(logger.handlers) == 1


class TestColoredFormatter:
    """Level names are coloured without touching the record."""

    def test_colours_level_name(self):
        record = logging.LogRecord("rabbithole", logging.ERROR, __file__, 1, "boom", None, None)
        formatted = ColoredFormatter("%(levelname)s: %(message)s").format(record)

        assert formatted.startswith("\033[31mERROR\033[0m")
        assert record.levelname == "ERROR"


class TestSubprocessLogging:
    """Every external command is logged at DEBUG."""

    def test_log_subprocess_call(self, caplog):
        result = Mock()
        result.returncode = 0
        result.stdout = "0x03a00003  0 host title"
        result.stderr = ""

        logger = logging.getLogger("rabbithole.core.x11")
        with caplog.at_level(logging.DEBUG, logger="rabbithole"):
            log_subprocess_call(["wmctrl", "-l"], result, logger)

        assert "Subprocess call: wmctrl -l" in caplog.text
        assert "Return code: 0" in caplog.text
        assert "stdout: 0x03a00003" in caplog.text

    def test_log_subprocess_stderr(self, caplog):
        result = Mock()
        result.returncode = 1
        result.stdout = ""
        result.stderr = "Cannot open display"

        logger = logging.getLogger("rabbithole.core.x11")
        with caplog.at_level(logging.DEBUG, logger="rabbithole"):
            log_subprocess_call(["xdotool", "getactivewindow"], result, logger)

        assert "stderr: Cannot open display" in caplog.text


class TestTimingLogging:
    """log_timing reports elapsed milliseconds."""

    def test_log_timing(self, caplog):
        logger = logging.getLogger("rabbithole.core.lifecycle")
        with caplog.at_level(logging.DEBUG, logger="rabbithole"):
            with log_timing("Close research window", logger):
                pass

        assert "Starting: Close research window" in caplog.text
        assert "Close research window completed in" in caplog.text

    def test_log_timing_on_error(self, caplog):
        logger = logging.getLogger("rabbithole.core.lifecycle")
        with caplog.at_level(logging.INFO, logger="rabbithole"):
            try:
                with log_timing("Open research window", logger):
                    raise RuntimeError("boom")
            except RuntimeError:
                pass

        assert "Open research window completed in" in caplog.text
