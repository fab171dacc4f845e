"""Tests for logging utility."""

import logging
from io import StringIO


class TestLoggerConfiguration:
    """Test that logger configures correctly from settings."""

    def test_configure_logging_creates_logger(self):
        """configure_logging should return the application logger."""
        from careerbridge.utils.logging import configure_logging

        logger = configure_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "careerbridge"

    def test_configure_logging_respects_level(self):
        from careerbridge.utils.logging import configure_logging

        logger = configure_logging(level="DEBUG")
        assert logger.level == logging.DEBUG

        logger = configure_logging(level="WARNING")
        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)

    def test_configure_logging_default_level_is_info(self):
        from careerbridge.utils.logging import configure_logging

        logger = configure_logging()
        assert logger.level == logging.INFO

    def test_configure_logging_installs_single_handler(self):
        """Calling configure_logging repeatedly should not stack handlers."""
        from careerbridge.utils.logging import configure_logging

        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1


class TestLogOutput:
    """Test that log output format is correct."""

    def test_module_logger_output_uses_app_format(self):
        """Module loggers should propagate into the configured app logger."""
        from careerbridge.utils.logging import configure_logging, get_logger

        logger = configure_logging(level="INFO")
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        logger.addHandler(handler)

        get_logger("matching.service").info("Ranked jobs")

        output = buffer.getvalue()
        assert "INFO" in output
        assert "careerbridge.matching.service" in output
        assert "Ranked jobs" in output


class TestResetLogging:
    def test_reset_logging_clears_handlers(self):
        from careerbridge.utils.logging import configure_logging, reset_logging

        logger = configure_logging()
        reset_logging()

        assert logger.handlers == []
        assert logger.propagate is True


class TestLogFile:
    def test_records_are_copied_to_log_file(self, tmp_path):
        from careerbridge.utils.logging import configure_logging, reset_logging

        log_file = tmp_path / "logs" / "careerbridge.log"
        logger = configure_logging(level="INFO", log_file=log_file)

        logger.info("Saved roadmap 3")
        logger.debug("not written")
        reset_logging()

        content = log_file.read_text(encoding="utf-8")
        assert "Saved roadmap 3" in content
        assert "not written" not in content

    def test_no_file_handler_by_default(self):
        from careerbridge.utils.logging import configure_logging

        logger = configure_logging()

        assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
