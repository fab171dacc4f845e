"""Logging setup for CareerBridge.

Modules log through ``logging.getLogger(__name__)``; every such logger is a
child of the ``careerbridge`` logger configured here, so one call to
``configure_logging`` controls the whole package.
"""

import logging
import sys
from pathlib import Path

LOGGER_NAME = "careerbridge"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def _resolve_level(level: str | None) -> int:
    return getattr(logging, (level or "INFO").upper(), logging.INFO)


def configure_logging(
    level: str | None = None,
    log_file: Path | str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure and return the ``careerbridge`` logger.

    Records go to stderr (stdout is reserved for command output) and, when
    ``log_file`` is given, are appended to that file as well. Calling this
    again only changes the level; handlers are installed once until
    ``reset_logging``.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to INFO.
        log_file: Optional file that receives a copy of every record.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    if _configured:
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    logger.handlers.clear()
    formatter = logging.Formatter(format_string, datefmt=date_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger, e.g. ``get_logger("cli")`` -> ``careerbridge.cli``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Remove installed handlers (useful for testing)."""
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    _configured = False
