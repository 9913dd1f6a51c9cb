# devlift/logging_config.py
"""
Opt-in logging setup for the ``devlift`` logger tree.

devlift never configures logging on import. Applications (or the CLI) call
setup_logging() once; libraries embedding devlift can rely on propagation.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "devlift"

FORMATS = {
    "simple": "%(message)s",
    "default": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    "detailed": "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s",
}

_HANDLER_MARK = "_devlift_handler"
_log_file_path: Path | None = None


def default_log_file_path() -> Path:
    return Path.home() / ".devlift" / "logs" / "devlift.log"


def setup_logging(
    level: str | int = "INFO",
    *,
    format: str = "simple",
    format_string: str | None = None,
    console: bool = True,
    file: bool = False,
    file_path: str | Path | None = None,
    propagate: bool = True,
) -> logging.Logger:
    """
    Configure handlers on the ``devlift`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Log level name or number
        format: One of "simple", "default", "detailed"
        format_string: Custom format, overrides ``format``
        console: Attach a stderr handler
        file: Attach a file handler
        file_path: Log file location (defaults to ~/.devlift/logs/devlift.log)
        propagate: Let records reach the root logger as well

    Returns:
        The configured ``devlift`` logger
    """
    global _log_file_path

    if format_string is None and format not in FORMATS:
        raise ValueError(f"Unknown log format '{format}'. Valid: {', '.join(FORMATS)}")

    logger = logging.getLogger(LOGGER_NAME)
    _remove_own_handlers(logger)

    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = propagate
    formatter = logging.Formatter(format_string or FORMATS[format])

    if console:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)

    if file:
        path = Path(file_path) if file_path else default_log_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)
        _log_file_path = path
    else:
        _log_file_path = None

    return logger


def disable_logging() -> None:
    """Silence all devlift log output (useful for tests)."""
    global _log_file_path
    logger = logging.getLogger(LOGGER_NAME)
    _remove_own_handlers(logger)
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    _log_file_path = None


def get_log_file_path() -> Path | None:
    """Path of the active log file, or None when file logging is off."""
    return _log_file_path


def _remove_own_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False) or isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()
