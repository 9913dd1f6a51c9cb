# tests/test_logging_config.py
import logging

import pytest

from devlift.logging_config import (
    LOGGER_NAME,
    disable_logging,
    get_log_file_path,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_devlift_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


def test_setup_logging_console():
    logger = setup_logging("debug")
    assert logger.name == "devlift"
    assert logger.level == logging.DEBUG
    assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    assert get_log_file_path() is None


def test_repeated_setup_replaces_handlers():
    setup_logging()
    setup_logging()
    logger = logging.getLogger(LOGGER_NAME)
    own = [h for h in logger.handlers if getattr(h, "_devlift_handler", False)]
    assert len(own) == 1


def test_file_logging(tmp_path):
    path = tmp_path / "logs" / "devlift.log"
    setup_logging("INFO", format="detailed", console=False, file=True, file_path=path)

    logging.getLogger("devlift.execution_engine").info("hello from engine")

    assert get_log_file_path() == path
    assert "hello from engine" in path.read_text()
    assert "[INFO]" in path.read_text()


def test_unknown_format():
    with pytest.raises(ValueError, match="Unknown log format 'fancy'"):
        setup_logging(format="fancy")


def test_disable_logging():
    disable_logging()
    logger = logging.getLogger(LOGGER_NAME)
    assert logger.propagate is False
    assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)
