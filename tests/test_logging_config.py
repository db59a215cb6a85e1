"""
Tests for CLI logging setup.
"""

import io
import logging

import pytest

from winfit.logging_config import LOGGER_NAME, level_for, setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


@pytest.mark.unit
class TestLevels:

    @pytest.mark.parametrize("verbosity, level", [
        (-1, logging.WARNING),
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
    ])
    def test_level_for(self, verbosity, level):
        assert level_for(verbosity) == level


@pytest.mark.unit
class TestSetupLogging:

    def test_console_format_and_level(self):
        stream = io.StringIO()
        logger = setup_logging(1, stream=stream)
        logging.getLogger("winfit.solver").info("Solved %d windows", 3)
        logging.getLogger("winfit.solver").debug("hidden")
        assert logger.level == logging.INFO
        assert stream.getvalue() == "winfit: INFO: Solved 3 windows\n"

    def test_repeated_setup_replaces_handlers(self):
        setup_logging(stream=io.StringIO())
        logger = setup_logging(stream=io.StringIO())
        assert len(logger.handlers) == 1

    @pytest.mark.integration
    def test_log_file(self, tmp_path):
        path = tmp_path / "winfit.log"
        setup_logging(0, log_file=str(path), stream=io.StringIO())
        logging.getLogger("winfit.config").warning("Ignoring unreadable config")
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.flush()
        assert "winfit.config WARNING Ignoring unreadable config" in path.read_text()
