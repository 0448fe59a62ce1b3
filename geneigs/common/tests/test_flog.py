'''
Tests for the console/file logger.
'''

import logging

import pytest

from geneigs.common.flog import Logger, Colors, get_global_logger

# -------------------------------------------------------------------

class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)

@pytest.fixture
def logger():
    log             = Logger("geneigs_test_flog", lvl=logging.DEBUG)
    log.has_colors  = False
    handler         = _ListHandler()
    log.logger.addHandler(handler)
    log.records     = handler.records
    yield log
    log.logger.removeHandler(handler)

# -------------------------------------------------------------------

class TestLogger:

    def test_levels_and_indentation(self, logger):
        logger.info("restart", lvl=1)
        logger.debug("details", lvl=2)
        logger.warning("slow")
        logger.error("broken")

        levels  = [r.levelno for r in logger.records]
        msgs    = [r.getMessage() for r in logger.records]
        assert levels == [logging.INFO, logging.DEBUG, logging.WARNING, logging.ERROR]
        assert msgs[0] == "\t->restart"
        assert msgs[1] == "\t\t->details"

    def test_verbose_flag(self, logger):
        logger.info("hidden", verbose=False)
        logger.warning("shown")
        logger.debug("shown too")
        assert [r.getMessage() for r in logger.records] == ["shown", "shown too"]

    def test_level_from_string(self):
        log = Logger("geneigs_test_flog_str", lvl='warning')
        assert log.lvl == logging.WARNING
        assert log.logger.level == logging.WARNING

    def test_title(self, logger):
        logger.title("config", 20, '-')
        msg = logger.records[-1].getMessage()
        assert "config" in msg
        assert len(msg) <= 20
        assert msg.startswith('-')

    def test_colors(self):
        assert Logger.colorize("abc", None) == "abc"
        assert Logger.colorize("abc", "white") == "abc"
        red = Logger.colorize("abc", "red")
        assert red.startswith(str(Colors("red"))) and "abc" in red

    def test_global_logger_is_shared(self):
        assert get_global_logger() is get_global_logger()

# -------------------------------------------------------------------
#! End of file
# -------------------------------------------------------------------
