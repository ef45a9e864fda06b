"""Tests for Logger."""

import logging

from copilot_catalog.utils import Logger
from copilot_catalog.utils.logger import configure_library_logging


class TestLogger:
    """Test the logging wrapper."""
    
    def test_level_applied(self):
        logger = Logger(name="copilot-catalog-test-level", level="warning")
        
        assert logger.logger.level == logging.WARNING
        assert not logger.isEnabledFor(logging.INFO)
    
    def test_unknown_level_defaults_to_info(self):
        logger = Logger(name="copilot-catalog-test-unknown", level="chatty")
        
        assert logger.logger.level == logging.INFO
    
    def test_single_handler(self):
        Logger(name="copilot-catalog-test-handlers")
        logger = Logger(name="copilot-catalog-test-handlers")
        
        assert len(logger.logger.handlers) == 1
    
    def test_messages_reach_logging(self, caplog):
        logger = Logger(name="copilot-catalog-test-caplog", level="DEBUG")
        
        with caplog.at_level(logging.DEBUG, logger="copilot-catalog-test-caplog"):
            logger.info("index loaded")
        
        assert "index loaded" in caplog.text
    
    def test_configure_library_logging(self):
        configure_library_logging("ERROR")
        
        assert logging.getLogger("copilot_catalog").level == logging.ERROR
        assert logging.getLogger("copilot_catalog.catalog.cache").getEffectiveLevel() == logging.ERROR
