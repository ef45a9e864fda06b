"""
Logger
Structured logging for the Copilot Catalog MCP server.

Everything goes to stderr: in stdio mode stdout carries the protocol.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


class Logger:
    """Simple logger wrapper with structured logging support."""
    
    def __init__(self, name: str = "copilot-catalog", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(_resolve_level(level))
        
        # Only add handler if none exist
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(handler)
    
    def setLevel(self, level: str) -> None:
        self.logger.setLevel(_resolve_level(level))
    
    def debug(self, message: str, extra: Optional[dict] = None):
        self.logger.debug(message, extra=extra)
    
    def info(self, message: str, extra: Optional[dict] = None):
        self.logger.info(message, extra=extra)
    
    def warning(self, message: str, extra: Optional[dict] = None):
        self.logger.warning(message, extra=extra)
    
    def error(self, message: str, extra: Optional[dict] = None):
        self.logger.error(message, extra=extra)
    
    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)


def configure_library_logging(level: str) -> None:
    """Route the `copilot_catalog.*` module loggers to stderr at `level`."""
    root = logging.getLogger("copilot_catalog")
    root.setLevel(_resolve_level(level))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
