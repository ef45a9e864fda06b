"""
Config Module
Configuration management.
"""

from .repository import RepoConfig, BUNDLED_METADATA_PATH
from .settings import ConfigManager, Config, RateLimit

__all__ = [
    "ConfigManager",
    "Config",
    "RateLimit",
    "RepoConfig",
    "BUNDLED_METADATA_PATH",
]
