"""
Settings
Configuration management for the Copilot Catalog MCP server.

This is the only place that reads the environment. Everything below it
(index cache, tools, dispatcher) receives plain dataclasses.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from copilot_catalog.config.repository import RepoConfig
from copilot_catalog.utils import Logger


@dataclass(frozen=True)
class RateLimit:
    """Fixed-window request limit per client."""
    window_seconds: float
    max_requests: int


@dataclass
class Config:
    """Server configuration."""
    environment: str = "development"
    log_level: str = "INFO"
    http_host: str = "127.0.0.1"
    http_port: int = 8080
    auth_token: Optional[str] = None
    allowed_origins: list[str] = field(default_factory=list)
    rate_limit: Optional[RateLimit] = None
    repo: RepoConfig = field(default_factory=RepoConfig)
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"
    
    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class ConfigManager:
    """Configuration manager - loads and provides config."""
    
    _instance: Optional["ConfigManager"] = None
    
    def __init__(self, logger: Optional[Logger] = None):
        self._config: Optional[Config] = None
        self.logger = logger or Logger("copilot-catalog-config")
    
    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance
    
    def load(self, config_file: Optional[str] = None) -> Config:
        """
        Load configuration.
        
        Priority (later wins):
        1. Built-in defaults (github/awesome-copilot@main)
        2. JSON config file (--config)
        3. ACP_REPOS_JSON env var (JSON object)
        4. Individual env vars (ACP_METADATA_URL, GITHUB_TOKEN, ...)
        """
        load_dotenv()
        
        repo = RepoConfig()
        
        if config_file:
            try:
                data = json.loads(Path(config_file).expanduser().read_text())
                if isinstance(data, dict):
                    repo = repo.merged(data)
                else:
                    self.logger.warning(f"Ignoring config file {config_file}: expected a JSON object")
            except (OSError, json.JSONDecodeError) as e:
                self.logger.warning(f"Failed to load config file: {e}")
        
        repos_json = os.getenv("ACP_REPOS_JSON")
        if repos_json:
            try:
                data = json.loads(repos_json)
                if isinstance(data, dict):
                    repo = repo.merged(data)
            except json.JSONDecodeError as e:
                self.logger.warning(f"Failed to parse ACP_REPOS_JSON: {e}")
        
        env_overrides = {
            "metadata_url": os.getenv("ACP_METADATA_URL"),
            "token": os.getenv("GITHUB_TOKEN"),
            "local_path": os.getenv("CATALOG_LOCAL_PATH"),
        }
        repo = repo.merged({k: v for k, v in env_overrides.items() if v})
        
        rate_limit = None
        rate_max = os.getenv("MCP_RATE_LIMIT_MAX")
        if rate_max:
            rate_limit = RateLimit(
                window_seconds=float(os.getenv("MCP_RATE_LIMIT_WINDOW", "60")),
                max_requests=int(rate_max),
            )
        
        env = os.getenv("ENVIRONMENT", "development")
        self._config = Config(
            environment=env,
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            http_host=os.getenv("MCP_HOST", "127.0.0.1"),
            http_port=int(os.getenv("MCP_PORT", os.getenv("HTTP_PORT", "8080"))),
            auth_token=os.getenv("MCP_AUTH_TOKEN") or None,
            allowed_origins=_split_csv(os.getenv("MCP_ALLOWED_ORIGINS")),
            rate_limit=rate_limit,
            repo=repo,
        )
        return self._config
    
    def get(self) -> Config:
        """Get current configuration."""
        if self._config is None:
            # Create default config if not loaded
            self._config = Config()
        return self._config
