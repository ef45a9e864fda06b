"""
Source Readers

Fetch raw file content from the upstream content repository. Two
interchangeable backends: a local checkout or GitHub's raw content host.
No caching here; see IndexCache.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from copilot_catalog import __package_name__, __version__
from copilot_catalog.catalog.errors import (
    InvalidArgumentError,
    NetworkError,
    SourceNotFoundError,
)
from copilot_catalog.config.repository import RepoConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@runtime_checkable
class SourceReader(Protocol):
    """Reads repository-relative files."""
    
    async def read_file(self, relative_path: str) -> str:
        """Return file text. Raises SourceNotFoundError or NetworkError."""
        ...
    
    def describe(self) -> str:
        ...


class LocalSourceReader:
    """Reads files from a local checkout of the content repository."""
    
    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()
    
    def _resolve(self, relative_path: str) -> Path:
        candidate = (self.root / relative_path.lstrip("/")).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise InvalidArgumentError(f"Path escapes repository root: {relative_path}")
        return candidate
    
    async def read_file(self, relative_path: str) -> str:
        path = self._resolve(relative_path)
        if not path.is_file():
            raise SourceNotFoundError(relative_path)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise NetworkError(f"Failed to read {relative_path}: {e}") from e
    
    def describe(self) -> str:
        return f"local:{self.root}"


class GitHubSourceReader:
    """Reads files from raw.githubusercontent.com over HTTPS."""
    
    def __init__(self, repo_config: RepoConfig, client: Optional[httpx.AsyncClient] = None):
        self.repo_config = repo_config
        self._client = client
        self._owns_client = client is None
    
    @property
    def headers(self) -> dict[str, str]:
        headers = {"User-Agent": f"{__package_name__}/{__version__}"}
        if self.repo_config.token:
            headers["Authorization"] = f"Bearer {self.repo_config.token}"
        return headers
    
    @property
    def client(self) -> httpx.AsyncClient:
        """Lazily create the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=DEFAULT_TIMEOUT,
                headers=self.headers,
                follow_redirects=True,
            )
        return self._client
    
    async def _get(self, url: str, label: str) -> httpx.Response:
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to fetch {label}: {e}") from e
        if response.status_code == 404:
            raise SourceNotFoundError(label)
        if response.status_code != 200:
            raise NetworkError(f"Failed to fetch {label}: HTTP {response.status_code}")
        return response
    
    async def read_file(self, relative_path: str) -> str:
        url = self.repo_config.raw_url(relative_path)
        logger.debug(f"GET {url}")
        response = await self._get(url, relative_path)
        return response.text
    
    async def fetch_json(self, url: str) -> Any:
        """Fetch an absolute URL and decode it as JSON (hosted snapshot)."""
        response = await self._get(url, url)
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {url}: {e}") from e
    
    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
    
    def describe(self) -> str:
        return self.repo_config.raw_base_url


def create_source_reader(repo_config: RepoConfig) -> LocalSourceReader | GitHubSourceReader:
    """Pick the backend from configuration: a local checkout wins if set."""
    if repo_config.local_path:
        return LocalSourceReader(repo_config.local_path)
    return GitHubSourceReader(repo_config)
