"""
Index Cache

Owns the resolved Index and its freshness. Resolution order:

1. Memory (TTL, default 1 hour)
2. Bundled snapshot shipped with the package
3. Remote: hosted snapshot URL (if configured), then metadata.json from
   the source repository
4. Empty index

`get()` never raises: a failed fetch degrades to an empty index.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from jsonschema import ValidationError, validate

from copilot_catalog.catalog.errors import NetworkError
from copilot_catalog.catalog.models import Index
from copilot_catalog.catalog.source import GitHubSourceReader, SourceReader
from copilot_catalog.config.repository import RepoConfig

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
INDEX_CACHE_KEY = "index_v2"
REMOTE_METADATA_PATH = "metadata.json"

# Minimum shape a snapshot must have to be trusted
SNAPSHOT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["version", "agents"],
    "properties": {
        "version": {"type": ["string", "number"]},
        "generatedAt": {"type": "string"},
        "agents": {"type": "array"},
    },
}


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    ttl_seconds: float
    
    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl_seconds


class TTLCache:
    """
    String-keyed cache with per-entry TTL.
    
    Expiry is checked lazily on read; there is no background sweep.
    """
    
    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}
    
    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._entries[key]
            return None
        return entry.value
    
    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=self.clock(),
            ttl_seconds=self.default_ttl if ttl is None else ttl,
        )
    
    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None
    
    def clear(self) -> None:
        self._entries.clear()
    
    def has(self, key: str) -> bool:
        return self.get(key) is not None
    
    def __len__(self) -> int:
        return len(self._entries)


class JsonFetcher(Protocol):
    async def fetch_json(self, url: str) -> Any:
        ...


def is_valid_snapshot(doc: Any) -> bool:
    """A snapshot needs a version marker and an array of agents."""
    try:
        validate(instance=doc, schema=SNAPSHOT_SCHEMA)
    except ValidationError as e:
        logger.debug(f"Snapshot rejected: {e.message}")
        return False
    return True


class IndexCache:
    """
    Resolves and caches the catalog Index.
    
    Concurrent misses may both run the full resolution and both store the
    result. Resolution has no side effects beyond the cache write, so this
    only costs duplicated work.
    """
    
    def __init__(
        self,
        reader: SourceReader,
        repo_config: Optional[RepoConfig] = None,
        *,
        bundled_path: Optional[str | Path] = None,
        ttl: float = DEFAULT_TTL_SECONDS,
        cache: Optional[TTLCache] = None,
        hosted_fetcher: Optional[JsonFetcher] = None,
    ):
        self.reader = reader
        self.repo_config = repo_config or RepoConfig()
        if bundled_path is None:
            bundled_path = self.repo_config.bundled_path
        self.bundled_path = Path(bundled_path) if bundled_path else None
        self.ttl = ttl
        self.cache = cache or TTLCache(default_ttl=ttl)
        self._hosted_fetcher = hosted_fetcher
        self._owns_fetcher = False
    
    # =========================================================================
    # Public API
    # =========================================================================
    
    async def get(self, force_refresh: bool = False) -> Index:
        """Return the current Index, resolving it if needed."""
        if not force_refresh:
            cached = self.cache.get(INDEX_CACHE_KEY)
            if cached is not None:
                logger.debug("Index served from memory cache")
                return cached
            
            bundled = await self._load_bundled()
            if bundled is not None:
                self.cache.set(INDEX_CACHE_KEY, bundled, self.ttl)
                return bundled
        
        index = await self._resolve_remote()
        self.cache.set(INDEX_CACHE_KEY, index, self.ttl)
        return index
    
    async def refresh(self) -> Index:
        """Drop everything cached and resolve from the remote sources."""
        self.cache.clear()
        return await self.get(force_refresh=True)
    
    def invalidate(self) -> None:
        """Drop the memory cache only."""
        self.cache.clear()
    
    async def aclose(self) -> None:
        """Close the hosted-metadata fetcher if this cache created it."""
        if self._owns_fetcher and self._hosted_fetcher is not None:
            await self._hosted_fetcher.aclose()  # type: ignore[attr-defined]
            self._hosted_fetcher = None
            self._owns_fetcher = False
    
    async def fetch_file(self, relative_path: str) -> str:
        """Fetch a repository file, caching its text. Reader errors propagate."""
        key = f"file:{relative_path}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        content = await self.reader.read_file(relative_path)
        self.cache.set(key, content, self.ttl)
        return content
    
    # =========================================================================
    # Sources
    # =========================================================================
    
    def _read_bundled(self) -> Any:
        assert self.bundled_path is not None
        return json.loads(self.bundled_path.read_text(encoding="utf-8"))
    
    async def _load_bundled(self) -> Optional[Index]:
        if self.bundled_path is None or not self.bundled_path.is_file():
            return None
        try:
            logger.info(f"Loading bundled metadata from {self.bundled_path}")
            doc = await asyncio.to_thread(self._read_bundled)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load bundled metadata: {e}")
            return None
        if not is_valid_snapshot(doc):
            logger.warning(f"Bundled metadata at {self.bundled_path} is not a valid snapshot")
            return None
        return Index.from_snapshot(doc, source="bundled")
    
    @property
    def hosted_fetcher(self) -> JsonFetcher:
        if self._hosted_fetcher is None:
            fetch_json = getattr(self.reader, "fetch_json", None)
            if callable(fetch_json):
                self._hosted_fetcher = self.reader  # type: ignore[assignment]
            else:
                self._hosted_fetcher = GitHubSourceReader(self.repo_config)
                self._owns_fetcher = True
        return self._hosted_fetcher  # type: ignore[return-value]
    
    async def _load_hosted(self, url: str) -> Optional[Index]:
        try:
            logger.info(f"Fetching metadata from hosted URL: {url}")
            doc = await self.hosted_fetcher.fetch_json(url)
        except Exception as e:
            logger.warning(f"Failed to fetch hosted metadata: {e}")
            return None
        if not is_valid_snapshot(doc):
            logger.warning(f"Hosted metadata at {url} is not a valid snapshot")
            return None
        index = Index.from_snapshot(doc, source="hosted")
        logger.info(f"Hosted metadata index loaded (v{index.version})")
        return index
    
    async def _load_repository(self) -> Index:
        content = await self.reader.read_file(REMOTE_METADATA_PATH)
        try:
            doc = json.loads(content)
        except ValueError as e:
            raise NetworkError(f"Invalid metadata JSON: {e}") from e
        if not is_valid_snapshot(doc):
            raise NetworkError("Invalid metadata format")
        index = Index.from_snapshot(doc, source="repository")
        logger.info(f"Remote metadata index loaded (v{index.version})")
        return index
    
    async def _resolve_remote(self) -> Index:
        logger.info("Attempting to download metadata index...")
        
        if self.repo_config.metadata_url:
            hosted = await self._load_hosted(self.repo_config.metadata_url)
            if hosted is not None:
                return hosted
        
        try:
            return await self._load_repository()
        except Exception as e:
            logger.error(f"Failed to fetch remote index: {e}")
        return Index.empty(source="empty")
