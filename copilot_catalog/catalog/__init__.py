"""
Catalog Module
Index resolution, caching and search over upstream content.
"""

from .errors import (
    CatalogError,
    InvalidArgumentError,
    NotFoundError,
    SourceNotFoundError,
    NetworkError,
    OperationCancelledError,
)
from .models import (
    ContentKind,
    ContentItem,
    Agent,
    Prompt,
    Instruction,
    Skill,
    Collection,
    CollectionItem,
    CollectionDisplay,
    Index,
    KIND_ORDER,
    DOWNLOAD_PRIORITY,
    item_from_dict,
)
from .source import SourceReader, LocalSourceReader, GitHubSourceReader, create_source_reader
from .cache import CacheEntry, TTLCache, IndexCache, is_valid_snapshot
from .catalog import ContentCatalog, DEFAULT_LIMIT

__all__ = [
    # Errors
    "CatalogError",
    "InvalidArgumentError",
    "NotFoundError",
    "SourceNotFoundError",
    "NetworkError",
    "OperationCancelledError",
    # Models
    "ContentKind",
    "ContentItem",
    "Agent",
    "Prompt",
    "Instruction",
    "Skill",
    "Collection",
    "CollectionItem",
    "CollectionDisplay",
    "Index",
    "KIND_ORDER",
    "DOWNLOAD_PRIORITY",
    "item_from_dict",
    # Sources
    "SourceReader",
    "LocalSourceReader",
    "GitHubSourceReader",
    "create_source_reader",
    # Cache
    "CacheEntry",
    "TTLCache",
    "IndexCache",
    "is_valid_snapshot",
    # Queries
    "ContentCatalog",
    "DEFAULT_LIMIT",
]
