"""
Content Catalog

Name lookup and text/tag search over one Index.
"""

from typing import Iterable, Optional

from copilot_catalog.catalog.models import (
    DOWNLOAD_PRIORITY,
    KIND_ORDER,
    ContentItem,
    ContentKind,
    Index,
)

DEFAULT_LIMIT = 10


def _kinds_for(kind: Optional[str | ContentKind]) -> tuple[ContentKind, ...]:
    if kind is None or (isinstance(kind, str) and kind.strip().lower() == "all"):
        return KIND_ORDER
    return (ContentKind.parse(kind),)


def matches_query(item: ContentItem, query_lower: str) -> bool:
    """Substring match on name, description or any tag.
    
    An empty query matches every item.
    """
    return (
        query_lower in item.name.lower()
        or query_lower in item.description.lower()
        or any(query_lower in tag for tag in item.tags_lower)
    )


class ContentCatalog:
    """Read-only queries over an Index."""
    
    def __init__(self, index: Index):
        self.index = index
    
    def candidates(self, kind: Optional[str | ContentKind] = None) -> Iterable[ContentItem]:
        """Items of `kind` (or all kinds) in canonical order."""
        for k in _kinds_for(kind):
            yield from self.index.items_of(k)
    
    def find_by_name(self, kind: str | ContentKind, name: str) -> Optional[ContentItem]:
        for item in self.index.items_of(ContentKind.parse(kind)):
            if item.name == name:
                return item
        return None
    
    def find_any(self, name: str, kind_hint: Optional[str | ContentKind] = None) -> Optional[ContentItem]:
        """
        Resolve a name across kinds.
        
        The hinted kind is tried first, then the fixed priority
        agent > skill > prompt > instruction > collection.
        """
        if kind_hint:
            found = self.find_by_name(kind_hint, name)
            if found is not None:
                return found
        for kind in DOWNLOAD_PRIORITY:
            found = self.find_by_name(kind, name)
            if found is not None:
                return found
        return None
    
    def search(
        self,
        query: str,
        kind: Optional[str | ContentKind] = None,
        tags: Optional[list[str]] = None,
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> list[ContentItem]:
        """
        Filter by kind, then text, then tags (any of), keeping encounter order.
        
        Results are truncated to `limit` after filtering.
        """
        query_lower = query.lower()
        wanted_tags = {t.lower() for t in tags or [] if isinstance(t, str)}
        
        results = []
        for item in self.candidates(kind):
            if not matches_query(item, query_lower):
                continue
            if wanted_tags and not wanted_tags.intersection(item.tags_lower):
                continue
            results.append(item)
        
        if not limit or limit <= 0:
            limit = DEFAULT_LIMIT
        return results[:limit]
    
    def by_tag(self, tag: str) -> dict[ContentKind, list[ContentItem]]:
        """Every item carrying `tag` (case-insensitive), grouped by kind."""
        return {
            kind: [item for item in self.index.items_of(kind) if item.has_tag(tag)]
            for kind in KIND_ORDER
        }
    
    def recommend(
        self,
        description: str,
        kind: Optional[str | ContentKind] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[ContentItem]:
        """
        Rank items against a free-text description.
        
        Each word scores 3 for a name hit, 2 for a description hit and 1 for
        a tag hit. Items scoring zero are dropped; ties keep index order.
        """
        words = [w for w in description.lower().split() if w]
        scored = []
        for item in self.candidates(kind):
            name = item.name.lower()
            desc = item.description.lower()
            score = 0
            for word in words:
                if word in name:
                    score += 3
                if word in desc:
                    score += 2
                if any(word in tag for tag in item.tags_lower):
                    score += 1
            if score > 0:
                scored.append((score, item))
        scored.sort(key=lambda pair: -pair[0])
        return [item for _, item in scored[: limit if limit > 0 else DEFAULT_LIMIT]]
    
    def counts(self) -> dict[str, int]:
        return {kind.plural: len(self.index.items_of(kind)) for kind in KIND_ORDER}
