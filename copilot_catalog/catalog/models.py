"""
Catalog Models

Content items (one closed set of kinds) and the immutable Index built from a
metadata snapshot.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Iterator, Mapping, Optional

from copilot_catalog.catalog.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class ContentKind(Enum):
    """Item kinds. Declaration order is the canonical listing order."""
    AGENT = "agent"
    PROMPT = "prompt"
    INSTRUCTION = "instruction"
    SKILL = "skill"
    COLLECTION = "collection"
    
    @property
    def plural(self) -> str:
        return f"{self.value}s"
    
    @classmethod
    def parse(cls, value: str) -> "ContentKind":
        """Accept 'agent', 'agents', 'Agent' ..."""
        if isinstance(value, ContentKind):
            return value
        if not isinstance(value, str):
            raise InvalidArgumentError(f"Invalid content type: {value!r}")
        normalized = value.strip().lower()
        for kind in cls:
            if normalized in (kind.value, kind.plural):
                return kind
        raise InvalidArgumentError(
            f"Unknown content type: {value}. Expected one of: {', '.join(k.value for k in cls)}"
        )


KIND_ORDER: tuple[ContentKind, ...] = tuple(ContentKind)

# Priority used by download when no type hint resolves the name
DOWNLOAD_PRIORITY: tuple[ContentKind, ...] = (
    ContentKind.AGENT,
    ContentKind.SKILL,
    ContentKind.PROMPT,
    ContentKind.INSTRUCTION,
    ContentKind.COLLECTION,
)


def _tags(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(str(t) for t in raw if isinstance(t, str) and t)


def _str(raw: Any) -> str:
    return raw if isinstance(raw, str) else ""


@dataclass(frozen=True)
class ContentItem:
    """Fields shared by every kind."""
    name: str
    description: str = ""
    tags: tuple[str, ...] = ()
    path: str = ""
    url: str = ""
    
    kind: ClassVar[ContentKind]
    
    @property
    def tags_lower(self) -> tuple[str, ...]:
        return tuple(t.lower() for t in self.tags)
    
    def has_tag(self, tag: str) -> bool:
        return tag.lower() in self.tags_lower
    
    def summary(self) -> dict[str, Any]:
        """Short form used in search results."""
        return {
            "name": self.name,
            "description": self.description,
            "type": self.kind.value,
            "tags": list(self.tags),
            "path": self.path,
        }
    
    def download_info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind.value,
            "url": self.url,
            "path": self.path,
            "description": self.description,
        }
    
    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "path": self.path,
            "url": self.url,
            "type": self.kind.value,
        }


@dataclass(frozen=True)
class Agent(ContentItem):
    kind: ClassVar[ContentKind] = ContentKind.AGENT


@dataclass(frozen=True)
class Prompt(ContentItem):
    kind: ClassVar[ContentKind] = ContentKind.PROMPT


@dataclass(frozen=True)
class Instruction(ContentItem):
    kind: ClassVar[ContentKind] = ContentKind.INSTRUCTION


@dataclass(frozen=True)
class Skill(ContentItem):
    files: tuple[str, ...] = ()
    
    kind: ClassVar[ContentKind] = ContentKind.SKILL
    
    @property
    def directory(self) -> str:
        """Skill folder: the path with a trailing SKILL.md removed."""
        path = self.path
        if path.endswith("/SKILL.md"):
            return path[: -len("/SKILL.md")]
        if path.endswith("SKILL.md"):
            return path[: -len("SKILL.md")]
        return path.rstrip("/")
    
    @property
    def file_list(self) -> tuple[str, ...]:
        return self.files or ("SKILL.md",)
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["files"] = list(self.files)
        return data


@dataclass(frozen=True)
class CollectionItem:
    path: str
    kind: ContentKind
    
    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "kind": self.kind.value}


@dataclass(frozen=True)
class CollectionDisplay:
    ordering: Optional[str] = None  # "alpha" | "manual"
    show_badge: bool = False
    
    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"show_badge": self.show_badge}
        if self.ordering:
            data["ordering"] = self.ordering
        return data


@dataclass(frozen=True)
class Collection(ContentItem):
    id: str = ""
    items: tuple[CollectionItem, ...] = ()
    display: Optional[CollectionDisplay] = None
    
    kind: ClassVar[ContentKind] = ContentKind.COLLECTION
    
    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["id"] = self.id
        data["items"] = [i.to_dict() for i in self.items]
        if self.display is not None:
            data["display"] = self.display.to_dict()
        return data


ITEM_TYPES: dict[ContentKind, type[ContentItem]] = {
    ContentKind.AGENT: Agent,
    ContentKind.PROMPT: Prompt,
    ContentKind.INSTRUCTION: Instruction,
    ContentKind.SKILL: Skill,
    ContentKind.COLLECTION: Collection,
}


def _collection_items(raw: Any) -> tuple[CollectionItem, ...]:
    items = []
    for entry in raw if isinstance(raw, list) else []:
        if not isinstance(entry, Mapping) or not isinstance(entry.get("path"), str):
            continue
        try:
            kind = ContentKind.parse(entry.get("kind", ""))
        except InvalidArgumentError:
            logger.debug(f"Skipping collection entry with unknown kind: {entry!r}")
            continue
        items.append(CollectionItem(path=entry["path"], kind=kind))
    return tuple(items)


def _collection_display(raw: Any) -> Optional[CollectionDisplay]:
    if not isinstance(raw, Mapping):
        return None
    ordering = raw.get("ordering")
    return CollectionDisplay(
        ordering=ordering if ordering in ("alpha", "manual") else None,
        show_badge=bool(raw.get("show_badge", False)),
    )


def item_from_dict(kind: ContentKind, data: Any) -> ContentItem:
    """Build the variant for `kind` from one snapshot entry.
    
    Raises ValueError when the entry is not an object or has no name.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"{kind.value} entry must be an object, got {type(data).__name__}")
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"{kind.value} entry is missing a name")
    
    common = {
        "name": name,
        "description": _str(data.get("description")),
        "tags": _tags(data.get("tags")),
        "path": _str(data.get("path")),
        "url": _str(data.get("url")),
    }
    if kind is ContentKind.SKILL:
        files = data.get("files")
        return Skill(**common, files=tuple(f for f in files if isinstance(f, str)) if isinstance(files, list) else ())
    if kind is ContentKind.COLLECTION:
        return Collection(
            **common,
            id=_str(data.get("id")) or name,
            items=_collection_items(data.get("items")),
            display=_collection_display(data.get("display")),
        )
    return ITEM_TYPES[kind](**common)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Index:
    """
    Immutable catalog snapshot: five sequences, one per kind.
    
    Consumers never mutate an Index; refreshing produces a new one.
    """
    agents: tuple[Agent, ...] = ()
    prompts: tuple[Prompt, ...] = ()
    instructions: tuple[Instruction, ...] = ()
    skills: tuple[Skill, ...] = ()
    collections: tuple[Collection, ...] = ()
    last_updated: str = field(default_factory=utc_now_iso)
    version: Optional[str] = None
    generated_at: Optional[str] = None
    source: Optional[str] = None
    
    @classmethod
    def empty(cls, source: Optional[str] = None) -> "Index":
        return cls(last_updated=utc_now_iso(), source=source)
    
    @classmethod
    def from_snapshot(cls, doc: Mapping[str, Any], source: Optional[str] = None) -> "Index":
        """
        Build an Index from a validated snapshot document.
        
        Entries that fail to parse are skipped. Within a kind the first
        occurrence of a name wins; later duplicates are skipped.
        """
        sequences: dict[str, tuple[ContentItem, ...]] = {}
        for kind in KIND_ORDER:
            seen: set[str] = set()
            parsed: list[ContentItem] = []
            raw_items = doc.get(kind.plural) or []
            if not isinstance(raw_items, list):
                logger.warning(f"Snapshot field '{kind.plural}' is not an array; treating as empty")
                raw_items = []
            for position, raw in enumerate(raw_items):
                try:
                    item = item_from_dict(kind, raw)
                except ValueError as e:
                    logger.warning(f"Skipping {kind.plural}[{position}]: {e}")
                    continue
                if item.name in seen:
                    logger.warning(f"Skipping duplicate {kind.value} name: {item.name}")
                    continue
                seen.add(item.name)
                parsed.append(item)
            sequences[kind.plural] = tuple(parsed)
        
        generated_at = doc.get("generatedAt")
        version = doc.get("version")
        return cls(
            **sequences,
            last_updated=generated_at if isinstance(generated_at, str) and generated_at else utc_now_iso(),
            version=str(version) if version is not None else None,
            generated_at=generated_at if isinstance(generated_at, str) else None,
            source=source,
        )
    
    def items_of(self, kind: ContentKind) -> tuple[ContentItem, ...]:
        return getattr(self, kind.plural)
    
    def all_items(self) -> Iterator[ContentItem]:
        for kind in KIND_ORDER:
            yield from self.items_of(kind)
    
    @property
    def total_count(self) -> int:
        return sum(len(self.items_of(kind)) for kind in KIND_ORDER)
    
    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            kind.plural: [item.to_dict() for item in self.items_of(kind)]
            for kind in KIND_ORDER
        }
        data["lastUpdated"] = self.last_updated
        if self.version is not None:
            data["version"] = self.version
        if self.generated_at is not None:
            data["generatedAt"] = self.generated_at
        if self.source is not None:
            data["source"] = self.source
        return data
