"""
Catalog Resources

Read-only MCP resources over the current Index:

    catalog://metadata                 full index
    catalog://{kind}s/index            one kind, summarised
    catalog://{kind}s/{name}           one item by exact name
    catalog://search/{type}/{query}    unlimited text search
    catalog://tags/{tag}               items carrying a tag, per kind
"""

import json
import logging
from typing import Any
from urllib.parse import unquote

from copilot_catalog.catalog import (
    KIND_ORDER,
    ContentCatalog,
    ContentKind,
    IndexCache,
    InvalidArgumentError,
    NotFoundError,
)
from copilot_catalog.catalog.catalog import matches_query

logger = logging.getLogger(__name__)

SCHEME = "catalog://"
MIME_TYPE = "application/json"


def _content(uri: str, data: Any, pretty: bool = True) -> dict[str, str]:
    return {
        "uri": uri,
        "mimeType": MIME_TYPE,
        "text": json.dumps(data, indent=2 if pretty else None, ensure_ascii=False),
    }


def _index_entry(item) -> dict[str, Any]:
    entry = {
        "name": item.name,
        "description": item.description,
        "tags": list(item.tags),
        "path": item.path,
        "url": item.url,
    }
    if item.kind is ContentKind.COLLECTION:
        entry["items"] = [i.to_dict() for i in item.items]
    return entry


class CatalogResources:
    """Lists and reads `catalog://` resources."""
    
    def __init__(self, index_cache: IndexCache):
        self.index_cache = index_cache
    
    def list_resources(self) -> list[dict[str, Any]]:
        resources = [
            {
                "uri": f"{SCHEME}metadata",
                "name": "Complete Metadata Index",
                "description": "Full index of all agents, prompts, instructions, skills, and collections",
                "mimeType": MIME_TYPE,
            }
        ]
        for kind in KIND_ORDER:
            resources.append({
                "uri": f"{SCHEME}{kind.plural}/index",
                "name": f"{kind.plural.capitalize()} Index",
                "description": f"List of all available {kind.plural}",
                "mimeType": MIME_TYPE,
            })
        return resources
    
    def list_templates(self) -> list[dict[str, Any]]:
        templates = [
            {
                "uriTemplate": f"{SCHEME}{kind.plural}/{{name}}",
                "name": f"{kind.value}-info",
                "description": f"Get metadata and download URL for a specific {kind.value} by name",
                "mimeType": MIME_TYPE,
            }
            for kind in KIND_ORDER
        ]
        templates.append({
            "uriTemplate": f"{SCHEME}search/{{type}}/{{query}}",
            "name": "search-resources",
            "description": "Search resources by type (agents/prompts/instructions/skills/collections/all) and query",
            "mimeType": MIME_TYPE,
        })
        templates.append({
            "uriTemplate": f"{SCHEME}tags/{{tag}}",
            "name": "browse-by-tag",
            "description": "Browse all resources with a specific tag",
            "mimeType": MIME_TYPE,
        })
        return templates
    
    async def read(self, uri: str) -> dict[str, str]:
        """
        Read one resource.
        
        Raises NotFoundError for unknown URIs or names, InvalidArgumentError
        for malformed search URIs.
        """
        logger.info(f"Reading resource: {uri}")
        if not uri.startswith(SCHEME):
            raise NotFoundError(f"Unknown resource URI: {uri}")
        
        rest = uri[len(SCHEME):]
        index = await self.index_cache.get()
        catalog = ContentCatalog(index)
        
        if rest == "metadata":
            return _content(uri, index.to_dict())
        
        head, _, tail = rest.partition("/")
        
        if head == "search":
            return self._read_search(uri, catalog, tail)
        if head == "tags":
            return self._read_tag(uri, catalog, unquote(tail))
        
        try:
            kind = ContentKind.parse(head)
        except InvalidArgumentError:
            raise NotFoundError(f"Unknown resource URI: {uri}") from None
        
        if tail == "index":
            return _content(uri, [_index_entry(item) for item in index.items_of(kind)])
        
        name = unquote(tail)
        if not name:
            raise NotFoundError(f"Unknown resource URI: {uri}")
        item = catalog.find_by_name(kind, name)
        if item is None:
            raise NotFoundError(
                f'{kind.value.capitalize()} not found: "{name}". '
                f"Names must match exactly; try {SCHEME}search/{kind.plural}/{name} "
                f"or {SCHEME}{kind.plural}/index"
            )
        if kind is ContentKind.COLLECTION:
            return _content(uri, item.to_dict())
        return _content(uri, item.download_info(), pretty=False)
    
    def _read_search(self, uri: str, catalog: ContentCatalog, tail: str) -> dict[str, str]:
        kind, sep, query = tail.partition("/")
        if not sep or not kind:
            raise InvalidArgumentError(f"Invalid search URI format. Expected: {SCHEME}search/{{type}}/{{query}}")
        query = unquote(query).lower()
        results = [
            item.to_dict()
            for item in catalog.candidates(kind)
            if matches_query(item, query)
        ]
        return _content(uri, {
            "query": query,
            "type": kind,
            "count": len(results),
            "results": results,
        })
    
    def _read_tag(self, uri: str, catalog: ContentCatalog, tag: str) -> dict[str, str]:
        grouped = catalog.by_tag(tag)
        data: dict[str, Any] = {
            "tag": tag.lower(),
            "totalCount": sum(len(items) for items in grouped.values()),
        }
        for kind, items in grouped.items():
            data[kind.plural] = [item.to_dict() for item in items]
        return _content(uri, data)
