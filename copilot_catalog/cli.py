#!/usr/bin/env python3
"""
Copilot Catalog CLI Entry Point

Handles:
- Server modes (stdio, http)
- Browsing the catalog from a terminal (explore, search, get, recommend)
- Forcing an index refresh
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from copilot_catalog import __version__, __package_name__
from copilot_catalog.catalog import (
    Collection,
    ContentCatalog,
    ContentItem,
    ContentKind,
    Index,
    IndexCache,
    InvalidArgumentError,
    Skill,
    create_source_reader,
)
from copilot_catalog.config import Config, ConfigManager
from copilot_catalog.utils.logger import configure_library_logging

ICONS = {
    ContentKind.AGENT: "🤖",
    ContentKind.PROMPT: "💬",
    ContentKind.INSTRUCTION: "📋",
    ContentKind.SKILL: "🧰",
    ContentKind.COLLECTION: "📦",
}
RULE = "─" * 50


def print_version():
    """Print version info."""
    print(f"{__package_name__} v{__version__}")


def load_config(args) -> Config:
    config = ConfigManager.get_instance().load(args.config)
    config.log_level = "DEBUG" if args.verbose else "WARNING"
    configure_library_logging(config.log_level)
    return config


def _kind_label(kind: Optional[str]) -> str:
    if not kind or kind == "all":
        return "items"
    return ContentKind.parse(kind).plural


def _tags(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


# =============================================================================
# Output
# =============================================================================

def print_json(data: Any):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def print_item_list(items: list[ContentItem], heading: str):
    print(f"\n{heading}\n")
    if not items:
        print("  (no results)\n")
        return
    for item in items:
        print(f"{ICONS[item.kind]} {item.name}: {item.description}")
        if item.tags:
            print(f"  Tags: {', '.join(item.tags)}")
        if isinstance(item, Collection):
            print(f"  Items: {len(item.items)}")
        print("")


def print_item_detail(item: ContentItem):
    print(f"\n{item.kind.value}: {item.name}\n")
    print(RULE)
    print(f"{item.description}\n")
    print(f"Tags: {', '.join(item.tags)}\n")
    
    if isinstance(item, Collection) and item.items:
        print(f"Items ({len(item.items)}):\n")
        for position, entry in enumerate(item.items, start=1):
            print(f"  {position}. [{entry.kind.value}] {entry.path}")
        print("")
    
    if isinstance(item, Skill) and item.files:
        print(f"Files ({len(item.files)}):\n")
        for position, path in enumerate(item.files, start=1):
            print(f"  {position}. {path}")
        print("")
    
    print(RULE)
    print("Download URL:")
    print(item.url)
    print("")
    print("Use the URL above to download the file directly.")
    print(RULE)


def print_recommendations(items: list[ContentItem], description: str):
    print(f"\nRecommended for \"{description}\":\n")
    if not items:
        print("  (no matches)\n")
        return
    for position, item in enumerate(items, start=1):
        print(f"{position}. {ICONS[item.kind]} {item.name}: {item.description}")
        if item.tags:
            print(f"   Tags: {', '.join(item.tags)}")
        print("")


# =============================================================================
# Commands
# =============================================================================

async def open_index(args, config: Config) -> tuple[Index, IndexCache]:
    reader = create_source_reader(config.repo)
    cache = IndexCache(reader, config.repo)
    if args.refresh:
        cache.invalidate()
        return await cache.refresh(), cache
    return await cache.get(), cache


async def close_cache(cache: IndexCache):
    await cache.aclose()
    close = getattr(cache.reader, "aclose", None)
    if close is not None:
        await close()


async def run_catalog_command(args, config: Config) -> int:
    index, cache = await open_index(args, config)
    try:
        catalog = ContentCatalog(index)
        
        if args.command == "explore":
            limit = args.limit or max(index.total_count, 1)
            items = catalog.search("", kind=args.type, tags=_tags(args.tags), limit=limit)
            if args.json:
                print_json([item.to_dict() for item in items])
            else:
                print_item_list(items, f"Available {_kind_label(args.type)}:")
            return 0
        
        if args.command == "search":
            items = catalog.search(args.query, kind=args.type, tags=_tags(args.tags), limit=args.limit)
            if args.json:
                print_json({
                    "query": args.query,
                    "count": len(items),
                    "items": [item.summary() for item in items],
                })
            else:
                print_item_list(items, f"Search results for \"{args.query}\" ({_kind_label(args.type)}):")
            return 0
        
        if args.command == "get":
            item = catalog.find_by_name(args.type, args.name)
            if item is None:
                print(f"Not found: {args.type} {args.name}", file=sys.stderr)
                return 1
            if args.json:
                print_json(item.to_dict())
            else:
                print_item_detail(item)
            return 0
        
        if args.command == "recommend":
            items = catalog.recommend(args.description, kind=args.type, limit=args.limit or 10)
            if args.json:
                print_json([item.summary() for item in items])
            else:
                print_recommendations(items, args.description)
            return 0
        
        if args.command == "refresh":
            if not args.refresh:
                index = await cache.refresh()
            summary = {"status": "success", "count": index.total_count, "updated": index.last_updated, "source": index.source}
            if args.json:
                print_json(summary)
            else:
                print(f"Index refreshed from {index.source}: {index.total_count} items")
            return 0
        
        raise InvalidArgumentError(f"Unknown command: {args.command}")
    finally:
        await close_cache(cache)


async def run_server(args):
    if args.http:
        from copilot_catalog.server import run_http
        await run_http(args.host, args.port, args.config)
    else:
        from copilot_catalog.server import run_stdio
        await run_stdio(args.config)


# =============================================================================
# Argument parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=__package_name__,
        description="Copilot Catalog - browse and serve agents, prompts, instructions, skills and collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  copilot-catalog                       Run the MCP server over stdio (default)
  copilot-catalog serve --http          Run the HTTP server on port 8080
  copilot-catalog search python --type agent
  copilot-catalog get skill webapp-testing
  copilot-catalog explore prompts --tags testing

MCP Configuration (mcp.json):

  {
    "mcpServers": {
      "copilot-catalog": {
        "command": "copilot-catalog"
      }
    }
  }
"""
    )
    
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    parser.add_argument("--refresh", action="store_true", help="Ignore cached data and refetch the index")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--config", default=None, help="Path to a JSON config file")
    
    sub = parser.add_subparsers(dest="command")
    
    serve = sub.add_parser("serve", help="Run the MCP server")
    serve.add_argument("--http", action="store_true", help="Run in HTTP mode instead of stdio")
    serve.add_argument("--host", default=None, help="HTTP host (default: 127.0.0.1)")
    serve.add_argument("--port", "-p", type=int, default=None, help="HTTP port (default: 8080)")
    
    explore = sub.add_parser("explore", help="List items, optionally of one type")
    explore.add_argument("type", nargs="?", default="all", help="agents, prompts, instructions, skills, collections or all")
    explore.add_argument("--tags", "-t", default=None, help="Comma-separated tags")
    explore.add_argument("--limit", "-l", type=int, default=None, help="Maximum number of results")
    
    search = sub.add_parser("search", help="Search by keyword")
    search.add_argument("query")
    search.add_argument("--type", "-t", default="all", help="Content type filter")
    search.add_argument("--tags", default=None, help="Comma-separated tags")
    search.add_argument("--limit", "-l", type=int, default=None, help="Maximum number of results (default: 10)")
    
    get = sub.add_parser("get", help="Show one item and its download URL")
    get.add_argument("type")
    get.add_argument("name")
    
    recommend = sub.add_parser("recommend", help="Recommend items for a task description")
    recommend.add_argument("description")
    recommend.add_argument("--type", "-t", default="all", help="Content type filter")
    recommend.add_argument("--limit", "-l", type=int, default=None, help="Maximum number of results (default: 10)")
    
    sub.add_parser("refresh", help="Refetch the index from upstream")
    
    return parser


def main(argv: Optional[list[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    if args.version:
        print_version()
        sys.exit(0)
    
    if args.command in (None, "serve"):
        if args.command is None:
            args.http, args.host, args.port = False, None, None
        asyncio.run(run_server(args))
        return
    
    config = load_config(args)
    try:
        code = asyncio.run(run_catalog_command(args, config))
    except InvalidArgumentError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
