"""
Search Tool

Find catalog items by keyword, type and tags.
"""

from typing import Any

from copilot_catalog.catalog import ContentCatalog, DEFAULT_LIMIT, IndexCache
from copilot_catalog.mcp_types import (
    ToolCategory,
    ToolContext,
    ToolHandlerResult,
    ToolInput,
)
from copilot_catalog.tools.base import BaseTool
from copilot_catalog.utils import Logger

KIND_CHOICES = ["agent", "prompt", "instruction", "skill", "collection", "all"]


class SearchTool(BaseTool):
    """
    Search agents, prompts, instructions, skills and collections.
    
    Matching is a case-insensitive substring test on name, description and
    tags. An empty query lists everything (truncated to `limit`).
    """
    
    def __init__(self, logger: Logger, index_cache: IndexCache):
        super().__init__(logger, index_cache, {
            'category': ToolCategory.CATALOG,
            'streaming': True,
        })
    
    @property
    def name(self) -> str:
        return "search"
    
    @property
    def description(self) -> str:
        return """Search for content (agents, prompts, instructions, skills, collections).

REQUIRED: query
OPTIONAL: type, tags, limit (default 10)

- query matches name, description or any tag (case-insensitive substring)
- query="" lists everything, useful with type to browse one kind
- tags keeps only items carrying at least one of the given tags

Examples:
- search("python")
- search("testing", type="skill")
- search("", type="agent", limit=50)
- search("react", tags=["frontend"])"""
    
    @property
    def inputSchema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The keyword to search for."
                },
                "type": {
                    "type": "string",
                    "enum": KIND_CHOICES,
                    "description": "Optional content type filter (agent, prompt, instruction, skill, collection, all)."
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter by tags."
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "description": "Maximum number of results to return. Default is 10."
                }
            },
            "required": ["query"]
        }
    
    async def execute(self, input: ToolInput, context: ToolContext) -> ToolHandlerResult:
        """Execute search."""
        try:
            self.checkCancelled(context)
            self.requireValidInput(input)
            
            query: str = input.get("query")
            kind = input.get("type") or "all"
            tags = input.get("tags") or []
            limit = int(input.get("limit") or DEFAULT_LIMIT)
            
            context.emitProgress({"phase": "searching"})
            index = await self.index_cache.get()
            self.checkCancelled(context)
            
            items = ContentCatalog(index).search(query, kind=kind, tags=tags, limit=limit)
            context.emitProgress({"phase": "done", "count": len(items)})
            
            self.logExecution(context, success=True)
            return self.success({
                "query": query,
                "count": len(items),
                "items": [item.summary() for item in items],
            })
        
        except Exception as e:
            return await self.handleError(e, context)
