"""
Download Tool

Resolve an item name to its download location. Content is not fetched:
clients download from the returned URL directly.
"""

from typing import Any

from copilot_catalog.catalog import ContentCatalog, IndexCache, NotFoundError
from copilot_catalog.mcp_types import (
    ToolCategory,
    ToolContext,
    ToolHandlerResult,
    ToolInput,
)
from copilot_catalog.tools.base import BaseTool
from copilot_catalog.utils import Logger


class DownloadTool(BaseTool):
    """
    Look up download info for one item.
    
    Without a type hint the first match in agent, skill, prompt,
    instruction, collection order wins.
    """
    
    def __init__(self, logger: Logger, index_cache: IndexCache):
        super().__init__(logger, index_cache, {
            'category': ToolCategory.CATALOG,
        })
    
    @property
    def name(self) -> str:
        return "download"
    
    @property
    def description(self) -> str:
        return """Get the download URL for a specific item. The returned URL can be used directly to fetch and save the file content.

REQUIRED: name
OPTIONAL: type (resolves names shared across kinds)

Without type, kinds are tried in order: agent, skill, prompt, instruction, collection."""
    
    @property
    def inputSchema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "The name of the item to download."
                },
                "type": {
                    "type": "string",
                    "enum": ["agent", "prompt", "instruction", "skill", "collection"],
                    "description": "Optional type hint (agent, prompt, instruction, skill, collection) to resolve name collisions."
                }
            },
            "required": ["name"]
        }
    
    async def execute(self, input: ToolInput, context: ToolContext) -> ToolHandlerResult:
        """Execute download lookup."""
        try:
            self.checkCancelled(context)
            self.requireValidInput(input)
            
            name: str = input.get("name")
            kind_hint = input.get("type")
            
            index = await self.index_cache.get()
            self.checkCancelled(context)
            
            item = ContentCatalog(index).find_any(name, kind_hint=kind_hint)
            if item is None:
                raise NotFoundError(f"Item not found: {name}")
            
            self.logExecution(context, success=True)
            return self.success(item.download_info())
        
        except Exception as e:
            return await self.handleError(e, context)
