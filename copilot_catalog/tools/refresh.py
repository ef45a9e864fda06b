"""
Refresh Tool

Force the index to be re-resolved from the upstream sources.
"""

from typing import Any

from copilot_catalog.catalog import IndexCache
from copilot_catalog.mcp_types import (
    ToolCategory,
    ToolContext,
    ToolHandlerResult,
    ToolInput,
)
from copilot_catalog.tools.base import BaseTool
from copilot_catalog.utils import Logger


class RefreshMetadataTool(BaseTool):
    """Drop the cached index and fetch it again from upstream."""
    
    def __init__(self, logger: Logger, index_cache: IndexCache):
        super().__init__(logger, index_cache, {
            'category': ToolCategory.INDEX,
            'streaming': True,
        })
    
    @property
    def name(self) -> str:
        return "refresh_metadata"
    
    @property
    def description(self) -> str:
        return "Force refresh metadata from upstream repository."
    
    @property
    def inputSchema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {},
            "required": []
        }
    
    async def execute(self, input: ToolInput, context: ToolContext) -> ToolHandlerResult:
        """Execute refresh."""
        try:
            self.checkCancelled(context)
            
            context.emitProgress({"phase": "refreshing"})
            index = await self.index_cache.refresh()
            count = index.total_count
            context.emitProgress({"phase": "done", "count": count})
            
            self.logger.info(f"Index refreshed: {count} items from {index.source}")
            self.logExecution(context, success=True)
            return self.success({
                "status": "success",
                "count": count,
                "updated": index.last_updated,
                "source": index.source,
            })
        
        except Exception as e:
            return await self.handleError(e, context)
