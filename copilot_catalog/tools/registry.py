"""
Tool Registry
Manages tool registration, discovery, and execution.
"""

import itertools
import time
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

from mcp.types import Tool as MCPTool

from copilot_catalog.catalog import IndexCache
from copilot_catalog.mcp_types import (
    ToolHandler, ToolContext, ToolError, ToolInput,
    ToolExecution, ToolExecutionResult, MCPErrorCode, ToolResult, TextContent
)
from copilot_catalog.tools.base import BaseTool
from copilot_catalog.tools.download import DownloadTool
from copilot_catalog.tools.refresh import RefreshMetadataTool
from copilot_catalog.tools.search import SearchTool
from copilot_catalog.tools.skill_bundle import LoadSkillDirectoryTool

_execution_ids = itertools.count(1)


class ToolRegistry:
    """Tool Registry Implementation."""
    
    def __init__(self, logger):
        self.logger = logger
        self.tools: Dict[str, BaseTool] = {}
        self.handlers: Dict[str, ToolHandler] = {}
    
    def register(self, tool: BaseTool) -> None:
        """Register a tool; its execute method becomes the default handler."""
        if tool.name in self.tools:
            raise ValueError(f"Tool {tool.name} is already registered")
        
        self.tools[tool.name] = tool
        self.handlers[tool.name] = tool.execute
        self.logger.info(f"Tool registered: {tool.name}")
    
    def registerHandler(self, toolName: str, handler: ToolHandler) -> None:
        """Replace the handler of a registered tool."""
        if toolName not in self.tools:
            raise ValueError(f"Tool {toolName} not found in registry")
        
        self.handlers[toolName] = handler
        self.logger.debug(f"Tool handler registered: {toolName}")
    
    def get(self, toolName: str) -> Optional[BaseTool]:
        """Get a tool by name."""
        return self.tools.get(toolName)
    
    def listTools(self) -> List[BaseTool]:
        """List all registered tools."""
        return list(self.tools.values())
    
    def hasTool(self, toolName: str) -> bool:
        """Check if a tool is registered."""
        return toolName in self.tools
    
    async def execute(self, toolName: str, input: Dict[str, Any], context: ToolContext) -> ToolExecutionResult:
        """
        Execute a tool with input and context.
        
        Never raises: unknown tools and unexpected handler exceptions come
        back as failed results.
        """
        context.toolName = toolName
        execution = ToolExecution(
            id=f"exec_{next(_execution_ids)}",
            toolName=toolName,
            input=input,
            context=context,
            startTime=datetime.now(timezone.utc).isoformat(),
            status='running'
        )
        started = time.monotonic()
        
        handler = self.handlers.get(toolName)
        if handler is None:
            error = ToolError(code=MCPErrorCode.TOOL_NOT_FOUND, message=f"Unknown tool: {toolName}")
            return self._finish(execution, started, success=False, error=error)
        
        try:
            result = await handler(ToolInput(**(input or {})), context)
        except Exception as e:
            self.logger.error(f"Tool {toolName} raised: {e}")
            error = ToolError(code=MCPErrorCode.INTERNAL_ERROR, message=f"{toolName} failed: {e}", details=repr(e))
            return self._finish(execution, started, success=False, error=error)
        
        return self._finish(execution, started, success=result.success, result=result.result, error=result.error)
    
    def getToolSchemas(self) -> List[MCPTool]:
        """Get tool schemas for MCP protocol - returns proper MCP Tool objects."""
        return [
            MCPTool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.inputSchema
            )
            for tool in self.listTools()
        ]
    
    def _finish(
        self,
        execution: ToolExecution,
        started: float,
        success: bool,
        result: Optional[ToolResult] = None,
        error: Optional[ToolError] = None,
    ) -> ToolExecutionResult:
        execution.status = 'completed' if success else 'failed'
        execution.endTime = datetime.now(timezone.utc).isoformat()
        execution.duration = int((time.monotonic() - started) * 1000)
        if error is not None and result is None:
            result = ToolResult(content=[TextContent(type="text", text=f"Error: {error.message}")], isError=True)
        execution.result = result
        execution.error = error
        
        self.logger.debug(f"Tool {execution.toolName} {execution.status} in {execution.duration}ms")
        return ToolExecutionResult(
            execution=execution,
            success=success,
            result=result,
            error=error
        )


def create_registry(logger, index_cache: IndexCache) -> ToolRegistry:
    """Registry holding the four catalog tools."""
    registry = ToolRegistry(logger)
    for tool_class in (SearchTool, DownloadTool, RefreshMetadataTool, LoadSkillDirectoryTool):
        registry.register(tool_class(logger, index_cache))
    return registry
