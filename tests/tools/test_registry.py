"""Tests for ToolRegistry."""

from unittest.mock import AsyncMock

import pytest
from mcp.types import Tool as MCPTool

from copilot_catalog.mcp_types import MCPErrorCode, ToolContext, ToolHandlerResult
from copilot_catalog.tools import SearchTool, ToolRegistry, create_registry


@pytest.fixture
def registry(logger, index_cache):
    return create_registry(logger, index_cache)


class TestRegistration:
    """Test registering and listing tools."""
    
    def test_create_registry_registers_all_tools(self, registry):
        assert [tool.name for tool in registry.listTools()] == [
            "search", "download", "refresh_metadata", "load_skill_directory"
        ]
        assert registry.hasTool("search")
        assert not registry.hasTool("explore")
    
    def test_duplicate_registration_rejected(self, logger, index_cache):
        registry = ToolRegistry(logger)
        registry.register(SearchTool(logger, index_cache))
        
        with pytest.raises(ValueError):
            registry.register(SearchTool(logger, index_cache))
    
    def test_register_handler_requires_tool(self, logger):
        with pytest.raises(ValueError):
            ToolRegistry(logger).registerHandler("search", AsyncMock())
    
    def test_tool_schemas(self, registry):
        schemas = registry.getToolSchemas()
        
        assert all(isinstance(schema, MCPTool) for schema in schemas)
        search = next(s for s in schemas if s.name == "search")
        assert search.inputSchema["properties"]["limit"]["type"] == "integer"


@pytest.mark.asyncio
class TestExecution:
    """Test execute() outcomes."""
    
    async def test_execute_success(self, registry, mock_context):
        outcome = await registry.execute("search", {"query": "python"}, mock_context)
        
        assert outcome.success
        assert outcome.execution.status == "completed"
        assert outcome.execution.toolName == "search"
        assert mock_context.toolName == "search"
        assert not outcome.result.isError
    
    async def test_argument_named_get_does_not_break_lookup(self, registry, mock_context):
        outcome = await registry.execute("search", {"query": "python", "get": 1}, mock_context)
        
        assert outcome.success
        assert not outcome.result.isError
    
    async def test_unknown_tool(self, registry, mock_context):
        outcome = await registry.execute("explore", {}, mock_context)
        
        assert not outcome.success
        assert outcome.error.code == MCPErrorCode.TOOL_NOT_FOUND
        assert outcome.result.isError
        assert outcome.execution.status == "failed"
    
    async def test_handler_exception_becomes_internal_error(self, registry, logger, mock_context):
        registry.registerHandler("search", AsyncMock(side_effect=RuntimeError("boom")))
        
        outcome = await registry.execute("search", {"query": "x"}, mock_context)
        
        assert outcome.error.code == MCPErrorCode.INTERNAL_ERROR
        assert "boom" in outcome.error.message
        logger.error.assert_called_once()
    
    async def test_custom_handler_receives_input(self, registry, mock_context):
        handler = AsyncMock(return_value=ToolHandlerResult(success=True))
        registry.registerHandler("download", handler)
        
        await registry.execute("download", {"name": "item"}, mock_context)
        
        tool_input, context = handler.call_args[0]
        assert tool_input["name"] == "item"
        assert context is mock_context
    
    async def test_pre_cancelled_token_skips_fetch(self, registry, reader):
        context = ToolContext(requestId="r1")
        context.cancellation.cancel()
        
        outcome = await registry.execute("load_skill_directory", {"name": "webapp-testing"}, context)
        
        assert outcome.error.code == MCPErrorCode.CANCELLED
        assert reader.calls == []
