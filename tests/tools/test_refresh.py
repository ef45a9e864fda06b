"""Tests for RefreshMetadataTool."""

import json

import pytest

from conftest import FakeSourceReader
from copilot_catalog.catalog import IndexCache
from copilot_catalog.mcp_types import ToolContext, ToolInput
from copilot_catalog.tools import RefreshMetadataTool


@pytest.mark.asyncio
class TestRefreshMetadataTool:
    """Test forced index refresh."""
    
    async def test_refresh_reports_count(self, logger, index_cache, mock_context, result_data):
        tool = RefreshMetadataTool(logger, index_cache)
        
        result = await tool.execute(ToolInput(), mock_context)
        
        assert result.success
        data = result_data(result)
        assert data["status"] == "success"
        assert data["count"] == 9
        assert data["source"] == "repository"
        assert data["updated"] == "2025-01-01T00:00:00Z"
    
    async def test_refresh_picks_up_new_content(self, logger, repo_config, snapshot, mock_context, result_data):
        reader = FakeSourceReader({"metadata.json": json.dumps(snapshot)})
        cache = IndexCache(reader, repo_config)
        tool = RefreshMetadataTool(logger, cache)
        await cache.get()
        
        snapshot["agents"] = snapshot["agents"][:1]
        reader.files["metadata.json"] = json.dumps(snapshot)
        result = await tool.execute(ToolInput(), mock_context)
        
        assert result_data(result)["count"] == 7
        assert reader.calls == ["metadata.json", "metadata.json"]
    
    async def test_refresh_failure_yields_empty_index(self, logger, repo_config, mock_context, result_data):
        cache = IndexCache(FakeSourceReader(failing={"metadata.json"}), repo_config)
        tool = RefreshMetadataTool(logger, cache)
        
        result = await tool.execute(ToolInput(), mock_context)
        
        assert result.success
        assert result_data(result)["count"] == 0
        assert result_data(result)["source"] == "empty"
    
    async def test_emits_progress(self, logger, index_cache):
        progress = []
        context = ToolContext(requestId="r1", onProgress=progress.append)
        
        await RefreshMetadataTool(logger, index_cache).execute(ToolInput(), context)
        
        assert progress == [{"phase": "refreshing"}, {"phase": "done", "count": 9}]
