"""
Tools Module

The 4 MCP tools for the catalog:
- search: Find items by keyword, type and tags
- download: Resolve an item to its download URL
- refresh_metadata: Re-fetch the index from upstream
- load_skill_directory: Fetch every file of a skill
"""

from .base import BaseTool
from .registry import ToolRegistry, create_registry

# The 4 tools
from .search import SearchTool
from .download import DownloadTool
from .refresh import RefreshMetadataTool
from .skill_bundle import LoadSkillDirectoryTool

__all__ = [
    "BaseTool",
    "ToolRegistry",
    "create_registry",
    # The 4 tools
    "SearchTool",
    "DownloadTool",
    "RefreshMetadataTool",
    "LoadSkillDirectoryTool",
]
