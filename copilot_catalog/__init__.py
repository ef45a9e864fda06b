"""
Copilot Catalog
MCP server indexing agents, prompts, instructions, skills and collections
published in an upstream content repository.
"""

__version__ = "0.3.0"
__package_name__ = "copilot-catalog"

__all__ = ["__version__", "__package_name__"]
