#!/usr/bin/env python3
"""
Copilot Catalog MCP Server
Main server implementation following proper MCP architecture.
"""

import argparse
import asyncio
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.server.models import InitializationOptions
from mcp.server.lowlevel import NotificationOptions
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp import types
from pydantic import AnyUrl

from copilot_catalog import __version__, __package_name__
from copilot_catalog.catalog import IndexCache, SourceReader, create_source_reader
from copilot_catalog.config import Config, ConfigManager
from copilot_catalog.dispatch import RequestDispatcher
from copilot_catalog.prompts import CatalogPrompts
from copilot_catalog.resources import CatalogResources
from copilot_catalog.tools import create_registry
from copilot_catalog.utils import Logger
from copilot_catalog.utils.logger import configure_library_logging


class CatalogMCPServer:
    """Main MCP Server for the Copilot Catalog."""
    
    def __init__(
        self,
        config: Optional[Config] = None,
        reader: Optional[SourceReader] = None,
        index_cache: Optional[IndexCache] = None,
    ):
        self.config = config or ConfigManager.get_instance().get()
        
        # Initialize logger
        self.logger = Logger(name=__package_name__, level=self.config.log_level)
        configure_library_logging(self.config.log_level)
        
        # Content pipeline: reader -> index cache -> tools/prompts/resources
        self.reader = reader or create_source_reader(self.config.repo)
        self.index_cache = index_cache or IndexCache(self.reader, self.config.repo)
        self.tool_registry = create_registry(self.logger, self.index_cache)
        self.prompts = CatalogPrompts()
        self.resources = CatalogResources(self.index_cache)
        self.dispatcher = RequestDispatcher(self.tool_registry, self.prompts, self.resources)
        
        # Initialize MCP Server
        self.server = Server(__package_name__)
        self._setup_handlers()
    
    @classmethod
    def from_config_file(cls, config_file: Optional[str] = None) -> "CatalogMCPServer":
        """Load configuration (env, .env, optional JSON file) and build a server."""
        return cls(ConfigManager.get_instance().load(config_file))
    
    def _setup_handlers(self):
        """Set up MCP protocol request handlers using decorators."""
        
        @self.server.list_tools()
        async def handle_list_tools() -> list[types.Tool]:
            """List available tools."""
            return self.tool_registry.getToolSchemas()
        
        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> list[types.TextContent]:
            """Execute a tool through the dispatcher so it is cancellable by request id."""
            request_id = str(self.server.request_context.request_id)
            response = await self.dispatcher.handle({
                "jsonrpc": "2.0",
                "id": request_id,
                "method": "tools/call",
                "params": {"name": name, "arguments": arguments or {}},
            })
            
            if "error" in response:
                raise RuntimeError(response["error"]["message"])
            
            result = response["result"]
            texts = [item["text"] for item in result.get("content", [])]
            if result.get("isError"):
                raise RuntimeError("\n".join(texts) or f"Tool {name} failed")
            return [types.TextContent(type="text", text=text) for text in texts]
        
        @self.server.list_prompts()
        async def handle_list_prompts() -> list[types.Prompt]:
            return [types.Prompt.model_validate(p) for p in self.prompts.list_prompts()]
        
        @self.server.get_prompt()
        async def handle_get_prompt(name: str, arguments: dict[str, str] | None = None) -> types.GetPromptResult:
            return types.GetPromptResult.model_validate(self.prompts.get_prompt(name, arguments))
        
        @self.server.list_resources()
        async def handle_list_resources() -> list[types.Resource]:
            return [types.Resource.model_validate(r) for r in self.resources.list_resources()]
        
        @self.server.list_resource_templates()
        async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
            return [types.ResourceTemplate.model_validate(t) for t in self.resources.list_templates()]
        
        @self.server.read_resource()
        async def handle_read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
            content = await self.resources.read(str(uri))
            return [ReadResourceContents(content=content["text"], mime_type=content["mimeType"])]
    
    async def aclose(self) -> None:
        """Release network clients held by the source reader and index cache."""
        await self.index_cache.aclose()
        close = getattr(self.reader, "aclose", None)
        if close is not None:
            await close()
    
    async def start(self):
        """Start the MCP server over stdio."""
        try:
            tool_count = len(self.tool_registry.listTools())
            self.logger.info(f"Registered {tool_count} tools")
            
            # Create transport and run server
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=__package_name__,
                        server_version=__version__,
                        capabilities=self.server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={}
                        ),
                    ),
                )
        
        except Exception as e:
            self.logger.error(f"Failed to start server: {e}")
            raise
        finally:
            await self.aclose()


async def run_stdio(config_file: Optional[str] = None):
    """Run in stdio mode (for editor integrations)."""
    server = CatalogMCPServer.from_config_file(config_file)
    await server.start()


async def run_http(host: Optional[str] = None, port: Optional[int] = None, config_file: Optional[str] = None):
    """Run in HTTP mode. Delegates to server_http.py (Starlette + uvicorn)."""
    from copilot_catalog.server_http import main as http_main
    await http_main(host=host, port=port, config_file=config_file)


def main():
    parser = argparse.ArgumentParser(description="Copilot Catalog MCP Server")
    parser.add_argument("--stdio", action="store_true", help="Run in stdio mode")
    parser.add_argument("--http", action="store_true", help="Run in HTTP mode")
    parser.add_argument("--host", default=None, help="HTTP host")
    parser.add_argument("--port", type=int, default=None, help="HTTP port")
    parser.add_argument("--config", default=None, help="JSON config file")
    args = parser.parse_args()
    
    if args.http:
        asyncio.run(run_http(args.host, args.port, args.config))
    else:
        asyncio.run(run_stdio(args.config))


if __name__ == "__main__":
    main()
