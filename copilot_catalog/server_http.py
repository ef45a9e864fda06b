#!/usr/bin/env python3
"""
Copilot Catalog MCP Server - HTTP Transport
Runs as a web server speaking JSON-RPC over HTTP.

Endpoints:
- POST /mcp, POST /messages - JSON-RPC (JSON body, or SSE when streaming)
- POST /mcp/cancel          - abort an in-flight tool call by request id
- GET  /health              - liveness, exempt from auth

For local editor integrations use stdio mode instead.
"""

import json
import time
from contextlib import asynccontextmanager
from functools import wraps
from typing import Awaitable, Callable, Optional
from urllib.parse import urlsplit

from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from copilot_catalog import __version__
from copilot_catalog.config import Config, RateLimit
from copilot_catalog.dispatch import PARSE_ERROR, error_response, wants_stream
from copilot_catalog.dispatch.jsonrpc import request_id_of
from copilot_catalog.server import CatalogMCPServer

Endpoint = Callable[[Request], Awaitable[Response]]


class RateLimiter:
    """Fixed-window request counter per client key."""
    
    def __init__(self, limit: RateLimit, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
    
    def allow(self, key: str) -> bool:
        now = self.clock()
        start, count = self._windows.get(key, (now, 0))
        if now - start >= self.limit.window_seconds:
            start, count = now, 0
        if count >= self.limit.max_requests:
            return False
        self._windows[key] = (start, count + 1)
        return True


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def normalize_origin(raw: str) -> str:
    parts = urlsplit(raw)
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return raw


class RequestGuard:
    """Origin allow-list, auth token and rate limit checks, in that order."""
    
    def __init__(self, config: Config):
        self.allowed_origins = list(config.allowed_origins)
        self.auth_token = config.auth_token
        self.limiter = RateLimiter(config.rate_limit) if config.rate_limit else None
    
    def check(self, request: Request, require_auth: bool = True) -> Optional[Response]:
        """Return an error response, or None when the request may proceed."""
        if self.allowed_origins:
            origin = request.headers.get("origin") or request.headers.get("referer")
            if not origin:
                return JSONResponse({"error": "Missing Origin header"}, status_code=403)
            if normalize_origin(origin) not in self.allowed_origins:
                return JSONResponse({"error": "Origin not allowed"}, status_code=403)
        
        if require_auth and self.auth_token:
            header = request.headers.get("authorization", "")
            token = header[len("Bearer "):] if header.startswith("Bearer ") else header
            if token != self.auth_token and request.headers.get("x-api-key") != self.auth_token:
                return JSONResponse({"error": "Unauthorized"}, status_code=401)
        
        if self.limiter is not None and not self.limiter.allow(client_key(request)):
            return JSONResponse({"error": "Too Many Requests"}, status_code=429)
        
        return None


def create_app(server: CatalogMCPServer, config: Optional[Config] = None) -> Starlette:
    """Build the Starlette app around one CatalogMCPServer."""
    config = config or server.config
    guard = RequestGuard(config)
    dispatcher = server.dispatcher
    logger = server.logger
    
    def guarded(require_auth: bool = True) -> Callable[[Endpoint], Endpoint]:
        def decorate(endpoint: Endpoint) -> Endpoint:
            @wraps(endpoint)
            async def wrapper(request: Request) -> Response:
                rejected = guard.check(request, require_auth=require_auth)
                if rejected is not None:
                    return rejected
                try:
                    return await endpoint(request)
                except Exception as e:
                    logger.error(f"HTTP MCP request failed: {e}")
                    return JSONResponse({"error": "Failed to handle MCP request"}, status_code=500)
            return wrapper
        return decorate
    
    @guarded(require_auth=False)
    async def health_check(request: Request) -> Response:
        """Health check endpoint."""
        tool_count = len(server.tool_registry.listTools())
        return PlainTextResponse(
            f"Copilot Catalog MCP Server (HTTP)\n"
            f"Version: {__version__}\n"
            f"Status: Running\n"
            f"Tools: {tool_count}\n"
            f"In flight: {len(dispatcher.inflight)}\n"
            f"MCP endpoint: /mcp\n"
        )
    
    @guarded()
    async def mcp_endpoint(request: Request) -> Response:
        """JSON-RPC over HTTP, answered as JSON or as an SSE stream."""
        try:
            message = json.loads(await request.body())
        except ValueError:
            return JSONResponse(error_response(None, PARSE_ERROR, "Parse error"), status_code=400)
        
        if wants_stream(message, request.headers.get("accept")) and request_id_of(message) is not None:
            stream = dispatcher.stream(message)
            
            async def event_source():
                try:
                    async for event in stream:
                        yield event.to_sse()
                finally:
                    await stream.aclose()
            
            # Disconnects before the first event still release the entry
            return EventSourceResponse(event_source(), background=BackgroundTask(stream.aclose))
        
        response = await dispatcher.handle(message)
        if response is None:
            return Response(status_code=202)
        return JSONResponse(response)
    
    @guarded()
    async def cancel_endpoint(request: Request) -> Response:
        """Cancel an in-flight request: body {"id": ...}."""
        try:
            body = json.loads(await request.body() or b"{}")
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        
        request_id = body.get("id") if isinstance(body, dict) else None
        if request_id is None or request_id == "":
            return JSONResponse({"error": "Missing id"}, status_code=400)
        
        if not dispatcher.cancel(request_id):
            return JSONResponse({"error": "Request not found or already completed"}, status_code=404)
        return JSONResponse({"id": request_id, "status": "cancelled"})
    
    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        await server.aclose()
    
    app = Starlette(
        routes=[
            Route("/health", endpoint=health_check, methods=["GET"]),
            Route("/mcp", endpoint=mcp_endpoint, methods=["POST"]),
            Route("/messages", endpoint=mcp_endpoint, methods=["POST"]),
            Route("/mcp/cancel", endpoint=cancel_endpoint, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.server = server
    return app


async def main(host: Optional[str] = None, port: Optional[int] = None, config_file: Optional[str] = None):
    """Run the HTTP server."""
    import uvicorn
    
    server_instance = CatalogMCPServer.from_config_file(config_file)
    config = server_instance.config
    host = host or config.http_host
    port = port or config.http_port
    app = create_app(server_instance, config)
    
    uvicorn_config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=config.log_level.lower(),
    )
    server = uvicorn.Server(uvicorn_config)
    
    print(f"Copilot Catalog MCP Server (HTTP) starting on http://{host}:{port}")
    print(f"")
    print(f"Endpoints:")
    print(f"  MCP:     http://{host}:{port}/mcp  (alias /messages)")
    print(f"  Cancel:  http://{host}:{port}/mcp/cancel")
    print(f"  Health:  http://{host}:{port}/health")
    
    await server.serve()
