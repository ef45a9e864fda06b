"""
Dispatch Module
JSON-RPC routing, streaming events and cancellation for MCP requests.
"""

from .jsonrpc import (
    JsonRpcError,
    JsonRpcRequest,
    parse_request,
    success_response,
    error_response,
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    RESOURCE_NOT_FOUND,
    REQUEST_CANCELLED,
)
from .events import StreamEvent
from .dispatcher import RequestDispatcher, wants_stream

__all__ = [
    "JsonRpcError",
    "JsonRpcRequest",
    "parse_request",
    "success_response",
    "error_response",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "RESOURCE_NOT_FOUND",
    "REQUEST_CANCELLED",
    "StreamEvent",
    "RequestDispatcher",
    "wants_stream",
]
