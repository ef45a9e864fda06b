"""
JSON-RPC 2.0 envelope handling.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
RESOURCE_NOT_FOUND = -32002
REQUEST_CANCELLED = -32800

RequestId = Union[str, int]


class JsonRpcError(Exception):
    """Protocol-level failure carried back to the caller as an error object."""
    
    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
    
    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


@dataclass
class JsonRpcRequest:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: Optional[RequestId] = None
    
    @property
    def is_notification(self) -> bool:
        return self.id is None


def request_id_of(message: Any) -> Optional[RequestId]:
    """Best-effort id for error replies to envelopes that failed validation."""
    if isinstance(message, dict):
        rid = message.get("id")
        if isinstance(rid, (str, int)) and not isinstance(rid, bool):
            return rid
    return None


def parse_request(message: Any) -> JsonRpcRequest:
    """Validate a decoded JSON-RPC request. Raises JsonRpcError(INVALID_REQUEST)."""
    if not isinstance(message, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: expected a JSON object")
    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: jsonrpc must be \"2.0\"")
    
    method = message.get("method")
    if not isinstance(method, str) or not method:
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: method must be a non-empty string")
    
    params = message.get("params")
    if params is None:
        params = {}
    elif not isinstance(params, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: params must be an object")
    
    rid = message.get("id")
    if "id" in message and rid is not None:
        if isinstance(rid, bool) or not isinstance(rid, (str, int)):
            raise JsonRpcError(INVALID_REQUEST, "Invalid Request: id must be a string or integer")
    
    return JsonRpcRequest(method=method, params=params, id=rid)


def success_response(request_id: Optional[RequestId], result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: Optional[RequestId], code: int, message: str, data: Any = None) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": JsonRpcError(code, message, data).to_dict(),
    }
