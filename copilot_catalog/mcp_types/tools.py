"""
Tool-related types
Types specific to tool implementations: context, results, errors, execution records.
"""

import time
from typing import Dict, Any, List, Optional, Callable, Awaitable
from dataclasses import dataclass, field
from enum import Enum

from copilot_catalog.execution.cancellation import CancellationToken


class ToolCategory(Enum):
    """Tool categories for organization."""
    CATALOG = "catalog"     # Read-only catalog queries (search, download)
    CONTENT = "content"     # Fetches file content (skill bundles)
    INDEX = "index"         # Index maintenance (refresh)


class MCPErrorCode(Enum):
    """Tool error codes."""
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CANCELLED = "CANCELLED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TOOL_EXECUTION_ERROR = "TOOL_EXECUTION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class TextContent:
    """Text content for tool results - MCP content format."""
    type: str
    text: str


class ToolInput(dict):
    """Tool input data. Arguments are read by key, never as attributes."""


ProgressCallback = Callable[[Dict[str, Any]], None]


@dataclass
class ToolContext:
    """Tool execution context.
    
    Carries the cancellation token for this call and the optional progress
    and partial-result emitters supplied by the transport.
    """
    requestId: str
    timestamp: float = field(default_factory=time.time)
    toolName: Optional[str] = None
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    onProgress: Optional[ProgressCallback] = None
    onPartial: Optional[ProgressCallback] = None
    
    def emitProgress(self, payload: Dict[str, Any]) -> None:
        if self.onProgress is not None:
            self.onProgress(payload)
    
    def emitPartial(self, payload: Dict[str, Any]) -> None:
        if self.onPartial is not None:
            self.onPartial(payload)


@dataclass
class ToolResult:
    """Tool execution result - MCP content format."""
    content: List[TextContent]
    isError: bool = False
    structuredContent: Optional[Dict[str, Any]] = None
    
    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "content": [{"type": c.type, "text": c.text} for c in self.content],
        }
        if self.structuredContent is not None:
            data["structuredContent"] = self.structuredContent
        if self.isError:
            data["isError"] = True
        return data


@dataclass
class ToolError:
    """Tool error information."""
    code: MCPErrorCode
    message: str
    details: Optional[str] = None


@dataclass
class ToolHandlerResult:
    """Tool handler result."""
    success: bool
    result: Optional[ToolResult] = None
    error: Optional[ToolError] = None


@dataclass
class ToolMetadata:
    """Tool metadata."""
    category: ToolCategory
    version: str
    streaming: bool = False
    description: Optional[str] = None


@dataclass
class ToolValidationError:
    """Tool validation error."""
    field: str
    message: str
    code: str


@dataclass
class ToolValidationResult:
    """Tool validation result."""
    valid: bool
    errors: List[ToolValidationError] = field(default_factory=list)


@dataclass
class ToolExecution:
    """Tool execution record."""
    id: str
    toolName: str
    input: Dict[str, Any]
    context: ToolContext
    startTime: str
    status: str
    endTime: Optional[str] = None
    duration: Optional[int] = None
    result: Optional[ToolResult] = None
    error: Optional[ToolError] = None


@dataclass
class ToolExecutionResult:
    """Tool execution result."""
    execution: ToolExecution
    success: bool
    result: Optional[ToolResult] = None
    error: Optional[ToolError] = None


# Type alias for tool handlers
ToolHandler = Callable[[Dict[str, Any], ToolContext], Awaitable[ToolHandlerResult]]
