"""
MCP Types Module
Types and dataclasses for the MCP server implementation.
"""

from .tools import (
    # Enums
    ToolCategory,
    MCPErrorCode,
    
    # Core types
    TextContent,
    ToolInput,
    ToolContext,
    ToolResult,
    ToolError,
    ToolHandlerResult,
    ToolMetadata,
    
    # Validation
    ToolValidationError,
    ToolValidationResult,
    
    # Execution
    ToolExecution,
    ToolExecutionResult,
    
    # Type aliases
    ToolHandler,
    ProgressCallback,
)

__all__ = [
    # Enums
    "ToolCategory",
    "MCPErrorCode",
    
    # Core types
    "TextContent",
    "ToolInput",
    "ToolContext",
    "ToolResult",
    "ToolError",
    "ToolHandlerResult",
    "ToolMetadata",
    
    # Validation
    "ToolValidationError",
    "ToolValidationResult",
    
    # Execution
    "ToolExecution",
    "ToolExecutionResult",
    
    # Type aliases
    "ToolHandler",
    "ProgressCallback",
]
