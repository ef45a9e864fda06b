"""
Base Tool Classes
Abstract base classes for tool implementations.
"""

import json
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

from jsonschema import Draft7Validator

from copilot_catalog.catalog import (
    CatalogError,
    IndexCache,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    OperationCancelledError,
)
from copilot_catalog.mcp_types import (
    ToolInput, ToolResult, ToolError, ToolContext,
    ToolHandlerResult, ToolValidationResult, ToolValidationError,
    MCPErrorCode, TextContent, ToolCategory, ToolMetadata
)
from copilot_catalog import __version__


class BaseTool(ABC):
    """Abstract base class for all tool implementations."""
    
    def __init__(self, logger, index_cache: IndexCache, metadata: Optional[Dict[str, Any]] = None):
        self.logger = logger
        self.index_cache = index_cache
        
        # Set default metadata values
        default_metadata = {
            'category': ToolCategory.CATALOG,
            'version': __version__,
            'streaming': False,
        }
        
        # Merge with provided metadata
        if metadata:
            default_metadata.update(metadata)
        
        self.metadata = ToolMetadata(**default_metadata)
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        pass
    
    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        pass
    
    @property
    @abstractmethod
    def inputSchema(self) -> Dict[str, Any]:
        """Tool input schema (JSON Schema)."""
        pass
    
    @abstractmethod
    async def execute(self, input: ToolInput, context: ToolContext) -> ToolHandlerResult:
        """Execute the tool with input and context."""
        pass
    
    def checkCancelled(self, context: ToolContext) -> None:
        """Raise OperationCancelledError if the call was cancelled."""
        context.cancellation.raise_if_cancelled()
    
    def validateInput(self, input: Dict[str, Any]) -> ToolValidationResult:
        """Validate tool input against the JSON schema."""
        validator = Draft7Validator(self.inputSchema)
        errors = []
        reported = set()
        for error in sorted(validator.iter_errors(dict(input)), key=lambda e: list(e.path)):
            if error.validator == "required":
                for missing in error.validator_value:
                    if missing in error.instance or missing in reported:
                        continue
                    reported.add(missing)
                    errors.append(ToolValidationError(
                        field=missing,
                        message=f"Missing required argument: {missing}",
                        code="MISSING_REQUIRED_FIELD"
                    ))
            else:
                field = ".".join(str(p) for p in error.path)
                errors.append(ToolValidationError(
                    field=field,
                    message=f"Invalid argument '{field}': {error.message}",
                    code="INVALID_TYPE"
                ))
        
        return ToolValidationResult(valid=len(errors) == 0, errors=errors)
    
    def requireValidInput(self, input: Dict[str, Any]) -> None:
        """Raise InvalidArgumentError listing every validation failure."""
        validation = self.validateInput(input)
        if not validation.valid:
            raise InvalidArgumentError("; ".join(e.message for e in validation.errors))
    
    def createSuccessResult(self, data: Any) -> ToolResult:
        """Create a successful tool result - MCP content format."""
        try:
            if isinstance(data, str):
                text = data
            else:
                text = json.dumps(data, indent=2, default=str, ensure_ascii=False)
            
            text = text.strip()
            
        except (TypeError, ValueError) as e:
            self.logger.warning(f"Failed to serialize tool result: {e}")
            text = json.dumps({"error": "Failed to serialize result"}, indent=2)
        
        return ToolResult(
            content=[TextContent(type="text", text=text)],
            isError=False,
            structuredContent=data if isinstance(data, dict) else None
        )
    
    def createErrorResult(self, error: ToolError) -> ToolResult:
        """Create an error tool result - MCP content format."""
        return ToolResult(
            content=[TextContent(type="text", text=f"Error: {error.message}")],
            isError=True
        )
    
    def success(self, data: Any) -> ToolHandlerResult:
        return ToolHandlerResult(success=True, result=self.createSuccessResult(data))
    
    def failure(self, code: MCPErrorCode, message: str, details: Optional[str] = None) -> ToolHandlerResult:
        error = ToolError(code=code, message=message, details=details)
        return ToolHandlerResult(
            success=False,
            error=error,
            result=self.createErrorResult(error)
        )
    
    async def handleError(self, error: Exception, context: ToolContext) -> ToolHandlerResult:
        """Map a failure onto a tool error result."""
        if isinstance(error, OperationCancelledError):
            self.logger.info(f"Tool {self.name} cancelled (request {context.requestId})")
            return self.failure(MCPErrorCode.CANCELLED, error.reason)
        if isinstance(error, InvalidArgumentError):
            return self.failure(MCPErrorCode.INVALID_INPUT, str(error))
        if isinstance(error, NotFoundError):
            return self.failure(MCPErrorCode.RESOURCE_NOT_FOUND, str(error))
        if isinstance(error, NetworkError):
            self.logger.warning(f"Tool {self.name} network failure: {error}")
            return self.failure(MCPErrorCode.NETWORK_ERROR, str(error))
        if isinstance(error, CatalogError):
            return self.failure(MCPErrorCode.TOOL_EXECUTION_ERROR, str(error))
        
        self.logger.error(f"Tool execution error: {error}")
        return self.failure(MCPErrorCode.INTERNAL_ERROR, f"{self.name} failed: {error}", details=repr(error))
    
    def logExecution(self, context: ToolContext, success: bool):
        """Log tool execution."""
        self.logger.debug(f"Tool executed: {self.name}", extra={
            'tool': self.name,
            'success': success,
            'requestId': context.requestId
        })
