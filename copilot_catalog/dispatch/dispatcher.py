"""
Request Dispatcher

Routes JSON-RPC requests to tools, prompts and resources, answering either
with a single response object or with a stream of events. Tool calls are
tracked in an InFlightRegistry so a separate cancel call can abort them.

A failing request never raises out of the dispatcher: every failure is
turned into a JSON-RPC error object.
"""

import asyncio
import logging
from functools import partial
from typing import Any, AsyncGenerator, AsyncIterator, Awaitable, Callable, Optional

from mcp.types import LATEST_PROTOCOL_VERSION

from copilot_catalog import __package_name__, __version__
from copilot_catalog.catalog import InvalidArgumentError, NotFoundError, OperationCancelledError
from copilot_catalog.dispatch import events
from copilot_catalog.dispatch.events import StreamEvent
from copilot_catalog.dispatch.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    REQUEST_CANCELLED,
    RESOURCE_NOT_FOUND,
    JsonRpcError,
    JsonRpcRequest,
    RequestId,
    error_response,
    parse_request,
    request_id_of,
    success_response,
)
from copilot_catalog.execution import CancellationToken, InFlightRegistry, InFlightRequest
from copilot_catalog.mcp_types import MCPErrorCode, ToolContext
from copilot_catalog.prompts import CatalogPrompts
from copilot_catalog.resources import CatalogResources
from copilot_catalog.tools import ToolRegistry

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Request cancelled"
EVENT_STREAM = "text/event-stream"

# Queue markers for the streaming path
_FINISHED = object()
_CLOSED = object()


def wants_stream(message: Any, accept: Optional[str] = None) -> bool:
    """SSE is used when the client accepts event streams or sets params.stream."""
    if accept and EVENT_STREAM in accept.lower():
        return True
    if isinstance(message, dict):
        params = message.get("params")
        return isinstance(params, dict) and params.get("stream") is True
    return False


class ToolCallStream:
    """
    Event stream of one registered tool call.
    
    `aclose()` releases the in-flight entry whether or not the stream was
    ever iterated.
    """
    
    def __init__(self, source: AsyncGenerator[StreamEvent, None], release: Callable[[], None]):
        self._source = source
        self._release = release
    
    def __aiter__(self) -> "ToolCallStream":
        return self
    
    async def __anext__(self) -> StreamEvent:
        return await self._source.__anext__()
    
    async def aclose(self) -> None:
        self._release()
        await self._source.aclose()


class RequestDispatcher:
    """JSON-RPC front door shared by the stdio and HTTP transports."""
    
    def __init__(
        self,
        registry: ToolRegistry,
        prompts: CatalogPrompts,
        resources: CatalogResources,
        server_info: Optional[dict[str, str]] = None,
        inflight: Optional[InFlightRegistry] = None,
    ):
        self.registry = registry
        self.prompts = prompts
        self.resources = resources
        self.server_info = server_info or {"name": __package_name__, "version": __version__}
        self.inflight = inflight or InFlightRegistry()
        self._methods: dict[str, Callable[[dict[str, Any]], Awaitable[Any]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
            "resources/list": self._list_resources,
            "resources/templates/list": self._list_resource_templates,
            "resources/read": self._read_resource,
        }
    
    # =========================================================================
    # Public API
    # =========================================================================
    
    async def handle(self, message: Any) -> Optional[dict[str, Any]]:
        """Answer one request. Notifications return None."""
        try:
            request = parse_request(message)
        except JsonRpcError as e:
            return error_response(request_id_of(message), e.code, e.message, e.data)
        
        if request.is_notification:
            self._notify(request)
            return None
        
        if request.method == "tools/call":
            return await self._handle_tool_call(request)
        return await self._handle_method(request)
    
    def stream(self, message: Any) -> AsyncIterator[StreamEvent]:
        """
        Answer one request as a stream of events.
        
        Progress and partial events arrive in emission order, followed by
        exactly one result or error event and a final done event. Tool calls
        are registered as in-flight before this method returns.
        """
        try:
            request = parse_request(message)
        except JsonRpcError as e:
            return self._single(request_id_of(message), error_response(request_id_of(message), e.code, e.message, e.data))
        
        if request.is_notification:
            self._notify(request)
            return self._single(None, None)
        
        if request.method != "tools/call":
            return self._stream_method(request)
        
        try:
            name, arguments = self._tool_call_params(request.params)
            entry = self._register(request, name)
        except JsonRpcError as e:
            return self._single(request.id, error_response(request.id, e.code, e.message, e.data))
        
        release = partial(self.inflight.release, str(request.id), entry)
        return ToolCallStream(self._stream_tool_call(request, entry, name, arguments, release), release)
    
    def cancel(self, request_id: RequestId, reason: str = CANCELLED_MESSAGE) -> bool:
        """Abort an in-flight call. False when the id is unknown or already settled."""
        return self.inflight.cancel(str(request_id), reason)
    
    # =========================================================================
    # Routing
    # =========================================================================
    
    def _notify(self, request: JsonRpcRequest) -> None:
        if request.method == "notifications/cancelled":
            request_id = request.params.get("requestId")
            if request_id is not None:
                self.cancel(request_id, request.params.get("reason") or CANCELLED_MESSAGE)
        elif request.method == "notifications/initialized":
            logger.debug("Client initialized")
        else:
            logger.debug(f"Ignoring notification: {request.method}")
    
    async def _handle_method(self, request: JsonRpcRequest) -> dict[str, Any]:
        handler = self._methods.get(request.method)
        if handler is None:
            return error_response(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")
        try:
            result = await handler(request.params)
        except JsonRpcError as e:
            return error_response(request.id, e.code, e.message, e.data)
        except InvalidArgumentError as e:
            return error_response(request.id, INVALID_PARAMS, str(e))
        except NotFoundError as e:
            return error_response(request.id, RESOURCE_NOT_FOUND, str(e))
        except OperationCancelledError as e:
            return error_response(request.id, REQUEST_CANCELLED, e.reason)
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method}")
            return error_response(request.id, INTERNAL_ERROR, "Internal error", str(e))
        return success_response(request.id, result)
    
    # =========================================================================
    # Tool calls
    # =========================================================================
    
    def _tool_call_params(self, params: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: name must be a non-empty string")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: arguments must be an object")
        return name, arguments
    
    def _register(self, request: JsonRpcRequest, name: str) -> InFlightRequest:
        try:
            return self.inflight.register(str(request.id), CancellationToken(), tool_name=name)
        except InvalidArgumentError as e:
            raise JsonRpcError(INVALID_REQUEST, str(e)) from e
    
    async def _handle_tool_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        try:
            name, arguments = self._tool_call_params(request.params)
            entry = self._register(request, name)
        except JsonRpcError as e:
            return error_response(request.id, e.code, e.message, e.data)
        
        try:
            return await self._execute_tool(request, entry.token, name, arguments)
        finally:
            self.inflight.release(str(request.id), entry)
    
    async def _execute_tool(
        self,
        request: JsonRpcRequest,
        token: CancellationToken,
        name: str,
        arguments: dict[str, Any],
        on_progress: Optional[Callable[[dict[str, Any]], None]] = None,
        on_partial: Optional[Callable[[dict[str, Any]], None]] = None,
    ) -> dict[str, Any]:
        context = ToolContext(
            requestId=str(request.id),
            toolName=name,
            cancellation=token,
            onProgress=on_progress,
            onPartial=on_partial,
        )
        try:
            outcome = await self.registry.execute(name, arguments, context)
        except Exception as e:
            logger.exception(f"Tool call {name} failed")
            return error_response(request.id, INTERNAL_ERROR, "Internal error", str(e))
        
        if outcome.success and outcome.result is not None:
            return success_response(request.id, outcome.result.to_dict())
        
        error = outcome.error
        if error is not None and error.code is MCPErrorCode.CANCELLED:
            return error_response(request.id, REQUEST_CANCELLED, CANCELLED_MESSAGE)
        if error is not None and error.code is MCPErrorCode.TOOL_NOT_FOUND:
            return error_response(request.id, INVALID_PARAMS, error.message)
        if outcome.result is not None:
            return success_response(request.id, outcome.result.to_dict())
        
        message = error.message if error else "Unknown error"
        return success_response(request.id, {
            "content": [{"type": "text", "text": f"Error: {message}"}],
            "isError": True,
        })
    
    # =========================================================================
    # Streaming
    # =========================================================================
    
    async def _single(self, request_id: Optional[RequestId], response: Optional[dict[str, Any]]) -> AsyncIterator[StreamEvent]:
        if response is not None:
            kind = events.ERROR if "error" in response else events.RESULT
            yield StreamEvent(kind, request_id, response)
        yield StreamEvent(events.DONE, request_id)
    
    async def _stream_method(self, request: JsonRpcRequest) -> AsyncIterator[StreamEvent]:
        response = await self._handle_method(request)
        async for event in self._single(request.id, response):
            yield event
    
    async def _stream_tool_call(
        self,
        request: JsonRpcRequest,
        entry: InFlightRequest,
        name: str,
        arguments: dict[str, Any],
        release: Callable[[], None],
    ) -> AsyncIterator[StreamEvent]:
        rid = request.id
        queue: asyncio.Queue = asyncio.Queue()
        entry.close_stream = lambda: queue.put_nowait(_CLOSED)
        
        # Tools without streaming metadata only deliver the terminal event
        tool = self.registry.get(name)
        streaming = tool is not None and tool.metadata.streaming
        
        def settled(_task: asyncio.Task) -> None:
            release()
            queue.put_nowait(_FINISHED)
        
        task = asyncio.create_task(self._execute_tool(
            request,
            entry.token,
            name,
            arguments,
            on_progress=(lambda p: queue.put_nowait(StreamEvent(events.PROGRESS, rid, p))) if streaming else None,
            on_partial=(lambda p: queue.put_nowait(StreamEvent(events.PARTIAL, rid, p))) if streaming else None,
        ))
        task.add_done_callback(settled)
        
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    yield StreamEvent(events.ERROR, rid, error_response(rid, REQUEST_CANCELLED, CANCELLED_MESSAGE))
                    break
                if item is _FINISHED:
                    response = task.result()
                    kind = events.ERROR if "error" in response else events.RESULT
                    yield StreamEvent(kind, rid, response)
                    break
                yield item
            yield StreamEvent(events.DONE, rid)
        finally:
            if not task.done():
                entry.token.cancel("Stream closed")
            release()
    
    # =========================================================================
    # Methods
    # =========================================================================
    
    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": params.get("protocolVersion") or LATEST_PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "prompts": {"listChanged": False},
                "resources": {"listChanged": False},
            },
            "serverInfo": dict(self.server_info),
        }
    
    async def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}
    
    async def _list_tools(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "tools": [
                tool.model_dump(by_alias=True, exclude_none=True)
                for tool in self.registry.getToolSchemas()
            ]
        }
    
    async def _list_prompts(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"prompts": self.prompts.list_prompts()}
    
    async def _get_prompt(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: name must be a string")
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: arguments must be an object")
        return self.prompts.get_prompt(name, arguments)
    
    async def _list_resources(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": self.resources.list_resources()}
    
    async def _list_resource_templates(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resourceTemplates": self.resources.list_templates()}
    
    async def _read_resource(self, params: dict[str, Any]) -> dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str) or not uri:
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: uri must be a non-empty string")
        return {"contents": [await self.resources.read(uri)]}
