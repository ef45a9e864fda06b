"""
In-Flight Requests

Registry of cancellable calls, keyed by request id. Every mutation is a
plain dict operation with no await in between, so check-and-act on one id
is atomic with respect to other tasks on the event loop.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from copilot_catalog.catalog.errors import InvalidArgumentError
from copilot_catalog.execution.cancellation import CancellationToken

logger = logging.getLogger(__name__)


@dataclass
class InFlightRequest:
    request_id: str
    token: CancellationToken
    close_stream: Optional[Callable[[], None]] = None
    tool_name: Optional[str] = None


class InFlightRegistry:
    """request id -> InFlightRequest for calls that have not settled."""
    
    def __init__(self):
        self._requests: dict[str, InFlightRequest] = {}
    
    def register(
        self,
        request_id: str,
        token: Optional[CancellationToken] = None,
        tool_name: Optional[str] = None,
    ) -> InFlightRequest:
        """Track a new call. Ids are unique among outstanding requests only."""
        request_id = str(request_id)
        if request_id in self._requests:
            raise InvalidArgumentError(f"Request id already in flight: {request_id}")
        entry = InFlightRequest(request_id=request_id, token=token or CancellationToken(), tool_name=tool_name)
        self._requests[request_id] = entry
        logger.debug(f"Request registered: {request_id}")
        return entry
    
    def cancel(self, request_id: str, reason: str = "Request cancelled") -> bool:
        """Abort, close any stream and forget. False if the id is unknown."""
        entry = self._requests.pop(str(request_id), None)
        if entry is None:
            return False
        entry.token.cancel(reason)
        if entry.close_stream is not None:
            entry.close_stream()
        logger.info(f"Request cancelled: {entry.request_id} ({entry.tool_name or 'unknown'})")
        return True
    
    def release(self, request_id: str, entry: Optional[InFlightRequest] = None) -> None:
        """Forget a settled request. Safe to call after cancel.
        
        When `entry` is given, only that exact registration is removed, so a
        late release never drops a newer request that reused the id.
        """
        request_id = str(request_id)
        current = self._requests.get(request_id)
        if current is None:
            return
        if entry is not None and current is not entry:
            return
        del self._requests[request_id]
    
    def __contains__(self, request_id: object) -> bool:
        return str(request_id) in self._requests
    
    def __len__(self) -> int:
        return len(self._requests)
