"""
Stream events for SSE delivery.

Each event is wrapped in the envelope `{"event", "requestId", "payload"}`.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from copilot_catalog.dispatch.jsonrpc import RequestId

PROGRESS = "progress"
PARTIAL = "partial"
RESULT = "result"
ERROR = "error"
DONE = "done"


@dataclass(frozen=True)
class StreamEvent:
    event: str
    request_id: Optional[RequestId]
    payload: Optional[dict[str, Any]] = None
    
    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "requestId": self.request_id,
            "payload": self.payload,
        }
    
    def to_sse(self) -> dict[str, str]:
        """Mapping accepted by sse_starlette's EventSourceResponse."""
        return {
            "event": self.event,
            "data": json.dumps(self.to_dict(), ensure_ascii=False, default=str),
        }
