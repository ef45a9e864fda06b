"""
Cancellation

Cooperative cancellation token threaded through every tool execution.
Cancelling only flips a flag and wakes waiters; the running operation must
observe it.
"""

import asyncio
from typing import Callable, Optional

from copilot_catalog.catalog.errors import OperationCancelledError


class CancellationToken:
    """Signal shared between the dispatcher and one in-flight operation."""
    
    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None
        self._event: Optional[asyncio.Event] = None
        self._callbacks: list[Callable[[str], None]] = []
    
    @property
    def cancelled(self) -> bool:
        return self._cancelled
    
    @property
    def reason(self) -> Optional[str]:
        return self._reason
    
    def cancel(self, reason: str = "Request cancelled") -> bool:
        """Cancel once. Returns False if already cancelled."""
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)
        return True
    
    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError(self._reason or "Request cancelled")
    
    def add_callback(self, callback: Callable[[str], None]) -> None:
        """Run `callback(reason)` on cancel (immediately if already cancelled)."""
        if self._cancelled:
            callback(self._reason or "Request cancelled")
        else:
            self._callbacks.append(callback)
    
    async def wait(self) -> str:
        """Block until cancelled; returns the reason."""
        if not self._cancelled:
            if self._event is None:
                self._event = asyncio.Event()
            await self._event.wait()
        return self._reason or "Request cancelled"
    
    @classmethod
    def cancelled_token(cls, reason: str = "Request cancelled") -> "CancellationToken":
        token = cls()
        token.cancel(reason)
        return token
