"""
Execution Module
Cancellation tokens and in-flight request tracking.
"""

from .cancellation import CancellationToken
from .inflight import InFlightRequest, InFlightRegistry

__all__ = [
    "CancellationToken",
    "InFlightRequest",
    "InFlightRegistry",
]
