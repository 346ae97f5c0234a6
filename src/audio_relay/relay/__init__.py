"""
Relay queue for Audio Relay.

Coalesces bursts of admitted audio, then posts them to the channel in order.
"""

from .dispatcher import RelayDispatcher
from .models import QueuedItem, QueueStats, RelayResult
from .ordered_queue import DebouncedOrderedQueue
from .sequence import SequenceTracker

__all__ = [
    "DebouncedOrderedQueue",
    "QueuedItem",
    "QueueStats",
    "RelayDispatcher",
    "RelayResult",
    "SequenceTracker",
]
