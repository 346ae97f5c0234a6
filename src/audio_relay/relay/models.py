"""
Data models for the relay queue.
"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class QueuedItem:
    """An audio waiting to be relayed, ordered by its source message id."""

    file_id: str
    sequence_key: int


@dataclass
class RelayResult:
    """Outcome of relaying one item."""

    item: QueuedItem
    predicted: int
    actual: Optional[int] = None
    corrected: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.actual is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {
            "file_id": self.item.file_id,
            "sequence_key": self.item.sequence_key,
            "predicted": self.predicted,
            "actual": self.actual,
            "corrected": self.corrected,
        }
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class QueueStats:
    """Statistics about the relay queue."""

    pending: int
    worker_active: bool
    items_admitted_total: int
    items_replaced_total: int
    batches_dispatched_total: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "pending": self.pending,
            "worker_active": self.worker_active,
            "items_admitted_total": self.items_admitted_total,
            "items_replaced_total": self.items_replaced_total,
            "batches_dispatched_total": self.batches_dispatched_total,
        }
