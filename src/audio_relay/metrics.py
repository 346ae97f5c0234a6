"""Prometheus metrics collector."""

import logging
from typing import Optional

from prometheus_client import Counter, Gauge, Histogram

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and exposes Prometheus metrics."""

    def __init__(self):
        """Initialize metrics."""

        # Inbound
        self.updates_total = Counter(
            "audio_relay_updates_total", "Total webhook updates received", ["kind"]
        )

        self.rejected_total = Counter(
            "audio_relay_rejected_total", "Messages rejected from unauthorized chats"
        )

        self.commands_total = Counter(
            "audio_relay_commands_total", "Commands answered", ["command"]
        )

        # Queue
        self.items_admitted_total = Counter(
            "audio_relay_items_admitted_total", "Audio items admitted to the relay queue"
        )

        self.items_replaced_total = Counter(
            "audio_relay_items_replaced_total", "Admissions that overwrote a pending sequence key"
        )

        self.queue_pending = Gauge("audio_relay_queue_pending", "Items waiting in the relay queue")

        self.batch_size = Histogram(
            "audio_relay_batch_size",
            "Number of items drained per batch",
            buckets=[1, 2, 3, 5, 10, 20, 50],
        )

        # Outbound
        self.items_relayed_total = Counter(
            "audio_relay_items_relayed_total", "Audio items posted to the channel"
        )

        self.corrections_total = Counter(
            "audio_relay_corrections_total", "Captions edited after a message id misprediction"
        )

        self.errors_total = Counter(
            "audio_relay_errors_total", "Failed Telegram calls", ["operation"]
        )

    def record_update(self, kind: str) -> None:
        """Record an inbound update."""
        self.updates_total.labels(kind=kind).inc()

    def record_rejection(self) -> None:
        """Record a rejected sender."""
        self.rejected_total.inc()

    def record_command(self, command: str) -> None:
        """Record an answered command."""
        self.commands_total.labels(command=command).inc()

    def record_admission(self, replaced: bool, pending: int) -> None:
        """Record a queue admission."""
        self.items_admitted_total.inc()
        if replaced:
            self.items_replaced_total.inc()
        self.queue_pending.set(pending)

    def record_batch(self, size: int) -> None:
        """Record a drained batch."""
        self.batch_size.observe(size)
        self.queue_pending.set(0)

    def record_relayed(self, corrected: bool) -> None:
        """Record a relayed item."""
        self.items_relayed_total.inc()
        if corrected:
            self.corrections_total.inc()

    def record_error(self, operation: str) -> None:
        """Record a failed Telegram call."""
        self.errors_total.labels(operation=operation).inc()


# Global metrics collector instance
_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
