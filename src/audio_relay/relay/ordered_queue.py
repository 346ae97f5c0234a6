"""
Debounced ordered queue that coalesces bursts of audio into one batch.
"""
import asyncio
import logging
import time
from bisect import bisect_left
from typing import Callable, Optional

from ..metrics import MetricsCollector
from .dispatcher import RelayDispatcher
from .models import QueuedItem, QueueStats

logger = logging.getLogger(__name__)


class DebouncedOrderedQueue:
    """
    Pending items sorted by sequence key, drained by a single worker.

    An admission starts a drain worker when none is active. The worker waits
    until the quiet interval passes with no new admission, drains everything
    as one batch, hands it to the dispatcher, and exits. Items admitted while
    that batch is being dispatched stay queued until the next admission
    starts a new worker.

    Items, last-arrival time, and the worker flag each have their own lock.
    No lock is held across a sleep or a network call.
    """

    def __init__(
        self,
        dispatcher: RelayDispatcher,
        quiet_interval: float = 3.0,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the queue.

        Args:
            dispatcher: Receives each drained batch
            quiet_interval: Seconds without admissions before a drain may run
            metrics: Optional metrics collector
            clock: Monotonic time source
        """
        self.dispatcher = dispatcher
        self.quiet_interval = quiet_interval
        self._metrics = metrics
        self._clock = clock

        # Parallel lists; _keys mirrors _items for bisect.
        self._items: list[QueuedItem] = []
        self._keys: list[int] = []
        self._items_lock = asyncio.Lock()

        self._last_arrival = 0.0
        self._arrival_lock = asyncio.Lock()

        self._worker_active = False
        self._worker_lock = asyncio.Lock()
        self._worker_task: Optional[asyncio.Task] = None

        # Statistics
        self._items_admitted = 0
        self._items_replaced = 0
        self._batches_dispatched = 0
        self._in_flight = 0

    @property
    def worker_active(self) -> bool:
        return self._worker_active

    @property
    def last_arrival(self) -> float:
        return self._last_arrival

    @property
    def in_flight(self) -> int:
        """Items of the batch currently being dispatched."""
        return self._in_flight

    async def admit(self, file_id: str, sequence_key: int) -> bool:
        """
        Insert an item, or replace the pending item with the same key.

        Refreshes the last-arrival time and starts a drain worker if none is
        active.

        Args:
            file_id: Telegram file id of the audio
            sequence_key: Message id of the source message

        Returns:
            True if an existing entry was replaced
        """
        item = QueuedItem(file_id=file_id, sequence_key=sequence_key)

        async with self._items_lock:
            index = bisect_left(self._keys, sequence_key)
            replaced = index < len(self._keys) and self._keys[index] == sequence_key
            if replaced:
                self._items[index] = item
            else:
                self._keys.insert(index, sequence_key)
                self._items.insert(index, item)
            pending = len(self._items)

        async with self._arrival_lock:
            self._last_arrival = self._clock()

        self._items_admitted += 1
        if replaced:
            self._items_replaced += 1
        if self._metrics:
            self._metrics.record_admission(replaced, pending)

        logger.debug(
            f"Admitted item {sequence_key} ({'replaced' if replaced else 'new'}), {pending} pending",
            extra={"file_id": file_id, "sequence_key": sequence_key},
        )

        async with self._worker_lock:
            if self._worker_active:
                return replaced
            self._worker_active = True
            self._worker_task = asyncio.create_task(self._drain_worker())

        return replaced

    async def drain(self) -> list[QueuedItem]:
        """Remove and return the entire contents in ascending key order."""
        async with self._items_lock:
            batch = self._items
            self._items = []
            self._keys = []
        return batch

    def pending(self) -> list[QueuedItem]:
        """Snapshot of the pending items."""
        return list(self._items)

    async def _quiet_period_elapsed(self) -> bool:
        async with self._arrival_lock:
            elapsed = self._clock() - self._last_arrival
        return elapsed >= self.quiet_interval

    async def _drain_worker(self) -> None:
        """Wait out the burst, dispatch one batch, then exit."""
        logger.debug("Drain worker started")
        try:
            while True:
                await asyncio.sleep(self.quiet_interval)
                if await self._quiet_period_elapsed():
                    break

            batch = await self.drain()
            if not batch:
                logger.debug("Drain worker found an empty queue")
                return

            self._batches_dispatched += 1
            if self._metrics:
                self._metrics.record_batch(len(batch))

            logger.info(
                f"Draining batch of {len(batch)} items",
                extra={"sequence_keys": [item.sequence_key for item in batch]},
            )
            self._in_flight = len(batch)
            await self.dispatcher.dispatch(batch)

        except asyncio.CancelledError:
            logger.info("Drain worker cancelled")
            raise
        except Exception as e:
            logger.error(f"Error in drain worker: {e}", exc_info=True)
        finally:
            self._in_flight = 0
            async with self._worker_lock:
                self._worker_active = False
            logger.debug("Drain worker exiting")

    async def stop(self) -> None:
        """Cancel an in-flight drain worker (process shutdown only)."""
        task = self._worker_task
        if task and not task.done():
            if self._in_flight:
                logger.warning(f"Abandoning in-flight batch of {self._in_flight} items")
            logger.info("Stopping relay queue worker")
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        # A task cancelled before its first step never runs its finally block.
        self._in_flight = 0
        async with self._worker_lock:
            self._worker_active = False

    def stats(self) -> QueueStats:
        """
        Get current queue statistics.

        Returns:
            Queue statistics
        """
        return QueueStats(
            pending=len(self._items),
            worker_active=self._worker_active,
            items_admitted_total=self._items_admitted,
            items_replaced_total=self._items_replaced,
            batches_dispatched_total=self._batches_dispatched,
        )
