"""
Relay dispatcher: posts drained batches to the destination channel.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from ..metrics import MetricsCollector
from ..telegram.interface import BotInterface, ChatId, TelegramError
from .models import QueuedItem, RelayResult
from .sequence import SequenceTracker

logger = logging.getLogger(__name__)


class RelayDispatcher:
    """
    Sends each item of a batch to the channel, paced and in order.

    Every caption links to the post it belongs to. Telegram assigns the id
    only after the send, so the caption uses the predicted id (last confirmed
    + 1) and is edited once if Telegram assigned something else.
    """

    def __init__(
        self,
        bot: BotInterface,
        channel_id: ChatId,
        channel_link: str,
        tracker: SequenceTracker,
        caption_text: str = "Listen",
        pacing_delay: float = 1.0,
        metrics: Optional[MetricsCollector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the dispatcher.

        Args:
            bot: Telegram client used for send and edit calls
            channel_id: Destination channel
            channel_link: Base URL of public posts in the channel
            tracker: Last confirmed channel message id
            caption_text: Link text placed before the post number
            pacing_delay: Seconds between consecutive sends
            metrics: Optional metrics collector
            sleep: Awaitable used for pacing
        """
        self.bot = bot
        self.channel_id = channel_id
        self.channel_link = channel_link.rstrip("/")
        self.tracker = tracker
        self.caption_text = caption_text
        self.pacing_delay = pacing_delay
        self._metrics = metrics
        self._sleep = sleep

    def build_caption(self, message_id: int) -> str:
        """Markdown caption linking to the channel post with the given id."""
        return f"[{self.caption_text} #{message_id}]({self.channel_link}/{message_id})"

    async def dispatch(self, batch: Sequence[QueuedItem]) -> list[RelayResult]:
        """
        Relay a batch in ascending sequence key order.

        Sends never overlap; the pacing delay separates consecutive items and
        is not applied after the last one.

        Args:
            batch: Drained items, already sorted by sequence key

        Returns:
            One result per item
        """
        results = []
        for index, item in enumerate(batch):
            if index > 0 and self.pacing_delay > 0:
                await self._sleep(self.pacing_delay)
            results.append(await self._relay_item(item))

        relayed = sum(1 for r in results if r.success)
        logger.info(f"Dispatched batch: {relayed}/{len(results)} items relayed")
        return results

    async def _relay_item(self, item: QueuedItem) -> RelayResult:
        predicted = self.tracker.predict()
        result = RelayResult(item=item, predicted=predicted)

        try:
            sent = await self.bot.send_audio(
                self.channel_id,
                item.file_id,
                caption=self.build_caption(predicted),
            )
        except TelegramError as e:
            # Item already left the queue; it is not retried.
            logger.error(
                f"Failed to relay audio: {e}",
                extra={"file_id": item.file_id, "sequence_key": item.sequence_key},
            )
            result.error = str(e)
            if self._metrics:
                self._metrics.record_error("send_audio")
            return result

        result.actual = sent.message_id

        if sent.message_id != predicted:
            logger.info(
                f"Predicted message id {predicted} but got {sent.message_id}, correcting caption",
                extra={"sequence_key": item.sequence_key},
            )
            result.corrected = True
            try:
                await self.bot.edit_caption(
                    self.channel_id,
                    sent.message_id,
                    self.build_caption(sent.message_id),
                )
            except TelegramError as e:
                logger.error(
                    f"Failed to correct caption of message {sent.message_id}: {e}",
                    extra={"file_id": item.file_id, "sequence_key": item.sequence_key},
                )
                result.error = str(e)
                if self._metrics:
                    self._metrics.record_error("edit_caption")

        self.tracker.confirm(sent.message_id)

        if self._metrics:
            self._metrics.record_relayed(result.corrected)

        logger.debug("Relayed item", extra=result.to_dict())
        return result
