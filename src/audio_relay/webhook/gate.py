"""Admission gate: turns webhook updates into replies, queue admissions, and cleanup."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import ValidationError

from ..metrics import MetricsCollector
from ..relay.ordered_queue import DebouncedOrderedQueue
from ..telegram.interface import BotInterface, TelegramError
from .models import Message, Update

logger = logging.getLogger(__name__)

DEFAULT_COMMANDS = {
    "/start": "Hi! Send or forward audio files here and they will be posted to the channel in order.",
    "/help": (
        "Forward any number of audio files. Once they stop arriving for a few seconds, "
        "they are posted to the channel in the order you sent them."
    ),
}

REJECTION_TEXT = "Sorry {name}, this bot only accepts audio from its owner."


@dataclass(frozen=True)
class CommandMessage:
    """Message whose text is exactly a known command."""

    message: Message
    command: str


@dataclass(frozen=True)
class AudioMessage:
    """Message carrying an audio attachment."""

    message: Message
    file_id: str


@dataclass(frozen=True)
class OtherMessage:
    """Any other message; it is only cleaned up."""

    message: Message


@dataclass(frozen=True)
class NonMessage:
    """Update that is not a new message, or a payload that failed validation."""

    kind: str


InboundEvent = Union[CommandMessage, AudioMessage, OtherMessage, NonMessage]


class AdmissionGate:
    """Handles inbound updates from the single authorized chat."""

    def __init__(
        self,
        bot: BotInterface,
        queue: DebouncedOrderedQueue,
        authorized_chat_id: int,
        commands: Optional[dict[str, str]] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the gate.

        Args:
            bot: Telegram client for replies and deletions
            queue: Relay queue receiving audio admissions
            authorized_chat_id: Only chat allowed to drive the bot
            commands: Command literal to canned reply
            metrics: Optional metrics collector
        """
        self.bot = bot
        self.queue = queue
        self.authorized_chat_id = authorized_chat_id
        self.commands = DEFAULT_COMMANDS if commands is None else commands
        self._metrics = metrics
        self._tasks: set[asyncio.Task] = set()

    def classify(self, payload: Any) -> InboundEvent:
        """
        Map a raw update payload onto exactly one event variant.

        Args:
            payload: Decoded JSON body of the webhook request

        Returns:
            The matching InboundEvent
        """
        try:
            update = payload if isinstance(payload, Update) else Update.model_validate(payload)
        except ValidationError:
            return NonMessage(kind="invalid")

        message = update.message
        if message is None:
            return NonMessage(kind=update.kind)
        if message.text is not None and message.text in self.commands:
            return CommandMessage(message=message, command=message.text)
        if message.audio is not None:
            return AudioMessage(message=message, file_id=message.audio.file_id)
        return OtherMessage(message=message)

    def submit(self, payload: Any) -> asyncio.Task:
        """
        Handle a payload as an independent task and return without waiting.

        Args:
            payload: Decoded JSON body of the webhook request

        Returns:
            The scheduled task
        """
        task = asyncio.create_task(self._run(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, payload: Any) -> Optional[InboundEvent]:
        try:
            return await self.handle(payload)
        except Exception as e:
            logger.error(f"Error handling update: {e}", exc_info=True)
            return None

    async def join(self) -> None:
        """Wait for all submitted tasks to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def handle(self, payload: Any) -> InboundEvent:
        """
        Process one update.

        Returns:
            The event the update was classified as
        """
        event = self.classify(payload)

        if isinstance(event, NonMessage):
            logger.debug(f"Ignoring non-message update: {event.kind}")
            if self._metrics:
                self._metrics.record_update(event.kind)
            return event

        if self._metrics:
            self._metrics.record_update("message")

        message = event.message
        if message.chat.id != self.authorized_chat_id:
            await self._reject(message)
            return event

        try:
            if isinstance(event, CommandMessage):
                await self._reply(message, self.commands[event.command])
                if self._metrics:
                    self._metrics.record_command(event.command)
            elif isinstance(event, AudioMessage):
                await self.queue.admit(event.file_id, message.message_id)
        finally:
            await self._delete(message)

        return event

    async def _reject(self, message: Message) -> None:
        name = message.sender_name()
        logger.warning(
            f"Rejecting message from unauthorized chat {message.chat.id} ({name})",
            extra={"chat_id": message.chat.id},
        )
        if self._metrics:
            self._metrics.record_rejection()
        await self._reply(message, REJECTION_TEXT.format(name=name))

    async def _reply(self, message: Message, text: str) -> None:
        try:
            await self.bot.send_message(message.chat.id, text)
        except TelegramError as e:
            logger.error(
                f"Failed to reply to chat {message.chat.id}: {e}",
                extra={"chat_id": message.chat.id, "message_id": message.message_id},
            )
            if self._metrics:
                self._metrics.record_error("send_message")

    async def _delete(self, message: Message) -> None:
        try:
            await self.bot.delete_message(message.chat.id, message.message_id)
        except TelegramError as e:
            logger.error(
                f"Failed to delete message {message.message_id}: {e}",
                extra={"chat_id": message.chat.id, "message_id": message.message_id},
            )
            if self._metrics:
                self._metrics.record_error("delete_message")
