"""Mock bot client for running the relay without talking to Telegram."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .interface import BotInterface, ChatId, SentMessage

logger = logging.getLogger(__name__)


@dataclass
class RecordedCall:
    """One outbound call captured by the mock."""

    method: str
    params: dict = field(default_factory=dict)


class MockBot(BotInterface):
    """
    In-memory bot client for development and testing.

    Assigns message ids from a per-chat counter. `skip_ids` makes the next
    send jump ahead, simulating posts interleaved by other channel admins.
    """

    def __init__(self, first_message_id: int = 1):
        self.calls: list[RecordedCall] = []
        self.webhook_url: Optional[str] = None
        self._first_message_id = first_message_id
        self._next_ids: dict[str, int] = {}

    def _assign_id(self, chat_id: ChatId) -> int:
        key = str(chat_id)
        message_id = self._next_ids.get(key, self._first_message_id)
        self._next_ids[key] = message_id + 1
        return message_id

    def skip_ids(self, chat_id: ChatId, count: int) -> None:
        key = str(chat_id)
        self._next_ids[key] = self._next_ids.get(key, self._first_message_id) + count

    def calls_for(self, method: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.method == method]

    async def send_audio(
        self,
        chat_id: ChatId,
        audio: str,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = "Markdown",
    ) -> SentMessage:
        message_id = self._assign_id(chat_id)
        self.calls.append(
            RecordedCall("send_audio", {"chat_id": chat_id, "audio": audio, "caption": caption})
        )
        logger.info(f"[mock] sendAudio {audio} to {chat_id} as {message_id}")
        return SentMessage(message_id=message_id, chat_id=chat_id)

    async def edit_caption(
        self,
        chat_id: ChatId,
        message_id: int,
        caption: str,
        parse_mode: Optional[str] = "Markdown",
    ) -> None:
        self.calls.append(
            RecordedCall(
                "edit_caption",
                {"chat_id": chat_id, "message_id": message_id, "caption": caption},
            )
        )
        logger.info(f"[mock] editMessageCaption {chat_id}/{message_id}")

    async def delete_message(self, chat_id: ChatId, message_id: int) -> None:
        self.calls.append(
            RecordedCall("delete_message", {"chat_id": chat_id, "message_id": message_id})
        )
        logger.info(f"[mock] deleteMessage {chat_id}/{message_id}")

    async def send_message(self, chat_id: ChatId, text: str) -> SentMessage:
        message_id = self._assign_id(chat_id)
        self.calls.append(RecordedCall("send_message", {"chat_id": chat_id, "text": text}))
        logger.info(f"[mock] sendMessage to {chat_id}: {text}")
        return SentMessage(message_id=message_id, chat_id=chat_id)

    async def set_webhook(self, url: str) -> None:
        self.webhook_url = url
        self.calls.append(RecordedCall("set_webhook", {"url": url}))
        logger.info(f"[mock] setWebhook {url}")
