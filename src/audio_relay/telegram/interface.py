"""Abstract interface for Telegram Bot API implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

ChatId = Union[int, str]


class TelegramError(Exception):
    """Raised when a Bot API call fails (API error, HTTP error, or transport failure)."""

    def __init__(
        self,
        method: str,
        description: str,
        error_code: Optional[int] = None,
    ):
        self.method = method
        self.description = description
        self.error_code = error_code
        super().__init__(f"{method} failed: {description}" + (f" ({error_code})" if error_code else ""))


@dataclass
class SentMessage:
    """A message the platform has accepted, with its assigned identifier."""

    message_id: int
    chat_id: ChatId


class BotInterface(ABC):
    """Abstract base class for Telegram bot clients."""

    @abstractmethod
    async def send_audio(
        self,
        chat_id: ChatId,
        audio: str,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = "Markdown",
    ) -> SentMessage:
        """
        Send an audio file by its file id.

        Args:
            chat_id: Destination chat or channel
            audio: File id of an audio already stored by Telegram
            caption: Caption text
            parse_mode: Caption markup flavor

        Returns:
            The sent message with its platform-assigned id
        """
        pass

    @abstractmethod
    async def edit_caption(
        self,
        chat_id: ChatId,
        message_id: int,
        caption: str,
        parse_mode: Optional[str] = "Markdown",
    ) -> None:
        """Replace the caption of an already sent message."""
        pass

    @abstractmethod
    async def delete_message(self, chat_id: ChatId, message_id: int) -> None:
        """Delete a message."""
        pass

    @abstractmethod
    async def send_message(self, chat_id: ChatId, text: str) -> SentMessage:
        """Send a plain text message."""
        pass

    @abstractmethod
    async def set_webhook(self, url: str) -> None:
        """Register the webhook URL that Telegram pushes updates to."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass
