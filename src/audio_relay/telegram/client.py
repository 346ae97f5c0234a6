"""Telegram Bot API client over httpx."""

import logging
from typing import Any, Optional

import httpx

from .interface import BotInterface, ChatId, SentMessage, TelegramError

logger = logging.getLogger(__name__)


class TelegramBotClient(BotInterface):
    """Calls the Telegram Bot API with JSON POST requests."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the bot client.

        Args:
            token: Bot credential token
            api_url: Bot API root URL
            timeout: HTTP request timeout in seconds
            client: Optional pre-built httpx client (tests inject a mock transport)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._base_url = f"{self.api_url}/bot{token}/"
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def _call(self, method: str, params: dict[str, Any]) -> Any:
        """
        Invoke a Bot API method and return its `result`.

        Raises:
            TelegramError: On transport failure, HTTP error status, bad JSON, or `ok: false`
        """
        payload = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self.client.post(self._base_url + method, json=payload)
        except httpx.TimeoutException as e:
            raise TelegramError(method, "request timed out") from e
        except httpx.HTTPError as e:
            raise TelegramError(method, f"{type(e).__name__}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise TelegramError(
                method, f"invalid JSON response: {response.text[:200]}", response.status_code
            ) from e

        if not isinstance(body, dict) or not body.get("ok", False):
            description = "unknown error"
            error_code = response.status_code
            if isinstance(body, dict):
                description = body.get("description", description)
                error_code = body.get("error_code", error_code)
            raise TelegramError(method, description, error_code)

        logger.debug(f"Telegram {method} succeeded")
        return body.get("result")

    async def send_audio(
        self,
        chat_id: ChatId,
        audio: str,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = "Markdown",
    ) -> SentMessage:
        result = await self._call(
            "sendAudio",
            {"chat_id": chat_id, "audio": audio, "caption": caption, "parse_mode": parse_mode},
        )
        return self._parse_sent("sendAudio", result, chat_id)

    async def edit_caption(
        self,
        chat_id: ChatId,
        message_id: int,
        caption: str,
        parse_mode: Optional[str] = "Markdown",
    ) -> None:
        await self._call(
            "editMessageCaption",
            {
                "chat_id": chat_id,
                "message_id": message_id,
                "caption": caption,
                "parse_mode": parse_mode,
            },
        )

    async def delete_message(self, chat_id: ChatId, message_id: int) -> None:
        await self._call("deleteMessage", {"chat_id": chat_id, "message_id": message_id})

    async def send_message(self, chat_id: ChatId, text: str) -> SentMessage:
        result = await self._call("sendMessage", {"chat_id": chat_id, "text": text})
        return self._parse_sent("sendMessage", result, chat_id)

    async def set_webhook(self, url: str) -> None:
        await self._call("setWebhook", {"url": url})
        logger.info("Webhook registered with Telegram")

    @staticmethod
    def _parse_sent(method: str, result: Any, chat_id: ChatId) -> SentMessage:
        try:
            return SentMessage(message_id=int(result["message_id"]), chat_id=chat_id)
        except (KeyError, TypeError, ValueError) as e:
            raise TelegramError(method, f"response has no message_id: {result!r}") from e

    async def close(self) -> None:
        """Close HTTP client connection pool."""
        await self.client.aclose()
        logger.debug("TelegramBotClient closed")
