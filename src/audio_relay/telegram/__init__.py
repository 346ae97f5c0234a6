"""Telegram Bot API clients."""

from .client import TelegramBotClient
from .interface import BotInterface, ChatId, SentMessage, TelegramError
from .mock import MockBot

__all__ = [
    "BotInterface",
    "ChatId",
    "MockBot",
    "SentMessage",
    "TelegramBotClient",
    "TelegramError",
]
