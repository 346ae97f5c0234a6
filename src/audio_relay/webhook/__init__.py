"""Webhook module for receiving Telegram updates."""

from .gate import (
    AdmissionGate,
    AudioMessage,
    CommandMessage,
    InboundEvent,
    NonMessage,
    OtherMessage,
)
from .models import Audio, Chat, Message, Update, User

__all__ = [
    "AdmissionGate",
    "Audio",
    "AudioMessage",
    "Chat",
    "CommandMessage",
    "InboundEvent",
    "Message",
    "NonMessage",
    "OtherMessage",
    "Update",
    "User",
]
