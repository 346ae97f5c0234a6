"""Audio Relay - republish audio sent to a Telegram bot on a public channel."""

__version__ = "1.0.0"
