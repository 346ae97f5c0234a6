"""Shared pytest fixtures for Audio Relay tests."""

import asyncio
from typing import Any, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from audio_relay.config import Config
from audio_relay.relay.sequence import SequenceTracker
from audio_relay.telegram.interface import SentMessage

AUTHORIZED_CHAT_ID = 1001
CHANNEL_ID = "@relaychannel"
BOT_TOKEN = "123456:test-token"


@pytest.fixture(scope="function")
def test_config() -> Config:
    """Create a test configuration."""
    return Config(
        bot_token=BOT_TOKEN,
        authorized_chat_id=AUTHORIZED_CHAT_ID,
        channel_id=CHANNEL_ID,
        public_url="https://relay.example.com",
        use_mock=True,
        quiet_interval_seconds=0.05,  # Fast drains for testing
        pacing_delay_seconds=0.0,
        metrics_enabled=False,
        log_level="WARNING",
        log_format="text",
    )


@pytest.fixture
def mock_bot() -> MagicMock:
    """Create a mock Telegram client that assigns consecutive channel ids from 11."""
    mock = MagicMock()
    counter = iter(range(11, 1000))
    mock.send_audio = AsyncMock(
        side_effect=lambda chat_id, audio, caption=None, parse_mode="Markdown": SentMessage(
            message_id=next(counter), chat_id=chat_id
        )
    )
    mock.edit_caption = AsyncMock(return_value=None)
    mock.delete_message = AsyncMock(return_value=None)
    mock.send_message = AsyncMock(return_value=SentMessage(message_id=1, chat_id=AUTHORIZED_CHAT_ID))
    mock.set_webhook = AsyncMock(return_value=None)
    mock.close = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def tracker() -> SequenceTracker:
    """Tracker whose next prediction is 11."""
    return SequenceTracker(initial=10)


class RecordingDispatcher:
    """Dispatcher double that records each batch it receives."""

    def __init__(self, delay: float = 0.0, error: Optional[Exception] = None):
        self.batches: list[list] = []
        self.delay = delay
        self.error = error
        self.started = asyncio.Event()

    async def dispatch(self, batch):
        self.batches.append(list(batch))
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return []

    def keys(self) -> list[list[int]]:
        return [[item.sequence_key for item in batch] for batch in self.batches]


@pytest.fixture
def recording_dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def dispatcher_factory() -> Callable[..., RecordingDispatcher]:
    """Build recording dispatchers with a delay or a failure."""
    return RecordingDispatcher


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll until predicate() is true or fail after timeout."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


def _make_update(
    message_id: int = 100,
    chat_id: int = AUTHORIZED_CHAT_ID,
    text: Optional[str] = None,
    file_id: Optional[str] = None,
    username: Optional[str] = "owner",
    first_name: str = "Owner",
    update_id: Optional[int] = None,
) -> dict[str, Any]:
    """Build a Telegram `message` update payload."""
    message: dict[str, Any] = {
        "message_id": message_id,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": "private", "first_name": first_name},
        "from": {"id": chat_id, "is_bot": False, "first_name": first_name},
    }
    if username:
        message["from"]["username"] = username
    if text is not None:
        message["text"] = text
    if file_id is not None:
        message["audio"] = {
            "file_id": file_id,
            "file_unique_id": f"u-{file_id}",
            "duration": 180,
            "title": f"Track {message_id}",
        }
    return {"update_id": update_id or message_id + 5000, "message": message}


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    return _wait_until


@pytest.fixture
def make_update() -> Callable[..., dict[str, Any]]:
    return _make_update

