"""End-to-end tests: gate, queue, dispatcher, and tracker over the mock bot."""

import pytest
import pytest_asyncio

from audio_relay.relay import DebouncedOrderedQueue, RelayDispatcher, SequenceTracker
from audio_relay.telegram.mock import MockBot
from audio_relay.webhook import AdmissionGate

OWNER = 1001
CHANNEL = "@relaychannel"
LINK = "https://t.me/relaychannel"


@pytest_asyncio.fixture
async def pipeline():
    """Fully wired relay pipeline with fast timings."""
    bot = MockBot(first_message_id=1)
    tracker = SequenceTracker()
    dispatcher = RelayDispatcher(bot, CHANNEL, LINK, tracker, pacing_delay=0.0)
    queue = DebouncedOrderedQueue(dispatcher, quiet_interval=0.05)
    gate = AdmissionGate(bot=bot, queue=queue, authorized_chat_id=OWNER)
    yield bot, tracker, queue, gate
    await gate.join()
    await queue.stop()


def channel_posts(bot: MockBot) -> list[tuple[str, str]]:
    return [
        (call.params["audio"], call.params["caption"])
        for call in bot.calls_for("send_audio")
        if call.params["chat_id"] == CHANNEL
    ]


@pytest.mark.asyncio
class TestRelayPipeline:
    """Test the relay from webhook update to channel post."""

    async def test_out_of_order_burst_posted_in_order(self, pipeline, make_update, wait_until):
        """Test updates arriving shuffled are posted in source order."""
        bot, tracker, queue, gate = pipeline

        for message_id in (12, 10, 11):
            gate.submit(make_update(message_id=message_id, file_id=f"audio-{message_id}"))
        await gate.join()

        await wait_until(lambda: len(channel_posts(bot)) == 3)

        assert channel_posts(bot) == [
            ("audio-10", "[Listen #1](https://t.me/relaychannel/1)"),
            ("audio-11", "[Listen #2](https://t.me/relaychannel/2)"),
            ("audio-12", "[Listen #3](https://t.me/relaychannel/3)"),
        ]
        assert bot.calls_for("edit_caption") == []
        assert tracker.last == 3

        deleted = sorted(c.params["message_id"] for c in bot.calls_for("delete_message"))
        assert deleted == [10, 11, 12]

    async def test_interleaved_post_corrected(self, pipeline, make_update, wait_until):
        """Test a post made by someone else between batches is corrected for."""
        bot, tracker, queue, gate = pipeline

        await gate.handle(make_update(message_id=1, file_id="first"))
        await wait_until(lambda: tracker.last == 1 and not queue.worker_active)

        # Another admin posts to the channel
        bot.skip_ids(CHANNEL, 1)

        await gate.handle(make_update(message_id=2, file_id="second"))
        await wait_until(lambda: tracker.last == 3)

        edits = bot.calls_for("edit_caption")
        assert len(edits) == 1
        assert edits[0].params["message_id"] == 3
        assert edits[0].params["caption"] == "[Listen #3](https://t.me/relaychannel/3)"

    async def test_stranger_never_reaches_channel(self, pipeline, make_update):
        bot, tracker, queue, gate = pipeline

        await gate.handle(make_update(chat_id=4242, file_id="intruder"))

        assert queue.pending() == []
        assert channel_posts(bot) == []
        assert bot.calls_for("delete_message") == []
        assert len(bot.calls_for("send_message")) == 1
