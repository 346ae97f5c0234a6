"""Process entry point: wires the relay pipeline and serves the webhook."""

import asyncio
import logging
import sys
from typing import Optional

import uvicorn

from .api import dependencies
from .api.app import create_app
from .config import Config
from .metrics import MetricsCollector, get_metrics
from .relay import DebouncedOrderedQueue, RelayDispatcher, SequenceTracker
from .telegram import BotInterface, MockBot, TelegramBotClient, TelegramError
from .webhook import AdmissionGate

logger = logging.getLogger(__name__)


class Application:
    """
    Owns the bot client, relay pipeline, and HTTP server for one process.

    The queue and tracker live exactly as long as the process; nothing is
    restored on restart.
    """

    def __init__(self, config: Config):
        self.config = config
        self.bot: Optional[BotInterface] = None
        self.tracker: Optional[SequenceTracker] = None
        self.queue: Optional[DebouncedOrderedQueue] = None
        self.gate: Optional[AdmissionGate] = None
        self.api_server_task: Optional[asyncio.Task] = None
        self.running = False

    def _create_bot(self) -> BotInterface:
        if self.config.use_mock:
            logger.info("Using in-memory Telegram client")
            return MockBot()
        return TelegramBotClient(
            token=self.config.bot_token,
            api_url=self.config.telegram_api_url,
            timeout=self.config.request_timeout,
        )

    def _build_pipeline(self, metrics: Optional[MetricsCollector]) -> None:
        """Create tracker, dispatcher, queue, and gate, and publish them to the routes."""
        self.tracker = SequenceTracker(initial=self.config.message_id_seed)
        dispatcher = RelayDispatcher(
            bot=self.bot,
            channel_id=self.config.channel_id,
            channel_link=self.config.resolve_channel_link(),
            tracker=self.tracker,
            caption_text=self.config.caption_text,
            pacing_delay=self.config.pacing_delay_seconds,
            metrics=metrics,
        )
        self.queue = DebouncedOrderedQueue(
            dispatcher=dispatcher,
            quiet_interval=self.config.quiet_interval_seconds,
            metrics=metrics,
        )
        self.gate = AdmissionGate(
            bot=self.bot,
            queue=self.queue,
            authorized_chat_id=self.config.authorized_chat_id,
            metrics=metrics,
        )

        dependencies.set_config_instance(self.config)
        dependencies.set_gate_instance(self.gate)
        dependencies.set_tracker_instance(self.tracker)

    async def start(self) -> None:
        """
        Register the webhook, build the pipeline, and start serving.

        Exits the process with status 1 if Telegram refuses the webhook.
        """
        logger.info("Starting Audio Relay")
        logger.info(f"\n{self.config.display()}")

        self.bot = self._create_bot()

        try:
            await self.bot.set_webhook(self.config.webhook_url)
        except TelegramError as e:
            logger.error(f"Webhook registration failed: {e}")
            sys.exit(1)

        self._build_pipeline(get_metrics() if self.config.metrics_enabled else None)

        logger.info(f"Listening on {self.config.api_host}:{self.config.api_port}")
        self.api_server_task = asyncio.create_task(self._run_api_server())
        self.running = True

    async def stop(self) -> None:
        """Stop serving, let in-flight updates finish, then drop queued audio."""
        logger.info("Stopping Audio Relay...")
        self.running = False

        if self.api_server_task:
            self.api_server_task.cancel()
            try:
                await self.api_server_task
            except asyncio.CancelledError:
                pass

        if self.gate:
            await self.gate.join()

        # Pending items are not persisted; an in-flight batch is abandoned.
        if self.queue:
            pending = len(self.queue.pending())
            if pending:
                logger.warning(f"Discarding {pending} queued items not yet dispatched")
            await self.queue.stop()

        if self.bot:
            await self.bot.close()

        logger.info("Audio Relay stopped")

    async def _run_api_server(self) -> None:
        app = create_app(enable_metrics=self.config.metrics_enabled)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=self.config.api_host,
                port=self.config.api_port,
                log_level="info",
                # Access log lines include the webhook path, i.e. the token.
                access_log=False,
            )
        )
        try:
            await server.serve()
        except asyncio.CancelledError:
            logger.info("API server shutting down...")
            raise
        except Exception as e:
            logger.error(f"API server error: {e}", exc_info=True)
        finally:
            self.running = False

    async def run(self) -> None:
        """Run until a signal clears `running` or the server exits."""
        try:
            await self.start()
            while self.running:
                await asyncio.sleep(1)
        except Exception as e:
            logger.error(f"Application error: {e}", exc_info=True)
        finally:
            await self.stop()


def main() -> None:
    """Console script entry point."""
    from .cli import cli

    cli()


if __name__ == "__main__":
    main()
