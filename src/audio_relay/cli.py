"""Command-line interface for Audio Relay."""

import asyncio
import logging
import signal
import sys

import click

from .config import Config, ConfigError
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _load_config(kwargs: dict) -> Config:
    # Filter out None values (unspecified options)
    cli_args = {k: v for k, v in kwargs.items() if v is not None}
    try:
        return Config.from_args_and_env(cli_args)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


def config_options(func):
    """Options shared by commands that load the configuration."""
    options = [
        click.option("--bot-token", type=str, help="Telegram bot token"),
        click.option(
            "--authorized-chat-id",
            type=int,
            help="Only chat allowed to send audio to the bot",
        ),
        click.option(
            "--channel-id",
            type=str,
            help="Destination channel (@name or numeric id)",
        ),
        click.option(
            "--channel-link",
            type=str,
            help="Base URL of channel posts (default: derived from channel id)",
        ),
        click.option(
            "--caption-text",
            type=str,
            help="Link text of each post caption (default: Listen)",
        ),
        click.option(
            "--public-url",
            type=str,
            help="Externally reachable base URL for the webhook",
        ),
        click.option(
            "--telegram-api-url",
            type=str,
            help="Telegram Bot API root URL (default: https://api.telegram.org)",
        ),
        click.option(
            "--request-timeout",
            type=float,
            help="Bot API request timeout in seconds (default: 30)",
        ),
        click.option(
            "--use-mock",
            is_flag=True,
            default=None,
            help="Use an in-memory Telegram client instead of the Bot API",
        ),
        click.option("--api-host", type=str, help="API server host (default: 0.0.0.0)"),
        click.option("--api-port", type=int, help="API server port (default: 8000)"),
        click.option(
            "--quiet-interval",
            type=float,
            help="Seconds without new audio before a batch is posted (default: 3.0)",
        ),
        click.option(
            "--pacing-delay",
            type=float,
            help="Seconds between consecutive channel posts (default: 1.0)",
        ),
        click.option(
            "--message-id-seed",
            type=int,
            help="Last known channel message id at startup (default: 0)",
        ),
        click.option(
            "--metrics/--no-metrics",
            default=None,
            help="Enable/disable Prometheus metrics (default: enabled)",
        ),
        click.option(
            "--log-level",
            type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
            help="Logging level (default: INFO)",
        ),
        click.option(
            "--log-format",
            type=click.Choice(["text", "json"], case_sensitive=False),
            help="Log format (default: json)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli():
    """Audio Relay - republish audio sent to a Telegram bot on a channel."""
    pass


@cli.command()
@config_options
def server(**kwargs):
    """Register the webhook and start serving."""
    from .__main__ import Application

    config = _load_config(kwargs)

    setup_logging(
        level=config.log_level,
        format_type=config.log_format,
        redact=[config.bot_token],
    )

    app = Application(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        app.running = False

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        loop.run_until_complete(app.run())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt")
    finally:
        loop.close()


@cli.command("show-config")
@config_options
def show_config(**kwargs):
    """Validate and print the resolved configuration."""
    config = _load_config(kwargs)
    click.echo(config.display())


if __name__ == "__main__":
    cli()
