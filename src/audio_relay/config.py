"""Configuration management with CLI args, environment variables, and defaults."""

import os
from dataclasses import dataclass
from typing import Any, Optional, TypeVar

T = TypeVar("T")

ENV_PREFIX = "AUDIO_RELAY_"

# Legacy Markdown markup; the caption text is placed inside a link label.
MARKDOWN_RESERVED = "[]_*`"


class ConfigError(Exception):
    """Raised when a required setting is missing or malformed."""

    pass


class EnvVars:
    """Centralized environment variable names for consistent access."""

    # === Telegram ===
    BOT_TOKEN = f"{ENV_PREFIX}BOT_TOKEN"
    AUTHORIZED_CHAT_ID = f"{ENV_PREFIX}AUTHORIZED_CHAT_ID"
    CHANNEL_ID = f"{ENV_PREFIX}CHANNEL_ID"
    CHANNEL_LINK = f"{ENV_PREFIX}CHANNEL_LINK"
    CAPTION_TEXT = f"{ENV_PREFIX}CAPTION_TEXT"
    PUBLIC_URL = f"{ENV_PREFIX}PUBLIC_URL"
    TELEGRAM_API_URL = f"{ENV_PREFIX}TELEGRAM_API_URL"
    REQUEST_TIMEOUT = f"{ENV_PREFIX}REQUEST_TIMEOUT"
    USE_MOCK = f"{ENV_PREFIX}USE_MOCK"

    # === API ===
    API_HOST = f"{ENV_PREFIX}API_HOST"
    API_PORT = f"{ENV_PREFIX}API_PORT"

    # === Relay Queue ===
    QUIET_INTERVAL_SECONDS = f"{ENV_PREFIX}QUIET_INTERVAL_SECONDS"
    PACING_DELAY_SECONDS = f"{ENV_PREFIX}PACING_DELAY_SECONDS"
    MESSAGE_ID_SEED = f"{ENV_PREFIX}MESSAGE_ID_SEED"

    # === Metrics ===
    METRICS_ENABLED = f"{ENV_PREFIX}METRICS_ENABLED"

    # === Logging ===
    LOG_LEVEL = f"{ENV_PREFIX}LOG_LEVEL"
    LOG_FORMAT = f"{ENV_PREFIX}LOG_FORMAT"


def get_env_value(env_var: str, default: T, type_converter: type = str) -> T:
    """
    Get a value from an environment variable with type conversion.

    Args:
        env_var: Environment variable name
        default: Default value if not found
        type_converter: Type to convert to (str, int, float, bool)

    Returns:
        The environment value converted to the specified type, or the default

    Raises:
        ConfigError: If the value cannot be converted
    """
    env_value = os.getenv(env_var)
    if env_value is None or env_value == "":
        return default

    if type_converter == bool:
        return env_value.lower() in ("true", "1", "yes", "on")  # type: ignore
    try:
        return type_converter(env_value)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {env_var}: {env_value!r}") from e


def get_config_value(
    cli_arg: Optional[Any],
    env_var: str,
    default: T,
    type_converter: type = str,
) -> T:
    """
    Get a configuration value with priority: CLI > Environment > Default.

    Args:
        cli_arg: CLI argument value (highest priority)
        env_var: Environment variable name
        default: Default value (lowest priority)
        type_converter: Type to convert to (str, int, float, bool)

    Returns:
        The resolved configuration value
    """
    if cli_arg is not None:
        return cli_arg
    return get_env_value(env_var, default, type_converter)


@dataclass
class Config:
    """Application configuration."""

    # === Telegram ===
    bot_token: Optional[str] = None
    authorized_chat_id: Optional[int] = None
    channel_id: Optional[str] = None
    channel_link: Optional[str] = None
    caption_text: str = "Listen"
    public_url: Optional[str] = None
    telegram_api_url: str = "https://api.telegram.org"
    request_timeout: float = 30.0
    use_mock: bool = False

    # === API ===
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # === Relay Queue ===
    quiet_interval_seconds: float = 3.0
    pacing_delay_seconds: float = 1.0
    message_id_seed: int = 0

    # === Prometheus ===
    metrics_enabled: bool = True

    # === Logging ===
    log_level: str = "INFO"
    log_format: str = "json"  # json|text

    @classmethod
    def from_args_and_env(cls, cli_args: Optional[dict] = None) -> "Config":
        """
        Load configuration from CLI arguments, environment variables, and defaults.

        Priority: CLI args > Environment variables > Defaults

        Args:
            cli_args: Optional dictionary of CLI arguments (unset options omitted)

        Returns:
            Validated Config instance

        Raises:
            ConfigError: If a required setting is missing or malformed
        """
        args = cli_args or {}
        config = cls()

        config.bot_token = get_config_value(
            args.get("bot_token"), EnvVars.BOT_TOKEN, config.bot_token
        )
        config.authorized_chat_id = get_config_value(
            args.get("authorized_chat_id"), EnvVars.AUTHORIZED_CHAT_ID,
            config.authorized_chat_id, int
        )
        config.channel_id = get_config_value(
            args.get("channel_id"), EnvVars.CHANNEL_ID, config.channel_id
        )
        config.channel_link = get_config_value(
            args.get("channel_link"), EnvVars.CHANNEL_LINK, config.channel_link
        )
        config.caption_text = get_config_value(
            args.get("caption_text"), EnvVars.CAPTION_TEXT, config.caption_text
        )
        config.public_url = get_config_value(
            args.get("public_url"), EnvVars.PUBLIC_URL, config.public_url
        )
        config.telegram_api_url = get_config_value(
            args.get("telegram_api_url"), EnvVars.TELEGRAM_API_URL, config.telegram_api_url
        )
        config.request_timeout = get_config_value(
            args.get("request_timeout"), EnvVars.REQUEST_TIMEOUT, config.request_timeout, float
        )
        config.use_mock = args.get("use_mock") or get_env_value(
            EnvVars.USE_MOCK, config.use_mock, bool
        )
        config.api_host = get_config_value(
            args.get("api_host"), EnvVars.API_HOST, config.api_host
        )
        config.api_port = get_config_value(
            args.get("api_port"), EnvVars.API_PORT, config.api_port, int
        )
        config.quiet_interval_seconds = get_config_value(
            args.get("quiet_interval"), EnvVars.QUIET_INTERVAL_SECONDS,
            config.quiet_interval_seconds, float
        )
        config.pacing_delay_seconds = get_config_value(
            args.get("pacing_delay"), EnvVars.PACING_DELAY_SECONDS,
            config.pacing_delay_seconds, float
        )
        config.message_id_seed = get_config_value(
            args.get("message_id_seed"), EnvVars.MESSAGE_ID_SEED, config.message_id_seed, int
        )
        config.metrics_enabled = get_config_value(
            args.get("metrics"), EnvVars.METRICS_ENABLED, config.metrics_enabled, bool
        )
        config.log_level = get_config_value(
            args.get("log_level"), EnvVars.LOG_LEVEL, config.log_level
        )
        config.log_format = get_config_value(
            args.get("log_format"), EnvVars.LOG_FORMAT, config.log_format
        )

        config.validate()
        return config

    def validate(self) -> None:
        """
        Check that every required setting is present.

        Raises:
            ConfigError: If one or more required settings are missing
        """
        required = {
            EnvVars.BOT_TOKEN: self.bot_token,
            EnvVars.AUTHORIZED_CHAT_ID: self.authorized_chat_id,
            EnvVars.CHANNEL_ID: self.channel_id,
            EnvVars.PUBLIC_URL: self.public_url,
        }
        missing = [name for name, value in required.items() if value is None or value == ""]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")

        if self.quiet_interval_seconds <= 0:
            raise ConfigError("Quiet interval must be positive")
        if self.pacing_delay_seconds < 0:
            raise ConfigError("Pacing delay must not be negative")
        if any(c in self.caption_text for c in MARKDOWN_RESERVED):
            raise ConfigError(
                f"Caption text must not contain Markdown characters {MARKDOWN_RESERVED!r}"
            )

    @property
    def webhook_url(self) -> str:
        """Externally reachable URL registered with Telegram."""
        return f"{self.public_url.rstrip('/')}/{self.bot_token}"

    def resolve_channel_link(self) -> str:
        """
        Base URL of public posts in the destination channel.

        `@name` channels link to t.me/name; private `-100...` ids link through t.me/c/.
        """
        if self.channel_link:
            return self.channel_link.rstrip("/")
        channel = str(self.channel_id)
        if channel.startswith("@"):
            return f"https://t.me/{channel[1:]}"
        if channel.startswith("-100"):
            return f"https://t.me/c/{channel[4:]}"
        return f"https://t.me/c/{channel.lstrip('-')}"

    def display(self) -> str:
        """Return a formatted string representation of the configuration."""
        token = "(not set)"
        if self.bot_token:
            token = f"{self.bot_token[:4]}...{'*' * 8}"

        lines = [
            "Configuration:",
            "  Telegram:",
            f"    Bot Token: {token}",
            f"    Authorized Chat: {self.authorized_chat_id}",
            f"    Channel: {self.channel_id} ({self.resolve_channel_link() if self.channel_id else '-'})",
            f"    Public URL: {self.public_url}",
            f"    API URL: {self.telegram_api_url}",
            f"    Mock: {self.use_mock}",
            "  API:",
            f"    Host: {self.api_host}",
            f"    Port: {self.api_port}",
            "  Relay Queue:",
            f"    Quiet Interval: {self.quiet_interval_seconds}s",
            f"    Pacing Delay: {self.pacing_delay_seconds}s",
            f"    Message ID Seed: {self.message_id_seed}",
            "  Metrics:",
            f"    Enabled: {self.metrics_enabled}",
            "  Logging:",
            f"    Level: {self.log_level}",
            f"    Format: {self.log_format}",
        ]
        return "\n".join(lines)
