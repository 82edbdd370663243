"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
Variable names follow the bot's deployment environment: DISCORD_TOKEN,
N8N_BASE_URL, N8N_API_KEY and friends.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscordSettings(BaseSettings):
    """Discord bot configuration."""

    name: str = Field(default="n8nrelay", description="Bot display name")
    token: str = Field(default="", description="Discord bot token")
    command_prefix: str = Field(default="!", description="Prefix for legacy text commands")
    dev_guild_id: int | None = Field(
        default=None,
        description="If set, publishes slash commands to this guild only (instant). "
                    "If None, publishes globally (up to 1 hour propagation).",
    )
    allowed_channel_ids: list[int] = Field(
        default_factory=list,
        description="If non-empty, bot only responds in these channel IDs. "
                    "Set via DISCORD_ALLOWED_CHANNEL_IDS='[123456,789012]'",
    )
    admin_user_ids: list[int] = Field(
        default_factory=list,
        description="User IDs allowed to run /reload. Empty means anyone may reload.",
    )

    model_config = SettingsConfigDict(env_prefix="DISCORD_", env_file=".env", extra="ignore")

    @field_validator("command_prefix")
    @classmethod
    def _prefix_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("command_prefix must not be blank")
        return value.strip()


class N8nSettings(BaseSettings):
    """n8n automation engine configuration."""

    base_url: str = Field(
        default="http://n8n:5678",
        description="Base URL of the n8n instance; webhooks live under {base_url}/webhook/",
    )
    api_key: str = Field(default="", description="Sent as X-N8N-API-KEY when set")
    timeout: float = Field(default=10.0, gt=0, description="Webhook request timeout in seconds")
    nutrition_webhook: str = Field(
        default="a5d6da3f-8c74-4a42-9455-9a084ccb5354",
        description="Webhook path used by /analyse-nutrition",
    )

    model_config = SettingsConfigDict(env_prefix="N8N_", env_file=".env", extra="ignore")

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Path | None = Field(default=None, description="Log file path")

    # Sub-configurations
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    n8n: N8nSettings = Field(default_factory=N8nSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",  # .env also carries the prefixed sub-settings
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        _settings = Settings(
            _env_file=env_file,
            discord=DiscordSettings(_env_file=env_file),
            n8n=N8nSettings(_env_file=env_file),
        )
    else:
        _settings = Settings()
    return _settings
