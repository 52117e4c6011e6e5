"""
Type-safe configuration using Pydantic Settings
Validates environment variables and provides sensible defaults
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class BotConfig(BaseSettings):
    """
    Bot configuration with validation
    Automatically loads from environment variables and .env file
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Platform credentials - a missing token leaves that platform unconfigured
    telegram_bot_token: Optional[str] = Field(
        None, description="Telegram Bot API token from @BotFather"
    )
    discord_bot_token: Optional[str] = Field(
        None, description="Discord bot token from the developer portal"
    )

    # Owner identities (allowed to /quit)
    telegram_owner_id: int = Field(698_919_547, description="Telegram user ID of the bot owner")
    discord_owner_id: int = Field(
        90_927_967_651_262_464, description="Discord user ID of the bot owner"
    )

    # Data files
    listeners_file: str = Field("listeners.txt", description="Subscription persistence file")
    rooms_file: str = Field("spire.json", description="Class sections JSON for room lookups")

    # Remote sources
    menu_base_url: str = Field(
        "http://umassdining.com/locations-menus",
        description="Base URL of the dining hall menu pages",
    )
    events_url: str = Field(
        "http://www.umass.edu/events/", description="Campus events listing page"
    )

    # Daily schedule, in a fixed offset from UTC
    utc_offset_hours: int = Field(
        -4,
        ge=-12,
        le=14,
        description="Fixed UTC offset used for dates and the daily run (default: UTC-4)",
    )
    schedule_hour: int = Field(6, ge=0, le=23, description="Hour of the daily run")
    schedule_minute: int = Field(5, ge=0, le=59, description="Minute of the daily run")

    # Network behaviour
    fetch_timeout: float = Field(15.0, gt=0, le=120, description="Page fetch timeout in seconds")
    send_timeout: float = Field(10.0, gt=0, le=120, description="Message send timeout in seconds")
    send_concurrency: int = Field(
        4, ge=1, le=32, description="Parallel subscription checks during a batch pass"
    )
    refresh_retry_seconds: int = Field(
        300,
        ge=0,
        le=86_400,
        description="Minimum delay before retrying a failed menu refresh",
    )
    serve_stale_menus: bool = Field(
        True, description="Serve yesterday's menus with a warning when a refresh fails"
    )

    @field_validator("telegram_bot_token", "discord_bot_token")
    @classmethod
    def blank_token_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty or placeholder tokens as not configured"""
        if v is None:
            return None
        v = v.strip()
        if not v or v == "your_bot_token_here":
            return None
        return v

    @field_validator("telegram_bot_token")
    @classmethod
    def validate_telegram_token(cls, v: Optional[str]) -> Optional[str]:
        """Validate Telegram bot token format"""
        if v is not None and ":" not in v:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN appears to be invalid (should contain ':')"
            )
        return v

    @property
    def has_telegram(self) -> bool:
        return self.telegram_bot_token is not None

    @property
    def has_discord(self) -> bool:
        return self.discord_bot_token is not None


# Singleton instance
_config: Optional[BotConfig] = None


def get_config() -> BotConfig:
    """
    Get or create the global configuration instance

    Returns:
        BotConfig: Validated configuration

    Raises:
        ValidationError: If configuration is invalid
    """
    global _config
    if _config is None:
        _config = BotConfig()
    return _config
