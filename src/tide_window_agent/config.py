"""Configuration objects and helpers for the tide window agent."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import Field, HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .stations import DEFAULT_STATION_ID

LOGGER = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """Runtime configuration sourced from ``TIDE_AGENT_*`` environment variables."""

    noaa_base_url: HttpUrl = Field(
        "https://tidesandcurrents.noaa.gov/api/datagetter",
        description="NOAA CO-OPS data getter endpoint",
    )
    noaa_application: str = Field("TidesApp", description="Application name reported to NOAA")
    default_station: str = Field(DEFAULT_STATION_ID, description="Station used when a request names none")
    default_minimum_height: float = Field(1.5, description="Minimum safe tide height in feet")
    default_start_time: str = Field("10:00", description="Activity window start (HH:MM)")
    default_end_time: str = Field("14:30", description="Activity window end (HH:MM)")
    timeout_seconds: float = Field(15.0, description="NOAA request timeout")
    retry_attempts: int = Field(3, ge=1, description="Attempts per NOAA request")
    concurrency: int = Field(1, ge=1, description="Dates fetched at once; 1 keeps requests sequential")
    timezone: str = Field("America/Los_Angeles", description="Timezone that defines 'today'")
    share_base_url: str = Field("http://localhost:3000/", description="Base URL for share links")
    log_level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Output logs as JSON")
    telegram_bot_token: Optional[SecretStr] = Field(None, description="Bot token for --notify")
    telegram_chat_id: Optional[str] = Field(None, description="Chat receiving --notify summaries")

    model_config = SettingsConfigDict(
        env_prefix="TIDE_AGENT_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        return value.upper()

    def today(self) -> date:
        """Current date at the configured station timezone."""
        try:
            zone = ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            LOGGER.warning("settings.unknown_timezone", timezone=self.timezone)
            zone = timezone.utc
        return datetime.now(tz=zone).date()

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def telegram_api_endpoint(self) -> str:
        """Base Telegram Bot API endpoint."""
        if self.telegram_bot_token is None:
            raise RuntimeError("TIDE_AGENT_TELEGRAM_BOT_TOKEN is not configured")
        return f"https://api.telegram.org/bot{self.telegram_bot_token.get_secret_value()}"
