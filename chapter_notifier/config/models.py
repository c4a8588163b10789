"""Pydantic models used across chapter-notifier configuration flow."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

LOG_LEVELS = ("ERROR", "WARN", "INFO", "DEBUG", "TRACE")
DEFAULT_WATCHED_MANGAS = ["One Piece", "Jujutsu Kaisen"]


class DiscordConfig(BaseModel):
    """Bot credentials and target channels."""

    token: str = ""
    channel_id: str = ""
    # Falls back to channel_id when empty.
    error_channel_id: str = ""
    api_base: str = "https://discord.com/api/v10"
    timeout: float = 30.0

    @field_validator("token", "channel_id", "error_channel_id", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value

    @property
    def resolved_error_channel_id(self) -> str:
        return self.error_channel_id or self.channel_id


class SourceSelectors(BaseModel):
    """CSS selectors locating the fields of one release card."""

    block: str = "div.bg-card"
    release_title: str = "a.text-white.text-lg.font-bold"
    release_link: str = "a.text-white.text-lg.font-bold"
    release_link_attr: str = "href"
    chapter_title: str = "div.mb-3 > div"
    release_time: str = "time-ago"
    release_time_attr: str = "datetime"


class SourceConfig(BaseModel):
    """The release page being watched."""

    website_url: str = "https://tcbscans.me"
    request_timeout: float = 120.0
    selectors: SourceSelectors = Field(default_factory=SourceSelectors)

    @field_validator("website_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("website_url must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be > 0")
        return value


class LoggingConfig(BaseModel):
    """Log level and optional rotating log file."""

    level: str = "DEBUG"
    path: Path | None = None
    max_size: int = 50  # megabytes
    max_backups: int = 3

    @field_validator("level", mode="before")
    @classmethod
    def _normalise_level(cls, value: Any) -> str:
        level = str(value or "DEBUG").strip().upper()
        if level == "WARNING":
            level = "WARN"
        if level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {value}; options: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_rotation(self) -> "LoggingConfig":
        if self.max_size < 1:
            raise ValueError("max_size must be >= 1")
        if self.max_backups < 0:
            raise ValueError("max_backups must be >= 0")
        return self


class AppConfig(BaseModel):
    """Top-level application configuration."""

    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    collected_chapters_db: Path | None = None
    watched_mangas: list[str] = Field(default_factory=lambda: list(DEFAULT_WATCHED_MANGAS))
    sleep_timer: int = 15  # minutes
    display_timezone: str = "Europe/Berlin"

    @field_validator("collected_chapters_db", mode="before")
    @classmethod
    def _coerce_db(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @field_validator("watched_mangas", mode="before")
    @classmethod
    def _coerce_watched(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        names: list[str] = []
        for item in value:
            name = str(item).strip()
            if name and name not in names:
                names.append(name)
        return names

    @field_validator("sleep_timer")
    @classmethod
    def _positive_timer(cls, value: int) -> int:
        if value < 1:
            raise ValueError("sleep_timer must be >= 1 minute")
        return value

    @field_validator("display_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        value = value.strip()
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise ValueError(f"Unknown display_timezone: {value}") from exc
        return value

    def missing_required(self) -> list[str]:
        """Return the names of required settings that are still empty."""

        missing = []
        if not self.discord.token:
            missing.append("discord.token")
        if not self.discord.channel_id:
            missing.append("discord.channel_id")
        if self.collected_chapters_db is None:
            missing.append("collected_chapters_db")
        return missing


__all__ = [
    "AppConfig",
    "DEFAULT_WATCHED_MANGAS",
    "DiscordConfig",
    "LOG_LEVELS",
    "LoggingConfig",
    "SourceConfig",
    "SourceSelectors",
]
