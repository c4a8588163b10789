from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from chapter_notifier.config import AppConfig, DiscordConfig, LoggingConfig, SourceConfig


def test_defaults() -> None:
    config = AppConfig()
    assert config.watched_mangas == ["One Piece", "Jujutsu Kaisen"]
    assert config.sleep_timer == 15
    assert config.logging.level == "DEBUG"
    assert config.logging.max_size == 50
    assert config.logging.max_backups == 3
    assert config.source.website_url == "https://tcbscans.me"
    assert config.source.request_timeout == 120
    assert config.missing_required() == ["discord.token", "discord.channel_id", "collected_chapters_db"]


def test_watched_mangas_trimmed_and_deduplicated() -> None:
    config = AppConfig(watched_mangas=[" One Piece ", "One Piece", "", "Kagurabachi"])
    assert config.watched_mangas == ["One Piece", "Kagurabachi"]
    assert AppConfig(watched_mangas="One Piece, Jujutsu Kaisen").watched_mangas == [
        "One Piece",
        "Jujutsu Kaisen",
    ]


def test_sleep_timer_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        AppConfig(sleep_timer=0)


@pytest.mark.parametrize(("raw", "expected"), [("debug", "DEBUG"), ("warning", "WARN"), ("TRACE", "TRACE")])
def test_log_level_normalised(raw: str, expected: str) -> None:
    assert LoggingConfig(level=raw).level == expected


def test_unknown_log_level_rejected() -> None:
    with pytest.raises(ValidationError):
        LoggingConfig(level="LOUD")


def test_logging_path_coerced() -> None:
    assert LoggingConfig(path="logs/bot.log").path == Path("logs/bot.log")
    assert LoggingConfig(path="").path is None


def test_error_channel_falls_back_to_release_channel() -> None:
    assert DiscordConfig(channel_id="1").resolved_error_channel_id == "1"
    assert DiscordConfig(channel_id="1", error_channel_id="2").resolved_error_channel_id == "2"
    assert DiscordConfig(channel_id=123456789).channel_id == "123456789"


def test_source_url_validation() -> None:
    assert SourceConfig(website_url="https://tcbscans.me/").website_url == "https://tcbscans.me"
    with pytest.raises(ValidationError):
        SourceConfig(website_url="tcbscans.me")


def test_display_timezone_must_exist() -> None:
    assert AppConfig(display_timezone=" Asia/Tokyo ").display_timezone == "Asia/Tokyo"
    with pytest.raises(ValidationError, match="display_timezone"):
        AppConfig(display_timezone="Europe/Berln")
