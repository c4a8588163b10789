"""Pytest fixtures shared across the chapter-notifier test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from chapter_notifier.config import AppConfig, ConfigLocator, ConfigRepository, DiscordConfig
from chapter_notifier.engine import CandidateBlock, DedupStore, ReleaseRecord
from chapter_notifier.infra import ChapterRepository, SQLiteManager
from chapter_notifier.notify import Notification, NotificationError


class RecordingNotifier:
    """Notifier double collecting sent notifications; can be told to fail."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []
        self.fail_with: str | None = None

    def send(self, notification: Notification) -> None:
        if self.fail_with is not None:
            raise NotificationError(self.fail_with)
        self.sent.append(notification)


def listing_html(blocks: Iterable[CandidateBlock]) -> str:
    """Render candidate blocks the way the release page marks them up."""

    cards = []
    for block in blocks:
        cards.append(
            f"""
            <div class="bg-card border border-border rounded p-3 mb-3">
              <a href="{block.release_link}" class="text-white text-lg font-bold">{block.release_title}</a>
              <div class="mb-3"><div>{block.chapter_title}</div></div>
              <time-ago datetime="{block.release_time}"></time-ago>
            </div>
            """
        )
    return "<html><body><div class='grid'>" + "".join(cards) + "</div></body></html>"


@pytest.fixture
def one_piece_block() -> CandidateBlock:
    return CandidateBlock(
        release_title="One Piece Chapter 1100",
        release_link="/chapters/123/one-piece-chapter-1100",
        chapter_title="Final Arc",
        release_time="2024-05-01T12:00:00Z",
    )


@pytest.fixture
def make_record() -> Callable[..., ReleaseRecord]:
    def _builder(**overrides: Any) -> ReleaseRecord:
        base: dict[str, Any] = {
            "subject_title": "One Piece",
            "sequence_label": "1100",
            "detail_title": "Final Arc",
            "link": "/chapters/123/one-piece-chapter-1100",
            "published_at": "2024-05-01T12:00:00Z",
        }
        base.update(overrides)
        return ReleaseRecord(**base)

    return _builder


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "collected_chapters.db"


@pytest.fixture
def chapter_repository(db_path: Path) -> Iterable[ChapterRepository]:
    manager = SQLiteManager()
    repository = ChapterRepository(manager, db_path)
    yield repository
    manager.close_all()


@pytest.fixture
def store(chapter_repository: ChapterRepository) -> DedupStore:
    return DedupStore(chapter_repository)


@pytest.fixture
def sample_app_config(db_path: Path) -> AppConfig:
    return AppConfig(
        discord=DiscordConfig(token="bot-token", channel_id="111", error_channel_id="222"),
        collected_chapters_db=db_path,
        watched_mangas=["One Piece", "Jujutsu Kaisen"],
    )


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> ConfigRepository:
    return ConfigRepository(ConfigLocator(tmp_path / "config"), environ={})


@pytest.fixture
def render_listing() -> Callable[[Iterable[CandidateBlock]], str]:
    return listing_html
