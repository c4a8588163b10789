from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import yaml
from typer.testing import CliRunner

from chapter_notifier import __version__
from chapter_notifier.app import app
from chapter_notifier.config import ConfigError
from chapter_notifier.infra import ChapterRepository, SQLiteManager, StorageError
from chapter_notifier.pipeline import CycleSummary


class StubPipeline:
    def __init__(self, summary: CycleSummary) -> None:
        self.summary = summary
        self.calls = 0
        self.flushed = False

    def run_cycle(self) -> CycleSummary:
        self.calls += 1
        return self.summary

    def flush(self) -> bool:
        self.flushed = True
        return True


def make_state(config, summary: CycleSummary) -> SimpleNamespace:
    closed: list[str] = []
    return SimpleNamespace(
        config=config,
        pipeline=StubPipeline(summary),
        scheduler=SimpleNamespace(shutdown=lambda wait=True: closed.append("scheduler")),
        fetcher=SimpleNamespace(close=lambda: closed.append("fetcher")),
        notifier=SimpleNamespace(close=lambda: closed.append("notifier")),
        storage=SimpleNamespace(close_all=lambda: closed.append("storage")),
        closed=closed,
    )


def patch_startup(monkeypatch, config, state) -> None:
    monkeypatch.setattr("chapter_notifier.app.load_config", lambda options, require_complete=True: config)
    monkeypatch.setattr("chapter_notifier.app.configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr("chapter_notifier.app.build_state", lambda cfg: state)


def test_cli_version() -> None:
    result = CliRunner().invoke(app, ["version"])
    assert result.exit_code == 0, result.stdout
    assert __version__ in result.stdout


def test_cli_init_config(tmp_path: Path) -> None:
    runner = CliRunner()
    config_dir = tmp_path / "cfg"
    result = runner.invoke(app, ["--config-dir", str(config_dir), "init-config"])
    assert result.exit_code == 0, result.stdout
    assert (config_dir / "config.yaml").exists()
    assert "template written" in result.stdout

    again = runner.invoke(app, ["--config-dir", str(config_dir), "init-config"])
    assert again.exit_code == 0
    assert "already exists" in again.stdout


def test_cli_check_success(monkeypatch, sample_app_config) -> None:
    state = make_state(sample_app_config, CycleSummary(candidates=2, notified=1, saved=True))
    patch_startup(monkeypatch, sample_app_config, state)

    result = CliRunner().invoke(app, ["check"])
    assert result.exit_code == 0, result.stdout
    assert state.pipeline.calls == 1
    assert state.pipeline.flushed
    assert state.closed == ["scheduler", "fetcher", "notifier", "storage"]
    assert "notified" in result.stdout


def test_cli_check_failed_cycle_exits_nonzero(monkeypatch, sample_app_config) -> None:
    state = make_state(sample_app_config, CycleSummary(error="unexpected status 503"))
    patch_startup(monkeypatch, sample_app_config, state)

    result = CliRunner().invoke(app, ["check"])
    assert result.exit_code == 1
    assert "unexpected status 503" in result.stdout
    assert state.closed


def test_cli_startup_config_error(monkeypatch) -> None:
    def broken(options, require_complete=True):
        raise ConfigError("discord.token must be provided")

    monkeypatch.setattr("chapter_notifier.app.load_config", broken)
    result = CliRunner().invoke(app, ["check"])
    assert result.exit_code == 1
    assert "Startup failed" in result.stdout


def test_cli_startup_storage_error(monkeypatch, sample_app_config) -> None:
    def broken(config):
        raise StorageError("could not open chapter database")

    monkeypatch.setattr("chapter_notifier.app.load_config", lambda options, require_complete=True: sample_app_config)
    monkeypatch.setattr("chapter_notifier.app.configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr("chapter_notifier.app.build_state", broken)
    result = CliRunner().invoke(app, ["start"])
    assert result.exit_code == 1
    assert "could not open chapter database" in result.stdout


def test_cli_history(tmp_path: Path, make_record) -> None:
    config_dir = tmp_path / "cfg"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(
        yaml.safe_dump({"collected_chapters_db": "chapters.db"}), encoding="utf-8"
    )
    manager = SQLiteManager()
    repository = ChapterRepository(manager, config_dir / "chapters.db")
    for sequence in ("1099", "1100"):
        record = make_record(sequence_label=sequence, link=f"/c/{sequence}")
        repository.upsert_chapter(
            record.identity_key,
            {
                "subject_title": record.subject_title,
                "sequence_label": record.sequence_label,
                "detail_title": record.detail_title,
                "link": record.link,
                "published_at": record.published_at,
            },
        )
    manager.close_all()

    runner = CliRunner()
    result = runner.invoke(app, ["--config-dir", str(config_dir), "history", "--limit", "1"])
    assert result.exit_code == 0, result.stdout
    assert "One Piece 1100" in result.stdout
    assert "One Piece 1099" not in result.stdout


def test_cli_history_empty(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["--config-dir", str(tmp_path), "history"])
    assert result.exit_code == 0, result.stdout
    assert "No chapters collected yet." in result.stdout
