"""Typer CLI entrypoint for chapter-notifier."""

from __future__ import annotations

import signal
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import AppConfig, ConfigError, ConfigLocator, ConfigRepository
from .engine import DedupStore, Fetcher, Parser, RecordExtractor, WatchFilter
from .infra import ChapterRepository, SQLiteManager, StorageError, UserAgentPool
from .logging_conf import component_logger, configure_logging
from .notify import DiscordNotifier, NotificationDispatcher
from .pipeline import CycleSummary, ReleasePipeline
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="Watch a manga release page and post new chapters to Discord.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class CliOptions:
    config_dir: Path | None = None
    verbose: bool = False


@dataclass
class AppState:
    config: AppConfig
    storage: SQLiteManager
    chapters: ChapterRepository
    store: DedupStore
    fetcher: Fetcher
    notifier: DiscordNotifier
    dispatcher: NotificationDispatcher
    pipeline: ReleasePipeline
    scheduler: APSchedulerAdapter


def load_config(options: CliOptions, require_complete: bool = True) -> AppConfig:
    repository = ConfigRepository(ConfigLocator(options.config_dir))
    return repository.load(require_complete=require_complete)


def build_state(config: AppConfig) -> AppState:
    """Open storage, hydrate the dedup store and wire the pipeline.

    Raises ``StorageError`` when the chapter database cannot be opened or
    read; starting without known state would re-announce every chapter.
    """

    storage = SQLiteManager()
    chapters = ChapterRepository(storage, config.collected_chapters_db)
    store = DedupStore(chapters)
    try:
        loaded = store.load_all()
    except StorageError:
        storage.close_all()
        raise
    component_logger("startup").info("collected_chapters_loaded", chapters=len(loaded))

    fetcher = Fetcher(config.source, UserAgentPool())
    notifier = DiscordNotifier(config.discord)
    dispatcher = NotificationDispatcher(
        store,
        notifier,
        base_url=config.source.website_url,
        timezone=config.display_timezone,
    )
    pipeline = ReleasePipeline(
        fetcher=fetcher,
        parser=Parser(config.source.selectors),
        extractor=RecordExtractor(),
        watch_filter=WatchFilter(config.watched_mangas),
        store=store,
        dispatcher=dispatcher,
    )
    return AppState(
        config=config,
        storage=storage,
        chapters=chapters,
        store=store,
        fetcher=fetcher,
        notifier=notifier,
        dispatcher=dispatcher,
        pipeline=pipeline,
        scheduler=APSchedulerAdapter(),
    )


def shutdown_state(state: AppState) -> None:
    """Let the running cycle finish, flush the store and release resources."""

    state.scheduler.shutdown(wait=True)
    state.pipeline.flush()
    state.fetcher.close()
    state.notifier.close()
    state.storage.close_all()


def _options(ctx: typer.Context) -> CliOptions:
    return ctx.obj if isinstance(ctx.obj, CliOptions) else CliOptions()


def _startup(ctx: typer.Context) -> AppState:
    options = _options(ctx)
    try:
        config = load_config(options)
        configure_logging(config.logging, verbose=options.verbose)
        return build_state(config)
    except (ConfigError, StorageError) as exc:
        console.print(f"Startup failed: {exc}", style="red")
        raise typer.Exit(code=1) from exc


def _render_summary(summary: CycleSummary) -> Table:
    table = Table(title="Release check", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("field", style="cyan")
    table.add_column("value")
    for key, value in summary.as_dict().items():
        table.add_row(key, "-" if value is None else str(value))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", help="Directory holding config.yaml."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    ctx.obj = CliOptions(config_dir=config_dir, verbose=verbose)


@app.command("start", help="Check for new chapters every sleep_timer minutes until stopped.")
def start(ctx: typer.Context) -> None:
    state = _startup(ctx)
    logger = component_logger("app")
    stop = threading.Event()

    def _request_stop(signum, _frame) -> None:  # noqa: ANN001
        logger.info("shutdown_requested", signal=signal.Signals(signum).name)
        stop.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _request_stop)

    state.scheduler.schedule_interval(state.pipeline.run_cycle, state.config.sleep_timer)
    state.scheduler.start()
    logger.info(
        "chapter_notifier_started",
        version=__version__,
        watched=state.config.watched_mangas,
        sleep_timer=state.config.sleep_timer,
    )
    try:
        stop.wait()
    finally:
        shutdown_state(state)
        logger.info("chapter_notifier_stopped")


@app.command("check", help="Run a single release check and print its summary.")
def check(ctx: typer.Context) -> None:
    state = _startup(ctx)
    try:
        summary = state.pipeline.run_cycle()
    finally:
        shutdown_state(state)
    console.print(_render_summary(summary))
    if summary.error:
        raise typer.Exit(code=1)


@app.command("history", help="List collected chapters.")
def history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", min=1, help="Show the last N chapters."),
) -> None:
    try:
        config = load_config(_options(ctx), require_complete=False)
        if config.collected_chapters_db is None:
            raise ConfigError("collected_chapters_db must be provided")
        storage = SQLiteManager()
        try:
            rows = ChapterRepository(storage, config.collected_chapters_db).list_chapters()
        finally:
            storage.close_all()
    except (ConfigError, StorageError) as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc
    if not rows:
        console.print("No chapters collected yet.", style="dim")
        return
    table = Table(title=f"Collected chapters · {len(rows)} total", box=box.SIMPLE_HEAD)
    table.add_column("Chapter", style="cyan", no_wrap=True)
    table.add_column("Title", style="magenta")
    table.add_column("Released", style="green")
    table.add_column("Link", style="dim", overflow="fold")
    for key, fields in rows[-limit:]:
        table.add_row(key, fields["detail_title"] or "-", fields["published_at"], fields["link"])
    console.print(table)


@app.command("init-config", help="Write a config template if none exists.")
def init_config(ctx: typer.Context) -> None:
    repository = ConfigRepository(ConfigLocator(_options(ctx).config_dir))
    existed = repository.locator.config_path().exists()
    path = repository.ensure_template()
    if existed:
        console.print(f"Config already exists: {path}", style="yellow")
    else:
        console.print(f"Config template written to {path}", style="green")


@app.command("version", help="Print the installed version.")
def version() -> None:
    console.print(f"chapter-notifier {__version__}")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
