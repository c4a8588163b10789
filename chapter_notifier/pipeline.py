"""Poll cycle wiring together fetching, extraction, filtering, dedup and notification."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from threading import Lock

import structlog

from .engine import (
    DedupStore,
    ExtractionError,
    FetchError,
    Fetcher,
    Parser,
    RecordExtractor,
    ReleaseRecord,
    TimestampFormatError,
    WatchFilter,
)
from .infra import StorageError
from .notify import NotificationDispatcher, NotificationError


class PipelineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(slots=True)
class CycleSummary:
    """Counters for one cycle; ``error`` is set when the cycle failed."""

    candidates: int = 0
    rejected: int = 0
    unwatched: int = 0
    duplicates: int = 0
    notified: int = 0
    failed: int = 0
    saved: bool = False
    skipped: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.skipped

    def as_dict(self) -> dict:
        return asdict(self)


class ReleasePipeline:
    """Run fetch → extract → filter → dedup → notify → persist cycles."""

    def __init__(
        self,
        fetcher: Fetcher,
        parser: Parser,
        extractor: RecordExtractor,
        watch_filter: WatchFilter,
        store: DedupStore,
        dispatcher: NotificationDispatcher,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser
        self.extractor = extractor
        self.watch_filter = watch_filter
        self.store = store
        self.dispatcher = dispatcher
        self.logger = logger or structlog.get_logger("chapter_notifier.pipeline").bind(
            component="pipeline"
        )
        self._cycle_lock = Lock()

    @property
    def state(self) -> PipelineState:
        return PipelineState.RUNNING if self._cycle_lock.locked() else PipelineState.IDLE

    def run_cycle(self) -> CycleSummary:
        if not self._cycle_lock.acquire(blocking=False):
            self.logger.warning("cycle_skipped_already_running")
            return CycleSummary(skipped=True)
        try:
            return self._run_cycle()
        finally:
            self._cycle_lock.release()

    def _run_cycle(self) -> CycleSummary:
        summary = CycleSummary()
        self.logger.info("cycle_start", watched=list(self.watch_filter.watched))
        try:
            response = self.fetcher.fetch()
            blocks = self.parser.parse_candidates(response.text)
            summary.candidates = len(blocks)
            records = self._extract(blocks, summary)
            self._dispatch(records, summary)
        except (FetchError, TimestampFormatError) as exc:
            summary.error = str(exc)
            self.logger.error("cycle_failed", error=summary.error)
        except Exception as exc:  # noqa: BLE001
            summary.error = str(exc) or exc.__class__.__name__
            self.logger.error("cycle_failed", error=summary.error, exc_info=True)

        self.dispatcher.record_cycle_outcome(summary.error)
        summary.saved = self.flush()
        self.logger.info("cycle_done", **summary.as_dict())
        return summary

    def _extract(self, blocks, summary: CycleSummary) -> list[ReleaseRecord]:
        records: list[ReleaseRecord] = []
        for block in blocks:
            try:
                records.append(self.extractor.extract(block))
            except TimestampFormatError:
                raise
            except ExtractionError as exc:
                summary.rejected += 1
                self.logger.warning(
                    "candidate_rejected", chapter=block.release_title, reason=str(exc)
                )
        return records

    def _dispatch(self, records: list[ReleaseRecord], summary: CycleSummary) -> None:
        for record in records:
            if not self.watch_filter.accepts(record.subject_title):
                summary.unwatched += 1
                self.logger.debug("manga_not_watched", chapter=record.identity_key)
                continue
            try:
                sent = self.dispatcher.notify_new_release(record)
            except NotificationError as exc:
                summary.failed += 1
                if summary.error is None:
                    summary.error = str(exc)
                continue
            if sent:
                summary.notified += 1
            else:
                summary.duplicates += 1

    def flush(self) -> bool:
        """Persist the store; failures are logged and retried on the next flush."""

        try:
            count = self.store.save_all()
        except StorageError as exc:
            self.logger.error("store_flush_failed", error=str(exc))
            return False
        self.logger.debug("store_flushed", chapters=count)
        return True


__all__ = ["CycleSummary", "PipelineState", "ReleasePipeline"]
