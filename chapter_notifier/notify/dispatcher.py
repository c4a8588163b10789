"""Release and pipeline-health notifications."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Protocol

import structlog

from ..engine.dedup import DedupStore
from ..engine.extractor import ReleaseRecord
from ..engine.timefmt import DISPLAY_TIMEZONE
from .messages import (
    Notification,
    NotificationError,
    error_notification,
    release_notification,
    resolved_notification,
)


class Notifier(Protocol):
    def send(self, notification: Notification) -> None: ...


@dataclass
class PipelineErrorState:
    """Last reported cycle failure; empty means healthy."""

    last_error_message: str = ""

    @property
    def healthy(self) -> bool:
        return not self.last_error_message


class NotificationDispatcher:
    """Send exactly one notification per new release.

    A release is inserted into the store only after its notification was
    delivered. When delivery fails the release stays unknown and is retried on
    the next cycle.
    """

    def __init__(
        self,
        store: DedupStore,
        notifier: Notifier,
        base_url: str,
        timezone: str = DISPLAY_TIMEZONE,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.base_url = base_url
        self.timezone = timezone
        self.state = PipelineErrorState()
        self._state_lock = Lock()
        self.logger = logger or structlog.get_logger("chapter_notifier.dispatcher").bind(
            component="dispatcher"
        )

    def notify_new_release(self, record: ReleaseRecord) -> bool:
        """Notify and remember ``record``; returns False if it was already known.

        Raises :class:`NotificationError` when delivery fails.
        """

        key = record.identity_key
        with self.store.claim(key):
            if self.store.contains(key):
                self.logger.debug("chapter_already_collected", chapter=key)
                return False
            notification = release_notification(record, self.base_url, self.timezone)
            try:
                self.notifier.send(notification)
            except NotificationError:
                self.logger.error("release_notification_failed", chapter=key, exc_info=True)
                raise
            self.store.insert(key, record)
        self.logger.info("release_notification_sent", chapter=key)
        return True

    def notify_pipeline_error(self, message: str) -> bool:
        """Report a failing cycle once per distinct message."""

        with self._state_lock:
            if message == self.state.last_error_message:
                self.logger.debug("pipeline_error_already_reported", error=message)
                return False
            try:
                self.notifier.send(error_notification(message))
            except NotificationError as exc:
                # state unchanged so the next failing cycle tries again
                self.logger.error("error_notification_failed", error=message, reason=str(exc))
                return False
            self.state.last_error_message = message
        self.logger.info("error_notification_sent", error=message)
        return True

    def notify_pipeline_resolved(self) -> bool:
        """Report recovery after a previously reported failure."""

        with self._state_lock:
            previous = self.state.last_error_message
            if not previous:
                return False
            try:
                self.notifier.send(resolved_notification(previous))
            except NotificationError as exc:
                self.logger.error("resolved_notification_failed", reason=str(exc))
                return False
            self.state.last_error_message = ""
        self.logger.info("resolved_notification_sent", previous_error=previous)
        return True

    def record_cycle_outcome(self, error: str | None) -> None:
        if error:
            self.notify_pipeline_error(error)
        else:
            self.notify_pipeline_resolved()


__all__ = ["NotificationDispatcher", "Notifier", "PipelineErrorState"]
