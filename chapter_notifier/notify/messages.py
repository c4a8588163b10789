"""Outbound notification shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..engine.extractor import ReleaseRecord
from ..engine.timefmt import DISPLAY_TIMEZONE, format_display_time

RELEASE_COLOR = 3447003
ERROR_COLOR = 10038562
RESOLVED_COLOR = 5763719


class NotificationChannel(str, Enum):
    """Which configured channel a notification goes to."""

    RELEASE = "release"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notification:
    title: str
    description: str
    url: str = ""
    footer: str = ""
    color: int = RELEASE_COLOR
    channel: NotificationChannel = NotificationChannel.RELEASE


class NotificationError(RuntimeError):
    """An outbound notification could not be delivered."""


def release_description(record: ReleaseRecord) -> str:
    if record.detail_title:
        return f"Chapter {record.sequence_label}: {record.detail_title}"
    return f"Chapter {record.sequence_label}"


def release_notification(
    record: ReleaseRecord, base_url: str, timezone: str = DISPLAY_TIMEZONE
) -> Notification:
    return Notification(
        title=record.subject_title,
        description=release_description(record),
        url=base_url.rstrip("/") + record.link,
        footer="Released at " + format_display_time(record.published_at, timezone),
        color=RELEASE_COLOR,
        channel=NotificationChannel.RELEASE,
    )


def error_notification(message: str) -> Notification:
    return Notification(
        title="Error checking for new releases",
        description=message,
        color=ERROR_COLOR,
        channel=NotificationChannel.ERROR,
    )


def resolved_notification(previous_message: str) -> Notification:
    return Notification(
        title="Release checks are working again",
        description=f"Resolved: {previous_message}" if previous_message else "Resolved",
        color=RESOLVED_COLOR,
        channel=NotificationChannel.ERROR,
    )


__all__ = [
    "ERROR_COLOR",
    "Notification",
    "NotificationChannel",
    "NotificationError",
    "RELEASE_COLOR",
    "RESOLVED_COLOR",
    "error_notification",
    "release_description",
    "release_notification",
    "resolved_notification",
]
