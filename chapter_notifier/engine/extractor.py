"""Validation and normalisation of candidate blocks into release records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from html import unescape

import structlog

from .parser import CandidateBlock
from .timefmt import parse_wire_time

RELEASE_TITLE_PATTERN = re.compile(r"^(.+?) Chapter (\d+(?:\.\d+)?)$")
RELEASE_LINK_PATTERN = re.compile(r"^/chapters/\d+/[a-z0-9-]+-chapter-\d+.*$")


class ExtractionError(ValueError):
    """A candidate block could not be turned into a release record."""


class TimestampFormatError(ExtractionError):
    """The release timestamp no longer matches the expected wire format."""


@dataclass(slots=True, frozen=True)
class ReleaseRecord:
    """One observed chapter release."""

    subject_title: str
    sequence_label: str
    detail_title: str
    link: str
    published_at: str

    @property
    def identity_key(self) -> str:
        return f"{self.subject_title} {self.sequence_label}"


def split_release_title(release_title: str) -> tuple[str, str]:
    """Split ``"<manga> Chapter <number>"`` into trimmed manga title and number."""

    match = RELEASE_TITLE_PATTERN.match(release_title)
    if match is None:
        raise ExtractionError(f"release title {release_title!r} does not look like '<title> Chapter <n>'")
    return match.group(1).strip(), match.group(2).strip()


class RecordExtractor:
    """Turn one :class:`CandidateBlock` into a :class:`ReleaseRecord`.

    Every rule failure raises :class:`ExtractionError` and only affects the
    current candidate, except an unparseable timestamp which raises
    :class:`TimestampFormatError` so the caller can fail the whole cycle.
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("chapter_notifier.extractor").bind(
            component="extractor"
        )

    def extract(self, block: CandidateBlock) -> ReleaseRecord:
        release_title = unescape(block.release_title).strip()
        release_link = block.release_link.strip()
        chapter_title = unescape(block.chapter_title).strip()
        release_time = block.release_time.strip()

        if not release_title:
            raise ExtractionError("missing release title")
        if not release_link:
            raise ExtractionError(f"missing release link for {release_title!r}")
        if not release_time:
            raise ExtractionError(f"missing release time for {release_title!r}")
        if not chapter_title:
            self.logger.debug("chapter_title_missing", chapter=release_title)

        subject_title, sequence_label = split_release_title(release_title)

        if not RELEASE_LINK_PATTERN.match(release_link):
            raise ExtractionError(f"release link {release_link!r} has an unexpected shape")

        try:
            parse_wire_time(release_time)
        except ValueError as exc:
            raise TimestampFormatError(
                f"error parsing release time {release_time!r} for {release_title!r}"
            ) from exc

        return ReleaseRecord(
            subject_title=subject_title,
            sequence_label=sequence_label,
            detail_title=chapter_title,
            link=release_link,
            published_at=release_time,
        )


__all__ = [
    "ExtractionError",
    "RecordExtractor",
    "ReleaseRecord",
    "TimestampFormatError",
    "split_release_title",
]
