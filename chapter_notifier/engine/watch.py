"""Watch list membership."""

from __future__ import annotations

from typing import Iterable


class WatchFilter:
    """Accept only releases whose manga title is on the watch list.

    Matching is exact and case-sensitive: "One Piece" does not match
    "One Piece Dokoda?!".
    """

    def __init__(self, watched: Iterable[str]) -> None:
        self._ordered = tuple(dict.fromkeys(watched))
        self._members = frozenset(self._ordered)

    @property
    def watched(self) -> tuple[str, ...]:
        return self._ordered

    def accepts(self, subject_title: str) -> bool:
        return subject_title in self._members


__all__ = ["WatchFilter"]
