"""DOM parsing of the release listing into raw candidate blocks."""

from __future__ import annotations

from dataclasses import dataclass

from selectolax.parser import HTMLParser, Node

from ..config import SourceSelectors


@dataclass(slots=True, frozen=True)
class CandidateBlock:
    """Raw, as-scraped fields of one release card; empty string when absent."""

    release_title: str = ""
    release_link: str = ""
    chapter_title: str = ""
    release_time: str = ""


class Parser:
    """Split a listing page into candidate blocks using configured selectors."""

    def __init__(self, selectors: SourceSelectors | None = None) -> None:
        self.selectors = selectors or SourceSelectors()

    def parse_candidates(self, html: str) -> list[CandidateBlock]:
        parser = HTMLParser(html)
        return [self._parse_block(node) for node in parser.css(self.selectors.block)]

    def _parse_block(self, node: Node) -> CandidateBlock:
        sel = self.selectors
        return CandidateBlock(
            release_title=self._child_text(node, sel.release_title),
            release_link=self._child_attr(node, sel.release_link, sel.release_link_attr),
            chapter_title=self._child_text(node, sel.chapter_title),
            release_time=self._child_attr(node, sel.release_time, sel.release_time_attr),
        )

    @staticmethod
    def _child_text(node: Node, selector: str) -> str:
        child = node.css_first(selector)
        if child is None:
            return ""
        return child.text(separator=" ", strip=True)

    @staticmethod
    def _child_attr(node: Node, selector: str, attr: str) -> str:
        child = node.css_first(selector)
        if child is None:
            return ""
        return (child.attributes.get(attr) or "").strip()


__all__ = ["CandidateBlock", "Parser"]
