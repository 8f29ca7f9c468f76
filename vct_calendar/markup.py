"""Narrow query interface over parsed HTML.

The extractors only need to select descendants, look backwards for a
heading, read text and attributes and test classes. ``Fragment``
describes that capability set; ``SoupFragment`` provides it on top of
BeautifulSoup.
"""

from __future__ import annotations

from typing import Protocol

from bs4 import BeautifulSoup, Comment, NavigableString, Tag


class Fragment(Protocol):
    def select(self, selector: str) -> list[Fragment]: ...

    def select_one(self, selector: str) -> Fragment | None: ...

    def previous(self, selector: str) -> Fragment | None: ...

    def text(self, selector: str | None = None) -> str: ...

    def own_text(self) -> str: ...

    def first_text(self, selector: str | None = None) -> str: ...

    def last_text(self, selector: str | None = None) -> str: ...

    def attr(self, name: str, default: str = "") -> str: ...

    def has_class(self, name: str) -> bool: ...


class SoupFragment:
    """A BeautifulSoup tag exposed through the ``Fragment`` interface."""

    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    def __repr__(self) -> str:
        return f"SoupFragment(<{self.tag.name}>)"

    def select(self, selector: str) -> list[SoupFragment]:
        return [SoupFragment(t) for t in self.tag.select(selector)]

    def select_one(self, selector: str) -> SoupFragment | None:
        found = self.tag.select_one(selector)
        return SoupFragment(found) if found is not None else None

    def previous(self, selector: str) -> SoupFragment | None:
        """Nearest preceding sibling matching ``selector``."""
        for sibling in self.tag.find_previous_siblings():
            if isinstance(sibling, Tag) and sibling.css.match(selector):
                return SoupFragment(sibling)
        return None

    def _target(self, selector: str | None) -> Tag | None:
        return self.tag if selector is None else self.tag.select_one(selector)

    def text(self, selector: str | None = None) -> str:
        """Whitespace-collapsed text of the matched tag, ``""`` if none."""
        target = self._target(selector)
        if target is None:
            return ""
        return " ".join(target.get_text(" ", strip=True).split())

    def own_text(self) -> str:
        """Text of the direct string children only, nested tags dropped."""
        parts = [
            s.strip()
            for s in self.tag.children
            if isinstance(s, NavigableString) and not isinstance(s, Comment)
        ]
        return " ".join(p for p in parts if p)

    def first_text(self, selector: str | None = None) -> str:
        """Text of the first non-blank child node (string or tag)."""
        return _node_text(self._target(selector), first=True)

    def last_text(self, selector: str | None = None) -> str:
        """Text of the last non-blank child node."""
        return _node_text(self._target(selector), first=False)

    def attr(self, name: str, default: str = "") -> str:
        value = self.tag.get(name)
        if value is None:
            return default
        # multi-valued attributes such as class come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return str(value).strip()

    def has_class(self, name: str) -> bool:
        return name in (self.tag.get("class") or [])


def _node_text(tag: Tag | None, first: bool) -> str:
    if tag is None:
        return ""
    nodes = [n for n in tag.children if _text_of(n)]
    if not nodes:
        return ""
    return _text_of(nodes[0] if first else nodes[-1])


def _text_of(node) -> str:
    if isinstance(node, Tag):
        return " ".join(node.get_text(" ", strip=True).split())
    return " ".join(str(node).split())


def parse_markup(html: str) -> SoupFragment:
    """Parse raw HTML into a queryable root fragment."""
    soup = BeautifulSoup(html, "html.parser")
    return SoupFragment(soup)
