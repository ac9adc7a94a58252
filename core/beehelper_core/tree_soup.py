from __future__ import annotations

import re
from typing import Hashable, Iterable, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Comment, Tag
import soupsieve

from beehelper_core.tree import EMPTY_BOUNDS, Bounds

DEFAULT_VIEWPORT_HEIGHT = 800.0
DEFAULT_BOUNDS = Bounds(left=0.0, top=0.0, width=100.0, height=20.0)

_INVISIBLE_TAGS = {"head", "script", "style", "template", "noscript", "title", "meta", "link"}
_FONT_SIZE_RE = re.compile(r"font-size\s*:\s*([\d.]+)\s*px", re.IGNORECASE)
_DISPLAY_NONE_RE = re.compile(r"(display\s*:\s*none|visibility\s*:\s*hidden)", re.IGNORECASE)


def _parse_bounds(value: str) -> Optional[Bounds]:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 4:
        return None
    try:
        left, top, width, height = (float(part) for part in parts)
    except ValueError:
        return None
    return Bounds(left=left, top=top, width=width, height=height)


class SoupPageTree:
    """Page snapshot parsed with BeautifulSoup.

    Static HTML has no layout, so geometry comes from hints on the markup:
    ``data-bounds="left,top,width,height"`` (inherited from the nearest ancestor
    that declares it) and inline ``font-size: NNpx`` (inherited the same way).
    Elements inside ``<head>`` or hidden via ``hidden``/``display:none`` report
    empty bounds.
    """

    selector_errors = (soupsieve.SelectorSyntaxError, NotImplementedError)

    def __init__(
        self,
        markup: str | BeautifulSoup,
        *,
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
        parser: str = "html.parser",
    ) -> None:
        self._soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup, parser)
        self._viewport_height = float(viewport_height)

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def select(self, selector: str, root: Optional[Tag] = None) -> Sequence[Tag]:
        scope = root if root is not None else self._soup
        return scope.select(selector)

    def iter_nodes(self) -> Iterable[Tag]:
        return self._soup.find_all(True)

    def node_key(self, node: Tag) -> Hashable:
        return id(node)

    def tag(self, node: Tag) -> str:
        return str(node.name or "").lower()

    def text(self, node: Tag) -> str:
        if node is None:
            return ""
        return node.get_text().strip()

    def class_name(self, node: Tag) -> str:
        value = node.get("class")
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return str(value or "")

    def attribute(self, node: Tag, name: str) -> Optional[str]:
        value = node.get(name)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return str(value)

    def child_count(self, node: Tag) -> int:
        return sum(1 for child in node.children if isinstance(child, Tag))

    def bounds(self, node: Tag) -> Bounds:
        if self._is_hidden(node):
            return EMPTY_BOUNDS
        for current in self._lineage(node):
            hint = current.get("data-bounds")
            if hint:
                parsed = _parse_bounds(str(hint))
                if parsed is not None:
                    return parsed
        return DEFAULT_BOUNDS

    def font_size(self, node: Tag) -> Optional[float]:
        for current in self._lineage(node):
            match = _FONT_SIZE_RE.search(str(current.get("style") or ""))
            if match:
                return float(match.group(1))
        return None

    def input_value(self, node: Tag) -> str:
        if node is None:
            return ""
        if self.tag(node) == "textarea":
            return node.get_text()
        return str(node.get("value") or "")

    def viewport_height(self) -> float:
        return self._viewport_height

    def visible_text_length(self) -> int:
        body = self._soup.body or self._soup
        total = 0
        for string in body.find_all(string=True):
            if isinstance(string, Comment):
                continue
            parent = string.parent
            if parent is not None and self._is_hidden(parent):
                continue
            total += len(string.strip())
        return total

    def _lineage(self, node: Tag) -> Iterable[Tag]:
        current = node
        while isinstance(current, Tag) and current is not self._soup:
            yield current
            current = current.parent

    def _is_hidden(self, node: Tag) -> bool:
        for current in self._lineage(node):
            if self.tag(current) in _INVISIBLE_TAGS:
                return True
            if current.has_attr("hidden"):
                return True
            if _DISPLAY_NONE_RE.search(str(current.get("style") or "")):
                return True
        return False


HIGHLIGHT_CLASSES = ("wh-highlighted", "wh-correct")


class SoupRenderer:
    """Applies renderer writes to the parsed snapshot itself."""

    def __init__(self, tree: SoupPageTree) -> None:
        self._tree = tree
        self.clicked: list[Tag] = []
        self.statuses: list[str] = []

    def highlight(self, node: Tag) -> None:
        classes = list(node.get("class") or [])
        for name in HIGHLIGHT_CLASSES:
            if name not in classes:
                classes.append(name)
        node["class"] = classes

    def set_input_value(self, node: Tag, text: str) -> None:
        if self._tree.tag(node) == "textarea":
            node.string = text
        else:
            node["value"] = text

    def click(self, node: Tag) -> None:
        self.clicked.append(node)

    def clear_highlights(self) -> None:
        for node in self._tree.soup.select(".wh-highlighted"):
            remaining = [name for name in node.get("class") or [] if name not in HIGHLIGHT_CLASSES]
            if remaining:
                node["class"] = remaining
            else:
                del node["class"]
        for node in self._tree.soup.select("[data-wh-hint]"):
            del node["data-wh-hint"]

    def show_hint(self, node: Optional[Tag], text: str) -> None:
        if node is not None:
            node["data-wh-hint"] = text

    def show_status(self, text: str) -> None:
        self.statuses.append(text)
