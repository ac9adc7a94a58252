from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Optional

from beehelper_core.config import SelectorConfig
from beehelper_core.engine_logger import log_engine
from beehelper_core.text import is_ui_text
from beehelper_core.tree import Node, PageTree, find, find_all

PROMINENT_SELECTORS = (
    "h1",
    "h2",
    "h3",
    ".word",
    ".question",
    ".vocab",
    '[class*="word"]',
    '[class*="question"]',
    ".big",
    ".large",
    ".main",
    ".primary",
    "strong",
    "b",
    "em",
)
INTERACTIVE_TAGS = frozenset({"input", "button", "a", "textarea", "select", "option"})
SKIPPED_SCAN_TAGS = INTERACTIVE_TAGS | frozenset(
    {"script", "style", "noscript", "template", "html", "head", "body", "title", "meta", "link"}
)
MAX_PROMINENT_CHILDREN = 3
MAX_SCAN_CHILDREN = 2
MIN_QUESTION_LENGTH = 2
MAX_QUESTION_LENGTH = 100
DEFAULT_FONT_SIZE = 12.0

_HEADING_RE = re.compile(r"^h[1-6]$")
_QUESTION_CLASS_RE = re.compile(r"word|question|vocab", re.IGNORECASE)


@dataclass(frozen=True)
class TextNodeInfo:
    text: str
    tag: str
    class_name: str
    font_size: float
    top: float
    in_viewport: bool


def locate_question(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> Optional[str]:
    question = _scan_prominent(tree)
    if question:
        log_engine(f"Found question via prominent element: {question}")
        return question
    question = _score_leaves(tree)
    if question:
        log_engine(f"Found question via scoring: {question}")
        return question
    return _configured_fallback(tree, selectors or SelectorConfig())


def score_node(tree: PageTree, node: Node) -> Optional[float]:
    tag = tree.tag(node)
    if tag in SKIPPED_SCAN_TAGS:
        return None
    if tree.child_count(node) > MAX_SCAN_CHILDREN:
        return None
    text = tree.text(node)
    if len(text) < MIN_QUESTION_LENGTH or len(text) > MAX_QUESTION_LENGTH:
        return None
    if is_ui_text(text):
        return None
    bounds = tree.bounds(node)
    if not bounds.visible:
        return None
    score = tree.font_size(node) or DEFAULT_FONT_SIZE
    if 0 <= bounds.top < tree.viewport_height() / 2:
        score *= 2
    if _HEADING_RE.match(tag):
        score *= 1.5
    if _QUESTION_CLASS_RE.search(tree.class_name(node)):
        score *= 2
    return score


def describe_text_nodes(tree: PageTree, *, limit: Optional[int] = None) -> list[TextNodeInfo]:
    viewport_height = tree.viewport_height()
    infos: list[TextNodeInfo] = []
    for node in tree.iter_nodes():
        if tree.tag(node) in {"script", "style"}:
            continue
        if tree.child_count(node) > MAX_SCAN_CHILDREN:
            continue
        text = tree.text(node)
        if len(text) <= 1 or len(text) >= MAX_QUESTION_LENGTH:
            continue
        bounds = tree.bounds(node)
        if not bounds.visible:
            continue
        infos.append(
            TextNodeInfo(
                text=text[:50],
                tag=tree.tag(node),
                class_name=tree.class_name(node)[:30],
                font_size=tree.font_size(node) or DEFAULT_FONT_SIZE,
                top=round(bounds.top),
                in_viewport=0 <= bounds.top < viewport_height,
            )
        )
    infos.sort(key=lambda info: info.font_size, reverse=True)
    return infos[:limit] if limit is not None else infos


def _scan_prominent(tree: PageTree) -> Optional[str]:
    for selector in PROMINENT_SELECTORS:
        for node in find_all(tree, (selector,)):
            if tree.tag(node) in INTERACTIVE_TAGS:
                continue
            if tree.child_count(node) > MAX_PROMINENT_CHILDREN:
                continue
            text = tree.text(node)
            if not text or len(text) >= MAX_QUESTION_LENGTH:
                continue
            if is_ui_text(text):
                continue
            if tree.bounds(node).visible:
                return text
    return None


def _score_leaves(tree: PageTree) -> Optional[str]:
    best_text: Optional[str] = None
    best_score = 0.0
    for node in tree.iter_nodes():
        score = score_node(tree, node)
        if score is None:
            continue
        if score > best_score:
            best_score = score
            best_text = tree.text(node)
    return best_text


def _configured_fallback(tree: PageTree, selectors: SelectorConfig) -> Optional[str]:
    node = find(tree, selectors.question_word)
    if node is None:
        return None
    text = tree.text(node)
    if text and not is_ui_text(text):
        return text
    return None
