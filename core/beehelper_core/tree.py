from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Optional, Protocol, Sequence

from beehelper_core.config import Selectors, split_selectors
from beehelper_core.engine_logger import log_engine

Node = Any


@dataclass(frozen=True)
class Bounds:
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def visible(self) -> bool:
        return self.width > 0 and self.height > 0


EMPTY_BOUNDS = Bounds()


class PageTree(Protocol):
    selector_errors: tuple[type[BaseException], ...]

    def select(self, selector: str, root: Optional[Node] = None) -> Sequence[Node]: ...

    def iter_nodes(self) -> Iterable[Node]: ...

    def node_key(self, node: Node) -> Hashable: ...

    def tag(self, node: Node) -> str: ...

    def text(self, node: Node) -> str: ...

    def class_name(self, node: Node) -> str: ...

    def attribute(self, node: Node, name: str) -> Optional[str]: ...

    def child_count(self, node: Node) -> int: ...

    def bounds(self, node: Node) -> Bounds: ...

    def font_size(self, node: Node) -> Optional[float]: ...

    def input_value(self, node: Node) -> str: ...

    def viewport_height(self) -> float: ...

    def visible_text_length(self) -> int: ...


def _select(tree: PageTree, selector: str, root: Optional[Node]) -> Sequence[Node]:
    try:
        return tree.select(selector, root)
    except tree.selector_errors as exc:
        log_engine(f"Skipping selector {selector!r}: {exc}")
        return ()


def find(tree: PageTree, selectors: str | Selectors, root: Optional[Node] = None) -> Optional[Node]:
    for selector in split_selectors(selectors):
        matches = _select(tree, selector, root)
        if matches:
            return matches[0]
    return None


def find_all(tree: PageTree, selectors: str | Selectors, root: Optional[Node] = None) -> list[Node]:
    results: list[Node] = []
    seen: set[Hashable] = set()
    for selector in split_selectors(selectors):
        for node in _select(tree, selector, root):
            key = tree.node_key(node)
            if key in seen:
                continue
            seen.add(key)
            results.append(node)
    return results


def class_tokens(tree: PageTree, node: Node) -> tuple[str, ...]:
    return tuple(tree.class_name(node).split())
