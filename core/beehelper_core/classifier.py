from __future__ import annotations

from enum import Enum
from typing import Optional

from beehelper_core.config import SelectorConfig
from beehelper_core.tree import Node, PageTree, find, find_all

MAX_OPTION_LENGTH = 200
MIN_SELECTION_OPTIONS = 2


class ExerciseMode(Enum):
    SELECTION = "selection"
    TYPING = "typing"
    GAME = "game"
    TEST = "test"
    VOCABULARY = "vocabulary"
    NONE = "none"


def find_answer_options(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> list[Node]:
    selectors = selectors or SelectorConfig()
    options = []
    for node in find_all(tree, selectors.answer_options):
        text = tree.text(node)
        if 0 < len(text) < MAX_OPTION_LENGTH:
            options.append(node)
    return options


def find_answer_input(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> Optional[Node]:
    selectors = selectors or SelectorConfig()
    return find(tree, selectors.answer_input)


def extract_word_pairs(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> list[tuple[str, str]]:
    selectors = selectors or SelectorConfig()
    pairs: list[tuple[str, str]] = []
    for item in find_all(tree, selectors.word_pair):
        source = find(tree, selectors.source_word, root=item)
        target = find(tree, selectors.target_word, root=item)
        if source is not None and target is not None:
            source_text = tree.text(source)
            target_text = tree.text(target)
        else:
            cells = find_all(tree, selectors.pair_cells, root=item)
            if len(cells) < 2:
                continue
            source_text = tree.text(cells[0])
            target_text = tree.text(cells[1])
        if source_text and target_text:
            pairs.append((source_text, target_text))
    return pairs


def classify(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> ExerciseMode:
    selectors = selectors or SelectorConfig()
    if len(find_answer_options(tree, selectors=selectors)) >= MIN_SELECTION_OPTIONS:
        return ExerciseMode.SELECTION
    if find_answer_input(tree, selectors=selectors) is not None:
        return ExerciseMode.TYPING
    if find(tree, selectors.game_container) is not None:
        return ExerciseMode.GAME
    if find(tree, selectors.test_container) is not None:
        return ExerciseMode.TEST
    if extract_word_pairs(tree, selectors=selectors):
        return ExerciseMode.VOCABULARY
    return ExerciseMode.NONE
