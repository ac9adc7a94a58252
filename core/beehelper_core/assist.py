from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from beehelper_core.classifier import (
    ExerciseMode,
    extract_word_pairs,
    find_answer_input,
    find_answer_options,
)
from beehelper_core.config import SelectorConfig, TimingConfig
from beehelper_core.engine_logger import log_engine
from beehelper_core.scheduler import TimerFactory, threading_timer
from beehelper_core.scorer import locate_question
from beehelper_core.store import WordStore
from beehelper_core.text import normalize_word
from beehelper_core.tree import Node, PageTree

STATUS_IDLE = "idle"
STATUS_LEARNING = "learning"
STATUS_ANSWERED = "answered"
STATUS_HINTED = "hinted"
STATUS_INDEXED = "indexed"


class Renderer(Protocol):
    def highlight(self, node: Node) -> None: ...

    def set_input_value(self, node: Node, text: str) -> None: ...

    def click(self, node: Node) -> None: ...

    def clear_highlights(self) -> None: ...

    def show_hint(self, node: Optional[Node], text: str) -> None: ...

    def show_status(self, text: str) -> None: ...


class NullRenderer:
    def highlight(self, node: Node) -> None:
        return None

    def set_input_value(self, node: Node, text: str) -> None:
        return None

    def click(self, node: Node) -> None:
        return None

    def clear_highlights(self) -> None:
        return None

    def show_hint(self, node: Optional[Node], text: str) -> None:
        return None

    def show_status(self, text: str) -> None:
        log_engine(text)


@dataclass(frozen=True)
class AssistOutcome:
    mode: ExerciseMode
    status: str
    question: Optional[str] = None
    translations: Sequence[str] = field(default_factory=tuple)
    matched_options: int = 0
    indexed: int = 0
    message: str = ""


def option_matches(option_text: str, translations: Sequence[str]) -> bool:
    text = normalize_word(option_text)
    if not text:
        return False
    for translation in translations:
        candidate = normalize_word(translation)
        if candidate and (text == candidate or candidate in text or text in candidate):
            return True
    return False


class ExerciseAssistant:
    def __init__(
        self,
        store: WordStore,
        *,
        renderer: Optional[Renderer] = None,
        selectors: Optional[SelectorConfig] = None,
        timing: Optional[TimingConfig] = None,
        timer_factory: TimerFactory = threading_timer,
    ) -> None:
        self._store = store
        self._renderer = renderer or NullRenderer()
        self._selectors = selectors or SelectorConfig()
        self._timing = timing or TimingConfig()
        self._timer_factory = timer_factory

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    def process(self, tree: PageTree, mode: ExerciseMode) -> AssistOutcome:
        self._renderer.clear_highlights()
        if mode is ExerciseMode.VOCABULARY:
            return self._index_vocabulary(tree)
        if mode is ExerciseMode.NONE:
            return AssistOutcome(mode=mode, status=STATUS_IDLE)

        question = locate_question(tree, selectors=self._selectors)
        if not question:
            log_engine("No question found")
            return AssistOutcome(mode=mode, status=STATUS_IDLE)

        translations = self._store.lookup(question)
        if not translations:
            message = f'Learning: "{question}" - waiting for answer...'
            self._renderer.show_status(message)
            return AssistOutcome(mode=mode, status=STATUS_LEARNING, question=question, message=message)

        if mode is ExerciseMode.SELECTION:
            return self._handle_selection(tree, question, translations)
        if mode is ExerciseMode.TYPING:
            return self._handle_typing(tree, question, translations)
        return self._handle_game(tree, mode, question, translations)

    def _handle_selection(self, tree: PageTree, question: str, translations: list[str]) -> AssistOutcome:
        settings = self._store.settings
        matches = [
            option
            for option in find_answer_options(tree, selectors=self._selectors)
            if option_matches(tree.text(option), translations)
        ]
        for option in matches:
            if settings.auto_highlight:
                self._renderer.highlight(option)
            if settings.show_tooltips:
                self._renderer.show_hint(option, "✓ Correct!")
        if matches and settings.auto_answer:
            self._schedule_click(matches[0])
        if matches:
            self._store.record_answer_helped()
            message = f"✓ Answer: {translations[0]}"
            status = STATUS_ANSWERED
        else:
            message = f"💡 Try: {' / '.join(translations)}"
            status = STATUS_HINTED
        self._renderer.show_status(message)
        return AssistOutcome(
            mode=ExerciseMode.SELECTION,
            status=status,
            question=question,
            translations=tuple(translations),
            matched_options=len(matches),
            message=message,
        )

    def _handle_typing(self, tree: PageTree, question: str, translations: list[str]) -> AssistOutcome:
        settings = self._store.settings
        node = find_answer_input(tree, selectors=self._selectors)
        if node is None:
            log_engine("Input field not found")
            return AssistOutcome(mode=ExerciseMode.TYPING, status=STATUS_IDLE, question=question)
        hint = " / ".join(translations)
        if settings.show_hints:
            self._renderer.show_hint(node, hint)
        status = STATUS_HINTED
        if settings.auto_answer:
            self._renderer.set_input_value(node, translations[0])
            self._store.record_answer_helped()
            status = STATUS_ANSWERED
        message = f"💡 Answer: {hint}"
        self._renderer.show_status(message)
        return AssistOutcome(
            mode=ExerciseMode.TYPING,
            status=status,
            question=question,
            translations=tuple(translations),
            message=message,
        )

    def _handle_game(
        self,
        tree: PageTree,
        mode: ExerciseMode,
        question: str,
        translations: list[str],
    ) -> AssistOutcome:
        matched = 0
        for option in find_answer_options(tree, selectors=self._selectors):
            if option_matches(tree.text(option), translations):
                matched += 1
                if self._store.settings.auto_highlight:
                    self._renderer.highlight(option)
        message = f"🎮 Answer: {' / '.join(translations)}"
        self._renderer.show_status(message)
        return AssistOutcome(
            mode=mode,
            status=STATUS_HINTED,
            question=question,
            translations=tuple(translations),
            matched_options=matched,
            message=message,
        )

    def _index_vocabulary(self, tree: PageTree) -> AssistOutcome:
        if not self._store.settings.collect_words:
            return AssistOutcome(mode=ExerciseMode.VOCABULARY, status=STATUS_IDLE)
        added = self._store.add_many(extract_word_pairs(tree, selectors=self._selectors))
        message = ""
        if added:
            message = f"📚 Indexed {added} new words! (Total: {len(self._store)})"
            self._renderer.show_status(message)
        return AssistOutcome(
            mode=ExerciseMode.VOCABULARY,
            status=STATUS_INDEXED,
            indexed=added,
            message=message,
        )

    def _schedule_click(self, node: Node) -> None:
        delay = self._timing.auto_answer_delay_ms / 1000.0
        self._timer_factory(delay, lambda: self._renderer.click(node))
