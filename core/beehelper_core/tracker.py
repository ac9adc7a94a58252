from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import time
from typing import Callable, Optional

from beehelper_core.classifier import ExerciseMode
from beehelper_core.config import SelectorConfig
from beehelper_core.engine_logger import log_engine
from beehelper_core.extractor import find_correct_answer, find_revealed_answer
from beehelper_core.scorer import locate_question
from beehelper_core.store import WordStore
from beehelper_core.text import normalize_word
from beehelper_core.tree import PageTree, find


class TrackerState(Enum):
    IDLE = "idle"
    AWAITING_RESULT = "awaiting_result"


class LearnKind(Enum):
    CORRECT = "correct"
    CORRECTION = "correction"


@dataclass(frozen=True)
class QuestionRecord:
    text: str
    key: str
    discovered_at: float
    mode: ExerciseMode = ExerciseMode.NONE


@dataclass(frozen=True)
class LearnEvent:
    question: str
    answer: str
    kind: LearnKind
    learned_at: float


LearnListener = Callable[[LearnEvent], None]


class FeedbackTracker:
    """Watches for a question, then learns its answer from the page's own feedback.

    Only one question is tracked at a time. A new question replaces an
    unresolved one, and a tracked question has no timeout.
    """

    def __init__(
        self,
        store: WordStore,
        *,
        selectors: Optional[SelectorConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._selectors = selectors or SelectorConfig()
        self._clock = clock
        self._pending: Optional[QuestionRecord] = None
        self._last_key: Optional[str] = None
        self._listeners: list[LearnListener] = []

    @property
    def state(self) -> TrackerState:
        return TrackerState.AWAITING_RESULT if self._pending else TrackerState.IDLE

    @property
    def pending(self) -> Optional[QuestionRecord]:
        return self._pending

    @property
    def last_question_key(self) -> Optional[str]:
        return self._last_key

    def add_listener(self, listener: LearnListener) -> None:
        self._listeners.append(listener)

    def reset(self) -> None:
        self._pending = None
        self._last_key = None

    def observe(self, tree: PageTree, *, mode: ExerciseMode = ExerciseMode.NONE) -> Optional[LearnEvent]:
        try:
            return self._observe(tree, mode)
        except Exception as exc:  # noqa: BLE001
            log_engine(f"Feedback check failed: {exc}")
            return None

    def _observe(self, tree: PageTree, mode: ExerciseMode) -> Optional[LearnEvent]:
        question = locate_question(tree, selectors=self._selectors)
        key = normalize_word(question)
        if key and key != self._last_key:
            self._last_key = key
            self._pending = QuestionRecord(
                text=question.strip(),
                key=key,
                discovered_at=self._clock(),
                mode=mode,
            )
            log_engine(f"Current question for learning: {question}")

        pending = self._pending
        if pending is None:
            return None

        if find(tree, self._selectors.correct_feedback) is not None:
            answer = find_correct_answer(tree, selectors=self._selectors)
            if answer:
                return self._commit(pending, answer, LearnKind.CORRECT)

        if find(tree, self._selectors.incorrect_feedback) is not None:
            answer = find_revealed_answer(tree, selectors=self._selectors)
            if answer:
                return self._commit(pending, answer, LearnKind.CORRECTION)
        return None

    def _commit(self, question: QuestionRecord, answer: str, kind: LearnKind) -> Optional[LearnEvent]:
        self._pending = None
        if not self._store.add(question.text, answer):
            return None
        event = LearnEvent(question=question.text, answer=answer, kind=kind, learned_at=self._clock())
        label = "correct" if kind is LearnKind.CORRECT else "correction"
        log_engine(f'Learned from {label}: "{question.text}" -> "{answer}"')
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:  # noqa: BLE001
                log_engine(f"Learn listener failed: {exc}")
        return event
