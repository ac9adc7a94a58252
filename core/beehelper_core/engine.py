from __future__ import annotations

from dataclasses import dataclass
import threading
import time
from typing import Any, Callable, Mapping, Optional

from beehelper_core.assist import AssistOutcome, ExerciseAssistant, Renderer
from beehelper_core.classifier import ExerciseMode, classify
from beehelper_core.config import EngineConfig, settings_to_dict
from beehelper_core.engine_logger import log_engine, set_debug
from beehelper_core.scheduler import ChangeGate, Debouncer, TimerFactory, threading_timer
from beehelper_core.store import WordStore
from beehelper_core.tracker import FeedbackTracker, LearnEvent, QuestionRecord
from beehelper_core.tree import PageTree


@dataclass(frozen=True)
class PassResult:
    mode: ExerciseMode
    mode_changed: bool
    question: Optional[QuestionRecord] = None
    learned: Optional[LearnEvent] = None
    outcome: Optional[AssistOutcome] = None


class HelperEngine:
    """Wires the change gate, classifier, feedback tracker and assistant together.

    ``notify_change`` is the entry point for page change signals. Bursts are
    coalesced by the debouncer, and the gate drops passes that come too soon
    or follow too small a text change.
    """

    def __init__(
        self,
        tree: PageTree,
        store: WordStore,
        *,
        config: Optional[EngineConfig] = None,
        renderer: Optional[Renderer] = None,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: TimerFactory = threading_timer,
    ) -> None:
        self._config = config or EngineConfig()
        set_debug(self._config.debug)
        self._tree = tree
        self._store = store
        self._lock = threading.RLock()
        self.tracker = FeedbackTracker(store, selectors=self._config.selectors)
        self.assistant = ExerciseAssistant(
            store,
            renderer=renderer,
            selectors=self._config.selectors,
            timing=self._config.timing,
            timer_factory=timer_factory,
        )
        self._gate = ChangeGate(
            min_interval_ms=self._config.timing.min_pass_interval_ms,
            min_text_delta=self._config.timing.min_text_delta,
            clock=clock,
        )
        self._debouncer = Debouncer(
            self._on_debounced,
            delay_ms=self._config.timing.observer_debounce_ms,
            timer_factory=timer_factory,
        )
        self._mode: Optional[ExerciseMode] = None
        self._question_key: Optional[str] = None
        self.last_result: Optional[PassResult] = None

    @property
    def store(self) -> WordStore:
        return self._store

    @property
    def tree(self) -> PageTree:
        return self._tree

    @property
    def mode(self) -> Optional[ExerciseMode]:
        return self._mode

    def set_tree(self, tree: PageTree) -> None:
        with self._lock:
            self._tree = tree

    def notify_change(self) -> None:
        self._debouncer.trigger()

    def run_pass(self) -> Optional[PassResult]:
        with self._lock:
            if not self._gate.admit(self._tree.visible_text_length()):
                return None
            return self._process(rerun_assist=False)

    def reprocess(self) -> PassResult:
        with self._lock:
            self._mode = None
            self._gate.mark(self._tree.visible_text_length())
            return self._process(rerun_assist=True)

    def handle_action(self, message: Mapping[str, Any]) -> dict[str, Any]:
        action = str(message.get("action", "")) if isinstance(message, Mapping) else ""
        log_engine(f"Received action: {action or '<none>'}")
        if action == "refresh":
            try:
                self.reprocess()
            except Exception as exc:  # noqa: BLE001
                log_engine(f"Refresh failed: {exc}")
                return {"success": False, "error": str(exc)}
            return {"success": True}
        with self._lock:
            if action == "updateSettings":
                settings = self._store.update_settings(message.get("settings"))
                return {"success": True, "settings": settings_to_dict(settings)}
            if action == "clearDatabase":
                self._store.clear()
                self.tracker.reset()
                self.assistant.renderer.clear_highlights()
                return {"success": True}
            if action == "getStats":
                return {"success": True, "stats": self._store.get_stats().to_dict()}
            if action == "exportDatabase":
                return {"success": True, "data": self._store.export_all()}
            if action == "importDatabase":
                imported = self._store.import_all(str(message.get("data", "")))
                return {"success": True, "imported": imported}
        return {"success": False, "error": "Unknown action"}

    def close(self) -> None:
        self._debouncer.cancel()
        self._store.flush()

    def _on_debounced(self) -> None:
        try:
            self.run_pass()
        except Exception as exc:  # noqa: BLE001
            log_engine(f"Pass failed: {exc}")

    def _process(self, *, rerun_assist: bool) -> PassResult:
        tree = self._tree
        mode = classify(tree, selectors=self._config.selectors)
        learned = self.tracker.observe(tree, mode=mode)
        question_key = self.tracker.last_question_key

        mode_changed = mode is not self._mode
        if mode_changed:
            log_engine(f"Exercise type changed: {mode.value}")
        outcome: Optional[AssistOutcome] = None
        if rerun_assist or mode_changed or question_key != self._question_key:
            outcome = self.assistant.process(tree, mode)
        self._mode = mode
        self._question_key = question_key

        result = PassResult(
            mode=mode,
            mode_changed=mode_changed,
            question=self.tracker.pending,
            learned=learned,
            outcome=outcome,
        )
        self.last_result = result
        return result
