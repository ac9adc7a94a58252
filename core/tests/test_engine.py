from __future__ import annotations

import json
import os
import sys
import threading
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from beehelper_core.assist import STATUS_ANSWERED, STATUS_LEARNING  # noqa: E402
from beehelper_core.classifier import ExerciseMode  # noqa: E402
from beehelper_core.config import EngineConfig, TimingConfig  # noqa: E402
from beehelper_core.engine import HelperEngine  # noqa: E402
from beehelper_core.persistence import MemoryPersistence  # noqa: E402
from beehelper_core.scheduler import ManualTimerFactory  # noqa: E402
from beehelper_core.store import WordStore  # noqa: E402
from beehelper_core.tracker import LearnKind, TrackerState  # noqa: E402
from beehelper_core.tree_soup import SoupPageTree  # noqa: E402


def _page(question: str, *, feedback: str = "", selected: str = "") -> SoupPageTree:
    buttons = "".join(
        f'<button class="option{" selected" if word == selected else ""}">{word}</button>'
        for word in ("cat", "dog", "house")
    )
    return SoupPageTree(f'<div class="question">{question}</div><div id="choices">{buttons}</div>{feedback}')


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingRenderer:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def highlight(self, node) -> None:
        self.calls.append(("highlight", node.get_text()))

    def set_input_value(self, node, text: str) -> None:
        self.calls.append(("set_input_value", text))

    def click(self, node) -> None:
        self.calls.append(("click", node.get_text()))

    def clear_highlights(self) -> None:
        self.calls.append(("clear_highlights",))

    def show_hint(self, node, text: str) -> None:
        self.calls.append(("show_hint", text))

    def show_status(self, text: str) -> None:
        self.calls.append(("show_status", text))

    def named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class EngineTestCase(unittest.TestCase):
    timing = TimingConfig(min_text_delta=0)

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.timers = ManualTimerFactory()
        self.renderer = RecordingRenderer()
        self.memory = MemoryPersistence()
        self.store = WordStore(self.memory)
        self.engine = HelperEngine(
            _page("Katze"),
            self.store,
            config=EngineConfig(timing=self.timing),
            renderer=self.renderer,
            clock=self.clock,
            timer_factory=self.timers,
        )

    def tearDown(self) -> None:
        self.engine.close()

    def show(self, tree: SoupPageTree):
        self.clock.now += 1.0
        self.engine.set_tree(tree)
        self.engine.notify_change()
        self.timers.fire_pending()
        return self.engine.last_result


class TestLearningFlow(EngineTestCase):
    def test_learns_then_assists(self) -> None:
        result = self.show(_page("Katze"))
        self.assertIs(result.mode, ExerciseMode.SELECTION)
        self.assertTrue(result.mode_changed)
        self.assertEqual(result.outcome.status, STATUS_LEARNING)
        self.assertIs(self.engine.tracker.state, TrackerState.AWAITING_RESULT)

        result = self.show(_page("Katze", feedback='<div class="feedback correct">Correct!</div>', selected="cat"))
        self.assertFalse(result.mode_changed)
        self.assertEqual(result.learned.answer, "cat")
        self.assertIs(result.learned.kind, LearnKind.CORRECT)
        self.assertIsNone(result.outcome)
        self.assertEqual(self.store.lookup("katze"), ["cat"])

        result = self.show(_page("Hund"))
        self.assertEqual(result.outcome.status, STATUS_LEARNING)

        result = self.show(_page("Hund", feedback='<div class="wrong">Wrong! The correct answer is: dog</div>'))
        self.assertIs(result.learned.kind, LearnKind.CORRECTION)

        result = self.show(_page("Katze"))
        self.assertEqual(result.outcome.status, STATUS_ANSWERED)
        self.assertEqual(self.renderer.named("highlight"), [("highlight", "cat")])

        self.engine.close()
        mapping = json.loads(self.memory.payloads["word_database"])
        self.assertEqual(mapping, {"katze": ["cat"], "hund": ["dog"]})

    def test_burst_of_changes_runs_one_pass(self) -> None:
        self.clock.now = 1.0
        for _ in range(5):
            self.engine.notify_change()
        self.assertEqual(self.timers.fire_pending(), 1)
        self.assertEqual(len(self.renderer.named("clear_highlights")), 1)

    def test_refresh_reruns_assist_for_same_question(self) -> None:
        self.store.add("Katze", "cat")
        self.show(_page("Katze"))
        self.show(_page("Katze"))
        self.assertEqual(len(self.renderer.named("highlight")), 1)

        response = self.engine.handle_action({"action": "refresh"})
        self.assertEqual(response, {"success": True})
        self.assertEqual(len(self.renderer.named("highlight")), 2)
        self.assertEqual(self.engine.last_result.outcome.status, STATUS_ANSWERED)

    def test_auto_answer_click_is_delayed(self) -> None:
        self.store.add("Katze", "cat")
        self.engine.handle_action({"action": "updateSettings", "settings": {"autoAnswer": True}})
        self.show(_page("Katze"))
        self.assertEqual(self.renderer.named("click"), [])
        self.timers.fire_pending()
        self.assertEqual(self.renderer.named("click"), [("click", "cat")])

    def test_failed_pass_is_contained(self) -> None:
        class BrokenTree:
            def visible_text_length(self) -> int:
                raise RuntimeError("detached")

        self.engine.set_tree(BrokenTree())
        self.engine.notify_change()
        self.timers.fire_pending()
        self.assertIsNone(self.engine.last_result)


class TestChangeGating(EngineTestCase):
    timing = TimingConfig()

    def test_small_change_is_ignored(self) -> None:
        first = self.show(_page("Katze"))
        self.assertIsNotNone(first)
        self.show(_page("Hund!"))
        self.assertIs(self.engine.last_result, first)

    def test_rapid_change_is_ignored(self) -> None:
        first = self.show(_page("Katze"))
        self.engine.set_tree(_page("Katze", feedback="<p>" + "long text " * 5 + "</p>"))
        self.clock.now += 0.1
        self.assertIsNone(self.engine.run_pass())
        self.assertIs(self.engine.last_result, first)


class TestActions(EngineTestCase):
    def test_get_stats(self) -> None:
        self.store.add("Katze", "cat")
        response = self.engine.handle_action({"action": "getStats"})
        self.assertTrue(response["success"])
        self.assertEqual(response["stats"]["totalWords"], 1)

    def test_update_settings(self) -> None:
        response = self.engine.handle_action({"action": "updateSettings", "settings": {"showHints": False}})
        self.assertFalse(response["settings"]["showHints"])
        self.assertFalse(self.store.settings.show_hints)

    def test_export_and_import(self) -> None:
        payload = json.dumps({"vogel": ["bird"], "maus": "mouse"})
        response = self.engine.handle_action({"action": "importDatabase", "data": payload})
        self.assertEqual(response, {"success": True, "imported": 2})
        exported = self.engine.handle_action({"action": "exportDatabase"})
        self.assertEqual(json.loads(exported["data"]), {"vogel": ["bird"], "maus": ["mouse"]})

    def test_clear_database_resets_tracking(self) -> None:
        self.store.add("Katze", "cat")
        self.show(_page("Hund"))
        response = self.engine.handle_action({"action": "clearDatabase"})
        self.assertEqual(response, {"success": True})
        self.assertEqual(len(self.store), 0)
        self.assertIs(self.engine.tracker.state, TrackerState.IDLE)

    def test_unknown_action(self) -> None:
        self.assertEqual(
            self.engine.handle_action({"action": "launchRockets"}),
            {"success": False, "error": "Unknown action"},
        )
        self.assertFalse(self.engine.handle_action({})["success"])

    def test_failed_refresh_reports_error(self) -> None:
        class BrokenTree:
            def visible_text_length(self) -> int:
                raise RuntimeError("detached")

        self.engine.set_tree(BrokenTree())
        response = self.engine.handle_action({"action": "refresh"})
        self.assertEqual(response, {"success": False, "error": "detached"})

    def test_store_actions_wait_for_running_pass(self) -> None:
        finished = threading.Event()
        responses = []

        def export() -> None:
            responses.append(self.engine.handle_action({"action": "exportDatabase"}))
            finished.set()

        with self.engine._lock:
            worker = threading.Thread(target=export)
            worker.start()
            self.assertFalse(finished.wait(0.05))
            self.store.add("Katze", "cat")
        worker.join(timeout=1.0)
        self.assertTrue(finished.is_set())
        self.assertEqual(json.loads(responses[0]["data"]), {"katze": ["cat"]})


if __name__ == "__main__":
    unittest.main()
