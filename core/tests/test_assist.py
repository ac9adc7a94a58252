from __future__ import annotations

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from beehelper_core.assist import (  # noqa: E402
    STATUS_ANSWERED,
    STATUS_HINTED,
    STATUS_IDLE,
    STATUS_INDEXED,
    STATUS_LEARNING,
    ExerciseAssistant,
    option_matches,
)
from beehelper_core.classifier import ExerciseMode  # noqa: E402
from beehelper_core.config import TimingConfig  # noqa: E402
from beehelper_core.scheduler import ManualTimerFactory  # noqa: E402
from beehelper_core.store import WordStore  # noqa: E402
from beehelper_core.tree import find, find_all  # noqa: E402
from beehelper_core.tree_soup import SoupPageTree, SoupRenderer  # noqa: E402

SELECTION_PAGE = """
<div class="question">Katze</div>
<div id="choices">
  <button class="option">cat</button>
  <button class="option">dog</button>
  <button class="option">house</button>
</div>
"""

TYPING_PAGE = '<h1>Haus</h1><input type="text" id="field">'

VOCABULARY_PAGE = """
<table>
  <tr><td>Katze</td><td>cat</td></tr>
  <tr><td>Hund</td><td>dog</td></tr>
</table>
"""


class TestOptionMatches(unittest.TestCase):
    def test_exact_and_contained(self) -> None:
        self.assertTrue(option_matches(" Cat ", ["cat"]))
        self.assertTrue(option_matches("the cat", ["cat"]))
        self.assertTrue(option_matches("cat", ["the cat"]))
        self.assertFalse(option_matches("dog", ["cat"]))
        self.assertFalse(option_matches("", ["cat"]))


class TestExerciseAssistant(unittest.TestCase):
    def setUp(self) -> None:
        self.store = WordStore()
        self.store.add("Katze", "cat")
        self.store.add("Haus", "house")
        self.timers = ManualTimerFactory()

    def _assistant(self, tree: SoupPageTree) -> tuple[ExerciseAssistant, SoupRenderer]:
        renderer = SoupRenderer(tree)
        assistant = ExerciseAssistant(
            self.store,
            renderer=renderer,
            timing=TimingConfig(auto_answer_delay_ms=250),
            timer_factory=self.timers,
        )
        return assistant, renderer

    def test_selection_highlights_matching_option(self) -> None:
        tree = SoupPageTree(SELECTION_PAGE)
        assistant, renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.SELECTION)

        self.assertEqual(outcome.status, STATUS_ANSWERED)
        self.assertEqual(outcome.question, "Katze")
        self.assertEqual(outcome.matched_options, 1)
        highlighted = find_all(tree, ".wh-highlighted")
        self.assertEqual([tree.text(node) for node in highlighted], ["cat"])
        self.assertEqual(tree.attribute(highlighted[0], "data-wh-hint"), "✓ Correct!")
        self.assertEqual(renderer.statuses[-1], "✓ Answer: cat")
        self.assertEqual(self.store.counters.answers_helped, 1)
        self.assertEqual(self.timers.timers, [])

    def test_selection_respects_display_settings(self) -> None:
        self.store.update_settings({"autoHighlight": False, "showTooltips": False})
        tree = SoupPageTree(SELECTION_PAGE)
        assistant, _renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.SELECTION)
        self.assertEqual(outcome.status, STATUS_ANSWERED)
        self.assertEqual(find_all(tree, ".wh-highlighted"), [])
        self.assertEqual(find_all(tree, "[data-wh-hint]"), [])

    def test_selection_auto_answer_clicks_after_delay(self) -> None:
        self.store.update_settings({"autoAnswer": True})
        tree = SoupPageTree(SELECTION_PAGE)
        assistant, renderer = self._assistant(tree)
        assistant.process(tree, ExerciseMode.SELECTION)

        self.assertEqual(renderer.clicked, [])
        self.assertEqual(self.timers.timers[0].delay_seconds, 0.25)
        self.timers.fire_pending()
        self.assertEqual([tree.text(node) for node in renderer.clicked], ["cat"])

    def test_selection_without_matching_option_hints(self) -> None:
        self.store.add("Katze", "kitty")
        tree = SoupPageTree(SELECTION_PAGE.replace(">cat<", ">mouse<"))
        assistant, renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.SELECTION)
        self.assertEqual(outcome.status, STATUS_HINTED)
        self.assertEqual(renderer.statuses[-1], "💡 Try: cat / kitty")
        self.assertEqual(self.store.counters.answers_helped, 0)

    def test_unknown_question_is_learning(self) -> None:
        tree = SoupPageTree(SELECTION_PAGE.replace("Katze", "Vogel"))
        assistant, renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.SELECTION)
        self.assertEqual(outcome.status, STATUS_LEARNING)
        self.assertEqual(renderer.statuses, ['Learning: "Vogel" - waiting for answer...'])

    def test_typing_shows_hint(self) -> None:
        tree = SoupPageTree(TYPING_PAGE)
        assistant, _renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.TYPING)
        node = find(tree, "#field")
        self.assertEqual(outcome.status, STATUS_HINTED)
        self.assertEqual(tree.attribute(node, "data-wh-hint"), "house")
        self.assertEqual(tree.input_value(node), "")

    def test_typing_auto_answer_fills_input(self) -> None:
        self.store.update_settings({"autoAnswer": True, "showHints": False})
        tree = SoupPageTree(TYPING_PAGE)
        assistant, _renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.TYPING)
        node = find(tree, "#field")
        self.assertEqual(outcome.status, STATUS_ANSWERED)
        self.assertEqual(tree.input_value(node), "house")
        self.assertIsNone(tree.attribute(node, "data-wh-hint"))
        self.assertEqual(self.store.counters.answers_helped, 1)

    def test_game_highlights_matches(self) -> None:
        tree = SoupPageTree('<div class="game">' + SELECTION_PAGE + "</div>")
        assistant, _renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.GAME)
        self.assertEqual(outcome.status, STATUS_HINTED)
        self.assertEqual(outcome.matched_options, 1)
        self.assertEqual(len(find_all(tree, ".wh-highlighted")), 1)

    def test_vocabulary_is_indexed(self) -> None:
        tree = SoupPageTree(VOCABULARY_PAGE)
        assistant, renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.VOCABULARY)
        self.assertEqual(outcome.status, STATUS_INDEXED)
        self.assertEqual(outcome.indexed, 1)
        self.assertEqual(self.store.lookup("hund"), ["dog"])
        self.assertEqual(renderer.statuses[-1], "📚 Indexed 1 new words! (Total: 3)")

    def test_vocabulary_collection_can_be_disabled(self) -> None:
        self.store.update_settings({"collectWords": False})
        tree = SoupPageTree(VOCABULARY_PAGE)
        assistant, _renderer = self._assistant(tree)
        outcome = assistant.process(tree, ExerciseMode.VOCABULARY)
        self.assertEqual(outcome.status, STATUS_IDLE)
        self.assertIsNone(self.store.lookup("hund"))

    def test_previous_highlights_are_cleared(self) -> None:
        tree = SoupPageTree(SELECTION_PAGE)
        assistant, _renderer = self._assistant(tree)
        assistant.process(tree, ExerciseMode.SELECTION)
        outcome = assistant.process(tree, ExerciseMode.NONE)
        self.assertEqual(outcome.status, STATUS_IDLE)
        self.assertEqual(find_all(tree, ".wh-highlighted"), [])


if __name__ == "__main__":
    unittest.main()
