from __future__ import annotations

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from beehelper_core.config import (  # noqa: E402
    EngineConfig,
    HelperSettings,
    SelectorConfig,
    TimingConfig,
    engine_config_from_dict,
    load_engine_config,
    merge_settings,
    save_engine_config,
    settings_from_dict,
    settings_to_dict,
    split_selectors,
)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = HelperSettings()
        self.assertTrue(settings.auto_highlight)
        self.assertTrue(settings.show_hints)
        self.assertFalse(settings.auto_answer)
        self.assertTrue(settings.collect_words)
        self.assertTrue(settings.show_tooltips)

    def test_to_dict_uses_camel_case(self) -> None:
        self.assertEqual(
            settings_to_dict(HelperSettings(auto_answer=True)),
            {
                "autoHighlight": True,
                "showHints": True,
                "autoAnswer": True,
                "collectWords": True,
                "showTooltips": True,
            },
        )

    def test_from_dict_fills_missing_keys(self) -> None:
        settings = settings_from_dict({"showTooltips": False, "unknown": 1})
        self.assertEqual(settings, HelperSettings(show_tooltips=False))
        self.assertEqual(settings_from_dict(None), HelperSettings())

    def test_merge_keeps_existing_values(self) -> None:
        base = HelperSettings(auto_answer=True)
        merged = merge_settings(base, {"show_hints": False})
        self.assertTrue(merged.auto_answer)
        self.assertFalse(merged.show_hints)
        self.assertIs(merge_settings(base, None), base)


class TestEngineConfig(unittest.TestCase):
    def test_partial_dict_keeps_defaults(self) -> None:
        config = engine_config_from_dict(
            {
                "selectors": {"question_word": ".prompt, .term", "game_container": [".arena"]},
                "timing": {"min_text_delta": 5},
                "debug": True,
            }
        )
        self.assertEqual(config.selectors.question_word, (".prompt", ".term"))
        self.assertEqual(config.selectors.game_container, (".arena",))
        self.assertEqual(config.selectors.answer_input, SelectorConfig().answer_input)
        self.assertEqual(config.timing, TimingConfig(min_text_delta=5))
        self.assertTrue(config.debug)

    def test_save_and_load_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "engine_config.json"
            config = EngineConfig(timing=TimingConfig(auto_answer_delay_ms=900), debug=True)
            save_engine_config(config, path)
            loaded = load_engine_config(path)
            self.assertEqual(loaded.timing.auto_answer_delay_ms, 900)
            self.assertEqual(tuple(loaded.selectors.answer_options), tuple(SelectorConfig().answer_options))
            self.assertTrue(loaded.debug)

    def test_load_rejects_bad_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "engine_config.json"
            path.write_text("{nope", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_engine_config(path)
            path.write_text(json.dumps(["a"]), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_engine_config(path)

    def test_split_selectors(self) -> None:
        self.assertEqual(split_selectors(" .a , .b ,, "), (".a", ".b"))
        self.assertEqual(split_selectors([".a", " ", ".b"]), (".a", ".b"))


if __name__ == "__main__":
    unittest.main()
