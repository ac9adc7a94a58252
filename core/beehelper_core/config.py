from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import json
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

Selectors = Sequence[str]


@dataclass(frozen=True)
class SelectorConfig:
    question_word: Selectors = (
        ".word",
        ".question",
        "h1",
        "h2",
        "h3",
        ".big",
        ".large",
        ".main",
        '[class*="word"]:not(input):not(button):not([class*="password"])',
    )
    answer_options: Selectors = (
        ".answer",
        ".choice",
        ".option",
        ".btn",
        'button:not([type="submit"])',
        '[class*="answer"]',
        '[class*="choice"]',
        '[class*="option"]',
    )
    answer_input: Selectors = (
        'input[type="text"]',
        'input[type="search"]',
        'input:not([type="hidden"]):not([type="submit"]):not([type="checkbox"])'
        ':not([type="radio"]):not([type="password"]):not([type="button"])',
        "textarea",
        "#answer",
        '[name*="answer"]',
        '[id*="answer"]',
    )
    correct_feedback: Selectors = (
        ".correct",
        ".success",
        ".right",
        ".good",
        ".green",
        '[class*="correct"]:not([class*="incorrect"]):not(.wh-correct)',
        '[class*="success"]',
        '[class*="right"]',
        '[class*="good"]',
    )
    incorrect_feedback: Selectors = (
        ".incorrect",
        ".wrong",
        ".error",
        ".bad",
        ".red",
        '[class*="incorrect"]',
        '[class*="wrong"]',
        '[class*="error"]',
        '[class*="bad"]',
    )
    revealed_answer: Selectors = (
        ".correct-answer",
        ".right-answer",
        ".solution",
        ".reveal",
        ".show-answer",
        '[class*="solution"]',
        '[class*="reveal"]',
        '[class*="correct-answer"]',
    )
    highlighted_correct: Selectors = (
        ".wh-correct",
        ".selected.correct",
        '[class*="correct"][class*="selected"]',
    )
    active_answer: Selectors = (
        ".active",
        ".selected",
        '[aria-selected="true"]',
        ".clicked",
    )
    correct_unselected: Selectors = (
        ".correct:not(.selected)",
        '[class*="correct"]:not([class*="in"])',
        ".right-answer",
        ".solution",
    )
    option_correct_marker: Selectors = (".correct", '[class*="correct"]')
    word_pair: Selectors = (
        ".word-pair",
        ".vocabulary-item",
        ".vocab-item",
        ".pair",
        "tr",
        "li",
        ".row",
        ".item",
    )
    source_word: Selectors = (
        ".source",
        ".original",
        ".from",
        ".left",
        "td:first-child",
        "span:first-child",
    )
    target_word: Selectors = (
        ".target",
        ".translation",
        ".to",
        ".right",
        "td:last-child",
        "span:last-child",
    )
    pair_cells: Selectors = ("td", ".cell", ".word")
    game_container: Selectors = (".game", '[class*="game"]', "#game")
    test_container: Selectors = (
        ".test",
        ".exam",
        ".quiz",
        '[class*="test"]',
        '[class*="exam"]',
        '[class*="quiz"]',
    )


@dataclass(frozen=True)
class TimingConfig:
    observer_debounce_ms: int = 100
    min_pass_interval_ms: int = 500
    min_text_delta: int = 10
    auto_answer_delay_ms: int = 500


@dataclass(frozen=True)
class HelperSettings:
    auto_highlight: bool = True
    show_hints: bool = True
    auto_answer: bool = False
    collect_words: bool = True
    show_tooltips: bool = True


@dataclass(frozen=True)
class EngineConfig:
    selectors: SelectorConfig = field(default_factory=SelectorConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    debug: bool = False


_SETTINGS_KEYS = {
    "auto_highlight": "autoHighlight",
    "show_hints": "showHints",
    "auto_answer": "autoAnswer",
    "collect_words": "collectWords",
    "show_tooltips": "showTooltips",
}


def settings_from_dict(data: Optional[Mapping[str, Any]]) -> HelperSettings:
    defaults = HelperSettings()
    if not isinstance(data, Mapping):
        return defaults
    values: dict[str, bool] = {}
    for attr, key in _SETTINGS_KEYS.items():
        raw = data.get(key, data.get(attr))
        values[attr] = getattr(defaults, attr) if raw is None else bool(raw)
    return HelperSettings(**values)


def settings_to_dict(settings: HelperSettings) -> dict[str, bool]:
    return {key: getattr(settings, attr) for attr, key in _SETTINGS_KEYS.items()}


def merge_settings(settings: HelperSettings, changes: Optional[Mapping[str, Any]]) -> HelperSettings:
    if not isinstance(changes, Mapping):
        return settings
    merged: dict[str, Any] = settings_to_dict(settings)
    for key, value in changes.items():
        merged[_SETTINGS_KEYS.get(key, key)] = value
    return settings_from_dict(merged)


def _selectors_from_dict(data: Optional[Mapping[str, Any]]) -> SelectorConfig:
    defaults = SelectorConfig()
    if not isinstance(data, Mapping):
        return defaults
    updates: dict[str, tuple[str, ...]] = {}
    for item in fields(SelectorConfig):
        raw = data.get(item.name)
        if isinstance(raw, str):
            updates[item.name] = split_selectors(raw)
        elif isinstance(raw, Sequence):
            updates[item.name] = tuple(str(value) for value in raw if str(value).strip())
    return replace(defaults, **updates)


def _timing_from_dict(data: Optional[Mapping[str, Any]]) -> TimingConfig:
    defaults = TimingConfig()
    if not isinstance(data, Mapping):
        return defaults
    return TimingConfig(
        observer_debounce_ms=int(data.get("observer_debounce_ms", defaults.observer_debounce_ms)),
        min_pass_interval_ms=int(data.get("min_pass_interval_ms", defaults.min_pass_interval_ms)),
        min_text_delta=int(data.get("min_text_delta", defaults.min_text_delta)),
        auto_answer_delay_ms=int(data.get("auto_answer_delay_ms", defaults.auto_answer_delay_ms)),
    )


def engine_config_from_dict(data: Mapping[str, Any]) -> EngineConfig:
    return EngineConfig(
        selectors=_selectors_from_dict(data.get("selectors")),
        timing=_timing_from_dict(data.get("timing")),
        debug=bool(data.get("debug", False)),
    )


def engine_config_to_dict(config: EngineConfig) -> dict[str, Any]:
    return {
        "selectors": {item.name: list(getattr(config.selectors, item.name)) for item in fields(SelectorConfig)},
        "timing": {item.name: getattr(config.timing, item.name) for item in fields(TimingConfig)},
        "debug": config.debug,
    }


def load_engine_config(path: str | Path) -> EngineConfig:
    payload = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid engine config {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"Engine config {path} must be a JSON object.")
    return engine_config_from_dict(data)


def save_engine_config(config: EngineConfig, path: str | Path) -> None:
    payload = json.dumps(engine_config_to_dict(config), indent=2, sort_keys=True)
    Path(path).write_text(payload, encoding="utf-8")


def split_selectors(selectors: str | Selectors) -> tuple[str, ...]:
    if isinstance(selectors, str):
        selectors = selectors.split(",")
    return tuple(item.strip() for item in selectors if item and item.strip())
