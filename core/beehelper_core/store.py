from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import json
import re
import time
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

from beehelper_core.config import HelperSettings, merge_settings
from beehelper_core.engine_logger import log_engine
from beehelper_core.persistence import AsyncSaver, Persistence
from beehelper_core.text import compile_phrase_pattern, count_letters, normalize_word

STORE_REJECT_PHRASES = (
    "learning mode",
    "wocabee",
    "beehelper",
    "seznam",
    "balíků",
    "settings",
    "menu",
    "next",
    "back",
    "indexed",
    "words known",
)
MIN_PARTIAL_QUERY_LENGTH = 2

_STORE_REJECT_RE = compile_phrase_pattern(STORE_REJECT_PHRASES)
_LEADING_DIGITS_RE = re.compile(r"^\d{10,}")
_DIGITS_RE = re.compile(r"^\d+$")


def is_storable_word(word: str) -> bool:
    if not word:
        return False
    if _DIGITS_RE.match(word) or _LEADING_DIGITS_RE.match(word):
        return False
    if count_letters(word) < 2:
        return False
    return not _STORE_REJECT_RE.search(word)


def is_valid_pair(source: str, target: str) -> bool:
    if source == target:
        return False
    return is_storable_word(source) and is_storable_word(target)


@dataclass
class SessionCounters:
    words_indexed: int = 0
    answers_helped: int = 0
    session_start: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "wordsIndexed": self.words_indexed,
            "answersHelped": self.answers_helped,
            "sessionStart": self.session_start,
        }

    def restore(self, data: Optional[Mapping[str, Any]]) -> None:
        if not data:
            return
        self.words_indexed = _as_int(data.get("wordsIndexed"))
        self.answers_helped = _as_int(data.get("answersHelped"))


@dataclass(frozen=True)
class StoreStats:
    total_words: int
    total_translations: int
    words_indexed: int
    answers_helped: int
    session_duration: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalWords": self.total_words,
            "totalTranslations": self.total_translations,
            "wordsIndexed": self.words_indexed,
            "answersHelped": self.answers_helped,
            "sessionDuration": self.session_duration,
        }


def _as_int(value: object) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


class WordStore:
    def __init__(
        self,
        persistence: Optional[Persistence] = None,
        *,
        saver: Optional[AsyncSaver] = None,
        settings: Optional[HelperSettings] = None,
        min_partial_length: int = MIN_PARTIAL_QUERY_LENGTH,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if saver is None and persistence is not None:
            saver = AsyncSaver(persistence)
        self._saver = saver
        self._primary: dict[str, list[str]] = {}
        self._reverse: dict[str, list[str]] = {}
        self._clock = clock
        self._min_partial_length = max(1, int(min_partial_length))
        self._batch_depth = 0
        self._batch_dirty = False
        self.settings = settings or HelperSettings()
        self.counters = SessionCounters(session_start=clock())

    def __len__(self) -> int:
        return len(self._primary)

    def __contains__(self, word: object) -> bool:
        return normalize_word(word) in self._primary

    @property
    def primary_mapping(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._primary.items()}

    @property
    def reverse_index(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._reverse.items()}

    def load(self) -> bool:
        if self._saver is None:
            return False
        state = self._saver.persistence.load()
        if state.primary_mapping:
            self._primary = {}
            for source, targets in state.primary_mapping.items():
                for target in targets:
                    self._insert(normalize_word(source), normalize_word(target))
            self.rebuild_reverse_index()
        if state.settings is not None:
            self.settings = state.settings
        self.counters.restore(state.counters)
        log_engine(f"Store loaded: {len(self._primary)} words")
        return True

    def add(self, source: str, target: str) -> bool:
        source = normalize_word(source)
        target = normalize_word(target)
        if not is_valid_pair(source, target):
            return False
        if not self._insert(source, target):
            return False
        sources = self._reverse.setdefault(target, [])
        if source not in sources:
            sources.append(source)
        self.counters.words_indexed += 1
        log_engine(f'Added word: "{source}" -> "{target}"')
        self._schedule_save()
        return True

    def add_many(self, pairs: Iterable[Sequence[str]]) -> int:
        added = 0
        with self._batch():
            for pair in pairs:
                if len(pair) < 2:
                    continue
                if self.add(pair[0], pair[1]):
                    added += 1
        if added:
            log_engine(f"Indexed {added} new words")
        return added

    def lookup(self, word: str) -> Optional[list[str]]:
        key = normalize_word(word)
        if not key:
            return None
        if key in self._primary:
            return list(self._primary[key])
        if key in self._reverse:
            return list(self._reverse[key])
        return self._partial_match(key)

    def clear(self) -> None:
        self._primary.clear()
        self._reverse.clear()
        self.counters.words_indexed = 0
        self.counters.answers_helped = 0
        log_engine("Database cleared")
        self._schedule_save()

    def export_all(self) -> str:
        return json.dumps(self._primary, indent=2, ensure_ascii=False)

    def import_all(self, serialized: str) -> int:
        try:
            data = json.loads(serialized)
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            log_engine(f"Import error: {exc}")
            return 0
        if not isinstance(data, Mapping):
            log_engine("Import error: expected a JSON object")
            return 0
        imported = 0
        with self._batch():
            for source, targets in data.items():
                values = targets if isinstance(targets, list) else [targets]
                for target in values:
                    if not isinstance(target, str):
                        continue
                    if self.add(source, target):
                        imported += 1
        log_engine(f"Imported {imported} word pairs")
        return imported

    def get_stats(self) -> StoreStats:
        return StoreStats(
            total_words=len(self._primary),
            total_translations=sum(len(values) for values in self._primary.values()),
            words_indexed=self.counters.words_indexed,
            answers_helped=self.counters.answers_helped,
            session_duration=max(0.0, self._clock() - self.counters.session_start),
        )

    def record_answer_helped(self) -> None:
        self.counters.answers_helped += 1
        self._schedule_save()

    def update_settings(self, changes: Optional[Mapping[str, Any]]) -> HelperSettings:
        self.settings = merge_settings(self.settings, changes)
        self._schedule_save()
        return self.settings

    def rebuild_reverse_index(self) -> None:
        reverse: dict[str, list[str]] = {}
        for source, targets in self._primary.items():
            for target in targets:
                sources = reverse.setdefault(target, [])
                if source not in sources:
                    sources.append(source)
        self._reverse = reverse

    def flush(self, timeout: Optional[float] = None) -> None:
        if self._saver is not None:
            self._saver.flush(timeout)

    def _insert(self, source: str, target: str) -> bool:
        if not is_valid_pair(source, target):
            return False
        targets = self._primary.setdefault(source, [])
        if target in targets:
            return False
        targets.append(target)
        return True

    def _partial_match(self, key: str) -> Optional[list[str]]:
        if len(key) < self._min_partial_length:
            return None
        matches: list[str] = []
        for index in (self._primary, self._reverse):
            for candidate, values in index.items():
                if key in candidate or candidate in key:
                    matches.extend(values)
        if not matches:
            return None
        return list(dict.fromkeys(matches))

    @contextmanager
    def _batch(self) -> Iterator[None]:
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._batch_dirty:
                self._batch_dirty = False
                self._schedule_save()

    def _schedule_save(self) -> None:
        if self._saver is None:
            return
        if self._batch_depth:
            self._batch_dirty = True
            return
        self._saver.submit(self._primary, self.settings, self.counters.to_dict())
