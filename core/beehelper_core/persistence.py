from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Sequence

from beehelper_core.config import HelperSettings, settings_from_dict, settings_to_dict
from beehelper_core.engine_logger import log_engine
from beehelper_core.paths import SETTINGS_FILENAME, STATS_FILENAME, WORD_DATABASE_FILENAME

WordMapping = Mapping[str, Sequence[str]]


@dataclass(frozen=True)
class PersistedState:
    primary_mapping: Optional[dict[str, list[str]]] = None
    settings: Optional[HelperSettings] = None
    counters: Optional[dict[str, Any]] = None


class Persistence(Protocol):
    def load(self) -> PersistedState: ...

    def save(
        self,
        primary_mapping: WordMapping,
        settings: HelperSettings,
        counters: Mapping[str, Any],
    ) -> None: ...


def _mapping_from_payload(data: object) -> Optional[dict[str, list[str]]]:
    if not isinstance(data, Mapping):
        return None
    mapping: dict[str, list[str]] = {}
    for key, value in data.items():
        if isinstance(value, str):
            mapping[str(key)] = [value]
        elif isinstance(value, list):
            mapping[str(key)] = [item for item in value if isinstance(item, str)]
    return mapping


def _decode(payload: Optional[str], *, label: str) -> object:
    if payload is None:
        return None
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, TypeError) as exc:
        log_engine(f"Ignoring unreadable {label}: {exc}")
        return None


def state_from_payloads(
    *,
    word_database: Optional[str],
    settings: Optional[str],
    stats: Optional[str],
) -> PersistedState:
    settings_data = _decode(settings, label="settings")
    stats_data = _decode(stats, label="stats")
    return PersistedState(
        primary_mapping=_mapping_from_payload(_decode(word_database, label="word database")),
        settings=settings_from_dict(settings_data) if isinstance(settings_data, Mapping) else None,
        counters=dict(stats_data) if isinstance(stats_data, Mapping) else None,
    )


def payloads_from_state(
    primary_mapping: WordMapping,
    settings: HelperSettings,
    counters: Mapping[str, Any],
) -> dict[str, str]:
    return {
        "word_database": json.dumps(
            {key: list(values) for key, values in primary_mapping.items()},
            ensure_ascii=False,
        ),
        "settings": json.dumps(settings_to_dict(settings)),
        "stats": json.dumps(dict(counters)),
    }


class MemoryPersistence:
    def __init__(self, payloads: Optional[Mapping[str, str]] = None) -> None:
        self.payloads: dict[str, str] = dict(payloads or {})
        self.save_count = 0

    def load(self) -> PersistedState:
        return state_from_payloads(
            word_database=self.payloads.get("word_database"),
            settings=self.payloads.get("settings"),
            stats=self.payloads.get("stats"),
        )

    def save(
        self,
        primary_mapping: WordMapping,
        settings: HelperSettings,
        counters: Mapping[str, Any],
    ) -> None:
        self.payloads = payloads_from_state(primary_mapping, settings, counters)
        self.save_count += 1


class JsonFilePersistence:
    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def word_database_path(self) -> Path:
        return self._data_dir / WORD_DATABASE_FILENAME

    @property
    def settings_path(self) -> Path:
        return self._data_dir / SETTINGS_FILENAME

    @property
    def stats_path(self) -> Path:
        return self._data_dir / STATS_FILENAME

    def load(self) -> PersistedState:
        return state_from_payloads(
            word_database=self._read(self.word_database_path),
            settings=self._read(self.settings_path),
            stats=self._read(self.stats_path),
        )

    def save(
        self,
        primary_mapping: WordMapping,
        settings: HelperSettings,
        counters: Mapping[str, Any],
    ) -> None:
        payloads = payloads_from_state(primary_mapping, settings, counters)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._write(self.word_database_path, payloads["word_database"])
        self._write(self.settings_path, payloads["settings"])
        self._write(self.stats_path, payloads["stats"])

    def _read(self, path: Path) -> Optional[str]:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log_engine(f"Could not read {path}: {exc}")
            return None

    def _write(self, path: Path, payload: str) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)


class AsyncSaver:
    """Runs ``Persistence.save`` on a single background worker.

    Snapshots are taken at submit time, and the single worker keeps writes in
    submission order. Callers never wait unless they ask to via ``flush``.
    """

    def __init__(self, persistence: Persistence, *, executor: Optional[ThreadPoolExecutor] = None) -> None:
        self._persistence = persistence
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="beehelper-save")
        self._last: Optional[Future] = None

    @property
    def persistence(self) -> Persistence:
        return self._persistence

    def submit(
        self,
        primary_mapping: WordMapping,
        settings: HelperSettings,
        counters: Mapping[str, Any],
    ) -> Future:
        snapshot = {key: list(values) for key, values in primary_mapping.items()}
        future = self._executor.submit(self._persistence.save, snapshot, settings, dict(counters))
        future.add_done_callback(_log_save_failure)
        self._last = future
        return future

    def flush(self, timeout: Optional[float] = None) -> None:
        last = self._last
        if last is None:
            return
        try:
            last.result(timeout=timeout)
        except Exception:  # noqa: BLE001
            # Reported by _log_save_failure.
            return

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


def _log_save_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        log_engine(f"Save failed: {exc}")
