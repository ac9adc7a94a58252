from __future__ import annotations

import os
from pathlib import Path
import sys

WORD_DATABASE_FILENAME = "word_database.json"
SETTINGS_FILENAME = "settings.json"
STATS_FILENAME = "stats.json"
ENGINE_CONFIG_FILENAME = "engine_config.json"


def _platform_data_root() -> Path:
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "BeeHelper"
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or str(home / "AppData" / "Roaming")
        return Path(base) / "BeeHelper"
    return home / ".local" / "share" / "BeeHelper"


def resolve_data_root(override: str | Path | None = None) -> Path:
    env_override = os.environ.get("BEEHELPER_DATA_DIR")
    if override:
        root = Path(override)
    elif env_override:
        root = Path(env_override)
    else:
        root = _platform_data_root()
    root.mkdir(parents=True, exist_ok=True)
    return root
