from __future__ import annotations

from typing import Callable, Optional

_log_handler: Optional[Callable[[str], None]] = None
_debug = False


def set_log_handler(handler: Callable[[str], None] | None) -> None:
    global _log_handler
    _log_handler = handler


def set_debug(enabled: bool) -> None:
    global _debug
    _debug = bool(enabled)


def log_engine(message: str) -> None:
    if not message:
        return
    if _log_handler:
        _log_handler(message)
    elif _debug:
        print(f"[BeeHelper] {message}")
