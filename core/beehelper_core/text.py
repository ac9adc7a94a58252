from __future__ import annotations

import re
from typing import Sequence

UI_PHRASES = (
    # navigation and feedback
    "next",
    "continue",
    "skip",
    "submit",
    "check",
    "ok",
    "cancel",
    "correct",
    "wrong",
    "right",
    "error",
    "success",
    "loading",
    "please wait",
    "score",
    "points",
    "progress",
    "login",
    "logout",
    "sign",
    "register",
    "password",
    "menu",
    "home",
    "back",
    "settings",
    "help",
    "wocabee",
    "copyright",
    "©",
    "cookie",
    "privacy",
    "click",
    "tap",
    "press",
    "select",
    "choose",
    # our own panel and notifications
    "learning mode",
    "wocabeehelper",
    "beehelper",
    "indexed",
    "words known",
    "hint",
    "answer",
    "translation",
    # Czech
    "seznam",
    "balíků",
    "balík",
    "nastavení",
    "odhlásit",
    "přihlásit",
    "pokračovat",
    "zpět",
    "další",
    "hotovo",
    "správně",
    "špatně",
    "chyba",
    "body",
    "skóre",
)

_DIGITS_RE = re.compile(r"^\d+$")
_TIMESTAMP_RE = re.compile(r"^\d{10,}$")
_WHITESPACE_RE = re.compile(r"\s+")


def compile_phrase_pattern(phrases: Sequence[str]) -> re.Pattern[str]:
    # Plain case-insensitive containment: "ok" hits "OK!" and "book" alike.
    return re.compile("|".join(re.escape(phrase) for phrase in phrases), re.IGNORECASE)


_UI_PHRASE_RE = compile_phrase_pattern(UI_PHRASES)


def normalize_word(word: object) -> str:
    if not isinstance(word, str):
        return ""
    return _WHITESPACE_RE.sub(" ", word.strip()).lower()


def count_letters(text: str) -> int:
    return sum(1 for char in text if char.isalpha())


def count_digits(text: str) -> int:
    return sum(1 for char in text if char.isdigit())


def is_numeric_token(text: str) -> bool:
    stripped = text.strip()
    return bool(_DIGITS_RE.match(stripped) or _TIMESTAMP_RE.match(stripped))


def is_ui_text(text: object) -> bool:
    if not isinstance(text, str) or not text.strip():
        return True
    stripped = text.strip()
    if is_numeric_token(stripped):
        return True
    letters = count_letters(stripped)
    if letters < 2:
        return True
    if count_digits(stripped) > letters:
        return True
    return bool(_UI_PHRASE_RE.search(stripped))
