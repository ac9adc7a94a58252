from __future__ import annotations

import re
from typing import Optional

from beehelper_core.classifier import find_answer_input, find_answer_options
from beehelper_core.config import SelectorConfig
from beehelper_core.engine_logger import log_engine
from beehelper_core.text import is_ui_text
from beehelper_core.tree import PageTree, class_tokens, find

MAX_FEEDBACK_ANSWER_LENGTH = 100

AFFIRMATIVE_RE = re.compile(
    r"\b(?:correct|right|good|great|excellent|super|well done|správně|výborně|skvěle|richtig)\b|[✓✔!]",
    re.IGNORECASE,
)

REVEALED_ANSWER_PATTERNS = (
    re.compile(r"\bcorrect\s*(?:answer)?(?:\s*is)?[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\bright\s*(?:answer)?(?:\s*is)?[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\bshould\s*(?:be|have been)[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\bsprávn[áě]\s*(?:odpověď)?(?:\s*je)?[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\brichtige\s*(?:antwort)?(?:\s*ist)?[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\banswer[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\bodpověď[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\bsolution[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\břešení[:\s]+(.+)", re.IGNORECASE),
    re.compile(r"\blösung[:\s]+(.+)", re.IGNORECASE),
)


def find_correct_answer(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> Optional[str]:
    selectors = selectors or SelectorConfig()

    node = find_answer_input(tree, selectors=selectors)
    if node is not None:
        value = tree.input_value(node).strip()
        if value:
            log_engine(f"Found answer from input field: {value}")
            return value

    node = find(tree, selectors.highlighted_correct)
    if node is not None:
        text = tree.text(node)
        if text:
            log_engine(f"Found answer from highlighted option: {text}")
            return text

    node = find(tree, selectors.active_answer)
    if node is not None:
        text = tree.text(node)
        if text and not is_ui_text(text):
            log_engine(f"Found answer from active element: {text}")
            return text

    node = find(tree, selectors.correct_feedback)
    if node is not None:
        filtered = strip_affirmations(tree.text(node))
        if 0 < len(filtered) < MAX_FEEDBACK_ANSWER_LENGTH:
            log_engine(f"Found answer from success feedback: {filtered}")
            return filtered
    return None


def find_revealed_answer(tree: PageTree, *, selectors: Optional[SelectorConfig] = None) -> Optional[str]:
    selectors = selectors or SelectorConfig()

    for group in (selectors.revealed_answer, selectors.correct_unselected):
        node = find(tree, group)
        if node is not None:
            text = tree.text(node)
            if text:
                return text

    node = find(tree, selectors.incorrect_feedback)
    if node is not None:
        answer = extract_answer_phrase(tree.text(node))
        if answer:
            return answer

    for option in find_answer_options(tree, selectors=selectors):
        if (
            "correct" in class_tokens(tree, option)
            or tree.attribute(option, "data-correct") == "true"
            or find(tree, selectors.option_correct_marker, root=option) is not None
        ):
            text = tree.text(option)
            if text:
                return text
    return None


def strip_affirmations(text: str) -> str:
    return " ".join(AFFIRMATIVE_RE.sub("", text).split()).strip(" :-")


def extract_answer_phrase(text: str) -> Optional[str]:
    for pattern in REVEALED_ANSWER_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None
