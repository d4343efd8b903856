from __future__ import annotations

"""Input validators for the inline UI text prompts."""

from typing import Tuple

from studybot.editing import parse_question_text
from studybot.flashcards import parse_cards_text, parse_set_message


MAX_TITLE_LEN = 80
MIN_SOURCE_TEXT_LEN = 40


def validate_title(text: str) -> Tuple[bool, str | None]:
    s = text.strip()
    if not s:
        return False, "Title cannot be empty."
    if len(s) > MAX_TITLE_LEN:
        return False, f"Title is too long (max {MAX_TITLE_LEN} characters)."
    return True, None


def validate_set_message(text: str) -> Tuple[bool, str | None]:
    title, cards, bad = parse_set_message(text)
    ok, err = validate_title(title)
    if not ok:
        return ok, err
    if bad:
        lines = ", ".join(str(n) for n in bad[:10])
        return False, f"Could not read lines: {lines}. Use “front - back” on each line."
    if not cards:
        return False, "Add at least one card below the title."
    return True, None


def validate_cards_text(text: str) -> Tuple[bool, str | None]:
    cards, bad = parse_cards_text(text)
    if bad:
        lines = ", ".join(str(n) for n in bad[:10])
        return False, f"Could not read lines: {lines}. Use “front - back” on each line."
    if not cards:
        return False, "Send at least one card as “front - back”."
    return True, None


def validate_question_text(text: str) -> Tuple[bool, str | None]:
    if parse_question_text(text) is None:
        return False, "Please ensure question and all options are filled, and correct answer is selected."
    return True, None


def validate_source_text(text: str) -> Tuple[bool, str | None]:
    if len(text.strip()) < MIN_SOURCE_TEXT_LEN:
        return False, f"Please send at least {MIN_SOURCE_TEXT_LEN} characters of source text."
    return True, None
