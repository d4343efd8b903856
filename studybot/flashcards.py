from __future__ import annotations

"""Parsing flashcards from pasted text and CSV files."""

import csv
import re
from pathlib import Path
from typing import Iterable, List, Tuple

from studybot.models import Flashcard


# Tried in order; first separator found on a line wins
_SEPARATORS = ("\t", " | ", "|", " - ", " – ", " — ")

CSV_HEADER = ["front", "back"]


def split_card_line(line: str) -> Tuple[str, str] | None:
    s = line.strip()
    if not s:
        return None
    for sep in _SEPARATORS:
        if sep in s:
            front, back = s.split(sep, 1)
            front, back = front.strip(), back.strip()
            if front and back:
                return front, back
            return None
    return None


def parse_cards_text(text: str) -> Tuple[List[Flashcard], List[int]]:
    """Parse one card per line as `front - back`, `front | back` or `front<TAB>back`.

    Returns (cards, bad_line_numbers). Blank lines are skipped silently.
    """
    cards: List[Flashcard] = []
    bad: List[int] = []
    for i, line in enumerate((text or "").splitlines(), start=1):
        if not line.strip():
            continue
        pair = split_card_line(line)
        if pair is None:
            bad.append(i)
            continue
        cards.append(Flashcard(front=pair[0], back=pair[1]))
    return cards, bad


def parse_set_message(text: str) -> Tuple[str, List[Flashcard], List[int]]:
    """Parse a set message: first line is the title, the rest are cards."""
    lines = (text or "").strip().splitlines()
    if not lines:
        return "", [], []
    title = re.sub(r"\s+", " ", lines[0]).strip()
    cards, bad = parse_cards_text("\n".join(lines[1:]))
    # Line numbers relative to the whole message
    return title, cards, [n + 1 for n in bad]


def parse_flashcards_csv(path: Path) -> Iterable[Flashcard]:
    """Yield flashcards from a `front,back` CSV file.

    Header is required. Rows with an empty side are rejected.
    """
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        header = [h.strip().lower() for h in (reader.fieldnames or [])]
        if header != CSV_HEADER:
            raise SystemExit(f"Invalid header. Expected {CSV_HEADER}, got {reader.fieldnames}")
        for i, row in enumerate(reader, start=2):
            values = list(row.values())
            front = (values[0] or "").strip()
            back = (values[1] or "").strip()
            if not front or not back:
                raise SystemExit(f"Row {i}: empty front or back")
            yield Flashcard(front=front, back=back)
