from __future__ import annotations

from pathlib import Path

import pytest

from studybot.flashcards import parse_cards_text, parse_flashcards_csv, parse_set_message, split_card_line


def test_split_card_line_separators() -> None:
    assert split_card_line("Hola - Hello") == ("Hola", "Hello")
    assert split_card_line("Hola | Hello") == ("Hola", "Hello")
    assert split_card_line("Hola\tHello") == ("Hola", "Hello")
    assert split_card_line("well-known - famous") == ("well-known", "famous")
    assert split_card_line("Area of circle | πr²") == ("Area of circle", "πr²")
    assert split_card_line("no separator here") is None
    assert split_card_line("Hola - ") is None


def test_parse_cards_text_reports_bad_lines() -> None:
    cards, bad = parse_cards_text("Hola - Hello\n\nnope\nGracias | Thank you")
    assert [(c.front, c.back) for c in cards] == [("Hola", "Hello"), ("Gracias", "Thank you")]
    assert bad == [3]


def test_parse_set_message() -> None:
    title, cards, bad = parse_set_message("Spanish  Basics\nHola - Hello\nbroken\nAdiós - Goodbye")
    assert title == "Spanish Basics"
    assert len(cards) == 2
    assert bad == [3]
    assert parse_set_message("") == ("", [], [])


def test_parse_flashcards_csv(tmp_path: Path) -> None:
    path = tmp_path / "cards.csv"
    path.write_text("front,back\nHola,Hello\n\"x, y\",coords\n", encoding="utf-8")
    cards = list(parse_flashcards_csv(path))
    assert [(c.front, c.back) for c in cards] == [("Hola", "Hello"), ("x, y", "coords")]


def test_parse_flashcards_csv_rejects_bad_header_and_rows(tmp_path: Path) -> None:
    bad_header = tmp_path / "bad.csv"
    bad_header.write_text("question,answer\nHola,Hello\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        list(parse_flashcards_csv(bad_header))

    empty_back = tmp_path / "empty.csv"
    empty_back.write_text("front,back\nHola,\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        list(parse_flashcards_csv(empty_back))
