from __future__ import annotations

from studybot.handlers.practice import clamp_count
from studybot.models import Flashcard, FlashcardSet
from studybot.validators import (
    validate_cards_text,
    validate_question_text,
    validate_set_message,
    validate_source_text,
    validate_title,
)


def test_validate_title():
    assert validate_title("Midterm")[0]
    assert not validate_title("   ")[0]
    assert not validate_title("x" * 81)[0]


def test_validate_set_message():
    assert validate_set_message("Spanish\nHola - Hello")[0]
    ok, err = validate_set_message("Spanish")
    assert not ok and "at least one card" in (err or "")
    ok, err = validate_set_message("Spanish\nHola - Hello\nbroken")
    assert not ok and "3" in (err or "")


def test_validate_source_text():
    assert not validate_source_text("too short")[0]
    assert validate_source_text("Photosynthesis is how plants make their own food from light.")[0]


def test_clamp_count_stays_within_card_count():
    fset = FlashcardSet(title="S", cards=[Flashcard(f"f{i}", f"b{i}") for i in range(3)])
    assert clamp_count(0, fset) == 1
    assert clamp_count(2, fset) == 2
    assert clamp_count(99, fset) == 3


def test_validate_cards_text():
    assert validate_cards_text("Hola - Hello\nGracias | Thank you") == (True, None)
    ok, err = validate_cards_text("Hola - Hello\nbroken")
    assert not ok and "2" in (err or "")
    ok, err = validate_cards_text("   ")
    assert not ok and "at least one card" in (err or "")


def test_validate_question_text():
    assert validate_question_text("Q?\n*A\nB\nC\nD") == (True, None)
    ok, err = validate_question_text("Q?\nA\nB\nC\nD")
    assert not ok and "all options" in (err or "")
