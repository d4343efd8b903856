from __future__ import annotations

import pytest

from studybot.editing import (
    add_cards,
    card_ref,
    page_bounds,
    parse_question_text,
    question_to_text,
    remove_card,
    remove_question,
    replace_question,
    set_correct_index,
    step_card,
)
from studybot.models import Flashcard, FlashcardSet, PracticeTest, TestQuestion


def _set(n: int) -> FlashcardSet:
    return FlashcardSet(title="S", cards=[Flashcard(f"f{i}", f"b{i}") for i in range(n)])


def _test() -> PracticeTest:
    return PracticeTest(
        title="T",
        questions=[
            TestQuestion("Hola", ["Hello", "Bye", "Thanks", "Please"], 0),
            TestQuestion("Adiós", ["Hello", "Bye", "Thanks", "Please"], 1),
        ],
    )


def test_step_card_stops_at_both_ends():
    assert step_card(0, -1, 3) == 0
    assert step_card(0, 1, 3) == 1
    assert step_card(2, 1, 3) == 2
    assert step_card(7, 0, 3) == 2
    assert step_card(0, 1, 0) == 0


def test_page_bounds_clamps_page():
    assert page_bounds(25, 0, 10) == (0, 10, 0, 3)
    assert page_bounds(25, 2, 10) == (20, 25, 2, 3)
    assert page_bounds(25, 9, 10) == (20, 25, 2, 3)
    assert page_bounds(0, 3, 10) == (0, 0, 0, 1)


def test_add_and_remove_single_cards():
    fset = _set(3)
    assert add_cards(fset, [Flashcard("new", "card")])
    assert not add_cards(fset, [])
    assert [c.front for c in fset.cards] == ["f0", "f1", "f2", "new"]

    target = fset.cards[1]
    assert remove_card(fset, card_ref(target))
    assert [c.front for c in fset.cards] == ["f0", "f2", "new"]
    assert not remove_card(fset, card_ref(target))


def test_parse_question_text_reads_marked_option():
    q = parse_question_text("What is the capital of France?\nBerlin\n* Paris\nMadrid\nRome\n")
    assert q is not None
    assert q.prompt == "What is the capital of France?"
    assert q.options == ["Berlin", "Paris", "Madrid", "Rome"]
    assert q.correct_answer == "Paris"


@pytest.mark.parametrize(
    "text",
    [
        "Q\nA\nB\nC",  # three options
        "Q\nA\nB\nC\nD",  # nothing marked
        "Q\n*A\n*B\nC\nD",  # two marked
        "Q\n*\nB\nC\nD",  # marked option is empty
        "Q\nA\nB\nC\nD\nE",  # five options
        "",
    ],
)
def test_parse_question_text_rejects_incomplete_questions(text):
    assert parse_question_text(text) is None


def test_question_text_can_be_sent_back_unchanged():
    q = _test().questions[1]
    parsed = parse_question_text(question_to_text(q))
    assert parsed is not None
    assert (parsed.prompt, parsed.options, parsed.correct_index) == (q.prompt, q.options, q.correct_index)


def test_replace_question_keeps_identity():
    test = _test()
    old_id = test.questions[0].id
    new_q = TestQuestion("Gracias", ["Hello", "Bye", "Thanks", "Please"], 2)
    assert replace_question(test, 0, new_q)
    assert test.questions[0].id == old_id
    assert test.questions[0].correct_answer == "Thanks"
    assert not replace_question(test, 5, new_q)


def test_set_correct_index_and_remove_question():
    test = _test()
    assert set_correct_index(test, 0, 3)
    assert test.questions[0].correct_answer == "Please"
    assert not set_correct_index(test, 0, 3)
    assert not set_correct_index(test, 0, 4)
    assert not set_correct_index(test, 9, 0)

    assert remove_question(test, 0)
    assert [q.prompt for q in test.questions] == ["Adiós"]
    assert not remove_question(test, 1)
