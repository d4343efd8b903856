from __future__ import annotations

import random

import pytest

from studybot.models import SourceItem
from studybot.synth import default_title, pick_distractors, synthesize


SPANISH = [
    SourceItem("Hola", "Hello"),
    SourceItem("Gracias", "Thank you"),
    SourceItem("Adiós", "Goodbye"),
]


def _answers_by_prompt(items):
    return {it.prompt: it.answer for it in items}


@pytest.mark.parametrize("count", [1, 2, 3])
def test_question_count_matches_request(count: int) -> None:
    test = synthesize(SPANISH, count, rng=random.Random(1))
    assert len(test.questions) == count


def test_correct_index_points_at_source_answer() -> None:
    items = [SourceItem(f"q{i}", f"a{i}") for i in range(10)]
    answers = _answers_by_prompt(items)
    test = synthesize(items, 10, rng=random.Random(3))
    for q in test.questions:
        assert q.options[q.correct_index] == answers[q.prompt]
        assert 1 <= len(q.options) <= 4
        assert q.options.count(answers[q.prompt]) == 1
    # Sample without replacement
    assert len({q.prompt for q in test.questions}) == 10


def test_single_item_has_no_distractors() -> None:
    test = synthesize([SourceItem("Only", "One")], 1, rng=random.Random(0))
    assert len(test.questions) == 1
    q = test.questions[0]
    assert q.options == ["One"]
    assert q.correct_index == 0


def test_spanish_example_draws_distractors_from_other_answers() -> None:
    answers = {it.answer for it in SPANISH}
    by_prompt = _answers_by_prompt(SPANISH)
    test = synthesize(SPANISH, 2, rng=random.Random(42))
    assert len(test.questions) == 2
    for q in test.questions:
        correct = by_prompt[q.prompt]
        assert correct in q.options
        assert set(q.options) <= answers
        distractors = [o for o in q.options if o != correct]
        assert len(distractors) == 2
        assert len(set(distractors)) == 2


def test_count_is_clamped_to_available_items() -> None:
    test = synthesize(SPANISH, 10, rng=random.Random(0))
    assert len(test.questions) == len(SPANISH)


def test_empty_items_or_zero_count_give_empty_test() -> None:
    assert synthesize([], 5).questions == []
    assert synthesize(SPANISH, 0).questions == []


def test_shared_answer_text_is_excluded_from_distractors() -> None:
    items = [
        SourceItem("a", "X"),
        SourceItem("b", "X"),
        SourceItem("c", "Y"),
    ]
    test = synthesize(items, 3, rng=random.Random(5))
    by_prompt = {q.prompt: q for q in test.questions}
    # "a" and "b" share answer text, so only "Y" is left as a distractor
    assert sorted(by_prompt["a"].options) == ["X", "Y"]
    assert sorted(by_prompt["b"].options) == ["X", "Y"]
    assert sorted(by_prompt["c"].options) == ["X", "Y"]


def test_distractors_are_distinct() -> None:
    rng = random.Random(9)
    out = pick_distractors("X", ["X", "Y", "Y", "Z", "Z", "W", "V"], rng)
    assert len(out) == 3
    assert len(set(out)) == 3
    assert "X" not in out


def test_seeded_rng_is_reproducible() -> None:
    a = synthesize(SPANISH, 3, rng=random.Random(123))
    b = synthesize(SPANISH, 3, rng=random.Random(123))
    assert [(q.prompt, q.options, q.correct_index) for q in a.questions] == [
        (q.prompt, q.options, q.correct_index) for q in b.questions
    ]


def test_titles() -> None:
    assert synthesize(SPANISH, 1, "My Quiz").title == "My Quiz"
    assert synthesize(SPANISH, 1, "   ", source_name="Spanish Basics").title == "Practice Test from Spanish Basics"
    assert synthesize(SPANISH, 1).title == default_title(None) == "Practice Test"


def test_input_sequence_is_not_mutated() -> None:
    items = list(SPANISH)
    synthesize(items, 3, rng=random.Random(7))
    assert items == SPANISH
