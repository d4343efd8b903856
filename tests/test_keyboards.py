from __future__ import annotations

from studybot.keyboards import (
    kb_generator,
    kb_main_menu,
    kb_question_edit,
    kb_remove_cards,
    kb_set_detail,
    kb_sets,
    kb_study,
    kb_test_edit,
    kb_test_question,
)
from studybot.models import Flashcard, FlashcardSet, PracticeTest, TestQuestion


def _texts(kb):
    return [btn.text for row in kb.inline_keyboard for btn in row]


def _callbacks(kb):
    return [btn.callback_data for row in kb.inline_keyboard for btn in row]


def test_question_keyboard_has_one_button_per_option():
    test_id = "f" * 32
    assert len(kb_test_question(test_id, 0, 1).inline_keyboard[0]) == 1
    kb = kb_test_question(test_id, 3, 4)
    assert [b.callback_data for b in kb.inline_keyboard[0]] == [f"ui:test.answer:{test_id}:3:{i}" for i in range(4)]
    assert all(len(cb.encode("utf-8")) <= 64 for cb in _callbacks(kb))
    assert kb.inline_keyboard[1][0].callback_data == "ui:test.quit"


def test_generator_keyboard_shows_count_and_actions():
    kb = kb_generator(3, 10)
    assert "3 / 10" in _texts(kb)
    assert "ui:gen.run" in _callbacks(kb)
    assert "ui:gen.count:-1" in _callbacks(kb) and "ui:gen.count:1" in _callbacks(kb)


def test_sets_keyboard_and_callback_length():
    fset = FlashcardSet(title="A very long flashcard set title that keeps going and going")
    kb = kb_sets([fset])
    assert f"ui:sets.open:{fset.id}" in _callbacks(kb)
    assert all(len(cb.encode("utf-8")) <= 64 for cb in _callbacks(kb))
    assert any(t.endswith("…") for t in _texts(kb))


def test_main_menu_entries():
    texts = _texts(kb_main_menu())
    assert any("Flashcards" in t for t in texts)
    assert any("Practice tests" in t for t in texts)
    assert any("Study guides" in t for t in texts)


def test_study_keyboard_moves_flips_and_stops_at_edges():
    set_id = "a" * 32
    kb = kb_study(set_id, 0, 3, show_back=False)
    back, flip, nxt = kb.inline_keyboard[0]
    assert back.callback_data == "ui:sets.noop"
    assert flip.callback_data == f"ui:sets.study:{set_id}:0:b"
    assert nxt.callback_data == f"ui:sets.study:{set_id}:1:f"

    back, flip, nxt = kb_study(set_id, 2, 3, show_back=True).inline_keyboard[0]
    assert back.callback_data == f"ui:sets.study:{set_id}:1:f"
    assert flip.callback_data == f"ui:sets.study:{set_id}:2:f"
    assert nxt.callback_data == "ui:sets.noop"


def test_set_detail_hides_card_actions_for_empty_set():
    set_id = "a" * 32
    full = _callbacks(kb_set_detail(set_id, True))
    assert f"ui:sets.study:{set_id}:0:f" in full
    assert f"ui:sets.cards:{set_id}:0" in full
    empty = _callbacks(kb_set_detail(set_id, False))
    assert f"ui:sets.addcards:{set_id}" in empty
    assert not any(cb.startswith(("ui:sets.study:", "ui:sets.cards:", "ui:gen.set:")) for cb in empty)


def test_remove_cards_keyboard_pages_through_cards():
    fset = FlashcardSet(title="S", cards=[Flashcard(f"front {i}", f"back {i}") for i in range(12)])
    first = _callbacks(kb_remove_cards(fset, 0))
    assert sum(cb.startswith("ui:sets.delcard:") for cb in first) == 10
    assert f"ui:sets.cards:{fset.id}:1" in first
    assert f"ui:sets.delcard:{fset.id}:{fset.cards[0].id[:8]}:0" in first

    last = _callbacks(kb_remove_cards(fset, 5))
    assert sum(cb.startswith("ui:sets.delcard:") for cb in last) == 2
    assert f"ui:sets.cards:{fset.id}:0" in last
    assert all(len(cb.encode("utf-8")) <= 64 for cb in first + last)


def test_question_editing_keyboards():
    test = PracticeTest(
        title="T",
        questions=[TestQuestion(f"q{i}", ["a", "b", "c", "d"], 0) for i in range(3)],
    )
    edit = _callbacks(kb_test_edit(test, 0))
    assert [f"ui:tests.q:{test.id}:{i}" for i in range(3)] == edit[:3]
    assert f"ui:tests.qadd:{test.id}" in edit

    kb = kb_question_edit(test.id, 2, 4, correct_index=1)
    assert [b.text for b in kb.inline_keyboard[0]] == ["1", "✅ 2", "3", "4"]
    assert kb.inline_keyboard[0][3].callback_data == f"ui:tests.qc:{test.id}:2:3"
    assert all(len(cb.encode("utf-8")) <= 64 for cb in _callbacks(kb) + edit)
