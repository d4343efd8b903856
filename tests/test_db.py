from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
import pytest_asyncio

from studybot.editing import add_cards, card_ref, remove_card, set_correct_index
from studybot.models import Flashcard, FlashcardSet, PracticeTest, StudyGuide, TestQuestion


@pytest_asyncio.fixture
async def db(tmp_path, monkeypatch):
    # Point all DB operations at a temp file
    import studybot.db as dbmod

    db_file: Path = tmp_path / "test.db"
    monkeypatch.setattr(dbmod, "DB_PATH", db_file, raising=False)
    await dbmod.init_db()
    return dbmod


@pytest.mark.asyncio
async def test_kv_load_save_delete(db) -> None:
    assert await db.load("k") is None
    await db.save("k", b"one")
    assert await db.load("k") == b"one"
    await db.save("k", b"two")
    assert await db.load("k") == b"two"
    await db.delete("k")
    assert await db.load("k") is None


@pytest.mark.asyncio
async def test_flashcard_sets_are_per_user(db) -> None:
    fset = FlashcardSet(title="Spanish", cards=[Flashcard("Hola", "Hello"), Flashcard("Adiós", "Goodbye")])
    await db.add_flashcard_set(1, fset)
    assert await db.load_flashcard_sets(2) == []

    loaded = await db.load_flashcard_sets(1)
    assert len(loaded) == 1
    assert loaded[0].id == fset.id
    assert [(c.front, c.back) for c in loaded[0].cards] == [("Hola", "Hello"), ("Adiós", "Goodbye")]
    assert loaded[0].created_at == fset.created_at

    assert (await db.get_flashcard_set(1, fset.id)).title == "Spanish"
    assert await db.delete_flashcard_set(1, fset.id) is True
    assert await db.delete_flashcard_set(1, fset.id) is False
    assert await db.load_flashcard_sets(1) == []


@pytest.mark.asyncio
async def test_practice_tests_append_and_delete(db) -> None:
    t1 = PracticeTest(title="One", questions=[TestQuestion("Hola", ["Hello", "Bye"], 0)])
    t2 = PracticeTest(title="Two", questions=[])
    await db.append_practice_test(7, t1)
    await db.append_practice_test(7, t2)

    tests = await db.load_practice_tests(7)
    assert [t.title for t in tests] == ["One", "Two"]
    assert tests[0].questions[0].correct_answer == "Hello"

    # Stored in the same JSON shape the test schema uses
    raw = json.loads((await db.load(db.user_key(7, db.PRACTICE_TESTS_KEY))).decode("utf-8"))
    assert raw[0]["questions"][0]["correctIndex"] == 0

    assert await db.delete_practice_test(7, t1.id) is True
    assert [t.id for t in await db.load_practice_tests(7)] == [t2.id]


@pytest.mark.asyncio
async def test_study_guides_and_quiz_state(db) -> None:
    guide = StudyGuide(title="Photosynthesis", content="## Title\nPhotosynthesis")
    await db.append_study_guide(3, guide)
    assert (await db.get_study_guide(3, guide.id)).content == guide.content

    assert await db.get_quiz_state_json(3) is None
    await db.set_quiz_state(3, '{"test_id": "x"}')
    assert await db.get_quiz_state_json(3) == '{"test_id": "x"}'
    await db.set_quiz_state(3, None)
    assert await db.get_quiz_state_json(3) is None


@pytest.mark.asyncio
async def test_ui_state_and_pending(db) -> None:
    await db.set_ui_state(5, last_ui_message_id=10, current_screen="menu")
    await db.set_awaiting_input(5, "new_set")
    row = await db.get_ui_state(5)
    assert row["last_ui_message_id"] == 10
    assert row["current_screen"] == "menu"
    assert row["awaiting_input_field"] == "new_set"

    assert await db.get_pending(5) == {}
    await db.set_pending(5, {"set_id": "abc", "count": 3})
    assert await db.get_pending(5) == {"set_id": "abc", "count": 3}
    # Other UI fields survive
    assert (await db.get_ui_state(5))["awaiting_input_field"] == "new_set"
    await db.set_pending(5, None)
    assert await db.get_pending(5) == {}


@pytest.mark.asyncio
async def test_overlapping_appends_keep_every_item(db) -> None:
    tests = [PracticeTest(title=f"T{i}", questions=[]) for i in range(8)]
    guides = [StudyGuide(title=f"G{i}", content="x") for i in range(8)]
    await asyncio.gather(
        *(db.append_practice_test(9, t) for t in tests),
        *(db.append_study_guide(9, g) for g in guides),
    )
    assert {t.id for t in await db.load_practice_tests(9)} == {t.id for t in tests}
    assert {g.id for g in await db.load_study_guides(9)} == {g.id for g in guides}


@pytest.mark.asyncio
async def test_update_flashcard_set_adds_and_removes_cards(db) -> None:
    fset = FlashcardSet(title="Spanish", cards=[Flashcard("Hola", "Hello")])
    await db.add_flashcard_set(1, fset)

    updated = await db.update_flashcard_set(1, fset.id, lambda s: add_cards(s, [Flashcard("Adiós", "Goodbye")]))
    assert [c.front for c in updated.cards] == ["Hola", "Adiós"]
    stored = await db.get_flashcard_set(1, fset.id)
    assert [c.front for c in stored.cards] == ["Hola", "Adiós"]

    ref = card_ref(stored.cards[0])
    await db.update_flashcard_set(1, fset.id, lambda s: remove_card(s, ref))
    assert [c.front for c in (await db.get_flashcard_set(1, fset.id)).cards] == ["Adiós"]

    assert await db.update_flashcard_set(1, "missing", lambda s: True) is None


@pytest.mark.asyncio
async def test_update_practice_test_persists_question_edits(db) -> None:
    test = PracticeTest(title="T", questions=[TestQuestion("Hola", ["Hello", "Bye", "Thanks", "Please"], 0)])
    await db.append_practice_test(4, test)
    await db.update_practice_test(4, test.id, lambda t: set_correct_index(t, 0, 2))
    assert (await db.get_practice_test(4, test.id)).questions[0].correct_answer == "Thanks"
    assert await db.update_practice_test(4, "missing", lambda t: True) is None
