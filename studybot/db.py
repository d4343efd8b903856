from __future__ import annotations

"""SQLite-backed key-value store and UI state.

Collections (flashcard sets, practice tests, study guides) are stored as JSON
blobs under per-user keys, mirroring the app's original key-value storage.
"""

import contextlib
import json
from typing import Any, AsyncIterator, Callable, Dict, List, TypeVar

import aiosqlite

from studybot.config import DB_PATH
from studybot.models import FlashcardSet, PracticeTest, StudyGuide

_SENTINEL = object()

T = TypeVar("T")

FLASHCARD_SETS_KEY = "FlashcardSets"
PRACTICE_TESTS_KEY = "PracticeTests"
STUDY_GUIDES_KEY = "StudyGuides"
QUIZ_STATE_KEY = "QuizState"


def user_key(user_id: int, name: str) -> str:
    return f"{user_id}:{name}"


@contextlib.asynccontextmanager
async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    db = await aiosqlite.connect(DB_PATH.as_posix())
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


async def init_db() -> None:
    async with get_db() as db:
        await db.executescript(
            """
            PRAGMA journal_mode=WAL;

            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at DATETIME NOT NULL DEFAULT (datetime('now'))
            );

            -- UI state for inline navigation and message cleanup
            CREATE TABLE IF NOT EXISTS user_ui_state (
                user_id INTEGER PRIMARY KEY,
                last_ui_message_id INTEGER,
                current_screen TEXT,
                awaiting_input_field TEXT,
                pending_json TEXT
            );
            """
        )
        await db.commit()


# ---- Key-value primitives --------------------------------------------------

async def load(key: str) -> bytes | None:
    async with get_db() as db:
        cur = await db.execute("SELECT value FROM kv_store WHERE key=?", (key,))
        row = await cur.fetchone()
    return bytes(row[0]) if row else None


async def save(key: str, data: bytes) -> None:
    async with get_db() as db:
        await db.execute(
            "INSERT INTO kv_store(key, value) VALUES(?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=datetime('now')",
            (key, data),
        )
        await db.commit()


async def delete(key: str) -> None:
    async with get_db() as db:
        await db.execute("DELETE FROM kv_store WHERE key=?", (key,))
        await db.commit()


def _decode_list(raw: Any) -> List[Dict[str, Any]]:
    if raw is None:
        return []
    data = json.loads(bytes(raw).decode("utf-8"))
    return data if isinstance(data, list) else []


async def _load_json_list(key: str) -> List[Dict[str, Any]]:
    return _decode_list(await load(key))


async def _save_json_list(key: str, items: List[Dict[str, Any]]) -> None:
    await save(key, json.dumps(items, ensure_ascii=False).encode("utf-8"))


async def _update_json_list(key: str, change: Callable[[List[Dict[str, Any]]], T]) -> T:
    """Read-modify-write a JSON list under one write lock.

    `change` mutates the list in place; its return value is passed through.
    """
    async with get_db() as db:
        await db.execute("BEGIN IMMEDIATE")
        try:
            cur = await db.execute("SELECT value FROM kv_store WHERE key=?", (key,))
            row = await cur.fetchone()
            items = _decode_list(row[0] if row else None)
            result = change(items)
            await db.execute(
                "INSERT INTO kv_store(key, value) VALUES(?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=datetime('now')",
                (key, json.dumps(items, ensure_ascii=False).encode("utf-8")),
            )
            await db.commit()
        except BaseException:
            await db.rollback()
            raise
    return result


def _remove_by_id(items: List[Dict[str, Any]], item_id: str) -> bool:
    kept = [d for d in items if d.get("id") != item_id]
    removed = len(kept) != len(items)
    items[:] = kept
    return removed


# ---- Flashcard sets --------------------------------------------------------

async def load_flashcard_sets(user_id: int) -> List[FlashcardSet]:
    return [FlashcardSet.from_dict(d) for d in await _load_json_list(user_key(user_id, FLASHCARD_SETS_KEY))]


async def save_flashcard_sets(user_id: int, sets: List[FlashcardSet]) -> None:
    await _save_json_list(user_key(user_id, FLASHCARD_SETS_KEY), [s.to_dict() for s in sets])


async def add_flashcard_set(user_id: int, fset: FlashcardSet) -> None:
    await _update_json_list(user_key(user_id, FLASHCARD_SETS_KEY), lambda items: items.append(fset.to_dict()))


async def get_flashcard_set(user_id: int, set_id: str) -> FlashcardSet | None:
    for s in await load_flashcard_sets(user_id):
        if s.id == set_id:
            return s
    return None


async def delete_flashcard_set(user_id: int, set_id: str) -> bool:
    return await _update_json_list(
        user_key(user_id, FLASHCARD_SETS_KEY), lambda items: _remove_by_id(items, set_id)
    )


async def update_flashcard_set(
    user_id: int, set_id: str, change: Callable[[FlashcardSet], bool]
) -> FlashcardSet | None:
    """Apply `change` to one stored set; returns the set, or None if it is gone.

    The set is written back only when `change` reports a modification.
    """

    def apply(items: List[Dict[str, Any]]) -> FlashcardSet | None:
        for i, d in enumerate(items):
            if d.get("id") == set_id:
                fset = FlashcardSet.from_dict(d)
                if change(fset):
                    items[i] = fset.to_dict()
                return fset
        return None

    return await _update_json_list(user_key(user_id, FLASHCARD_SETS_KEY), apply)


# ---- Practice tests --------------------------------------------------------

async def load_practice_tests(user_id: int) -> List[PracticeTest]:
    return [PracticeTest.from_dict(d) for d in await _load_json_list(user_key(user_id, PRACTICE_TESTS_KEY))]


async def append_practice_test(user_id: int, test: PracticeTest) -> None:
    await _update_json_list(user_key(user_id, PRACTICE_TESTS_KEY), lambda items: items.append(test.to_dict()))


async def get_practice_test(user_id: int, test_id: str) -> PracticeTest | None:
    for t in await load_practice_tests(user_id):
        if t.id == test_id:
            return t
    return None


async def delete_practice_test(user_id: int, test_id: str) -> bool:
    return await _update_json_list(
        user_key(user_id, PRACTICE_TESTS_KEY), lambda items: _remove_by_id(items, test_id)
    )


async def update_practice_test(
    user_id: int, test_id: str, change: Callable[[PracticeTest], bool]
) -> PracticeTest | None:
    def apply(items: List[Dict[str, Any]]) -> PracticeTest | None:
        for i, d in enumerate(items):
            if d.get("id") == test_id:
                test = PracticeTest.from_dict(d)
                if change(test):
                    items[i] = test.to_dict()
                return test
        return None

    return await _update_json_list(user_key(user_id, PRACTICE_TESTS_KEY), apply)


# ---- Study guides ----------------------------------------------------------

async def load_study_guides(user_id: int) -> List[StudyGuide]:
    return [StudyGuide.from_dict(d) for d in await _load_json_list(user_key(user_id, STUDY_GUIDES_KEY))]


async def append_study_guide(user_id: int, guide: StudyGuide) -> None:
    await _update_json_list(user_key(user_id, STUDY_GUIDES_KEY), lambda items: items.append(guide.to_dict()))


async def get_study_guide(user_id: int, guide_id: str) -> StudyGuide | None:
    for g in await load_study_guides(user_id):
        if g.id == guide_id:
            return g
    return None


# ---- Quiz run state --------------------------------------------------------

async def get_quiz_state_json(user_id: int) -> str | None:
    raw = await load(user_key(user_id, QUIZ_STATE_KEY))
    return raw.decode("utf-8") if raw is not None else None


async def set_quiz_state(user_id: int, state_json: str | None) -> None:
    key = user_key(user_id, QUIZ_STATE_KEY)
    if state_json is None:
        await delete(key)
    else:
        await save(key, state_json.encode("utf-8"))


# ---- UI state --------------------------------------------------------------

async def get_ui_state(user_id: int) -> aiosqlite.Row | None:
    """Return UI state row for a user if exists."""
    async with get_db() as db:
        cur = await db.execute(
            "SELECT user_id, last_ui_message_id, current_screen, awaiting_input_field, pending_json "
            "FROM user_ui_state WHERE user_id=?",
            (user_id,),
        )
        return await cur.fetchone()


async def set_ui_state(
    user_id: int,
    last_ui_message_id: int | None = None,
    current_screen: str | None = None,
    awaiting_input_field: str | None | object = _SENTINEL,
) -> None:
    """Upsert UI state fields for the user; None keeps the stored value."""
    row = await get_ui_state(user_id)
    new_msg_id = last_ui_message_id if last_ui_message_id is not None else (
        int(row["last_ui_message_id"]) if row and row["last_ui_message_id"] is not None else None
    )
    new_screen = current_screen if current_screen is not None else (
        str(row["current_screen"]) if row and row["current_screen"] is not None else None
    )
    if awaiting_input_field is _SENTINEL:  # keep existing
        new_awaiting = row["awaiting_input_field"] if row else None
    else:
        new_awaiting = awaiting_input_field
    async with get_db() as db:
        await db.execute(
            "INSERT INTO user_ui_state(user_id, last_ui_message_id, current_screen, awaiting_input_field) VALUES(?,?,?,?) "
            "ON CONFLICT(user_id) DO UPDATE SET last_ui_message_id=excluded.last_ui_message_id, "
            "current_screen=excluded.current_screen, awaiting_input_field=excluded.awaiting_input_field",
            (user_id, new_msg_id, new_screen, new_awaiting),
        )
        await db.commit()


async def set_awaiting_input(user_id: int, field: str | None) -> None:
    """Set or clear the awaiting input field in UI state."""
    await set_ui_state(user_id, awaiting_input_field=field)


async def get_pending(user_id: int) -> Dict[str, Any]:
    """Return the draft parameters of a multi-step flow (e.g. test generation)."""
    row = await get_ui_state(user_id)
    if not row or not row["pending_json"]:
        return {}
    data = json.loads(row["pending_json"])
    return data if isinstance(data, dict) else {}


async def set_pending(user_id: int, pending: Dict[str, Any] | None) -> None:
    await set_ui_state(user_id)
    async with get_db() as db:
        await db.execute(
            "UPDATE user_ui_state SET pending_json=? WHERE user_id=?",
            (json.dumps(pending, ensure_ascii=False) if pending else None, user_id),
        )
        await db.commit()
