from __future__ import annotations

"""Editing saved practice tests: mark the correct option, rewrite, add or delete questions."""

import json
import logging
from typing import Callable

from aiogram import Bot, F, Router
from aiogram.types import CallbackQuery, Message

from studybot.db import (
    get_pending,
    get_practice_test,
    get_quiz_state_json,
    set_awaiting_input,
    set_pending,
    set_quiz_state,
    update_practice_test,
)
from studybot.editing import (
    PAGE_SIZE,
    append_question,
    page_bounds,
    parse_question_text,
    remove_question,
    replace_question,
    set_correct_index,
)
from studybot.formatters import (
    format_question_edit_html,
    format_question_prompt_html,
    format_test_edit_html,
)
from studybot.handlers.quiz import show_tests
from studybot.keyboards import kb_input_back, kb_question_edit, kb_test_edit
from studybot.models import PracticeTest
from studybot.ui import SCREEN_TESTS, show_screen
from studybot.validators import validate_question_text


logger = logging.getLogger(__name__)

router = Router()

AWAITING_QUESTION = "question"


def _ints(parts: list[str]) -> list[int] | None:
    try:
        return [int(p) for p in parts]
    except ValueError:
        return None


async def _drop_run_for(user_id: int, test_id: str) -> None:
    # An edited test no longer matches an attempt that is in progress
    data_s = await get_quiz_state_json(user_id)
    if data_s and json.loads(data_s).get("test_id") == test_id:
        await set_quiz_state(user_id, None)


async def _edit(
    user_id: int, test_id: str, change: Callable[[PracticeTest], bool]
) -> tuple[PracticeTest | None, bool]:
    changed = False

    def apply(test: PracticeTest) -> bool:
        nonlocal changed
        changed = change(test)
        return changed

    test = await update_practice_test(user_id, test_id, apply)
    if changed:
        await _drop_run_for(user_id, test_id)
    return test, changed


async def show_test_edit(bot: Bot, user_id: int, test: PracticeTest, page: int) -> None:
    _, _, page, pages = page_bounds(len(test.questions), page, PAGE_SIZE)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_test_edit_html(test, page, pages),
        reply_markup=kb_test_edit(test, page),
        screen_id=SCREEN_TESTS,
    )


async def show_question_edit(bot: Bot, user_id: int, test: PracticeTest, qidx: int) -> None:
    q = test.questions[qidx]
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_question_edit_html(test, qidx),
        reply_markup=kb_question_edit(test.id, qidx, len(q.options), q.correct_index),
        screen_id=SCREEN_TESTS,
    )


async def _test_gone(cb: CallbackQuery) -> None:
    await cb.answer("Test not found.", show_alert=True)


@router.callback_query(F.data.startswith("ui:tests.edit:"))
async def on_test_edit(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    nums = _ints(parts[3:]) if len(parts) == 4 else None
    if nums is None:
        await cb.answer()
        return
    test = await get_practice_test(user_id, parts[2])
    if test is None:
        await _test_gone(cb)
        return
    await set_awaiting_input(user_id, None)
    await show_test_edit(cb.message.bot, user_id, test, nums[0])  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:tests.q:"))
async def on_question_open(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    nums = _ints(parts[3:]) if len(parts) == 4 else None
    if nums is None:
        await cb.answer()
        return
    test = await get_practice_test(user_id, parts[2])
    if test is None:
        await _test_gone(cb)
        return
    await set_awaiting_input(user_id, None)
    qidx = nums[0]
    if not (0 <= qidx < len(test.questions)):
        await show_test_edit(cb.message.bot, user_id, test, 0)  # type: ignore[union-attr]
        await cb.answer("Question not found.")
        return
    await show_question_edit(cb.message.bot, user_id, test, qidx)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:tests.qc:"))
async def on_question_correct(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    nums = _ints(parts[3:]) if len(parts) == 5 else None
    if nums is None:
        await cb.answer()
        return
    qidx, optidx = nums
    test, changed = await _edit(user_id, parts[2], lambda t: set_correct_index(t, qidx, optidx))
    if test is None:
        await _test_gone(cb)
        return
    if changed:
        await show_question_edit(cb.message.bot, user_id, test, qidx)  # type: ignore[union-attr]
    await cb.answer("Correct answer updated." if changed else None)


@router.callback_query(F.data.startswith("ui:tests.qdel:"))
async def on_question_delete(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    nums = _ints(parts[3:]) if len(parts) == 4 else None
    if nums is None:
        await cb.answer()
        return
    qidx = nums[0]
    test, changed = await _edit(user_id, parts[2], lambda t: remove_question(t, qidx))
    if test is None:
        await _test_gone(cb)
        return
    await show_test_edit(cb.message.bot, user_id, test, qidx // PAGE_SIZE)  # type: ignore[union-attr]
    await cb.answer("Question deleted." if changed else "Question not found.")


async def _ask_question(cb: CallbackQuery, test: PracticeTest, qidx: int | None) -> None:
    user_id = cb.from_user.id
    await set_pending(user_id, {"test_id": test.id, "qidx": qidx})
    await set_awaiting_input(user_id, AWAITING_QUESTION)
    back = f"ui:tests.q:{test.id}:{qidx}" if qidx is not None else f"ui:tests.edit:{test.id}:0"
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_question_prompt_html(test.questions[qidx] if qidx is not None else None),
        reply_markup=kb_input_back(back),
        screen_id=SCREEN_TESTS,
    )
    await cb.answer()


@router.callback_query(F.data.startswith("ui:tests.qedit:"))
async def on_question_rewrite(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    parts = cb.data.split(":")
    nums = _ints(parts[3:]) if len(parts) == 4 else None
    if nums is None:
        await cb.answer()
        return
    test = await get_practice_test(cb.from_user.id, parts[2])
    if test is None:
        await _test_gone(cb)
        return
    if not (0 <= nums[0] < len(test.questions)):
        await cb.answer("Question not found.")
        return
    await _ask_question(cb, test, nums[0])


@router.callback_query(F.data.startswith("ui:tests.qadd:"))
async def on_question_add(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    _, _, test_id = cb.data.split(":", 2)
    test = await get_practice_test(cb.from_user.id, test_id)
    if test is None:
        await _test_gone(cb)
        return
    await _ask_question(cb, test, None)


async def handle_question_text(message: Message, user_id: int) -> None:
    bot: Bot = message.bot  # type: ignore[assignment]
    pending = await get_pending(user_id)
    test_id = str(pending.get("test_id") or "")
    qidx = pending.get("qidx")
    test = await get_practice_test(user_id, test_id) if test_id else None
    if test is None:
        await set_awaiting_input(user_id, None)
        await set_pending(user_id, None)
        await show_tests(bot, user_id)
        return

    text = message.text or ""
    ok, err = validate_question_text(text)
    question = parse_question_text(text) if ok else None
    if question is None:
        back = f"ui:tests.q:{test.id}:{qidx}" if qidx is not None else f"ui:tests.edit:{test.id}:0"
        current = test.questions[qidx] if qidx is not None and 0 <= qidx < len(test.questions) else None
        await show_screen(
            bot=bot,
            user_id=user_id,
            text=format_question_prompt_html(current, err),
            reply_markup=kb_input_back(back),
            screen_id=SCREEN_TESTS,
        )
        return

    if qidx is None:
        updated, _ = await _edit(user_id, test.id, lambda t: append_question(t, question))
    else:
        updated, _ = await _edit(user_id, test.id, lambda t: replace_question(t, int(qidx), question))
    await set_awaiting_input(user_id, None)
    await set_pending(user_id, None)
    if updated is None or not updated.questions:
        return
    target = len(updated.questions) - 1 if qidx is None else min(int(qidx), len(updated.questions) - 1)
    logger.info("User %s saved question %d of test %s", user_id, target + 1, test.id)
    await show_question_edit(bot, user_id, updated, target)
