from __future__ import annotations

"""Saved practice tests: library screens and taking a test one question at a time.

Run state lives in the key-value store so a test survives bot restarts.
"""

import json

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from studybot.db import (
    delete_practice_test,
    get_practice_test,
    get_quiz_state_json,
    load_practice_tests,
    set_quiz_state,
)
from studybot.formatters import (
    format_question_html,
    format_test_html,
    format_test_summary_html,
    format_tests_list_html,
)
from studybot.keyboards import kb_test_detail, kb_test_question, kb_test_summary, kb_tests
from studybot.models import PracticeTest, QuizRun
from studybot.ui import SCREEN_TEST, SCREEN_TESTS, show_screen


router = Router()


def start_run(test: PracticeTest) -> QuizRun:
    return QuizRun(test_id=test.id, current_q=0, choices=[None] * len(test.questions))


def record_answer(
    run: QuizRun, test: PracticeTest, qidx: int, optidx: int, *, test_id: str | None = None
) -> bool:
    """Record a choice for the active question and advance.

    Returns False for stale or out-of-range answers, leaving the run untouched.
    `test_id` is the test the answer button belongs to, when known.
    """
    if test_id is not None and test_id != run.test_id:
        return False
    if qidx != run.current_q or not (0 <= qidx < len(test.questions)):
        return False
    if not (0 <= optidx < len(test.questions[qidx].options)):
        return False
    if len(run.choices) < len(test.questions):
        run.choices.extend([None] * (len(test.questions) - len(run.choices)))
    run.choices[qidx] = optidx
    run.current_q = qidx + 1
    return True


def parse_answer_data(data: str) -> tuple[str, int, int] | None:
    """Split `ui:test.answer:<test_id>:<qidx>:<optidx>` callback data."""
    parts = data.split(":")
    if len(parts) != 5:
        return None
    try:
        return parts[2], int(parts[3]), int(parts[4])
    except ValueError:
        return None


def is_finished(run: QuizRun, test: PracticeTest) -> bool:
    return run.current_q >= len(test.questions)


async def _load_run(user_id: int) -> tuple[QuizRun | None, PracticeTest | None]:
    data_s = await get_quiz_state_json(user_id)
    if not data_s:
        return None, None
    run = QuizRun.from_dict(json.loads(data_s))
    return run, await get_practice_test(user_id, run.test_id)


async def show_tests(bot: Bot, user_id: int) -> None:
    tests = await load_practice_tests(user_id)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_tests_list_html(tests),
        reply_markup=kb_tests(tests),
        screen_id=SCREEN_TESTS,
    )


async def render_question(bot: Bot, user_id: int, run: QuizRun, test: PracticeTest) -> None:
    if is_finished(run, test):
        await render_summary(bot, user_id, run, test)
        return
    q = test.questions[run.current_q]
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_question_html(test, run.current_q),
        reply_markup=kb_test_question(test.id, run.current_q, len(q.options)),
        screen_id=SCREEN_TEST,
    )


async def render_summary(bot: Bot, user_id: int, run: QuizRun, test: PracticeTest) -> None:
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_test_summary_html(test, run),
        reply_markup=kb_test_summary(test.id),
        screen_id=SCREEN_TEST,
    )


@router.message(Command("tests"))
async def cmd_tests(message: Message) -> None:
    assert message.from_user
    await show_tests(message.bot, message.from_user.id)  # type: ignore[arg-type]


@router.callback_query(F.data == "ui:tests")
async def on_tests_open(cb: CallbackQuery) -> None:
    assert cb.from_user
    await show_tests(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:tests.open:"))
async def on_test_open(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, test_id = cb.data.split(":", 2)
    test = await get_practice_test(user_id, test_id)
    if test is None:
        await cb.answer("Test not found.")
        await show_tests(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_test_html(test),
        reply_markup=kb_test_detail(test.id, bool(test.questions)),
        screen_id=SCREEN_TESTS,
    )
    await cb.answer()


@router.callback_query(F.data.startswith("ui:tests.delete:"))
async def on_test_delete(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, test_id = cb.data.split(":", 2)
    deleted = await delete_practice_test(user_id, test_id)
    await show_tests(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer("Test deleted." if deleted else "Test not found.")


@router.callback_query(F.data.startswith("ui:test.start:"))
async def on_test_start(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, test_id = cb.data.split(":", 2)
    test = await get_practice_test(user_id, test_id)
    if test is None or not test.questions:
        await cb.answer("This test has no questions.")
        return
    run = start_run(test)
    await set_quiz_state(user_id, json.dumps(run.to_dict()))
    await render_question(cb.message.bot, user_id, run, test)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:test.answer:"))
async def on_test_answer(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parsed = parse_answer_data(cb.data)
    if parsed is None:
        await cb.answer()
        return
    test_id, qidx, optidx = parsed

    run, test = await _load_run(user_id)
    if run is None or test is None:
        await cb.answer("No active test.")
        return
    if not record_answer(run, test, qidx, optidx, test_id=test_id):
        await cb.answer("This question is no longer active", show_alert=False)
        return
    await set_quiz_state(user_id, json.dumps(run.to_dict()))
    await render_question(cb.message.bot, user_id, run, test)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:test.quit")
async def on_test_quit(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    await set_quiz_state(user_id, None)
    await show_tests(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer()
