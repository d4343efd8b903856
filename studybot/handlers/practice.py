from __future__ import annotations

"""Practice test generator: pick a set, a question count and an optional title."""

import logging
from typing import Any, Dict

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from studybot.config import DEFAULT_QUESTION_COUNT, MAX_QUESTION_COUNT, OPENAI_API_KEY
from studybot.db import (
    append_practice_test,
    get_flashcard_set,
    get_pending,
    load_flashcard_sets,
    set_awaiting_input,
    set_pending,
)
from studybot.formatters import (
    format_generated_html,
    format_generating_html,
    format_generator_html,
    format_title_prompt_html,
)
from studybot.generator import generate_test
from studybot.keyboards import kb_back_to_menu, kb_generated, kb_generator, kb_input_back, kb_pick_set
from studybot.models import FlashcardSet
from studybot.ui import SCREEN_GENERATOR, show_screen
from studybot.validators import validate_title


logger = logging.getLogger(__name__)

router = Router()

AWAITING_TEST_TITLE = "test_title"


def max_count_for(fset: FlashcardSet) -> int:
    return max(1, min(len(fset.cards), MAX_QUESTION_COUNT))


def clamp_count(count: int, fset: FlashcardSet) -> int:
    """Keep the question count within 1..number of cards."""
    return max(1, min(count, max_count_for(fset)))


async def _load_draft(user_id: int) -> tuple[Dict[str, Any], FlashcardSet | None]:
    pending = await get_pending(user_id)
    set_id = pending.get("set_id")
    fset = await get_flashcard_set(user_id, str(set_id)) if set_id else None
    return pending, fset


async def show_pick_set(bot: Bot, user_id: int) -> None:
    sets = [s for s in await load_flashcard_sets(user_id) if s.cards]
    if not sets:
        await show_screen(
            bot=bot,
            user_id=user_id,
            text="<b>Practice Test Generator</b>\n\nNo flashcard sets found. Create one under Flashcards first.",
            reply_markup=kb_back_to_menu(),
            screen_id=SCREEN_GENERATOR,
        )
        return
    await show_screen(
        bot=bot,
        user_id=user_id,
        text="<b>Practice Test Generator</b>\n\nSelect a flashcard set:",
        reply_markup=kb_pick_set(sets),
        screen_id=SCREEN_GENERATOR,
    )


async def show_generator(bot: Bot, user_id: int, fset: FlashcardSet, pending: Dict[str, Any]) -> None:
    count = clamp_count(int(pending.get("count", DEFAULT_QUESTION_COUNT)), fset)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_generator_html(fset, count, pending.get("title")),
        reply_markup=kb_generator(count, max_count_for(fset)),
        screen_id=SCREEN_GENERATOR,
    )


@router.message(Command("generate"))
async def cmd_generate(message: Message) -> None:
    assert message.from_user
    await set_awaiting_input(message.from_user.id, None)
    await show_pick_set(message.bot, message.from_user.id)  # type: ignore[arg-type]


@router.callback_query(F.data == "ui:gen")
async def on_gen_open(cb: CallbackQuery) -> None:
    assert cb.from_user
    await set_awaiting_input(cb.from_user.id, None)
    await show_pick_set(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:gen.set:"))
async def on_gen_set(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    await set_awaiting_input(user_id, None)
    _, _, set_id = cb.data.split(":", 2)
    fset = await get_flashcard_set(user_id, set_id)
    if fset is None or not fset.cards:
        await cb.answer("This set has no cards.")
        return
    pending = {"set_id": fset.id, "count": clamp_count(DEFAULT_QUESTION_COUNT, fset), "title": None}
    await set_pending(user_id, pending)
    await show_generator(cb.message.bot, user_id, fset, pending)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:gen.count:"))
async def on_gen_count(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    delta = int(cb.data.rsplit(":", 1)[1])
    pending, fset = await _load_draft(user_id)
    if fset is None:
        await cb.answer("Select a flashcard set first.")
        return
    new_count = clamp_count(int(pending.get("count", DEFAULT_QUESTION_COUNT)) + delta, fset)
    if new_count == pending.get("count"):
        await cb.answer()
        return
    pending["count"] = new_count
    await set_pending(user_id, pending)
    await show_generator(cb.message.bot, user_id, fset, pending)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:gen.noop")
async def on_gen_noop(cb: CallbackQuery) -> None:
    await cb.answer()


@router.callback_query(F.data == "ui:gen.title")
async def on_gen_title(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    pending, fset = await _load_draft(user_id)
    if fset is None:
        await cb.answer("Select a flashcard set first.")
        return
    await set_awaiting_input(user_id, AWAITING_TEST_TITLE)
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_title_prompt_html(),
        reply_markup=kb_input_back(f"ui:gen.set:{fset.id}"),
        screen_id=SCREEN_GENERATOR,
    )
    await cb.answer()


async def handle_title_text(message: Message, user_id: int) -> None:
    ok, err = validate_title(message.text or "")
    pending, fset = await _load_draft(user_id)
    if fset is None:
        await set_awaiting_input(user_id, None)
        await show_pick_set(message.bot, user_id)  # type: ignore[arg-type]
        return
    if not ok:
        await show_screen(
            bot=message.bot,  # type: ignore[arg-type]
            user_id=user_id,
            text=format_title_prompt_html(err or "Invalid title."),
            reply_markup=kb_input_back(f"ui:gen.set:{fset.id}"),
            screen_id=SCREEN_GENERATOR,
        )
        return
    pending["title"] = (message.text or "").strip()
    await set_pending(user_id, pending)
    await set_awaiting_input(user_id, None)
    await show_generator(message.bot, user_id, fset, pending)  # type: ignore[arg-type]


@router.callback_query(F.data == "ui:gen.run")
async def on_gen_run(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    bot = cb.message.bot  # type: ignore[union-attr]
    pending, fset = await _load_draft(user_id)
    if fset is None:
        await cb.answer("Select a flashcard set first.")
        await show_pick_set(bot, user_id)
        return
    await cb.answer()
    count = clamp_count(int(pending.get("count", DEFAULT_QUESTION_COUNT)), fset)
    await show_screen(bot=bot, user_id=user_id, text=format_generating_html(), reply_markup=None, screen_id=SCREEN_GENERATOR)

    result = await generate_test(
        fset.source_items(),
        count,
        pending.get("title"),
        OPENAI_API_KEY,
        source_name=fset.title,
    )
    await append_practice_test(user_id, result.test)
    logger.info(
        "User %s generated test %s (%s, %d questions)",
        user_id,
        result.test.id,
        result.source,
        len(result.test.questions),
    )
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_generated_html(result.test, result.used_fallback),
        reply_markup=kb_generated(result.test.id),
        screen_id=SCREEN_GENERATOR,
    )
