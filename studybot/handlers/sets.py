from __future__ import annotations

"""Flashcard sets: list, create from pasted text, study, edit cards, delete."""

import logging

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from studybot.db import (
    add_flashcard_set,
    delete_flashcard_set,
    get_flashcard_set,
    get_pending,
    load_flashcard_sets,
    set_awaiting_input,
    set_pending,
    update_flashcard_set,
)
from studybot.editing import PAGE_SIZE, add_cards, page_bounds, remove_card, step_card
from studybot.flashcards import parse_cards_text, parse_set_message
from studybot.formatters import (
    format_add_cards_prompt_html,
    format_new_set_prompt_html,
    format_remove_cards_html,
    format_set_html,
    format_sets_list_html,
    format_study_card_html,
)
from studybot.keyboards import kb_input_back, kb_remove_cards, kb_set_detail, kb_sets, kb_study
from studybot.models import FlashcardSet
from studybot.ui import SCREEN_SETS, SCREEN_STUDY, show_screen
from studybot.validators import validate_cards_text, validate_set_message


logger = logging.getLogger(__name__)

router = Router()

AWAITING_NEW_SET = "new_set"
AWAITING_ADD_CARDS = "add_cards"


async def show_sets(bot: Bot, user_id: int) -> None:
    sets = await load_flashcard_sets(user_id)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_sets_list_html(sets),
        reply_markup=kb_sets(sets),
        screen_id=SCREEN_SETS,
    )


async def show_set(bot: Bot, user_id: int, fset: FlashcardSet) -> None:
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_set_html(fset),
        reply_markup=kb_set_detail(fset.id, bool(fset.cards)),
        screen_id=SCREEN_SETS,
    )


@router.message(Command("sets"))
async def cmd_sets(message: Message) -> None:
    assert message.from_user
    await set_awaiting_input(message.from_user.id, None)
    await show_sets(message.bot, message.from_user.id)  # type: ignore[arg-type]


@router.callback_query(F.data == "ui:sets")
async def on_sets_open(cb: CallbackQuery) -> None:
    assert cb.from_user
    await set_awaiting_input(cb.from_user.id, None)
    await show_sets(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:sets.new")
async def on_set_new(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    await set_awaiting_input(user_id, AWAITING_NEW_SET)
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_new_set_prompt_html(),
        reply_markup=kb_input_back("ui:sets"),
        screen_id=SCREEN_SETS,
    )
    await cb.answer()


async def handle_new_set_text(message: Message, user_id: int) -> None:
    text = message.text or ""
    ok, err = validate_set_message(text)
    if not ok:
        await show_screen(
            bot=message.bot,  # type: ignore[arg-type]
            user_id=user_id,
            text=format_new_set_prompt_html(err or "Invalid flashcards."),
            reply_markup=kb_input_back("ui:sets"),
            screen_id=SCREEN_SETS,
        )
        return
    title, cards, _ = parse_set_message(text)
    fset = FlashcardSet(title=title, cards=cards)
    await add_flashcard_set(user_id, fset)
    await set_awaiting_input(user_id, None)
    logger.info("User %s created set %s with %d cards", user_id, fset.id, len(cards))
    await show_set(message.bot, user_id, fset)  # type: ignore[arg-type]


@router.callback_query(F.data.startswith("ui:sets.open:"))
async def on_set_open(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    await set_awaiting_input(user_id, None)
    _, _, set_id = cb.data.split(":", 2)
    fset = await get_flashcard_set(user_id, set_id)
    if fset is None:
        await cb.answer("Set not found.")
        await show_sets(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    await show_set(cb.message.bot, user_id, fset)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:sets.delete:"))
async def on_set_delete(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, set_id = cb.data.split(":", 2)
    deleted = await delete_flashcard_set(user_id, set_id)
    await show_sets(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer("Set deleted." if deleted else "Set not found.")


@router.callback_query(F.data == "ui:sets.noop")
async def on_sets_noop(cb: CallbackQuery) -> None:
    await cb.answer()


@router.callback_query(F.data.startswith("ui:sets.study:"))
async def on_set_study(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    if len(parts) != 5 or not parts[3].isdigit():
        await cb.answer()
        return
    set_id, index, side = parts[2], int(parts[3]), parts[4]
    fset = await get_flashcard_set(user_id, set_id)
    if fset is None:
        await cb.answer("Set not found.")
        await show_sets(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    index = step_card(index, 0, len(fset.cards))
    show_back = side == "b"
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_study_card_html(fset, index, show_back),
        reply_markup=kb_study(fset.id, index, len(fset.cards), show_back)
        if fset.cards
        else kb_input_back(f"ui:sets.open:{fset.id}"),
        screen_id=SCREEN_STUDY,
    )
    await cb.answer()


@router.callback_query(F.data.startswith("ui:sets.addcards:"))
async def on_set_add_cards(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, set_id = cb.data.split(":", 2)
    fset = await get_flashcard_set(user_id, set_id)
    if fset is None:
        await cb.answer("Set not found.")
        await show_sets(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    await set_pending(user_id, {"set_id": fset.id})
    await set_awaiting_input(user_id, AWAITING_ADD_CARDS)
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_add_cards_prompt_html(fset),
        reply_markup=kb_input_back(f"ui:sets.open:{fset.id}"),
        screen_id=SCREEN_SETS,
    )
    await cb.answer()


async def handle_add_cards_text(message: Message, user_id: int) -> None:
    bot: Bot = message.bot  # type: ignore[assignment]
    set_id = str((await get_pending(user_id)).get("set_id") or "")
    fset = await get_flashcard_set(user_id, set_id) if set_id else None
    if fset is None:
        await set_awaiting_input(user_id, None)
        await show_sets(bot, user_id)
        return
    text = message.text or ""
    ok, err = validate_cards_text(text)
    if not ok:
        await show_screen(
            bot=bot,
            user_id=user_id,
            text=format_add_cards_prompt_html(fset, err),
            reply_markup=kb_input_back(f"ui:sets.open:{fset.id}"),
            screen_id=SCREEN_SETS,
        )
        return
    cards, _ = parse_cards_text(text)
    updated = await update_flashcard_set(user_id, fset.id, lambda s: add_cards(s, cards))
    await set_awaiting_input(user_id, None)
    await set_pending(user_id, None)
    if updated is None:
        await show_sets(bot, user_id)
        return
    logger.info("User %s added %d cards to set %s", user_id, len(cards), fset.id)
    await show_set(bot, user_id, updated)


async def show_remove_cards(bot: Bot, user_id: int, fset: FlashcardSet, page: int) -> None:
    _, _, page, pages = page_bounds(len(fset.cards), page, PAGE_SIZE)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_remove_cards_html(fset, page, pages),
        reply_markup=kb_remove_cards(fset, page),
        screen_id=SCREEN_SETS,
    )


@router.callback_query(F.data.startswith("ui:sets.cards:"))
async def on_set_cards(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    if len(parts) != 4 or not parts[3].isdigit():
        await cb.answer()
        return
    fset = await get_flashcard_set(user_id, parts[2])
    if fset is None:
        await cb.answer("Set not found.")
        await show_sets(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    await show_remove_cards(cb.message.bot, user_id, fset, int(parts[3]))  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("ui:sets.delcard:"))
async def on_card_delete(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    parts = cb.data.split(":")
    if len(parts) != 5 or not parts[4].isdigit():
        await cb.answer()
        return
    set_id, ref, page = parts[2], parts[3], int(parts[4])
    removed = False

    def change(fset: FlashcardSet) -> bool:
        nonlocal removed
        removed = remove_card(fset, ref)
        return removed

    fset = await update_flashcard_set(user_id, set_id, change)
    if fset is None:
        await cb.answer("Set not found.")
        await show_sets(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    if fset.cards:
        await show_remove_cards(cb.message.bot, user_id, fset, page)  # type: ignore[union-attr]
    else:
        await show_set(cb.message.bot, user_id, fset)  # type: ignore[union-attr]
    await cb.answer("Card deleted." if removed else "Card not found.")
