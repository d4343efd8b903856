from __future__ import annotations

import logging

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from studybot.config import OPENAI_API_KEY
from studybot.db import append_study_guide, get_study_guide, load_study_guides, set_awaiting_input
from studybot.errors import GenerationError
from studybot.formatters import (
    format_guide_error_html,
    format_guide_html,
    format_guide_loading_html,
    format_guide_prompt_html,
    format_guides_list_html,
)
from studybot.keyboards import kb_guide_back, kb_guides, kb_input_back
from studybot.study_guide import generate_study_guide
from studybot.ui import SCREEN_GUIDES, show_screen
from studybot.validators import validate_source_text


logger = logging.getLogger(__name__)

router = Router()

AWAITING_GUIDE_TEXT = "guide_text"


async def show_guides(bot: Bot, user_id: int) -> None:
    guides = await load_study_guides(user_id)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_guides_list_html(guides),
        reply_markup=kb_guides(guides),
        screen_id=SCREEN_GUIDES,
    )


@router.message(Command("guides"))
async def cmd_guides(message: Message) -> None:
    assert message.from_user
    await set_awaiting_input(message.from_user.id, None)
    await show_guides(message.bot, message.from_user.id)  # type: ignore[arg-type]


@router.callback_query(F.data == "ui:guides")
async def on_guides_open(cb: CallbackQuery) -> None:
    assert cb.from_user
    await set_awaiting_input(cb.from_user.id, None)
    await show_guides(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:guides.new")
async def on_guide_new(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    if not OPENAI_API_KEY:
        await cb.answer("OpenAI API key is missing. Ask the bot owner to set it.", show_alert=True)
        return
    await set_awaiting_input(user_id, AWAITING_GUIDE_TEXT)
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_guide_prompt_html(),
        reply_markup=kb_input_back("ui:guides"),
        screen_id=SCREEN_GUIDES,
    )
    await cb.answer()


async def handle_guide_text(message: Message, user_id: int) -> None:
    bot: Bot = message.bot  # type: ignore[assignment]
    text = message.text or ""
    ok, err = validate_source_text(text)
    if not ok:
        await show_screen(
            bot=bot,
            user_id=user_id,
            text=format_guide_prompt_html(err),
            reply_markup=kb_input_back("ui:guides"),
            screen_id=SCREEN_GUIDES,
        )
        return
    await set_awaiting_input(user_id, None)
    await show_screen(bot=bot, user_id=user_id, text=format_guide_loading_html(), reply_markup=None, screen_id=SCREEN_GUIDES)
    try:
        guide = await generate_study_guide(text, OPENAI_API_KEY)
    except GenerationError as e:
        logger.warning("Study guide generation failed (%s): %s", type(e).__name__, e)
        await show_screen(
            bot=bot,
            user_id=user_id,
            text=format_guide_error_html(str(e)),
            reply_markup=kb_guide_back(),
            screen_id=SCREEN_GUIDES,
        )
        return
    await append_study_guide(user_id, guide)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_guide_html(guide),
        reply_markup=kb_guide_back(),
        screen_id=SCREEN_GUIDES,
    )


@router.callback_query(F.data.startswith("ui:guides.open:"))
async def on_guide_open(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, guide_id = cb.data.split(":", 2)
    guide = await get_study_guide(user_id, guide_id)
    if guide is None:
        await cb.answer("Study guide not found.")
        await show_guides(cb.message.bot, user_id)  # type: ignore[union-attr]
        return
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=format_guide_html(guide),
        reply_markup=kb_guide_back(),
        screen_id=SCREEN_GUIDES,
    )
    await cb.answer()
