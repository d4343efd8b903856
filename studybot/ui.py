from __future__ import annotations

"""Inline UI utilities: screen IDs and edit-or-replace rendering helper.

The chat keeps a single active UI message for navigation screens.
"""

import logging

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup

from studybot.db import get_ui_state, set_ui_state


logger = logging.getLogger(__name__)

# Screen identifiers
SCREEN_MENU = "menu"
SCREEN_SETS = "sets"
SCREEN_STUDY = "study"
SCREEN_GENERATOR = "generator"
SCREEN_TESTS = "tests"
SCREEN_TEST = "test"
SCREEN_GUIDES = "guides"


async def show_screen(
    bot: Bot,
    user_id: int,
    text: str,
    reply_markup: InlineKeyboardMarkup | None,
    screen_id: str,
) -> None:
    """Render a screen by editing the previous UI message or replacing it.

    If editing fails (identical content, message gone), the old message is
    deleted and a fresh one is sent. The stored message id and screen are
    updated either way.
    """
    state = await get_ui_state(user_id)
    chat_id = user_id
    last_id = int(state["last_ui_message_id"]) if state and state["last_ui_message_id"] else None

    if last_id is not None:
        try:
            await bot.edit_message_text(
                chat_id=chat_id,
                message_id=last_id,
                text=text,
                reply_markup=reply_markup,
            )
            await set_ui_state(user_id, last_ui_message_id=last_id, current_screen=screen_id)
            return
        except TelegramBadRequest:
            try:
                await bot.delete_message(chat_id, last_id)
            except TelegramAPIError as e:
                logger.debug("Could not delete UI message %s: %s", last_id, e)

    msg = await bot.send_message(chat_id, text, reply_markup=reply_markup)
    await set_ui_state(user_id, last_ui_message_id=msg.message_id, current_screen=screen_id)
