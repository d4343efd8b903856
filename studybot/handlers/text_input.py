from __future__ import annotations

"""Free-text input routed by the field the UI is currently awaiting."""

from typing import Awaitable, Callable, Dict

from aiogram import Router
from aiogram.types import Message

from studybot.db import get_ui_state, set_awaiting_input
from studybot.handlers import editor, guides, practice, sets


router = Router()

InputHandler = Callable[[Message, int], Awaitable[None]]

INPUT_HANDLERS: Dict[str, InputHandler] = {
    sets.AWAITING_NEW_SET: sets.handle_new_set_text,
    sets.AWAITING_ADD_CARDS: sets.handle_add_cards_text,
    practice.AWAITING_TEST_TITLE: practice.handle_title_text,
    guides.AWAITING_GUIDE_TEXT: guides.handle_guide_text,
    editor.AWAITING_QUESTION: editor.handle_question_text,
}


@router.message()
async def on_text_input(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    state = await get_ui_state(user_id)
    awaiting = state["awaiting_input_field"] if state else None
    if not awaiting:
        return
    handler = INPUT_HANDLERS.get(str(awaiting))
    if handler is None:
        await set_awaiting_input(user_id, None)
        return
    await handler(message, user_id)
