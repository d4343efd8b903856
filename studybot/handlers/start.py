from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from studybot.db import set_awaiting_input, set_pending


router = Router()


@router.message(Command("start"))
async def cmd_start(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    await set_awaiting_input(user_id, None)
    await set_pending(user_id, None)
    await message.answer(
        "Welcome! Create flashcard sets, turn them into multiple-choice practice tests "
        "and write study guides from your notes.\n"
        "Use /menu to get started."
    )
