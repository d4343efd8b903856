from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from studybot.config import BOT_TOKEN, LOG_LEVEL, OPENAI_API_KEY
from studybot.db import init_db
from studybot.handlers import editor, guides, menu, practice, quiz, sets, start, text_input


logger = logging.getLogger(__name__)


async def main() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set. Please configure .env")
    if not OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; practice tests will be generated locally")

    await init_db()
    bot = Bot(BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()

    dp.include_router(start.router)
    dp.include_router(menu.router)
    dp.include_router(sets.router)
    dp.include_router(practice.router)
    dp.include_router(quiz.router)
    dp.include_router(editor.router)
    dp.include_router(guides.router)
    # Catch-all text input goes last
    dp.include_router(text_input.router)

    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


def run() -> None:
    with suppress(KeyboardInterrupt):
        asyncio.run(main())


if __name__ == "__main__":
    run()
