from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv


load_dotenv()

ROOT_DIR: Final[Path] = Path(__file__).resolve().parents[1]
DATA_DIR: Final[Path] = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)
DB_PATH: Final[Path] = DATA_DIR / "studybot.db"

BOT_TOKEN: Final[str] = os.getenv("BOT_TOKEN", "")
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

# OpenAI-compatible chat completions. An empty key means local generation only.
OPENAI_API_BASE: Final[str | None] = os.getenv("OPENAI_API_BASE") or None
OPENAI_API_KEY: Final[str] = os.getenv("OPENAI_API_KEY", "")
OPENAI_TIMEOUT_SECONDS: Final[int] = int(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))

PRACTICE_TEST_MODEL: Final[str] = os.getenv("PRACTICE_TEST_MODEL", "gpt-3.5-turbo")
PRACTICE_TEST_TEMPERATURE: Final[float] = 0.2
PRACTICE_TEST_MAX_TOKENS: Final[int] = 1200

STUDY_GUIDE_MODEL: Final[str] = os.getenv("STUDY_GUIDE_MODEL", "gpt-3.5-turbo")
STUDY_GUIDE_TEMPERATURE: Final[float] = 0.1
STUDY_GUIDE_MAX_TOKENS: Final[int] = 1400

DEFAULT_QUESTION_COUNT: Final[int] = 5
MAX_QUESTION_COUNT: Final[int] = int(os.getenv("MAX_QUESTION_COUNT", "30"))
