from __future__ import annotations

"""Practice-test generation through an OpenAI-compatible chat completions API."""

import json
import logging
from typing import Any, Dict, List, Sequence

import openai
from openai import AsyncOpenAI

from studybot.config import (
    OPENAI_API_BASE,
    OPENAI_TIMEOUT_SECONDS,
    PRACTICE_TEST_MAX_TOKENS,
    PRACTICE_TEST_MODEL,
    PRACTICE_TEST_TEMPERATURE,
)
from studybot.errors import MissingCredentials, NetworkError, SchemaError, ServiceError
from studybot.models import PracticeTest, SourceItem
from studybot.schema import decode_practice_test


logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = "You are a helpful assistant that outputs strictly JSON."


def build_prompt(items: Sequence[SourceItem], count: int) -> str:
    """Build the user instruction embedding the flashcards and target schema."""
    cards = [{"front": it.prompt, "back": it.answer} for it in items]
    cards_json = json.dumps(cards, ensure_ascii=False)
    return f"""
You will receive an array of flashcards with "front" and "back" strings. Generate a multiple choice practice test in JSON format ONLY, no explanations, no extra text. The JSON MUST strictly follow this schema:
{{
  "title": String,
  "questions": [
    {{
      "prompt": String,
      "options": [String,String,String,String],
      "correctIndex": Int (0-based index)
    }}
  ]
}}
Create {count} questions derived from the flashcards.
Use the "front" as prompt. The correct answer is always the "back".
The other options should be plausible wrong answers from other cards' backs.
Provide the JSON ONLY.
Here is the flashcards array:
{cards_json}
""".strip()


def build_messages(items: Sequence[SourceItem], count: int) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_MESSAGE},
        {"role": "user", "content": build_prompt(items, count)},
    ]


def make_client(api_key: str) -> AsyncOpenAI:
    # Single attempt; the transport timeout is the only deadline
    return AsyncOpenAI(
        api_key=api_key,
        base_url=OPENAI_API_BASE,
        timeout=OPENAI_TIMEOUT_SECONDS,
        max_retries=0,
    )


def service_error_message(status_code: int, body: Any) -> str:
    """Best-effort human readable message from an error response body."""
    if isinstance(body, dict):
        err = body.get("error", body)
        if isinstance(err, dict) and isinstance(err.get("message"), str) and err["message"]:
            return err["message"]
    return f"HTTP Error {status_code}. Check your API key."


async def complete_chat(
    client: Any,
    *,
    model: str,
    messages: List[Dict[str, str]],
    temperature: float,
    max_tokens: int,
) -> str:
    """Send one chat completion request and return the first choice text.

    SDK failures are translated into NetworkError / ServiceError; a missing or
    empty payload raises SchemaError.
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except openai.APIConnectionError as e:
        # APITimeoutError is a subclass
        raise NetworkError(f"Network error: {e}") from e
    except openai.APIStatusError as e:
        raise ServiceError(service_error_message(e.status_code, e.body), e.status_code) from e
    except openai.OpenAIError as e:
        # e.g. APIResponseValidationError: a reply the SDK itself could not parse
        raise ServiceError(f"Unexpected API error: {e}", getattr(e, "status_code", 0) or 0) from e

    choices = getattr(response, "choices", None) or []
    if not choices:
        raise SchemaError("Response contained no choices")
    try:
        content = choices[0].message.content
    except AttributeError as e:
        raise SchemaError(f"Unexpected response format: {e}") from e
    if not isinstance(content, str) or not content.strip():
        raise SchemaError("Response contained no content")
    return content


async def generate_remote(
    items: Sequence[SourceItem],
    count: int,
    api_key: str | None,
    *,
    client: Any = None,
) -> PracticeTest:
    if not api_key:
        raise MissingCredentials()
    client = client or make_client(api_key)
    logger.debug("Requesting %d questions from %d items via %s", count, len(items), PRACTICE_TEST_MODEL)
    content = await complete_chat(
        client,
        model=PRACTICE_TEST_MODEL,
        messages=build_messages(items, count),
        temperature=PRACTICE_TEST_TEMPERATURE,
        max_tokens=PRACTICE_TEST_MAX_TOKENS,
    )
    return decode_practice_test(content)


class OpenAIPracticeTestGenerator:
    """Remote strategy backed by the chat completions API."""

    def __init__(self, api_key: str | None, client: Any = None) -> None:
        self.api_key = api_key
        self.client = client

    async def attempt(self, items: Sequence[SourceItem], count: int) -> PracticeTest:
        return await generate_remote(items, count, self.api_key, client=self.client)
