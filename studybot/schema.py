from __future__ import annotations

"""Strict decoding of model output into a PracticeTest."""

import json
import re
from typing import Any, List

from studybot.errors import SchemaError
from studybot.models import PracticeTest, TestQuestion


OPTIONS_PER_QUESTION = 4

_OPEN_FENCE_RE = re.compile(r"\A```[\w+-]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?```\Z")


def strip_code_fences(text: str) -> str:
    """Remove a Markdown fence wrapping the payload, if any.

    Accepts an optional language tag after the opening fence. Text without a
    fence is returned trimmed.
    """
    s = (text or "").strip()
    s = _OPEN_FENCE_RE.sub("", s, count=1)
    s = _CLOSE_FENCE_RE.sub("", s, count=1)
    return s.strip()


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def decode_question(raw: Any, idx: int) -> TestQuestion:
    if not isinstance(raw, dict):
        raise SchemaError(f"questions[{idx}] is not an object")
    prompt = raw.get("prompt")
    options = raw.get("options")
    correct_index = raw.get("correctIndex")
    if not isinstance(prompt, str):
        raise SchemaError(f"questions[{idx}].prompt must be a string")
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        raise SchemaError(f"questions[{idx}].options must be a list of {OPTIONS_PER_QUESTION} strings")
    if not all(isinstance(o, str) for o in options):
        raise SchemaError(f"questions[{idx}].options must contain only strings")
    if not _is_int(correct_index):
        raise SchemaError(f"questions[{idx}].correctIndex must be an integer")
    if not (0 <= correct_index < len(options)):
        raise SchemaError(f"questions[{idx}].correctIndex {correct_index} out of range")
    return TestQuestion(prompt=prompt, options=list(options), correct_index=correct_index)


def decode_practice_test(text: str) -> PracticeTest:
    """Decode fenced or bare JSON into a PracticeTest, raising SchemaError on any mismatch."""
    payload = strip_code_fences(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SchemaError("Top-level JSON value must be an object")
    title = data.get("title")
    questions = data.get("questions")
    if not isinstance(title, str):
        raise SchemaError("title must be a string")
    if not isinstance(questions, list):
        raise SchemaError("questions must be a list")
    decoded: List[TestQuestion] = [decode_question(q, i) for i, q in enumerate(questions)]
    return PracticeTest(title=title, questions=decoded)
