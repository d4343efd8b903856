from __future__ import annotations

import json

import pytest

from studybot.errors import SchemaError
from studybot.schema import decode_practice_test, strip_code_fences


def _question(**overrides):
    q = {"prompt": "Hola", "options": ["Hello", "Goodbye", "Thanks", "Please"], "correctIndex": 0}
    q.update(overrides)
    return q


def _payload(questions, title="T") -> str:
    return json.dumps({"title": title, "questions": questions})


def test_fenced_json_is_stripped_and_decoded() -> None:
    test = decode_practice_test('```json\n{"title":"T","questions":[]}\n```')
    assert test.title == "T"
    assert test.questions == []


def test_strip_code_fences_variants() -> None:
    assert strip_code_fences("```\n{}\n```") == "{}"
    assert strip_code_fences("  ```JSON\n[1]\n```  ") == "[1]"
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'


def test_valid_question_is_decoded() -> None:
    test = decode_practice_test(_payload([_question(correctIndex=2)]))
    assert len(test.questions) == 1
    q = test.questions[0]
    assert q.prompt == "Hola"
    assert q.correct_index == 2
    assert q.correct_answer == "Thanks"


def test_correct_index_out_of_range_is_rejected() -> None:
    with pytest.raises(SchemaError):
        decode_practice_test(_payload([_question(correctIndex=4)]))
    with pytest.raises(SchemaError):
        decode_practice_test(_payload([_question(correctIndex=-1)]))


@pytest.mark.parametrize(
    "bad",
    [
        _question(options=["a", "b", "c"]),
        _question(options=["a", "b", "c", "d", "e"]),
        _question(options=["a", "b", "c", 4]),
        _question(prompt=5),
        _question(correctIndex="1"),
        _question(correctIndex=True),
        "not an object",
    ],
)
def test_malformed_questions_are_rejected(bad) -> None:
    with pytest.raises(SchemaError):
        decode_practice_test(_payload([bad]))


@pytest.mark.parametrize(
    "text",
    [
        "Here is your test!",
        "[]",
        json.dumps({"title": 1, "questions": []}),
        json.dumps({"title": "T", "questions": {}}),
        json.dumps({"questions": []}),
    ],
)
def test_malformed_documents_are_rejected(text: str) -> None:
    with pytest.raises(SchemaError):
        decode_practice_test(text)
