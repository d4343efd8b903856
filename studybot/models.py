from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return utcnow()


@dataclass(frozen=True)
class SourceItem:
    """One fact to be tested: the prompt shown and the answer expected."""

    prompt: str
    answer: str


@dataclass
class TestQuestion:
    prompt: str
    options: List[str]
    correct_index: int
    id: str = field(default_factory=new_id)

    __test__ = False  # not a pytest class

    @property
    def correct_answer(self) -> str:
        return self.options[self.correct_index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "options": list(self.options),
            "correctIndex": self.correct_index,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TestQuestion":
        return cls(
            id=str(d.get("id") or new_id()),
            prompt=str(d["prompt"]),
            options=[str(o) for o in d["options"]],
            correct_index=int(d["correctIndex"]),
        )


@dataclass
class PracticeTest:
    title: str
    questions: List[TestQuestion]
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PracticeTest":
        return cls(
            id=str(d.get("id") or new_id()),
            title=str(d.get("title", "")),
            questions=[TestQuestion.from_dict(q) for q in d.get("questions", [])],
            created_at=_parse_ts(d.get("createdAt")),
        )


@dataclass
class Flashcard:
    front: str
    back: str
    id: str = field(default_factory=new_id)

    def to_source_item(self) -> SourceItem:
        return SourceItem(prompt=self.front, answer=self.back)


@dataclass
class FlashcardSet:
    title: str
    cards: List[Flashcard] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def source_items(self) -> List[SourceItem]:
        return [c.to_source_item() for c in self.cards]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "cards": [{"id": c.id, "front": c.front, "back": c.back} for c in self.cards],
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FlashcardSet":
        return cls(
            id=str(d.get("id") or new_id()),
            title=str(d.get("title", "")),
            cards=[
                Flashcard(id=str(c.get("id") or new_id()), front=str(c["front"]), back=str(c["back"]))
                for c in d.get("cards", [])
            ],
            created_at=_parse_ts(d.get("createdAt")),
        )


@dataclass
class StudyGuide:
    title: str
    content: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StudyGuide":
        return cls(
            id=str(d.get("id") or new_id()),
            title=str(d.get("title", "")),
            content=str(d.get("content", "")),
            created_at=_parse_ts(d.get("createdAt")),
        )


@dataclass
class QuizRun:
    """In-progress attempt at a saved practice test."""

    test_id: str
    current_q: int = 0
    choices: List[Optional[int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"test_id": self.test_id, "current_q": self.current_q, "choices": list(self.choices)}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QuizRun":
        return cls(
            test_id=str(d["test_id"]),
            current_q=int(d.get("current_q", 0)),
            choices=[None if c is None else int(c) for c in d.get("choices", [])],
        )
