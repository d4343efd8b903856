from __future__ import annotations

"""In-place edits of stored flashcard sets and practice tests.

Every mutator returns True when it changed the object, so the repository
only writes back real modifications.
"""

from typing import List, Sequence, Tuple

from studybot.models import Flashcard, FlashcardSet, PracticeTest, TestQuestion
from studybot.schema import OPTIONS_PER_QUESTION


CARD_REF_LEN = 8
PAGE_SIZE = 10
CORRECT_MARK = "*"


def page_bounds(total: int, page: int, size: int) -> Tuple[int, int, int, int]:
    """Return (start, end, page, pages) with `page` clamped to the valid range."""
    pages = max(1, -(-total // size))
    page = max(0, min(page, pages - 1))
    start = page * size
    return start, min(start + size, total), page, pages


# ---- Flashcard study & cards -----------------------------------------------

def step_card(index: int, delta: int, n_cards: int) -> int:
    """Move through a set without wrapping around."""
    if n_cards <= 0:
        return 0
    return max(0, min(index + delta, n_cards - 1))


def card_ref(card: Flashcard) -> str:
    return card.id[:CARD_REF_LEN]


def add_cards(fset: FlashcardSet, cards: Sequence[Flashcard]) -> bool:
    fset.cards.extend(cards)
    return bool(cards)


def remove_card(fset: FlashcardSet, ref: str) -> bool:
    for i, card in enumerate(fset.cards):
        if card_ref(card) == ref:
            del fset.cards[i]
            return True
    return False


# ---- Practice test questions -----------------------------------------------

def parse_question_text(text: str) -> TestQuestion | None:
    """Parse a question typed as a prompt line followed by four option lines.

    The correct option is the one starting with `*`. Returns None unless the
    prompt and all four options are filled and exactly one option is marked.
    """
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    if len(lines) != 1 + OPTIONS_PER_QUESTION:
        return None
    prompt, raw_options = lines[0], lines[1:]
    options: List[str] = []
    correct: List[int] = []
    for i, raw in enumerate(raw_options):
        if raw.startswith(CORRECT_MARK):
            correct.append(i)
            raw = raw[len(CORRECT_MARK):].strip()
        if not raw:
            return None
        options.append(raw)
    if prompt.startswith(CORRECT_MARK) or len(correct) != 1:
        return None
    return TestQuestion(prompt=prompt, options=options, correct_index=correct[0])


def question_to_text(q: TestQuestion) -> str:
    lines = [q.prompt]
    for i, opt in enumerate(q.options):
        lines.append(f"{CORRECT_MARK}{opt}" if i == q.correct_index else opt)
    return "\n".join(lines)


def replace_question(test: PracticeTest, qidx: int, question: TestQuestion) -> bool:
    if not (0 <= qidx < len(test.questions)):
        return False
    question.id = test.questions[qidx].id
    test.questions[qidx] = question
    return True


def append_question(test: PracticeTest, question: TestQuestion) -> bool:
    test.questions.append(question)
    return True


def remove_question(test: PracticeTest, qidx: int) -> bool:
    if not (0 <= qidx < len(test.questions)):
        return False
    del test.questions[qidx]
    return True


def set_correct_index(test: PracticeTest, qidx: int, optidx: int) -> bool:
    if not (0 <= qidx < len(test.questions)):
        return False
    q = test.questions[qidx]
    if not (0 <= optidx < len(q.options)) or q.correct_index == optidx:
        return False
    q.correct_index = optidx
    return True
