from __future__ import annotations

"""Local multiple-choice synthesis from prompt/answer pairs.

This is the fallback of last resort for practice tests and never raises.
"""

import random
from typing import List, Optional, Sequence

from studybot.models import PracticeTest, SourceItem, TestQuestion


MAX_DISTRACTORS = 3


def default_title(source_name: Optional[str]) -> str:
    if source_name:
        return f"Practice Test from {source_name}"
    return "Practice Test"


def pick_distractors(
    correct: str,
    answers: Sequence[str],
    rng: random.Random,
    limit: int = MAX_DISTRACTORS,
) -> List[str]:
    """Sample up to `limit` distinct wrong answers.

    Any answer whose text equals `correct` is excluded, so items sharing an
    answer never stand in for each other and the pool can come up short.
    """
    pool = [a for a in answers if a != correct]
    rng.shuffle(pool)
    distractors: List[str] = []
    for a in pool:
        if a not in distractors:
            distractors.append(a)
        if len(distractors) == limit:
            break
    return distractors


def build_question(item: SourceItem, answers: Sequence[str], rng: random.Random) -> TestQuestion:
    options = [item.answer] + pick_distractors(item.answer, answers, rng)
    # Short option lists are kept as-is when distractors run out
    rng.shuffle(options)
    return TestQuestion(
        prompt=item.prompt,
        options=options,
        correct_index=options.index(item.answer),
    )


def synthesize(
    items: Sequence[SourceItem],
    count: int,
    title: Optional[str] = None,
    *,
    source_name: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> PracticeTest:
    """Build a practice test of up to `count` questions from `items`.

    count is clamped to len(items); a non-positive count or no items yields an
    empty test. Pass a seeded `rng` for reproducible ordering.
    """
    rng = rng or random.Random()
    picked = list(items)
    rng.shuffle(picked)
    picked = picked[: max(0, min(count, len(picked)))]

    answers = [it.answer for it in items]
    questions = [build_question(it, answers, rng) for it in picked]
    test_title = title.strip() if title and title.strip() else default_title(source_name)
    return PracticeTest(title=test_title, questions=questions)
