from __future__ import annotations

"""Two-tier practice-test generation: remote first, local synthesis as fallback."""

import logging
import random
from dataclasses import dataclass
from typing import Literal, Optional, Protocol, Sequence

from studybot.errors import GenerationError, SchemaError
from studybot.models import PracticeTest, SourceItem
from studybot.remote import OpenAIPracticeTestGenerator
from studybot.synth import synthesize


logger = logging.getLogger(__name__)

Source = Literal["remote", "local"]


class RemoteStrategy(Protocol):
    async def attempt(self, items: Sequence[SourceItem], count: int) -> PracticeTest:
        ...


@dataclass
class GenerationResult:
    test: PracticeTest
    source: Source
    error: Optional[Exception] = None

    @property
    def used_fallback(self) -> bool:
        return self.source == "local"


def _fit_remote_test(test: PracticeTest, count: int, n_items: int, title: Optional[str]) -> PracticeTest:
    limit = max(0, min(count, n_items))
    if limit and not test.questions:
        raise SchemaError("Response contained no questions")
    if len(test.questions) > limit:
        test.questions = test.questions[:limit]
    if title and title.strip():
        test.title = title.strip()
    return test


async def generate_test(
    items: Sequence[SourceItem],
    count: int,
    title: Optional[str] = None,
    api_key: Optional[str] = None,
    *,
    source_name: Optional[str] = None,
    strategy: Optional[RemoteStrategy] = None,
    rng: Optional[random.Random] = None,
) -> GenerationResult:
    """Generate a practice test; never raises.

    The remote strategy is tried once when one is given or an API key is set.
    Any failure of that attempt falls back to local synthesis with the same
    inputs; the recovered exception is kept on the result.
    """
    items = list(items)
    error: Optional[Exception] = None
    if strategy is None and api_key:
        strategy = OpenAIPracticeTestGenerator(api_key)

    if strategy is not None:
        try:
            test = await strategy.attempt(items, count)
            return GenerationResult(_fit_remote_test(test, count, len(items), title), "remote")
        except GenerationError as e:
            error = e
            logger.warning("Remote generation failed (%s): %s", type(e).__name__, e)
        except Exception as e:
            error = e
            logger.exception("Remote generation crashed; falling back to local synthesis")

    logger.info("Generating practice test locally from %d items", len(items))
    test = synthesize(items, count, title, source_name=source_name, rng=rng)
    return GenerationResult(test, "local", error)
