"""
Pytest configuration and fixtures for wordmatch tests.
"""

import asyncio
import random
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add src directory to Python path to allow importing wordmatch
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from wordmatch.game import GameController  # noqa: E402
from wordmatch.models import Difficulty, WordPair  # noqa: E402
from wordmatch.provider import ProviderError, WordPairProvider  # noqa: E402
from wordmatch.vocabulary import VocabularyManager  # noqa: E402

MATCH_DELAY = 0.01
MISMATCH_DELAY = 0.02


class FixedProvider(WordPairProvider):
    """Returns a fixed word list and records the requests it served."""

    def __init__(self, words: List[WordPair]):
        self.words = words
        self.calls = []

    async def fetch_word_pairs(self, difficulty: Difficulty, count: int):
        self.calls.append((difficulty, count))
        return list(self.words)


class FailingProvider(WordPairProvider):
    async def fetch_word_pairs(self, difficulty: Difficulty, count: int):
        raise ProviderError("service unavailable")


class BlockingProvider(WordPairProvider):
    """Suspends every fetch until ``release`` is set."""

    def __init__(self, words: List[WordPair]):
        self.words = words
        self.release = asyncio.Event()

    async def fetch_word_pairs(self, difficulty: Difficulty, count: int):
        await self.release.wait()
        return list(self.words)


def make_words(count: int) -> List[WordPair]:
    return [
        WordPair(id=str(i), en=f"word{i}", zh=f"词{i}", explanation="test")
        for i in range(1, count + 1)
    ]


@pytest.fixture
def vocabulary(tmp_path):
    manager = VocabularyManager(str(tmp_path / "missing"))
    manager.load_all()
    return manager


@pytest.fixture
def make_controller(vocabulary):
    def factory(
        provider: WordPairProvider,
        word_count: int = 8,
        tick_seconds: float = 60.0,
        rng: Optional[random.Random] = None,
    ) -> GameController:
        return GameController(
            provider,
            vocabulary,
            word_count=word_count,
            match_delay=MATCH_DELAY,
            mismatch_delay=MISMATCH_DELAY,
            tick_seconds=tick_seconds,
            rng=rng or random.Random(1234),
        )

    return factory
