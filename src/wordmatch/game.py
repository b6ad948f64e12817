"""Game session controller.

A ``GameController`` owns the state of one player's game and is the only
thing that mutates it. All scheduled work (the one second tick and the
match/mismatch feedback delays) runs as asyncio tasks on the same event loop
as the requests that drive the controller, so no locking is needed.

Every task remembers the generation of the session it was scheduled for.
Starting, aborting or shutting down bumps the generation, which turns any
callback that is still in flight into a no-op.
"""

import asyncio
import logging
import random
from typing import Callable, List, Optional, Set

from .config import settings
from .models import (
    Card,
    CardView,
    Difficulty,
    GameStatus,
    SelectOutcome,
    SessionSnapshot,
    SessionState,
    Side,
    WordPair,
)
from .provider import WordPairProvider, load_word_pairs
from .vocabulary import VocabularyManager

logger = logging.getLogger("wordmatch")


class GameStateError(Exception):
    """Raised when an action is not allowed in the current game status."""


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def build_cards(words: List[WordPair]) -> List[Card]:
    cards = []
    for pair in words:
        cards.append(
            Card(id=f"en-{pair.id}", pair_id=pair.id, content=pair.en, side=Side.EN)
        )
        cards.append(
            Card(id=f"zh-{pair.id}", pair_id=pair.id, content=pair.zh, side=Side.ZH)
        )
    return cards


class GameController:
    def __init__(
        self,
        provider: WordPairProvider,
        vocabulary: VocabularyManager,
        word_count: Optional[int] = None,
        match_reward: Optional[int] = None,
        match_delay: Optional[float] = None,
        mismatch_delay: Optional[float] = None,
        tick_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.provider = provider
        self.vocabulary = vocabulary
        self.word_count = (
            settings.WORD_COUNT if word_count is None else word_count
        )
        self.match_reward = (
            settings.MATCH_REWARD if match_reward is None else match_reward
        )
        self.match_delay = (
            settings.MATCH_DELAY_SECONDS if match_delay is None else match_delay
        )
        self.mismatch_delay = (
            settings.MISMATCH_DELAY_SECONDS
            if mismatch_delay is None
            else mismatch_delay
        )
        self.tick_seconds = (
            settings.TICK_SECONDS if tick_seconds is None else tick_seconds
        )
        if self.word_count < 1:
            raise ValueError("word_count must be at least 1")
        self.rng = rng or random.Random()

        self.state = SessionState()
        self.generation = 0
        self._tick_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    @property
    def status(self) -> GameStatus:
        return self.state.status

    # --- Lifecycle ---

    async def start(self, difficulty: Difficulty):
        """Loads a fresh word set for ``difficulty`` and starts playing."""
        if self.state.status == GameStatus.LOADING:
            raise GameStateError("A word set is already loading")

        generation = self._next_generation()
        self.state = SessionState(status=GameStatus.LOADING, difficulty=difficulty)
        logger.info(f"Loading {self.word_count} word pairs [{difficulty.name}]")

        try:
            words = await load_word_pairs(
                self.provider, difficulty, self.word_count, self.vocabulary
            )
        except Exception:
            if generation == self.generation:
                self.state = SessionState(difficulty=difficulty)
            raise

        if generation != self.generation:
            logger.info("Discarding word set loaded for a superseded session")
            return

        cards = build_cards(words)
        self.rng.shuffle(cards)
        self.state = SessionState(
            status=GameStatus.PLAYING,
            difficulty=difficulty,
            words=words,
            cards=cards,
        )
        self._tick_task = asyncio.create_task(self._tick(generation))
        logger.info(f"Session started with {len(cards)} cards [{difficulty.name}]")

    def abort(self):
        if self.state.status not in (GameStatus.PLAYING, GameStatus.LOADING):
            raise GameStateError(f"Cannot abort while {self.state.status.value}")
        self._next_generation()
        logger.info(
            f"Session aborted after {self.state.elapsed_seconds}s "
            f"with score {self.state.score}"
        )
        self.state = SessionState(difficulty=self.state.difficulty)

    def change_difficulty(self):
        if self.state.status != GameStatus.FINISHED:
            raise GameStateError("Difficulty can only be changed after finishing")
        self.state = SessionState(difficulty=self.state.difficulty)

    async def replay(self):
        if self.state.status != GameStatus.FINISHED:
            raise GameStateError("Replay is only available after finishing")
        await self.start(self.state.difficulty)

    def shutdown(self):
        """Cancels everything this controller has scheduled."""
        self._next_generation()

    # --- Selection ---

    def select(self, card_id: str) -> SelectOutcome:
        state = self.state
        if state.status != GameStatus.PLAYING:
            return SelectOutcome.IGNORED

        card = self._find_card(card_id)
        if (
            card is None
            or card.is_matched
            or card_id in state.selection
            or len(state.selection) >= 2
        ):
            return SelectOutcome.IGNORED

        state.selection.append(card_id)
        if len(state.selection) < 2:
            return SelectOutcome.SELECTED

        first, second = (self._find_card(i) for i in state.selection)
        if first.pair_id == second.pair_id and first.side != second.side:
            self._schedule(self.match_delay, self._resolve_match, first.pair_id)
            return SelectOutcome.MATCH

        self._schedule(self.mismatch_delay, self._resolve_mismatch)
        return SelectOutcome.MISMATCH

    def _resolve_match(self, pair_id: str):
        for card in self.state.cards:
            if card.pair_id == pair_id:
                card.is_matched = True
        self.state.score += self.match_reward
        self.state.selection.clear()
        self._check_completion()

    def _resolve_mismatch(self):
        self.state.selection.clear()

    def _check_completion(self):
        state = self.state
        if state.status != GameStatus.PLAYING:
            return
        if state.cards and all(card.is_matched for card in state.cards):
            state.status = GameStatus.FINISHED
            self._cancel_tick()
            logger.info(
                f"Session finished in {format_elapsed(state.elapsed_seconds)} "
                f"with score {state.score}"
            )

    # --- Scheduling ---

    def _schedule(self, delay: float, callback: Callable, *args):
        generation = self.generation

        async def run():
            await asyncio.sleep(delay)
            if generation != self.generation:
                return
            callback(*args)

        task = asyncio.create_task(run())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _tick(self, generation: int):
        while True:
            await asyncio.sleep(self.tick_seconds)
            if generation != self.generation or self.state.status != GameStatus.PLAYING:
                return
            self.state.elapsed_seconds += 1

    def _cancel_tick(self):
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    def _next_generation(self) -> int:
        self.generation += 1
        self._cancel_tick()
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        return self.generation

    # --- Views ---

    def _find_card(self, card_id: str) -> Optional[Card]:
        for card in self.state.cards:
            if card.id == card_id:
                return card
        return None

    def snapshot(self) -> SessionSnapshot:
        state = self.state
        return SessionSnapshot(
            status=state.status,
            difficulty=state.difficulty,
            score=state.score,
            elapsed_seconds=state.elapsed_seconds,
            elapsed_display=format_elapsed(state.elapsed_seconds),
            cards=[
                CardView(
                    id=card.id,
                    content=card.content,
                    side=card.side,
                    is_matched=card.is_matched,
                    is_selected=card.id in state.selection,
                )
                for card in state.cards
            ],
            words=state.words if state.status == GameStatus.FINISHED else [],
        )
