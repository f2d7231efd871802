"""Review session orchestrator.

Walks the learner through a prepared queue, applies each rating through
the card store, and brings learning-phase cards back once their minute
delay has passed.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from koine_srs.config import utcnow
from koine_srs.models import CARD_MODELS
from koine_srs.srs.queue import QueueConfig, ReviewQueue, build_queue
from koine_srs.srs.scheduler import GRADUATION_REPS, Rating, ReviewResult, parse_rating

if TYPE_CHECKING:
    from koine_srs.models.scheduling import SchedulingMixin
    from koine_srs.store import CardStore

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    """Statistics for a review session."""

    cards_reviewed: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0
    new_cards_seen: int = 0
    graduated: int = 0

    @property
    def accuracy(self) -> float:
        """Fraction of reviews not rated Again."""
        if self.cards_reviewed == 0:
            return 0.0
        return (self.cards_reviewed - self.again) / self.cards_reviewed


@dataclass(order=True)
class _LearningCard:
    due: datetime
    seq: int
    card: Any = field(compare=False)


@dataclass
class ReviewSession:
    """Manages an active review session."""

    store: CardStore
    queue: ReviewQueue
    stats: SessionStats = field(default_factory=SessionStats)
    _card_index: int = 0
    _cards: list[Any] = field(default_factory=list)
    _learning: list[_LearningCard] = field(default_factory=list)
    _seq: int = 0

    def __post_init__(self) -> None:
        """Initialize the card list from the queue."""
        self._cards = self.queue.interleaved()

    @property
    def remaining(self) -> int:
        """Cards left in the queue plus learning cards waiting to come back."""
        return max(0, len(self._cards) - self._card_index) + len(self._learning)

    @property
    def is_complete(self) -> bool:
        return self.remaining == 0

    @property
    def next_learning_due(self) -> datetime | None:
        """When the earliest pending learning card comes back, if any."""
        return self._learning[0].due if self._learning else None

    def next_card(self, now: datetime | None = None) -> Any | None:
        """Pick the card to present next without consuming it.

        A learning card whose delay has passed goes first. Otherwise the
        next queued card. Once the queue is exhausted the earliest learning
        card is shown early rather than ending the session.
        """
        now = now or utcnow()
        if self._learning and self._learning[0].due <= now:
            return self._learning[0].card
        if self._card_index < len(self._cards):
            return self._cards[self._card_index]
        if self._learning:
            return self._learning[0].card
        return None

    async def submit(
        self,
        card: SchedulingMixin,
        rating: int,
        now: datetime | None = None,
    ) -> ReviewResult:
        """Rate the card returned by ``next_card``.

        Args:
            card: The card being reviewed.
            rating: Review rating (1=Again, 2=Hard, 3=Good, 4=Easy).
            now: When the review happened (defaults to now).

        Returns:
            The scheduler's ReviewResult.

        Raises:
            InvalidRatingError: If the rating is not 1-4.
            ValueError: If the card is not the next queued card or a pending
                learning card. Nothing is written.
        """
        rating = parse_rating(rating)
        now = now or utcnow()
        if not self._is_waiting(card):
            raise ValueError("Card is not waiting in this session")

        was_new = card.reps == 0 and card.lapses == 0
        was_learning = card.reps < GRADUATION_REPS

        # A failed write leaves the card in place so it can be retried
        result = await self.store.review(card, rating, now=now)
        self._consume(card)

        self.stats.cards_reviewed += 1
        self.stats.new_cards_seen += int(was_new)
        if was_learning and not result.is_learning:
            self.stats.graduated += 1
        if rating == Rating.AGAIN:
            self.stats.again += 1
        elif rating == Rating.HARD:
            self.stats.hard += 1
        elif rating == Rating.GOOD:
            self.stats.good += 1
        else:
            self.stats.easy += 1

        if result.is_learning:
            self._seq += 1
            bisect.insort(self._learning, _LearningCard(result.state.due, self._seq, card))

        return result

    def _is_waiting(self, card: Any) -> bool:
        if any(entry.card is card for entry in self._learning):
            return True
        return self._card_index < len(self._cards) and self._cards[self._card_index] is card

    def _consume(self, card: Any) -> None:
        for i, entry in enumerate(self._learning):
            if entry.card is card:
                del self._learning[i]
                return
        if self._card_index < len(self._cards) and self._cards[self._card_index] is card:
            self._card_index += 1
            return
        raise ValueError("Card is not waiting in this session")


async def start_session(
    store: CardStore,
    models: Sequence[type[SchedulingMixin]] = CARD_MODELS,
    config: QueueConfig | None = None,
    now: datetime | None = None,
) -> ReviewSession:
    """Start a new review session.

    Args:
        store: Card store holding the cards.
        models: Card tables to study (defaults to every card type).
        config: Queue limits.
        now: Current time (defaults to utcnow).

    Returns:
        A ReviewSession ready for use.
    """
    queue = await build_queue(store, models, config=config, now=now)
    session = ReviewSession(store=store, queue=queue)

    logger.info("Started session: %d cards queued", queue.total)
    return session
