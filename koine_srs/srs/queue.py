"""Review queue building.

Due reviews come first, most overdue first, with a capped number of new
cards spread through them. Works on in-memory cards or straight from the
card store across every card table.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from koine_srs.config import settings, utcnow
from koine_srs.models import CARD_MODELS
from koine_srs.srs.queries import due_items, new_items

if TYPE_CHECKING:
    from koine_srs.models.scheduling import SchedulingMixin
    from koine_srs.store import CardStore

logger = logging.getLogger(__name__)


@dataclass
class QueueConfig:
    """Configuration for queue building."""

    max_reviews: int = field(default_factory=lambda: settings.max_reviews_per_session)
    max_new: int = field(default_factory=lambda: settings.max_new_cards_per_session)
    new_card_ratio: float = field(default_factory=lambda: settings.new_card_ratio)

    def new_card_slots(self, due_count: int) -> int:
        """How many new cards to introduce alongside ``due_count`` reviews.

        At least one new card is offered even when nothing is due.
        """
        return min(self.max_new, max(1, int(due_count * self.new_card_ratio)))


@dataclass
class ReviewQueue:
    """A prepared queue of cards for a review session."""

    due_cards: list[Any] = field(default_factory=list)
    new_cards: list[Any] = field(default_factory=list)
    total: int = 0

    def interleaved(self) -> list[Any]:
        """Spread new cards evenly through the due reviews.

        Reviews keep their overdue-first order. A new card follows every
        ``len(due) // (len(new) + 1)`` reviews; new cards left over once the
        reviews run out go at the end.
        """
        if not self.new_cards:
            return list(self.due_cards)
        if not self.due_cards:
            return list(self.new_cards)

        spacing = max(1, len(self.due_cards) // (len(self.new_cards) + 1))
        pending_new = iter(self.new_cards)
        result: list[Any] = []

        for position, card in enumerate(self.due_cards, start=1):
            result.append(card)
            if position % spacing == 0:
                result.extend(itertools.islice(pending_new, 1))

        result.extend(pending_new)
        return result


def build_queue_from(
    items: Iterable[Any],
    config: QueueConfig | None = None,
    now: datetime | None = None,
) -> ReviewQueue:
    """Build a review queue from cards already in memory.

    Due cards are previously seen cards past their due time, most overdue
    first. New cards keep their input order.
    """
    config = config or QueueConfig()
    now = now or utcnow()
    items = list(items)

    fresh = new_items(items)
    fresh_ids = {id(c) for c in fresh}
    due_cards = [c for c in due_items(items, now) if id(c) not in fresh_ids][: config.max_reviews]
    new_cards = fresh[: config.new_card_slots(len(due_cards))]

    return ReviewQueue(
        due_cards=due_cards,
        new_cards=new_cards,
        total=len(due_cards) + len(new_cards),
    )


async def build_queue(
    store: CardStore,
    models: Sequence[type[SchedulingMixin]] = CARD_MODELS,
    config: QueueConfig | None = None,
    now: datetime | None = None,
) -> ReviewQueue:
    """Build a review queue from the card store.

    Fetches due cards (overdue first) and new cards (never reviewed) across
    every card type, respecting session limits.

    Args:
        store: Card store to read from.
        models: Card tables to include (defaults to every card type).
        config: Queue configuration (limits, ratios).
        now: Current time (defaults to utcnow).

    Returns:
        A ReviewQueue with due and new cards.
    """
    config = config or QueueConfig()
    now = now or utcnow()

    due_cards: list[Any] = []
    for model in models:
        due_cards.extend(await store.due_cards(model, now=now, limit=config.max_reviews))
    due_cards = due_items(due_cards, now)[: config.max_reviews]

    slots = config.new_card_slots(len(due_cards))
    new_cards: list[Any] = []
    for model in models:
        if len(new_cards) >= slots:
            break
        new_cards.extend(await store.new_cards(model, limit=slots - len(new_cards)))

    queue = ReviewQueue(
        due_cards=due_cards,
        new_cards=new_cards,
        total=len(due_cards) + len(new_cards),
    )

    logger.info(
        "Built queue: %d due + %d new = %d total",
        len(due_cards),
        len(new_cards),
        queue.total,
    )
    return queue
