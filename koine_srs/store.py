"""Card store: persists scheduling state and review history.

Loads card records, hands their scheduling fields to the scheduler, and
writes the replacement state back against the same record. Reviews of a
single card must be serialized by the caller; different cards are
independent.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TypeVar

from sqlalchemy import and_, not_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from koine_srs.config import settings, utcnow
from koine_srs.models.review_log import ReviewLog
from koine_srs.models.scheduling import SchedulingMixin
from koine_srs.srs.scheduler import ReviewResult, Scheduler, SchedulerConfig

logger = logging.getLogger(__name__)

CardT = TypeVar("CardT", bound=SchedulingMixin)


class CardStore:
    """Async card repository backed by SQLAlchemy."""

    def __init__(self, session: AsyncSession, scheduler: Scheduler | None = None) -> None:
        self.session = session
        self.scheduler = scheduler or Scheduler(SchedulerConfig.from_settings(settings))

    async def add(self, card: CardT, now: datetime | None = None) -> CardT:
        """Seed a new card with the initial scheduling state and persist it."""
        card.apply_state(self.scheduler.initial_state(now))
        self.session.add(card)
        await self._commit()
        await self.session.refresh(card)
        logger.debug("Added %s card %d", _card_type(card), card.id)
        return card

    async def get(self, model: type[CardT], card_id: int) -> CardT | None:
        return await self.session.get(model, card_id)

    async def due_cards(
        self,
        model: type[CardT],
        now: datetime | None = None,
        limit: int | None = None,
    ) -> list[CardT]:
        """Fetch previously seen cards that are due, most overdue first.

        Brand-new cards are excluded; see ``new_cards``.
        """
        now = now or utcnow()
        stmt = (
            select(model)
            .where(
                and_(
                    model.due <= now,
                    not_(and_(model.reps == 0, model.lapses == 0)),
                )
            )
            .order_by(model.due.asc(), model.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def new_cards(self, model: type[CardT], limit: int | None = None) -> list[CardT]:
        """Fetch never-reviewed cards, oldest first."""
        stmt = (
            select(model)
            .where(and_(model.reps == 0, model.lapses == 0))
            .order_by(model.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def all_cards(self, model: type[CardT]) -> list[CardT]:
        result = await self.session.execute(select(model).order_by(model.id.asc()))
        return list(result.scalars().all())

    async def review(
        self,
        card: SchedulingMixin,
        rating: int,
        now: datetime | None = None,
    ) -> ReviewResult:
        """Apply a rating to a card, persist the new state and log the review.

        Args:
            card: The card record being reviewed.
            rating: Review rating (1=Again, 2=Hard, 3=Good, 4=Easy).
            now: When the review happened (defaults to now).

        Returns:
            The scheduler's ReviewResult.

        Raises:
            InvalidRatingError: If the rating is not 1-4. Nothing is written.
        """
        now = now or utcnow()
        before = card.scheduling_state()
        result = self.scheduler.review(before, rating, now=now)

        card.apply_state(result.state)
        self.session.add(
            ReviewLog(
                card_type=_card_type(card),
                card_id=card.id,
                rating=int(rating),
                interval_before=before.interval,
                interval_after=result.state.interval,
                ease_before=before.ease_factor,
                ease_after=result.state.ease_factor,
                reps_after=result.state.reps,
                lapses_after=result.state.lapses,
                reviewed_at=now,
            )
        )
        await self._commit()

        logger.debug(
            "Reviewed %s card %d: rating=%d interval %d->%d ease %.2f->%.2f",
            _card_type(card),
            card.id,
            rating,
            before.interval,
            result.state.interval,
            before.ease_factor,
            result.state.ease_factor,
        )
        return result

    async def review_history(self, card: SchedulingMixin) -> list[ReviewLog]:
        """Review log entries for a card, oldest first."""
        stmt = (
            select(ReviewLog)
            .where(and_(ReviewLog.card_type == _card_type(card), ReviewLog.card_id == card.id))
            .order_by(ReviewLog.reviewed_at.asc(), ReviewLog.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError:
            logger.exception("Commit failed, rolling back")
            await self.session.rollback()
            raise


def _card_type(card: object) -> str:
    return getattr(card, "card_type", type(card).__name__.lower())
