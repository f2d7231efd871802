"""Interval preview: what each rating would do to a card, as short labels.

Shown on the rating buttons ("1m", "10m", "1d", "4d"). The real card is
never touched; each rating is applied to the same input state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from koine_srs.config import utcnow
from koine_srs.srs.scheduler import (
    Rating,
    ReviewResult,
    Scheduler,
    SchedulingFields,
    round_half_up,
)


@dataclass(frozen=True)
class IntervalPreview:
    """Human-readable next-review delay for each rating."""

    again: str
    hard: str
    good: str
    easy: str

    def for_rating(self, rating: int) -> str:
        return {
            Rating.AGAIN: self.again,
            Rating.HARD: self.hard,
            Rating.GOOD: self.good,
            Rating.EASY: self.easy,
        }[Rating(rating)]


def format_interval(minutes: int | None = None, days: int | None = None) -> str:
    """Format a learning delay (minutes) or a review interval (days).

    Minutes win when both are given. Returns "?" when neither is.
    """
    if minutes is not None:
        if minutes < 60:
            return f"{minutes}m"
        return f"{round_half_up(minutes / 60)}h"
    if days is not None:
        if days < 30:
            return f"{days}d"
        if days < 365:
            return f"{round_half_up(days / 30)}mo"
        return f"{round_half_up(days / 365)}y"
    return "?"


def format_result(result: ReviewResult) -> str:
    """Label for a single review outcome."""
    if result.is_learning:
        return format_interval(minutes=result.next_review_minutes)
    return format_interval(days=result.state.interval)


def preview_intervals(
    scheduler: Scheduler,
    card: SchedulingFields,
    now: datetime | None = None,
) -> IntervalPreview:
    """Preview the outcome of every rating for a card without changing it."""
    now = now or utcnow()
    labels = {
        rating: format_result(scheduler.review(card, rating, now=now)) for rating in Rating
    }
    return IntervalPreview(
        again=labels[Rating.AGAIN],
        hard=labels[Rating.HARD],
        good=labels[Rating.GOOD],
        easy=labels[Rating.EASY],
    )
