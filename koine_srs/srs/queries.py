"""Read-only queries over collections of scheduled cards.

Every function accepts any mix of card types, since only the scheduling
fields are read, and returns the same objects it was given.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TypeVar

from koine_srs.config import settings, utcnow
from koine_srs.srs.leech import is_leech
from koine_srs.srs.scheduler import GRADUATION_REPS, Phase, SchedulingFields, phase_of

T = TypeVar("T", bound=SchedulingFields)


@dataclass
class ForecastDay:
    """Number of cards falling due on one calendar day."""

    date: date
    count: int


@dataclass
class StatusFilter:
    """Which lifecycle groups to keep when selecting cards for study."""

    include_new: bool = True
    include_learning: bool = True
    include_review: bool = True
    include_leeches: bool = True


def is_due(card: SchedulingFields, now: datetime | None = None) -> bool:
    """Return True if the card should be presented now."""
    return card.due <= (now or utcnow())


def due_items(items: Iterable[T], now: datetime | None = None) -> list[T]:
    """Cards due now, earliest (most overdue) first."""
    now = now or utcnow()
    return sorted((c for c in items if c.due <= now), key=lambda c: c.due)


def new_items(items: Iterable[T]) -> list[T]:
    """Cards that have never been reviewed."""
    return [c for c in items if c.reps == 0 and c.lapses == 0]


def learning_items(items: Iterable[T]) -> list[T]:
    """Cards between the first learning step and graduation."""
    return [c for c in items if 0 < c.reps < GRADUATION_REPS]


def retention_rate(items: Iterable[SchedulingFields]) -> float:
    """Share of successful repetitions among recorded outcomes, in percent.

    Only cards with a current success streak (``reps > 0``) count; a card
    sitting at zero reps after a lapse contributes nothing until it is
    recalled again. Returns 0 when no card qualifies.
    """
    total_reps = 0
    total_lapses = 0
    for card in items:
        if card.reps <= 0:
            continue
        total_reps += card.reps
        total_lapses += max(0, card.lapses)

    if total_reps + total_lapses == 0:
        return 0.0
    return total_reps / (total_reps + total_lapses) * 100


def review_forecast(
    items: Iterable[SchedulingFields],
    days: int | None = None,
    now: datetime | None = None,
) -> list[ForecastDay]:
    """Count cards falling due on each of the next ``days`` calendar days.

    The first bucket is today. Cards due before today or after the horizon
    are not counted.

    Args:
        items: Cards to bucket.
        days: Horizon length (defaults to ``settings.forecast_days``).
        now: Current time (defaults to utcnow).

    Returns:
        One ForecastDay per day, in date order, including empty days.
    """
    days = settings.forecast_days if days is None else days
    if days < 0:
        raise ValueError(f"Forecast horizon must be non-negative, got {days}")

    today = (now or utcnow()).date()
    counts: dict[date, int] = {today + timedelta(days=i): 0 for i in range(days)}

    for card in items:
        day = card.due.date()
        if day in counts:
            counts[day] += 1

    return [ForecastDay(date=d, count=n) for d, n in counts.items()]


def matches_status(
    card: SchedulingFields,
    status_filter: StatusFilter,
    leech_threshold: int | None = None,
) -> bool:
    """Check a card against a lifecycle status filter."""
    if not status_filter.include_leeches and is_leech(card, leech_threshold):
        return False

    phase = phase_of(card)
    if phase == Phase.NEW:
        return status_filter.include_new
    if phase == Phase.LEARNING:
        return status_filter.include_learning
    return status_filter.include_review


def filter_by_status(
    items: Iterable[T],
    status_filter: StatusFilter,
    leech_threshold: int | None = None,
) -> list[T]:
    """Keep the cards whose lifecycle group is selected by the filter."""
    return [c for c in items if matches_status(c, status_filter, leech_threshold)]
