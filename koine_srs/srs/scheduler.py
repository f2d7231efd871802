"""SM-2 style scheduler with short learning steps.

A card starts in a minute-granularity learning phase (1 minute, then
10 minutes) and graduates to day-granularity review spacing. Review
intervals grow by the card's ease factor, which the learner's ratings
nudge up or down within fixed bounds.

Key concepts:
- Interval: whole days until the next review once the card has graduated.
- Ease factor: multiplier controlling interval growth, clamped to [1.3, 3.0].
- Reps: consecutive successful presentations since the last lapse.
- Lapses: total failed recalls over the card's lifetime.
- Rating: 1=Again, 2=Hard, 3=Good, 4=Easy
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Protocol

from koine_srs.config import utcnow

if TYPE_CHECKING:
    from koine_srs.config import Settings

# Reps at which a card leaves the learning phase
GRADUATION_REPS = 2


class Rating(IntEnum):
    """Learner's self-assessed recall quality."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class Phase(Enum):
    """Where a card sits in its lifecycle."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"


class InvalidRatingError(ValueError):
    """Raised when a rating is not one of Again/Hard/Good/Easy."""


class SchedulingFields(Protocol):
    """Anything carrying the scheduling fields: plain states and ORM records alike."""

    due: datetime
    interval: int
    ease_factor: float
    reps: int
    lapses: int
    last_review: datetime | None


@dataclass
class SchedulingState:
    """The scheduling state of a card."""

    due: datetime  # Earliest moment the card should be shown again
    interval: int = 0  # Days; 0 while learning or right after a lapse
    ease_factor: float = 2.5
    reps: int = 0  # Consecutive successes since the last lapse
    lapses: int = 0  # Never reset
    last_review: datetime | None = None
    phase: Phase = Phase.NEW


@dataclass
class ReviewResult:
    """The result of applying a rating to a card."""

    state: SchedulingState
    is_learning: bool
    next_review_minutes: int | None = None  # Only set while still learning


@dataclass(frozen=True)
class SchedulerConfig:
    """Tuning constants for the scheduler."""

    learning_steps: tuple[int, ...] = (1, 10)  # minutes
    graduating_interval: int = 1
    easy_interval: int = 4
    second_review_interval: int = 3
    second_review_easy_interval: int = 7
    initial_ease: float = 2.5
    min_ease: float = 1.3
    max_ease: float = 3.0
    lapse_ease_penalty: float = 0.2
    hard_multiplier: float = 0.8
    easy_multiplier: float = 1.3
    interval_modifier: float = 1.0
    min_interval: int = 1
    max_interval: int = 365
    day_start_hour: int = 4

    def __post_init__(self) -> None:
        if not self.learning_steps:
            raise ValueError("learning_steps must contain at least one step")
        if not 0 <= self.day_start_hour <= 23:
            raise ValueError(f"day_start_hour must be 0-23, got {self.day_start_hour}")
        if self.min_ease > self.max_ease:
            raise ValueError("min_ease must not exceed max_ease")

    @classmethod
    def from_settings(cls, settings: Settings) -> SchedulerConfig:
        """Build a config from application settings."""
        return cls(
            learning_steps=tuple(settings.learning_steps),
            graduating_interval=settings.graduating_interval,
            easy_interval=settings.easy_interval,
            initial_ease=settings.initial_ease,
            min_ease=settings.min_ease,
            max_ease=settings.max_ease,
            interval_modifier=settings.interval_modifier,
            max_interval=settings.max_interval,
            day_start_hour=settings.day_start_hour,
        )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (32.5 -> 33)."""
    return math.floor(value + 0.5)


def phase_of(state: SchedulingFields) -> Phase:
    """Derive the phase of a record that may predate the stored phase field."""
    if state.reps >= GRADUATION_REPS:
        return Phase.REVIEW
    if state.reps == 0 and state.lapses == 0:
        return Phase.NEW
    return Phase.LEARNING


def parse_rating(rating: int) -> Rating:
    """Validate a rating, failing fast on anything outside 1-4."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(f"Rating must be an integer 1-4, got {rating!r}")
    try:
        return Rating(rating)
    except ValueError:
        raise InvalidRatingError(f"Rating must be 1-4, got {rating}") from None


class Scheduler:
    """Spaced repetition scheduler."""

    def __init__(self, config: SchedulerConfig | None = None) -> None:
        """Initialize the scheduler with optional custom tuning."""
        self.config = config or SchedulerConfig()

    def initial_state(self, now: datetime | None = None) -> SchedulingState:
        """Create the state for a card that has never been reviewed.

        The card is due immediately.
        """
        return SchedulingState(
            due=now or utcnow(),
            interval=0,
            ease_factor=self.config.initial_ease,
            reps=0,
            lapses=0,
            last_review=None,
            phase=Phase.NEW,
        )

    def review(
        self,
        state: SchedulingFields,
        rating: int,
        now: datetime | None = None,
    ) -> ReviewResult:
        """Apply a rating and compute the card's next scheduling state.

        The input state is never modified.

        Args:
            state: Current scheduling state (any object with the scheduling fields).
            rating: Review rating (1=Again, 2=Hard, 3=Good, 4=Easy).
            now: When the review happened (defaults to now).

        Returns:
            ReviewResult with the replacement state, whether the card is
            still learning, and the minute delay if it is.

        Raises:
            InvalidRatingError: If the rating is not 1-4.
        """
        rating = parse_rating(rating)
        now = now or utcnow()
        cfg = self.config

        # Stored values may have been corrupted outside the scheduler
        interval = max(0, int(state.interval))
        ease = self._clamp_ease(state.ease_factor)
        reps = max(0, int(state.reps))
        lapses = max(0, int(state.lapses))

        is_learning = reps < GRADUATION_REPS
        next_minutes: int | None = None

        if rating == Rating.AGAIN:
            lapses += 1
            reps = 0
            interval = 0
            is_learning = True
            next_minutes = cfg.learning_steps[0]
            ease = self._clamp_ease(ease - cfg.lapse_ease_penalty)
        elif is_learning:
            if rating == Rating.EASY:
                # Well-known cards skip the remaining learning steps
                reps = GRADUATION_REPS
                interval = cfg.easy_interval
                is_learning = False
            elif reps == 0:
                reps = 1
                next_minutes = self._second_step()
            else:
                reps = GRADUATION_REPS
                interval = cfg.graduating_interval
                is_learning = False
        else:
            reps += 1
            interval = self._next_review_interval(rating, reps, interval, ease)
            ease = self._update_ease(ease, rating)

        if next_minutes is not None:
            due = now + timedelta(minutes=next_minutes)
        else:
            due = self._day_due(now, interval)

        new_state = SchedulingState(
            due=due,
            interval=interval,
            ease_factor=ease,
            reps=reps,
            lapses=lapses,
            last_review=now,
            phase=Phase.LEARNING if is_learning else Phase.REVIEW,
        )

        return ReviewResult(
            state=new_state,
            is_learning=is_learning,
            next_review_minutes=next_minutes,
        )

    def _second_step(self) -> int:
        steps = self.config.learning_steps
        return steps[1] if len(steps) > 1 else steps[0]

    def _next_review_interval(self, rating: Rating, reps: int, interval: int, ease: float) -> int:
        """Grow the interval of a graduated card. ``reps`` is the incremented count."""
        cfg = self.config
        if reps == 2:
            new_interval = cfg.easy_interval if rating == Rating.EASY else cfg.graduating_interval
        elif reps == 3:
            new_interval = (
                cfg.second_review_easy_interval
                if rating == Rating.EASY
                else cfg.second_review_interval
            )
        else:
            new_interval = round_half_up(interval * ease * cfg.interval_modifier)
            if rating == Rating.HARD:
                new_interval = round_half_up(new_interval * cfg.hard_multiplier)
            elif rating == Rating.EASY:
                new_interval = round_half_up(new_interval * cfg.easy_multiplier)

        return min(cfg.max_interval, max(cfg.min_interval, new_interval))

    def _update_ease(self, ease: float, rating: Rating) -> float:
        """EF' = EF + (0.1 - (4-q) * (0.08 + (4-q) * 0.02))"""
        q = int(rating)
        delta = 0.1 - (4 - q) * (0.08 + (4 - q) * 0.02)
        return self._clamp_ease(ease + delta)

    def _clamp_ease(self, ease: float) -> float:
        if not math.isfinite(ease):
            return self.config.initial_ease
        return max(self.config.min_ease, min(self.config.max_ease, ease))

    def _day_due(self, now: datetime, interval: int) -> datetime:
        """Due date for a graduated card, pinned to the start of the review day."""
        due = now + timedelta(days=interval)
        return due.replace(hour=self.config.day_start_hour, minute=0, second=0, microsecond=0)
