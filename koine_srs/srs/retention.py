"""Heuristic memory-decay estimates for ranking cards by forgetting risk.

Uses an exponential forgetting curve R = e^(-t / S), where t is the time
since the last review and S is a stability estimated from the card's
scheduling history. These numbers are for dashboards only and never feed
back into the scheduler.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Generic, TypeVar

from koine_srs.config import utcnow
from koine_srs.srs.scheduler import SchedulingFields

T = TypeVar("T", bound=SchedulingFields)

STABILITY_MULTIPLIER = 1.5
DEFAULT_EASE = 2.5
LAPSE_PENALTY = 0.3
MIN_STABILITY = 0.1  # days
FORGOTTEN_THRESHOLD = 50.0  # percent


@dataclass
class RetentionPrediction(Generic[T]):
    """Forecasted recall for one card."""

    card: T
    retention: float  # 0-100
    stability: float  # days
    days_until_forgotten: int
    optimal_review_date: datetime


def estimate_stability(card: SchedulingFields) -> float:
    """Estimate memory stability in days.

    More reps and a higher ease mean a more stable memory; every lapse
    weakens it.
    """
    interval = max(0, card.interval)
    ease = card.ease_factor if math.isfinite(card.ease_factor) else DEFAULT_EASE
    ease = max(1.3, min(3.0, ease))
    reps = max(0, card.reps)
    lapses = max(0, card.lapses)

    base = interval * STABILITY_MULTIPLIER
    ease_factor = ease / DEFAULT_EASE
    reps_factor = math.log2(reps + 1)
    lapse_penalty = 1 / (1 + lapses * LAPSE_PENALTY)

    return base * ease_factor * reps_factor * lapse_penalty


def retention_at(elapsed_days: float, stability: float) -> float:
    """Recall probability in percent after ``elapsed_days`` at a given stability."""
    elapsed_days = max(0.0, elapsed_days)
    retention = math.exp(-elapsed_days / max(stability, MIN_STABILITY))
    return min(100.0, max(0.0, retention * 100))


def estimate_retention(
    card: SchedulingFields,
    now: datetime | None = None,
    stability: float | None = None,
) -> float:
    """Estimate the current recall probability of a card in percent.

    A card that was never reviewed has 0 retention. A ``last_review`` in the
    future (clock skew) counts as reviewed just now.
    """
    if card.last_review is None:
        return 0.0

    now = now or utcnow()
    stability = estimate_stability(card) if stability is None else stability
    elapsed_days = (now - card.last_review).total_seconds() / 86400
    return retention_at(elapsed_days, stability)


def days_until_forgotten(
    retention: float,
    stability: float,
    threshold: float = FORGOTTEN_THRESHOLD,
) -> int:
    """Days until retention decays below ``threshold`` percent.

    Solves R = e^(-t/S) for the threshold and the current retention and
    returns the difference, rounded up.
    """
    if retention <= threshold:
        return 0

    stability = max(stability, MIN_STABILITY)
    t_threshold = -stability * math.log(threshold / 100)
    t_current = -stability * math.log(min(retention, 100.0) / 100)
    return max(0, math.ceil(t_threshold - t_current))


def predict_retention(
    items: Iterable[T],
    now: datetime | None = None,
    limit: int = 20,
) -> list[RetentionPrediction[T]]:
    """Rank reviewed cards by forecasted forgetting risk, most at risk first.

    Args:
        items: Cards to rank; never-reviewed cards are skipped.
        now: Current time (defaults to utcnow).
        limit: Maximum number of predictions to return.

    Returns:
        Predictions sorted by ascending retention.
    """
    now = now or utcnow()
    predictions: list[RetentionPrediction[T]] = []

    for card in items:
        if card.reps == 0:
            continue

        stability = estimate_stability(card)
        retention = estimate_retention(card, now, stability=stability)
        days_left = days_until_forgotten(retention, stability)

        predictions.append(
            RetentionPrediction(
                card=card,
                retention=retention,
                stability=stability,
                days_until_forgotten=days_left,
                optimal_review_date=now + timedelta(days=max(0, days_left - 1)),
            )
        )

    predictions.sort(key=lambda p: p.retention)
    return predictions[:limit]
