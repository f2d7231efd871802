"""Tests for the retention heuristics."""

import math
from datetime import datetime, timedelta

import pytest

from koine_srs.srs.retention import (
    days_until_forgotten,
    estimate_retention,
    estimate_stability,
    predict_retention,
    retention_at,
)
from koine_srs.srs.scheduler import SchedulingState

NOW = datetime(2024, 1, 15, 12, 0, 0)


def _card(**kwargs) -> SchedulingState:
    fields = {"due": NOW, "interval": 10, "ease_factor": 2.5, "reps": 3, "lapses": 0}
    fields.update(kwargs)
    return SchedulingState(**fields)


class TestStability:
    def test_formula(self) -> None:
        # 10 * 1.5 * (2.5 / 2.5) * log2(4) = 30
        assert estimate_stability(_card()) == pytest.approx(30.0)

    def test_lapses_weaken_memory(self) -> None:
        assert estimate_stability(_card(lapses=2)) == pytest.approx(30.0 / 1.6)

    def test_new_card_has_no_stability(self) -> None:
        assert estimate_stability(_card(interval=0, reps=0)) == 0.0

    def test_corrupted_ease_clamped(self) -> None:
        assert estimate_stability(_card(ease_factor=9.0)) == estimate_stability(
            _card(ease_factor=3.0)
        )


class TestRetention:
    def test_fresh_review_is_full(self) -> None:
        assert estimate_retention(_card(last_review=NOW), NOW) == pytest.approx(100.0)

    def test_exponential_decay(self) -> None:
        card = _card(last_review=NOW - timedelta(days=30))
        assert estimate_retention(card, NOW) == pytest.approx(100 * math.exp(-1))

    def test_never_reviewed(self) -> None:
        assert estimate_retention(_card(last_review=None), NOW) == 0.0

    def test_future_last_review_counts_as_now(self) -> None:
        card = _card(last_review=NOW + timedelta(days=2))
        assert estimate_retention(card, NOW) == pytest.approx(100.0)

    def test_zero_stability_stays_in_range(self) -> None:
        value = retention_at(3.0, 0.0)
        assert 0.0 <= value <= 100.0

    def test_decreases_over_time(self) -> None:
        assert retention_at(1, 10) > retention_at(5, 10) > retention_at(20, 10)


class TestDaysUntilForgotten:
    def test_from_full_retention(self) -> None:
        # 30 * ln 2 = 20.79
        assert days_until_forgotten(100.0, 30.0) == 21

    def test_already_forgotten(self) -> None:
        assert days_until_forgotten(50.0, 30.0) == 0
        assert days_until_forgotten(12.0, 30.0) == 0

    def test_custom_threshold(self) -> None:
        assert days_until_forgotten(100.0, 10.0, threshold=90.0) == 2  # 10 * -ln 0.9 = 1.05


class TestPredictRetention:
    def test_skips_unreviewed_and_sorts(self) -> None:
        fresh = _card(interval=0, reps=0, last_review=None)
        recent = _card(last_review=NOW - timedelta(days=1))
        stale = _card(last_review=NOW - timedelta(days=40))
        predictions = predict_retention([fresh, recent, stale], NOW)

        assert [p.card for p in predictions] == [stale, recent]
        assert predictions[0].retention < predictions[1].retention

    def test_optimal_review_date(self) -> None:
        (prediction,) = predict_retention([_card(last_review=NOW)], NOW)
        assert prediction.days_until_forgotten == 21
        assert prediction.optimal_review_date == NOW + timedelta(days=20)

    def test_limit(self) -> None:
        cards = [_card(last_review=NOW - timedelta(days=d)) for d in range(30)]
        assert len(predict_retention(cards, NOW, limit=5)) == 5
