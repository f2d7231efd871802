"""Tests for rating-button interval previews."""

from dataclasses import replace
from datetime import datetime

import pytest

from koine_srs.srs.preview import format_interval, preview_intervals
from koine_srs.srs.scheduler import Rating, Scheduler, SchedulingState

NOW = datetime(2024, 1, 15, 12, 0, 0)


class TestFormatInterval:
    @pytest.mark.parametrize(
        ("minutes", "expected"),
        [(1, "1m"), (10, "10m"), (59, "59m"), (60, "1h"), (90, "2h"), (150, "3h")],
    )
    def test_minutes(self, minutes: int, expected: str) -> None:
        assert format_interval(minutes=minutes) == expected

    @pytest.mark.parametrize(
        ("days", "expected"),
        [(1, "1d"), (29, "29d"), (30, "1mo"), (45, "2mo"), (200, "7mo"), (365, "1y"), (800, "2y")],
    )
    def test_days(self, days: int, expected: str) -> None:
        assert format_interval(days=days) == expected

    def test_minutes_win(self) -> None:
        assert format_interval(minutes=10, days=3) == "10m"

    def test_unknown(self) -> None:
        assert format_interval() == "?"


class TestPreviewIntervals:
    def setup_method(self) -> None:
        self.scheduler = Scheduler()

    def test_new_card(self) -> None:
        card = self.scheduler.initial_state(NOW)
        preview = preview_intervals(self.scheduler, card, NOW)
        assert preview.again == "1m"
        assert preview.hard == "10m"
        assert preview.good == "10m"
        assert preview.easy == "4d"

    def test_second_learning_step(self) -> None:
        card = SchedulingState(due=NOW, reps=1)
        preview = preview_intervals(self.scheduler, card, NOW)
        assert (preview.again, preview.hard, preview.good, preview.easy) == (
            "1m",
            "1d",
            "1d",
            "4d",
        )

    def test_mature_card(self) -> None:
        card = SchedulingState(due=NOW, reps=4, interval=10, ease_factor=2.5)
        preview = preview_intervals(self.scheduler, card, NOW)
        assert preview.again == "1m"
        assert preview.hard == "20d"
        assert preview.good == "25d"
        assert preview.easy == "1mo"

    def test_matches_scheduler(self) -> None:
        card = SchedulingState(due=NOW, reps=7, interval=60, ease_factor=2.2)
        preview = preview_intervals(self.scheduler, card, NOW)
        for rating in Rating:
            result = self.scheduler.review(card, rating, now=NOW)
            expected = (
                format_interval(minutes=result.next_review_minutes)
                if result.is_learning
                else format_interval(days=result.state.interval)
            )
            assert preview.for_rating(rating) == expected

    def test_does_not_modify_card(self) -> None:
        card = SchedulingState(due=NOW, reps=4, interval=10)
        snapshot = replace(card)
        preview_intervals(self.scheduler, card, NOW)
        assert card == snapshot

    def test_idempotent(self) -> None:
        card = SchedulingState(due=NOW, reps=3, interval=3, lapses=1)
        assert preview_intervals(self.scheduler, card, NOW) == preview_intervals(
            self.scheduler, card, NOW
        )
