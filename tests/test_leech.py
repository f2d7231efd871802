"""Tests for leech detection."""

from datetime import datetime

from koine_srs.srs.leech import LeechLevel, is_leech, leech_status
from koine_srs.srs.scheduler import SchedulingState

NOW = datetime(2024, 1, 15, 12, 0, 0)


def _card(lapses: int) -> SchedulingState:
    return SchedulingState(due=NOW, reps=2, interval=1, lapses=lapses)


class TestIsLeech:
    def test_default_threshold(self) -> None:
        assert not is_leech(_card(7))
        assert is_leech(_card(8))
        assert is_leech(_card(20))

    def test_custom_threshold(self) -> None:
        assert is_leech(_card(3), threshold=3)
        assert not is_leech(_card(2), threshold=3)


class TestLeechStatus:
    def test_bands(self) -> None:
        assert leech_status(_card(0)).level == LeechLevel.NONE
        assert leech_status(_card(4)).level == LeechLevel.NONE
        assert leech_status(_card(5)).level == LeechLevel.STRUGGLING
        assert leech_status(_card(7)).level == LeechLevel.STRUGGLING
        assert leech_status(_card(8)).level == LeechLevel.LEECH

    def test_messages(self) -> None:
        assert leech_status(_card(0)).message == ""
        assert leech_status(_card(5)).message == "Struggling card"
        assert "rewording" in leech_status(_card(8)).message

    def test_is_leech_property_agrees(self) -> None:
        for lapses in range(12):
            assert leech_status(_card(lapses)).is_leech == is_leech(_card(lapses))

    def test_custom_bands(self) -> None:
        status = leech_status(_card(3), threshold=4, warning_threshold=2)
        assert status.level == LeechLevel.STRUGGLING
