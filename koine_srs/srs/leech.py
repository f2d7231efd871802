"""Leech detection: cards the learner keeps forgetting.

Advisory only. A leech is still scheduled like any other card; the flag
lets the UI suggest rewording or splitting the card.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from koine_srs.config import settings

if TYPE_CHECKING:
    from koine_srs.srs.scheduler import SchedulingFields


class LeechLevel(Enum):
    NONE = "none"
    STRUGGLING = "struggling"
    LEECH = "leech"


@dataclass
class LeechStatus:
    """Warning to surface alongside a card."""

    level: LeechLevel
    message: str

    @property
    def is_leech(self) -> bool:
        return self.level == LeechLevel.LEECH


def is_leech(card: SchedulingFields, threshold: int | None = None) -> bool:
    """Return True if the card has lapsed at least ``threshold`` times (default 8)."""
    threshold = settings.leech_threshold if threshold is None else threshold
    return card.lapses >= threshold


def leech_status(
    card: SchedulingFields,
    threshold: int | None = None,
    warning_threshold: int | None = None,
) -> LeechStatus:
    """Classify a card into the leech warning bands (8+ leech, 5+ struggling)."""
    threshold = settings.leech_threshold if threshold is None else threshold
    warning_threshold = (
        settings.leech_warning_threshold if warning_threshold is None else warning_threshold
    )

    if card.lapses >= threshold:
        return LeechStatus(LeechLevel.LEECH, "Leech: consider rewording or splitting this card")
    if card.lapses >= warning_threshold:
        return LeechStatus(LeechLevel.STRUGGLING, "Struggling card")
    return LeechStatus(LeechLevel.NONE, "")
