"""Scheduling-state columns shared by every card table."""

from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from koine_srs.config import utcnow
from koine_srs.srs.scheduler import Phase, SchedulingState


class SchedulingMixin:
    """Embeds a card's scheduling state in its own table.

    The scheduler only ever sees these columns, so vocabulary, grammar and
    verse cards are scheduled identically.
    """

    due: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # days
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=2.5)
    reps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lapses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_review: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    phase: Mapped[Phase] = mapped_column(Enum(Phase), nullable=False, default=Phase.NEW)

    def scheduling_state(self) -> SchedulingState:
        """Snapshot the scheduling columns as a plain state."""
        return SchedulingState(
            due=self.due,
            interval=self.interval,
            ease_factor=self.ease_factor,
            reps=self.reps,
            lapses=self.lapses,
            last_review=self.last_review,
            phase=self.phase,
        )

    def apply_state(self, state: SchedulingState) -> None:
        """Replace the scheduling columns with a new state."""
        self.due = state.due
        self.interval = state.interval
        self.ease_factor = state.ease_factor
        self.reps = state.reps
        self.lapses = state.lapses
        self.last_review = state.last_review
        self.phase = state.phase
