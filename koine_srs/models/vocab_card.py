from typing import ClassVar

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from koine_srs.models.base import Base, TimestampMixin
from koine_srs.models.scheduling import SchedulingMixin


class VocabCard(Base, TimestampMixin, SchedulingMixin):
    """A vocabulary word with its scheduling state."""

    __tablename__ = "vocab_cards"
    card_type: ClassVar[str] = "vocab"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    lemma: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)  # λόγος
    lexical_form: Mapped[str | None] = mapped_column(String(300), nullable=True)  # λόγος, -ου, ὁ
    gloss: Mapped[str] = mapped_column(String(500), nullable=False)
    part_of_speech: Mapped[str] = mapped_column(String(50), nullable=False, default="other")
    frequency: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # corpus occurrences
