from typing import ClassVar

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from koine_srs.models.base import Base, TimestampMixin
from koine_srs.models.scheduling import SchedulingMixin


class GrammarCard(Base, TimestampMixin, SchedulingMixin):
    """A morphology drill, e.g. parsing an inflected form."""

    __tablename__ = "grammar_cards"
    card_type: ClassVar[str] = "grammar"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    prompt: Mapped[str] = mapped_column(String(500), nullable=False)  # "Parse: ἔλυσεν"
    answer: Mapped[str] = mapped_column(String(500), nullable=False)
    grammar_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="parsing"
    )  # parsing, declension, conjugation, syntax
    hint: Mapped[str | None] = mapped_column(Text, nullable=True)
