from typing import ClassVar

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from koine_srs.models.base import Base, TimestampMixin
from koine_srs.models.scheduling import SchedulingMixin


class VerseCard(Base, TimestampMixin, SchedulingMixin):
    """A passage to memorize."""

    __tablename__ = "verse_cards"
    card_type: ClassVar[str] = "verse"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reference: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)  # John.3.16
    text: Mapped[str] = mapped_column(Text, nullable=False)
    translation: Mapped[str | None] = mapped_column(Text, nullable=True)
