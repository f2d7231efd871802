"""SQLAlchemy ORM models for the Koine SRS card store."""

from koine_srs.models.base import Base
from koine_srs.models.grammar_card import GrammarCard
from koine_srs.models.review_log import ReviewLog
from koine_srs.models.scheduling import SchedulingMixin
from koine_srs.models.verse_card import VerseCard
from koine_srs.models.vocab_card import VocabCard

CARD_MODELS = (VocabCard, GrammarCard, VerseCard)

__all__ = [
    "CARD_MODELS",
    "Base",
    "GrammarCard",
    "ReviewLog",
    "SchedulingMixin",
    "VerseCard",
    "VocabCard",
]
