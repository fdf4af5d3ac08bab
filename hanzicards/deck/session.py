"""Flashcard review session: cursor and face state over a fixed deck."""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from ..models import Grade, VocabCard
from ..services.scheduler import format_interval_short
from .builder import DeckBuilder, DeckFilters

if TYPE_CHECKING:
    from ..services.vocabulary_service import VocabularyService

logger = logging.getLogger(__name__)

PLACEHOLDER = "—"


class SessionState(Enum):
    EMPTY = "empty"
    SHOWING_FRONT = "front"
    SHOWING_BACK = "back"


class ReviewDirection(Enum):
    """Which side of the card is shown first. Does not affect scheduling."""
    HANZI_TO_MEANING = "hanzi_to_meaning"
    MEANING_TO_HANZI = "meaning_to_hanzi"

    @classmethod
    def parse(cls, value: Union["ReviewDirection", str]) -> "ReviewDirection":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown review direction: {value!r}") from None


class ReviewSession:
    """
    Walks a deck built from the store.

    The deck is a snapshot taken by ``build_deck``; rebuilding starts over.
    Navigation wraps around and always shows the front. Grading goes through
    the store (which persists) and then moves to the next card. Every action
    is a no-op on an empty deck.

    Usage:
        session = ReviewSession(service)
        session.build_deck(due_only=True)
        session.flip()
        session.grade(Grade.GOOD)
    """

    def __init__(
        self,
        service: "VocabularyService",
        builder: Optional[DeckBuilder] = None,
        direction: Union[ReviewDirection, str] = ReviewDirection.HANZI_TO_MEANING,
    ):
        self.service = service
        self.builder = builder or DeckBuilder(service.clock)
        self.direction = ReviewDirection.parse(direction)

        self.deck: List[VocabCard] = []
        self.index: int = 0
        self.state: SessionState = SessionState.EMPTY

    def build_deck(self, filters: Optional[DeckFilters] = None, due_only: bool = False) -> int:
        """Build a new deck from the store and show its first card. Returns its size."""
        self.deck = self.builder.build(self.service.cards, filters, due_only)
        self.index = 0
        self.state = SessionState.SHOWING_FRONT if self.deck else SessionState.EMPTY
        logger.info("Review deck ready: %d cards", len(self.deck))
        return len(self.deck)

    @property
    def is_empty(self) -> bool:
        return not self.deck

    @property
    def current(self) -> Optional[VocabCard]:
        if self.is_empty:
            return None
        return self.deck[self.index]

    @property
    def total(self) -> int:
        return len(self.deck)

    @property
    def position(self) -> int:
        """1-based position for display, 0 when the deck is empty."""
        return 0 if self.is_empty else self.index + 1

    @property
    def showing_back(self) -> bool:
        return self.state is SessionState.SHOWING_BACK

    def next(self) -> None:
        if self.is_empty:
            return
        self.index = (self.index + 1) % len(self.deck)
        self.state = SessionState.SHOWING_FRONT

    def previous(self) -> None:
        if self.is_empty:
            return
        self.index = (self.index - 1) % len(self.deck)
        self.state = SessionState.SHOWING_FRONT

    def flip(self) -> None:
        if self.is_empty:
            return
        if self.state is SessionState.SHOWING_FRONT:
            self.state = SessionState.SHOWING_BACK
        else:
            self.state = SessionState.SHOWING_FRONT

    def grade(self, grade: Union[Grade, str]) -> Optional[VocabCard]:
        """Grade the current card, persist, and advance. Returns the graded card."""
        card = self.current
        if card is None:
            return None
        graded = self.service.grade(card.id, grade)
        self.next()
        return graded

    def front_text(self) -> str:
        card = self.current
        if card is None:
            return "No cards to review."
        if self.direction is ReviewDirection.MEANING_TO_HANZI:
            return card.meaning or PLACEHOLDER
        return card.hanzi or PLACEHOLDER

    def back_fields(self) -> Dict[str, str]:
        """Fields revealed on the back, placeholder for blanks."""
        card = self.current
        if card is None:
            return {"pinyin": PLACEHOLDER, "meaning": PLACEHOLDER, "example": PLACEHOLDER}

        if self.direction is ReviewDirection.MEANING_TO_HANZI:
            fields = {"hanzi": card.hanzi, "pinyin": card.pinyin, "example": card.example}
        else:
            fields = {"pinyin": card.pinyin, "meaning": card.meaning, "example": card.example}
        return {name: value or PLACEHOLDER for name, value in fields.items()}

    def grade_labels(self) -> Dict[Grade, str]:
        """Next-interval hint for each grade button, e.g. {Grade.GOOD: '<3d'}."""
        card = self.current
        if card is None:
            return {}
        return {
            grade: format_interval_short(self.service.scheduler.preview(card, grade))
            for grade in Grade
        }
