"""Review deck selection."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..models import VocabCard
from ..utils.clock import SystemClock
from ..utils.parsing import TextParser

logger = logging.getLogger(__name__)

# Sort position of cards without a due date
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class DeckFilters:
    """
    Conjunctive card filters shared by the table view and the deck builder.

    Blank values mean "no filter".
    """

    query: str = ""
    part_of_speech: str = ""
    chapter: str = ""

    def matches(self, card: VocabCard) -> bool:
        if self.part_of_speech and card.part_of_speech != self.part_of_speech:
            return False
        if self.chapter and card.chapter != self.chapter:
            return False

        query = TextParser.normalize_unicode(self.query).strip().lower()
        if query:
            haystacks = (card.hanzi, card.pinyin, card.meaning)
            if not any(query in (text or "").lower() for text in haystacks):
                return False
        return True


def due_sort_key(card: VocabCard) -> datetime:
    return card.srs.due or EPOCH


class DeckBuilder:
    """
    Builds the ordered card list for one review session.

    The deck is always sorted by due date, most overdue first, whatever sort
    the table view uses.
    """

    def __init__(self, clock: Optional[SystemClock] = None):
        self.clock = clock or SystemClock()

    def build(
        self,
        cards: Iterable[VocabCard],
        filters: Optional[DeckFilters] = None,
        due_only: bool = False,
    ) -> List[VocabCard]:
        """
        Select and order cards for review.

        Args:
            cards: Cards of the store
            filters: Text/part-of-speech/chapter filters
            due_only: Keep only cards whose due date has passed

        Returns:
            A new list (snapshot); empty when nothing matches
        """
        filters = filters or DeckFilters()
        now = self.clock.now()

        deck = [card for card in cards if filters.matches(card)]
        if due_only:
            deck = [card for card in deck if due_sort_key(card) <= now]

        deck.sort(key=due_sort_key)
        logger.debug("Built deck of %d cards (due_only=%s)", len(deck), due_only)
        return deck
