"""Merge two card collections by id, newest edit wins."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..models import VocabCard, normalize_card
from ..utils.clock import IdFactory

logger = logging.getLogger(__name__)

CardLike = Union[VocabCard, Mapping[str, Any]]


def merge_cards(
    base: Iterable[CardLike],
    incoming: Iterable[CardLike],
    now: datetime,
    id_factory: Optional[IdFactory] = None,
) -> List[VocabCard]:
    """
    Combine ``base`` and ``incoming`` into one collection.

    Every card is normalized first. An incoming card whose id is already
    present replaces the existing one only when its ``updated_at`` is
    strictly newer; ties keep the base card. Unknown ids are added.

    Required fields are not checked; filter with ``is_well_formed`` first.
    The order of the result is not part of the contract.
    """
    merged: Dict[str, VocabCard] = {}
    for raw in base:
        card = normalize_card(raw, now, id_factory)
        merged[card.id] = card

    added = replaced = 0
    for raw in incoming:
        card = normalize_card(raw, now, id_factory)
        current = merged.get(card.id)
        if current is None:
            merged[card.id] = card
            added += 1
        elif card.updated_at > current.updated_at:
            merged[card.id] = card
            replaced += 1

    logger.debug("Merged cards: %d added, %d replaced, %d total", added, replaced, len(merged))
    return list(merged.values())
