"""Services layer: scheduling, merging, persistence and the card store."""

from .scheduler import Scheduler, format_interval_short, round_half_away
from .merge import merge_cards
from .interchange import (
    InterchangeError,
    cards_to_csv,
    cards_to_json,
    parse_csv,
    parse_json,
)
from .repository import BaseRepository, CSVRepository, JSONRepository, MemoryRepository
from .vocabulary_service import SortOrder, StorageBackend, VocabularyService

__all__ = [
    "Scheduler",
    "format_interval_short",
    "round_half_away",
    "merge_cards",
    "InterchangeError",
    "cards_to_csv",
    "cards_to_json",
    "parse_csv",
    "parse_json",
    "BaseRepository",
    "CSVRepository",
    "JSONRepository",
    "MemoryRepository",
    "SortOrder",
    "StorageBackend",
    "VocabularyService",
]
