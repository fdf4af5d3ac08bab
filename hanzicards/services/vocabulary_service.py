"""
Vocabulary Service - the card store.

Owns the in-memory card collection. Every mutation goes through a method
here and is saved through the repository straight away, so callers (the
review session, the command line, a future UI) never write card fields
directly.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..config import Config
from ..deck.builder import DeckFilters, due_sort_key
from ..models import Grade, SchedulingState, VocabCard, is_well_formed
from ..utils.clock import IdFactory, SystemClock, new_id
from ..utils.helpers import ensure_dir
from ..utils.parsing import TextParser
from .interchange import InterchangeError, cards_to_csv, cards_to_json, parse_file_text
from .merge import merge_cards
from .repository import BaseRepository, CSVRepository, JSONRepository
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

# Content fields a payload may set, with their accepted spellings
EDITABLE_FIELDS = {
    "hanzi": ("hanzi",),
    "pinyin": ("pinyin",),
    "meaning": ("meaning",),
    "part_of_speech": ("partOfSpeech", "part_of_speech", "pos"),
    "example": ("example",),
    "chapter": ("chapter",),
}


class StorageBackend(Enum):
    """Available storage backends."""
    JSON = "json"
    CSV = "csv"


class SortOrder(Enum):
    """Table view orderings."""
    RECENT = "recent"
    HANZI = "hanzi"
    PRIORITY = "priority"


class VocabularyService:
    """
    Service for managing vocabulary cards.

    Usage:
        service = VocabularyService()
        service.load()
        card = service.upsert({"hanzi": "学习", "meaning": "to study"})
        service.grade(card.id, Grade.GOOD)
    """

    def __init__(
        self,
        repository: Optional[BaseRepository] = None,
        backend: StorageBackend = StorageBackend.JSON,
        store_path: Optional[str] = None,
        clock: Optional[SystemClock] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        """
        Initialize the store.

        Args:
            repository: Explicit persistence collaborator (overrides backend)
            backend: Storage backend used when no repository is given
            store_path: File for the JSON/CSV backend
            clock: Time source (defaults to the system clock)
            id_factory: Id generator for new cards (defaults to uuid4)
        """
        self.clock = clock or SystemClock()
        self.id_factory = id_factory or new_id
        self.backend = backend
        self.store_path = store_path
        self.scheduler = Scheduler(self.clock)

        self._repository = repository
        self._cards: Dict[str, VocabCard] = {}
        self._change_callbacks: List[Callable[[], None]] = []

    def _get_repository(self) -> BaseRepository:
        """Get or create the repository for the configured backend."""
        if self._repository is None:
            if self.backend == StorageBackend.CSV:
                self._repository = CSVRepository(self.store_path, self.clock, self.id_factory)
            else:
                self._repository = JSONRepository(self.store_path, self.clock, self.id_factory)
        return self._repository

    @property
    def count(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> List[VocabCard]:
        """Snapshot list of the cards (the cards themselves are live)."""
        return list(self._cards.values())

    def get(self, card_id: str) -> Optional[VocabCard]:
        return self._cards.get(card_id)

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback run after every mutation."""
        self._change_callbacks.append(callback)

    def _notify_change(self) -> None:
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Change callback %r failed", callback)

    def _commit(self) -> None:
        """Persist and notify after a mutation."""
        self.save()
        self._notify_change()

    # ==================== Persistence ====================

    def load(self) -> int:
        """
        Replace the in-memory cards with the stored ones.

        Returns:
            Number of cards loaded (0 for a missing or unreadable store)
        """
        cards = self._get_repository().load_all()
        self._cards = {card.id: card for card in cards}
        logger.info("Loaded %d cards", len(self._cards))
        return len(self._cards)

    def save(self) -> bool:
        return self._get_repository().save_all(self._cards.values())

    # ==================== CRUD ====================

    def upsert(self, payload: Mapping[str, Any]) -> VocabCard:
        """
        Create a card or edit an existing one.

        A payload without an id, or with an unknown id, creates a card with a
        fresh scheduling state. A known id overwrites the content fields
        present in the payload; scheduling and created_at are kept.

        Raises:
            ValueError: when hanzi or meaning would be blank
        """
        now = self.clock.now()
        card_id = TextParser.clean_field(payload.get("id"))
        existing = self._cards.get(card_id) if card_id else None

        fields: Dict[str, str] = {}
        for name, keys in EDITABLE_FIELDS.items():
            for key in keys:
                if key in payload:
                    fields[name] = TextParser.clean_field(payload[key])
                    break

        if existing is not None:
            hanzi = fields.get("hanzi", existing.hanzi)
            meaning = fields.get("meaning", existing.meaning)
        else:
            hanzi = fields.get("hanzi", "")
            meaning = fields.get("meaning", "")
        if not hanzi or not meaning:
            raise ValueError("hanzi and meaning are required")

        if existing is not None:
            for name, value in fields.items():
                setattr(existing, name, value)
            existing.updated_at = max(now, existing.created_at)
            card = existing
            logger.debug("Updated card %s (%s)", card.id, card.hanzi)
        else:
            card = VocabCard(
                id=card_id or self.id_factory(),
                hanzi=hanzi,
                meaning=meaning,
                pinyin=fields.get("pinyin", ""),
                part_of_speech=fields.get("part_of_speech", ""),
                example=fields.get("example", ""),
                chapter=fields.get("chapter", ""),
                created_at=now,
                updated_at=now,
                srs=SchedulingState.default(now),
            )
            self._cards[card.id] = card
            logger.debug("Added card %s (%s)", card.id, card.hanzi)

        self._commit()
        return card

    def delete(self, card_id: str) -> bool:
        if self._cards.pop(card_id, None) is None:
            return False
        logger.debug("Deleted card %s", card_id)
        self._commit()
        return True

    def reset_due(self, card_id: str) -> bool:
        """Make a card due now ("review today")."""
        card = self._cards.get(card_id)
        if card is None:
            return False
        now = self.clock.now()
        card.srs.due = now
        card.updated_at = max(now, card.created_at)
        self._commit()
        return True

    def clear(self) -> None:
        """Delete every card."""
        self._cards = {}
        logger.info("Cleared all cards")
        self._commit()

    def grade(self, card_id: str, grade: Union[Grade, str]) -> Optional[VocabCard]:
        """Apply a recall grade to a card and persist. Unknown ids are a no-op."""
        card = self.scheduler.grade(self._cards.get(card_id), grade)
        if card is None:
            return None
        self._commit()
        return card

    def seed_if_empty(self, entries: Iterable[Mapping[str, Any]]) -> int:
        """Add ``entries`` when the store has no cards. Returns the number added."""
        if self._cards:
            return 0
        added = 0
        for entry in entries:
            self.upsert(entry)
            added += 1
        return added

    # ==================== Import / export ====================

    def merge(self, records: Iterable[Union[VocabCard, Mapping[str, Any]]]) -> int:
        """
        Merge incoming cards into the store, newest edit wins.

        Records missing hanzi or meaning are dropped first.

        Returns:
            Number of cards added or replaced
        """
        incoming = [record for record in records if is_well_formed(record)]
        before = {card_id: card.updated_at for card_id, card in self._cards.items()}

        merged = merge_cards(self._cards.values(), incoming, self.clock.now(), self.id_factory)
        changed = sum(
            1 for card in merged
            if card.id not in before or card.updated_at != before[card.id]
        )

        self._cards = {card.id: card for card in merged}
        self._commit()
        return changed

    def import_file(self, path: Union[str, Path]) -> int:
        """
        Import a JSON or CSV export (chosen by file suffix).

        A file that cannot be read or parsed leaves the store untouched.

        Returns:
            Number of cards added or replaced, 0 on failure
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8-sig")
            records = parse_file_text(text, path.name)
        except (OSError, InterchangeError) as e:
            logger.error("Import of %s failed: %s", path, e)
            return 0

        changed = self.merge(records)
        logger.info("Imported %s: %d of %d records applied", path.name, changed, len(records))
        return changed

    def export_json(self, path: Optional[Union[str, Path]] = None) -> Path:
        path = Path(path or Path(Config.EXPORT_DIR) / Config.EXPORT_JSON_NAME)
        ensure_dir(path.parent)
        path.write_text(cards_to_json(self.cards, self.clock.now_iso()), encoding="utf-8")
        logger.info("Exported %d cards to %s", self.count, path)
        return path

    def export_csv(self, path: Optional[Union[str, Path]] = None) -> Path:
        path = Path(path or Path(Config.EXPORT_DIR) / Config.EXPORT_CSV_NAME)
        ensure_dir(path.parent)
        path.write_text(cards_to_csv(self.cards), encoding="utf-8")
        logger.info("Exported %d cards to %s", self.count, path)
        return path

    # ==================== Queries ====================

    def list_cards(
        self,
        filters: Optional[DeckFilters] = None,
        sort_by: Union[SortOrder, str] = SortOrder.RECENT,
    ) -> List[VocabCard]:
        """
        Filtered, sorted card list for the table view.

        Args:
            filters: Same filters the deck builder uses
            sort_by: 'recent' (last edit first), 'hanzi', or 'priority' (due first)
        """
        filters = filters or DeckFilters()
        sort_by = SortOrder(sort_by)
        rows = [card for card in self._cards.values() if filters.matches(card)]

        if sort_by is SortOrder.HANZI:
            rows.sort(key=lambda card: card.hanzi)
        elif sort_by is SortOrder.PRIORITY:
            rows.sort(key=due_sort_key)
        else:
            rows.sort(key=lambda card: card.updated_at or card.created_at, reverse=True)
        return rows

    def get_parts_of_speech(self) -> List[str]:
        return sorted({card.part_of_speech for card in self._cards.values() if card.part_of_speech})

    def get_chapters(self) -> List[str]:
        return sorted({card.chapter for card in self._cards.values() if card.chapter})

    def get_statistics(self) -> Dict[str, Any]:
        """Counts for the header line: total, due now, never reviewed, mean ease."""
        now = self.clock.now()
        cards = self.cards
        stats: Dict[str, Any] = {
            "total_words": len(cards),
            "due_now": sum(1 for card in cards if card.is_due(now)),
            "new_cards": sum(1 for card in cards if card.srs.reps == 0),
            "average_ease": 0.0,
        }
        if cards:
            stats["average_ease"] = round(sum(card.srs.ease for card in cards) / len(cards), 3)
        return stats

    @classmethod
    def load_from_json(cls, path: Optional[str] = None, **kwargs) -> "VocabularyService":
        """Factory method to create and load a JSON-backed store."""
        service = cls(backend=StorageBackend.JSON, store_path=path, **kwargs)
        service.load()
        return service

    @classmethod
    def load_from_csv(cls, path: str, **kwargs) -> "VocabularyService":
        """Factory method to create and load a CSV-backed store."""
        service = cls(backend=StorageBackend.CSV, store_path=path, **kwargs)
        service.load()
        return service
