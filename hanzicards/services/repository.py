"""
Repository Pattern - persistence collaborator for the card store.

The store calls ``load_all()`` once at startup and ``save_all()`` after every
mutation. Backends: a JSON document (default), a CSV file, and an in-memory
list for tests and scratch sessions.
"""

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import Config
from ..models import VocabCard, is_well_formed, normalize_card
from ..utils.clock import IdFactory, SystemClock
from ..utils.helpers import ensure_dir
from ..utils.parsing import TextParser
from .interchange import InterchangeError, cards_to_csv, parse_csv

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """
    Abstract base class for card stores.

    ``load_all`` never raises on bad data: a missing or unreadable store is an
    empty collection, and individual malformed records are skipped.
    """

    def __init__(self, clock: Optional[SystemClock] = None, id_factory: Optional[IdFactory] = None):
        self.clock = clock or SystemClock()
        self.id_factory = id_factory

    @abstractmethod
    def _read_records(self) -> Optional[List[Mapping[str, Any]]]:
        """Return raw records, or None when nothing is stored."""
        pass

    @abstractmethod
    def save_all(self, cards: Iterable[VocabCard]) -> bool:
        """Replace the stored collection. Returns True if successful."""
        pass

    def load_all(self) -> List[VocabCard]:
        """Load and normalize every stored card."""
        try:
            records = self._read_records()
        except (OSError, ValueError) as e:
            logger.warning("Could not read card store, starting empty: %s", e)
            return []

        if not records:
            return []

        now = self.clock.now()
        cards: List[VocabCard] = []
        seen = set()
        for raw in records:
            if not isinstance(raw, Mapping) or not is_well_formed(raw):
                label = describe_record(raw) if isinstance(raw, Mapping) else repr(raw)
                logger.warning("Skipping malformed stored record: %s", label)
                continue
            card = normalize_card(raw, now, self.id_factory)
            if card.id in seen:
                logger.warning("Skipping duplicate card id %s", card.id)
                continue
            seen.add(card.id)
            cards.append(card)
        return cards


class JSONRepository(BaseRepository):
    """
    Single-file JSON store: ``{"words": [record, ...]}``.

    Writes go to a temp file which then replaces the store atomically.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        clock: Optional[SystemClock] = None,
        id_factory: Optional[IdFactory] = None,
        key: str = Config.STORAGE_KEY,
    ):
        super().__init__(clock, id_factory)
        self.path = Path(path or Config.STORE_FILE)
        self.key = key

    def _read_records(self) -> Optional[List[Mapping[str, Any]]]:
        if not self.path.exists():
            return None

        with open(self.path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)

        if isinstance(data, dict) and isinstance(data.get(self.key), list):
            return data[self.key]
        if isinstance(data, list):
            return data
        logger.warning("Card store %s has no '%s' list, starting empty", self.path, self.key)
        return None

    def save_all(self, cards: Iterable[VocabCard]) -> bool:
        payload = {self.key: [card.to_record() for card in cards]}
        temp_file = self.path.with_name(f"{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            ensure_dir(self.path.parent)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.path)
            return True
        except OSError as e:
            logger.error("Error saving card store %s: %s", self.path, e)
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    pass
            return False


class CSVRepository(BaseRepository):
    """CSV-file store using the tabular interchange layout."""

    def __init__(
        self,
        path: Optional[str] = None,
        clock: Optional[SystemClock] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        super().__init__(clock, id_factory)
        self.path = Path(path or Path(Config.STORE_FILE).with_suffix(".csv"))

    def _read_records(self) -> Optional[List[Mapping[str, Any]]]:
        if not self.path.exists():
            return None
        text = self.path.read_text(encoding="utf-8-sig")
        try:
            return parse_csv(text)
        except InterchangeError as e:
            logger.warning("Card store %s is not valid CSV: %s", self.path, e)
            return None

    def save_all(self, cards: Iterable[VocabCard]) -> bool:
        try:
            ensure_dir(self.path.parent)
            self.path.write_text(cards_to_csv(cards), encoding="utf-8")
            return True
        except OSError as e:
            logger.error("Error saving card store %s: %s", self.path, e)
            return False


class MemoryRepository(BaseRepository):
    """Keeps serialized records in memory; nothing touches the disk."""

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        clock: Optional[SystemClock] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        super().__init__(clock, id_factory)
        self.records: Optional[List[Dict[str, Any]]] = records
        self.save_count = 0

    def _read_records(self) -> Optional[List[Mapping[str, Any]]]:
        return self.records

    def save_all(self, cards: Iterable[VocabCard]) -> bool:
        self.records = [card.to_record() for card in cards]
        self.save_count += 1
        return True


def describe_record(raw: Mapping[str, Any]) -> str:
    """Short label for log messages about a record."""
    return TextParser.clean_field(raw.get("hanzi")) or TextParser.clean_field(raw.get("id")) or "<unnamed>"
