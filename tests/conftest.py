"""
Shared fixtures.

Every test runs against a frozen clock, a predictable id sequence and an
in-memory repository so nothing touches the real card store.
"""

import itertools
from datetime import datetime, timezone

import pytest

from hanzicards.config import SettingsManager
from hanzicards.models import normalize_card
from hanzicards.services import MemoryRepository, VocabularyService
from hanzicards.utils import FixedClock

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"card-{next(counter)}"


@pytest.fixture
def repository(clock, id_factory):
    return MemoryRepository(clock=clock, id_factory=id_factory)


@pytest.fixture
def service(repository, clock, id_factory):
    svc = VocabularyService(repository=repository, clock=clock, id_factory=id_factory)
    svc.load()
    return svc


@pytest.fixture
def make_card(clock):
    """Build a card from keyword fields, e.g. make_card("a", due="2024-02-01")."""
    def _make(card_id, hanzi=None, meaning="meaning", **fields):
        record = {"id": card_id, "hanzi": hanzi or card_id, "meaning": meaning}
        record.update(fields)
        return normalize_card(record, clock.now())
    return _make


@pytest.fixture
def settings_file(tmp_path):
    """Point the SettingsManager singleton at a temp file for one test."""
    SettingsManager.reset_instance()
    path = tmp_path / "settings.json"
    SettingsManager(str(path))
    yield path
    SettingsManager.reset_instance()
