"""hanzicards - vocabulary flashcards with spaced repetition"""

__version__ = "1.0.0"
__author__ = "hanzicards Team"

from .config import Config, SettingsManager
from .models import Grade, SchedulingState, VocabCard, normalize_card
from .deck import DeckBuilder, DeckFilters, ReviewDirection, ReviewSession
from .services import Scheduler, VocabularyService, merge_cards

__all__ = [
    'Config',
    'SettingsManager',
    'Grade',
    'SchedulingState',
    'VocabCard',
    'normalize_card',
    'DeckBuilder',
    'DeckFilters',
    'ReviewDirection',
    'ReviewSession',
    'Scheduler',
    'VocabularyService',
    'merge_cards',
]
