"""Card data models."""

from .card import (
    DEFAULT_EASE,
    MAX_EASE,
    MAX_INTERVAL_DAYS,
    MIN_EASE,
    RECORD_FIELDS,
    Grade,
    SchedulingState,
    VocabCard,
    clamp_ease,
    clamp_interval,
    is_well_formed,
    normalize_card,
)

__all__ = [
    'DEFAULT_EASE',
    'MAX_EASE',
    'MAX_INTERVAL_DAYS',
    'MIN_EASE',
    'RECORD_FIELDS',
    'Grade',
    'SchedulingState',
    'VocabCard',
    'clamp_ease',
    'clamp_interval',
    'is_well_formed',
    'normalize_card',
]
