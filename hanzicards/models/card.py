"""Data models for hanzicards."""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..utils.clock import IdFactory, new_id
from ..utils.parsing import TextParser

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 3.0
# Hundred years; keeps due dates inside the datetime range
MAX_INTERVAL_DAYS = 36500

# Column order of the JSON/CSV interchange record
RECORD_FIELDS = [
    "id", "hanzi", "pinyin", "meaning", "partOfSpeech", "example", "chapter",
    "createdAt", "updatedAt", "interval", "ease", "due", "reps",
]

# Accepted spellings of each record field, first match wins
FIELD_ALIASES: Dict[str, tuple] = {
    "id": ("id", "uuid"),
    "hanzi": ("hanzi",),
    "pinyin": ("pinyin",),
    "meaning": ("meaning",),
    "part_of_speech": ("partOfSpeech", "part_of_speech", "pos"),
    "example": ("example",),
    "chapter": ("chapter",),
    "created_at": ("createdAt", "created_at"),
    "updated_at": ("updatedAt", "updated_at"),
}


class Grade(Enum):
    """Self-reported recall quality."""
    AGAIN = "again"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value: Union["Grade", str]) -> "Grade":
        """Accept a Grade or its name/value in any case ('good', 'EASY')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for grade in cls:
            if grade.value == text:
                return grade
        raise ValueError(f"Unknown grade: {value!r}. Expected one of: again, good, easy")


@dataclass
class SchedulingState:
    """Spaced-repetition state embedded in every card."""

    interval: int = 0
    ease: float = DEFAULT_EASE
    due: Optional[datetime] = None
    reps: int = 0

    @classmethod
    def default(cls, now: datetime) -> "SchedulingState":
        """Fresh state for a new card: due immediately."""
        return cls(interval=0, ease=DEFAULT_EASE, due=now, reps=0)


@dataclass
class VocabCard:
    """One vocabulary entry plus its scheduling state."""

    id: str
    hanzi: str
    meaning: str
    created_at: datetime
    updated_at: datetime

    pinyin: str = ""
    part_of_speech: str = ""
    example: str = ""
    chapter: str = ""

    srs: SchedulingState = field(default_factory=SchedulingState)

    @property
    def due(self) -> Optional[datetime]:
        return self.srs.due

    def is_due(self, now: datetime) -> bool:
        """True when the card is eligible for review at ``now``."""
        return self.srs.due is None or self.srs.due <= now

    def to_record(self) -> Dict[str, Any]:
        """Flat interchange record (camelCase keys, ISO timestamps)."""
        return {
            "id": self.id,
            "hanzi": self.hanzi,
            "pinyin": self.pinyin,
            "meaning": self.meaning,
            "partOfSpeech": self.part_of_speech,
            "example": self.example,
            "chapter": self.chapter,
            "createdAt": TextParser.format_timestamp(self.created_at),
            "updatedAt": TextParser.format_timestamp(self.updated_at),
            "interval": self.srs.interval,
            "ease": self.srs.ease,
            "due": TextParser.format_timestamp(self.srs.due),
            "reps": self.srs.reps,
        }


def clamp_ease(value: float) -> float:
    return min(MAX_EASE, max(MIN_EASE, value))


def is_well_formed(raw: Union[VocabCard, Mapping[str, Any]]) -> bool:
    """True when both required fields (hanzi, meaning) are non-blank."""
    if isinstance(raw, VocabCard):
        return bool(raw.hanzi.strip()) and bool(raw.meaning.strip())
    return not TextParser.is_missing(raw.get("hanzi")) and not TextParser.is_missing(raw.get("meaning"))


def clamp_interval(value: int) -> int:
    return min(MAX_INTERVAL_DAYS, max(0, value))


def _lookup(
    raw: Mapping[str, Any],
    name: str,
    is_blank: Callable[[Any], bool] = TextParser.is_missing,
) -> Any:
    for key in FIELD_ALIASES[name]:
        if key in raw and not is_blank(raw[key]):
            return raw[key]
    return None


def _repair_state(state: Optional[SchedulingState], now: datetime) -> SchedulingState:
    if state is None:
        return SchedulingState.default(now)
    return SchedulingState(
        interval=clamp_interval(TextParser.parse_int(state.interval, 0)),
        ease=clamp_ease(TextParser.parse_float(state.ease, DEFAULT_EASE)),
        due=TextParser.parse_timestamp(state.due) or now,
        reps=max(0, TextParser.parse_int(state.reps, 0)),
    )


def _state_from_mapping(raw: Mapping[str, Any], now: datetime) -> SchedulingState:
    # The nested "srs" object of the stored format wins over flat columns
    nested = raw.get("srs")
    nested = nested if isinstance(nested, Mapping) else {}

    def pick(key: str) -> Any:
        value = nested.get(key)
        if TextParser.is_placeholder(value):
            value = raw.get(key)
        return value

    return SchedulingState(
        interval=clamp_interval(TextParser.parse_int(pick("interval"), 0)),
        ease=clamp_ease(TextParser.parse_float(pick("ease"), DEFAULT_EASE)),
        due=TextParser.parse_timestamp(pick("due")) or now,
        reps=max(0, TextParser.parse_int(pick("reps"), 0)),
    )


def normalize_card(
    raw: Union[VocabCard, Mapping[str, Any]],
    now: datetime,
    id_factory: Optional[IdFactory] = None,
) -> VocabCard:
    """
    Build a fully-populated VocabCard from any ingestion source.

    Applied at load, import and merge. Accepts a VocabCard (a repaired copy
    is returned) or a mapping in either the flat record shape or the nested
    ``srs`` shape. Missing optional fields become "", a missing scheduling
    state becomes the default state due at ``now``, ease is clamped to
    [1.3, 3.0], and a missing id or timestamp is generated. Required fields
    are not validated here; see ``is_well_formed``.

    Args:
        raw: Card or raw record
        now: Moment used for any timestamp that has to be filled in
        id_factory: Id generator for records without an id

    Returns:
        A new VocabCard
    """
    if isinstance(raw, VocabCard):
        card = copy.deepcopy(raw)
        card.srs = _repair_state(card.srs, now)
        if card.updated_at < card.created_at:
            card.updated_at = card.created_at
        return card

    card_id = _lookup(raw, "id")
    card_id = TextParser.clean_field(card_id) if card_id is not None else ""
    if not card_id:
        card_id = (id_factory or new_id)()

    created_at = TextParser.parse_timestamp(_lookup(raw, "created_at", TextParser.is_placeholder))
    updated_at = TextParser.parse_timestamp(_lookup(raw, "updated_at", TextParser.is_placeholder))
    created_at = created_at or updated_at or now
    updated_at = updated_at or created_at
    if updated_at < created_at:
        updated_at = created_at

    return VocabCard(
        id=card_id,
        hanzi=TextParser.clean_field(_lookup(raw, "hanzi")),
        meaning=TextParser.clean_field(_lookup(raw, "meaning")),
        pinyin=TextParser.clean_field(_lookup(raw, "pinyin")),
        part_of_speech=TextParser.clean_field(_lookup(raw, "part_of_speech")),
        example=TextParser.clean_field(_lookup(raw, "example")),
        chapter=TextParser.clean_field(_lookup(raw, "chapter")),
        created_at=created_at,
        updated_at=updated_at,
        srs=_state_from_mapping(raw, now),
    )
