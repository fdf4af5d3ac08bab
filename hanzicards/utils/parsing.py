"""Text and timestamp parsing utilities shared by every ingestion path."""

import math
import unicodedata
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd


class TextParser:
    """
    Centralized parsing utilities.

    Single source of truth for how raw strings coming from forms, the
    persisted store and import files are cleaned before they reach a card.
    """

    # Placeholders pandas and JavaScript exports write into empty numeric or
    # timestamp cells. Never applied to text: "nan" and "none" are real words.
    PLACEHOLDER_MARKERS = frozenset({"nan", "none", "null", "nat", "undefined"})

    @classmethod
    def normalize_unicode(cls, text: Any) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.

        Pinyin tone marks can arrive either precomposed (NFC) or as a base
        vowel plus combining accent (NFD); both must compare equal.
        """
        if text is None:
            return ""
        if isinstance(text, float) and math.isnan(text):
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def clean_field(cls, text: Any) -> str:
        """NFC-normalize and strip a user-entered field."""
        return cls.normalize_unicode(text).strip()

    @classmethod
    def is_missing(cls, value: Any) -> bool:
        """True for None, NaN and blank strings."""
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        if isinstance(value, str):
            return not value.strip()
        return False

    @classmethod
    def is_placeholder(cls, value: Any) -> bool:
        """Like ``is_missing``, also matching "null", "NaN" and friends."""
        if cls.is_missing(value):
            return True
        return isinstance(value, str) and value.strip().lower() in cls.PLACEHOLDER_MARKERS

    @classmethod
    def parse_timestamp(cls, value: Any) -> Optional[datetime]:
        """
        Parse an ISO-8601 timestamp into an aware UTC datetime.

        Accepts full timestamps with ``Z`` or an offset, naive timestamps
        (treated as UTC) and date-only strings. Returns None for missing or
        unparseable values.
        """
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        if cls.is_placeholder(value):
            return None

        parsed = pd.to_datetime(str(value).strip(), utc=True, errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.to_pydatetime().astimezone(timezone.utc)

    @classmethod
    def format_timestamp(cls, value: Optional[datetime]) -> str:
        """Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC)."""
        if value is None:
            return ""
        value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

    @classmethod
    def parse_int(cls, value: Any, default: int = 0) -> int:
        """Parse an integer field, falling back to ``default``."""
        if cls.is_placeholder(value):
            return default
        try:
            result = float(value)
        except (TypeError, ValueError, OverflowError):
            return default
        if math.isnan(result) or math.isinf(result):
            return default
        return int(round(result))

    @classmethod
    def parse_float(cls, value: Any, default: float) -> float:
        """Parse a float field, falling back to ``default`` (also for NaN)."""
        if cls.is_placeholder(value):
            return default
        try:
            result = float(value)
        except (TypeError, ValueError, OverflowError):
            return default
        if math.isnan(result) or math.isinf(result):
            return default
        return result
