"""
Bulk interchange formats: JSON documents and delimited text.

Both formats carry the flat record of ``VocabCard.to_record``. Parsers return
raw record dicts; turning them into cards is left to ``normalize_card`` so
every ingestion path goes through the same defaults.
"""

import io
import json
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..models import RECORD_FIELDS, VocabCard
from ..utils.parsing import TextParser


class InterchangeError(ValueError):
    """Raised when an import file does not have a usable shape."""


def cards_to_json(cards: Iterable[VocabCard], exported_at: str, key: str = "words") -> str:
    """Serialize cards as ``{"exportAt": ..., "words": [...]}``."""
    payload = {
        "exportAt": exported_at,
        key: [card.to_record() for card in cards],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def parse_json(text: str, key: str = "words") -> List[Dict[str, Any]]:
    """
    Parse a JSON export.

    Accepts either ``{"words": [...]}`` or a bare list of records. Entries
    that are not JSON objects are skipped.

    Raises:
        InterchangeError: on invalid JSON or an unexpected top-level shape
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InterchangeError(f"Invalid JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get(key), list):
        records = data[key]
    elif isinstance(data, list):
        records = data
    else:
        raise InterchangeError(f"Expected a list of cards or an object with a '{key}' list")

    return [record for record in records if isinstance(record, dict)]


def cards_to_csv(cards: Iterable[VocabCard]) -> str:
    """
    Serialize cards as comma-separated text with a header row.

    Fields containing a comma, quote or newline are wrapped in quotes with
    inner quotes doubled.
    """
    df = pd.DataFrame([card.to_record() for card in cards], columns=RECORD_FIELDS)
    return df.to_csv(index=False, lineterminator="\n")


def parse_csv(text: str) -> List[Dict[str, Any]]:
    """
    Parse delimited text produced by ``cards_to_csv`` (or a spreadsheet).

    Every cell is read as text; blank cells are dropped from the record so
    they fall back to defaults. Header names are stripped.

    Raises:
        InterchangeError: when the text cannot be parsed as CSV
    """
    if not text or not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise InterchangeError(f"Invalid CSV: {e}") from e

    df.columns = df.columns.str.strip()

    records = []
    for row in df.to_dict(orient="records"):
        records.append({k: v for k, v in row.items() if not TextParser.is_missing(v)})
    return records


def parse_file_text(text: str, filename: Optional[str]) -> List[Dict[str, Any]]:
    """Pick the parser from the file suffix: ``.json`` or delimited text."""
    if filename and filename.lower().endswith(".json"):
        return parse_json(text)
    return parse_csv(text)
