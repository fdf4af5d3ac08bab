"""Utility functions."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union


def ensure_dir(path: Union[str, Path]) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)


def human_date(value: Optional[datetime]) -> str:
    """Short date for table cells, '—' when unset."""
    if value is None:
        return "—"
    return value.strftime("%Y-%m-%d")
