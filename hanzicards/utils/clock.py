"""
Injectable time and identifier sources.

Scheduling and due filtering read the current moment through a clock object
instead of calling ``datetime.now()`` inline, so tests can pin time.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .parsing import TextParser

IdFactory = Callable[[], str]


def new_id() -> str:
    """Generate a new opaque card identifier."""
    return str(uuid.uuid4())


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_iso(self) -> str:
        """Current moment as an ISO-8601 string."""
        return TextParser.format_timestamp(self.now())


class FixedClock(SystemClock):
    """
    Clock frozen at a given moment until moved explicitly.

    Usage:
        clock = FixedClock("2024-01-01T09:00:00Z")
        clock.advance(days=3)
    """

    def __init__(self, moment: Optional[object] = None):
        parsed = TextParser.parse_timestamp(moment) if moment is not None else None
        self._now = parsed or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, moment: object) -> None:
        parsed = TextParser.parse_timestamp(moment)
        if parsed is None:
            raise ValueError(f"Unparseable timestamp: {moment!r}")
        self._now = parsed

    def advance(self, days: float = 0, hours: float = 0, minutes: float = 0) -> datetime:
        self._now = self._now + timedelta(days=days, hours=hours, minutes=minutes)
        return self._now
