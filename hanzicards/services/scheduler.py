"""
Spaced repetition scheduler.

A simplified ease/interval scheme with three grades:

    AGAIN  ease - 0.2 (floor 1.3), interval reset to 0, due now
    GOOD   ease + 0.02 (cap 2.8), interval 1 or round(interval * ease)
    EASY   ease + 0.1 (cap 3.0), interval 3 or round(interval * ease * 1.2)

Intervals never exceed MAX_INTERVAL_DAYS (a hundred years).

The new due date is always counted from the grading moment, not from the
previous due date, so reviewing late earns no extra credit.
"""

import logging
import math
from datetime import timedelta
from typing import Optional, Tuple, Union

from ..models import Grade, MAX_EASE, MIN_EASE, SchedulingState, VocabCard, clamp_interval
from ..utils.clock import SystemClock

logger = logging.getLogger(__name__)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class Scheduler:
    """
    Applies a recall grade to a card's scheduling state.

    Usage:
        scheduler = Scheduler(clock)
        scheduler.grade(card, Grade.GOOD)
    """

    AGAIN_EASE_PENALTY = 0.2
    GOOD_EASE_BONUS = 0.02
    GOOD_EASE_CAP = 2.8
    EASY_EASE_BONUS = 0.1
    EASY_INTERVAL_BONUS = 1.2

    GOOD_FIRST_INTERVAL = 1
    EASY_FIRST_INTERVAL = 3

    def __init__(self, clock: Optional[SystemClock] = None):
        self.clock = clock or SystemClock()

    def _next_values(self, state: SchedulingState, grade: Grade) -> Tuple[int, float]:
        """Return (interval, ease) after ``grade``, without touching ``state``."""
        if grade is Grade.AGAIN:
            return 0, max(MIN_EASE, state.ease - self.AGAIN_EASE_PENALTY)

        if grade is Grade.GOOD:
            ease = min(self.GOOD_EASE_CAP, state.ease + self.GOOD_EASE_BONUS)
            if state.interval == 0:
                return self.GOOD_FIRST_INTERVAL, ease
            return clamp_interval(round_half_away(state.interval * ease)), ease

        ease = min(MAX_EASE, state.ease + self.EASY_EASE_BONUS)
        if state.interval == 0:
            return self.EASY_FIRST_INTERVAL, ease
        interval = round_half_away(state.interval * ease * self.EASY_INTERVAL_BONUS)
        return clamp_interval(interval), ease

    def grade(self, card: Optional[VocabCard], grade: Union[Grade, str]) -> Optional[VocabCard]:
        """
        Grade ``card`` in place and return it.

        Increments reps, updates ease and interval, sets due to now plus
        interval days and stamps updated_at. A None card is a no-op.
        """
        if card is None:
            return None

        grade = Grade.parse(grade)
        now = self.clock.now()
        state = card.srs if card.srs is not None else SchedulingState.default(now)

        interval, ease = self._next_values(state, grade)
        due = now + timedelta(days=interval)

        state.reps += 1
        state.ease = ease
        state.interval = interval
        state.due = due

        card.srs = state
        card.updated_at = max(now, card.created_at)

        logger.debug(
            "Graded %s %s: interval=%d ease=%.2f reps=%d",
            card.id, grade.value, state.interval, state.ease, state.reps,
        )
        return card

    def preview(self, card: VocabCard, grade: Union[Grade, str]) -> timedelta:
        """Interval ``grade`` would schedule for ``card``; the card is not changed."""
        interval, _ = self._next_values(card.srs, Grade.parse(grade))
        return timedelta(days=interval)


def format_interval_short(td: timedelta) -> str:
    """
    Format a timedelta into a short string for grade buttons:
      - '<Xm' for minutes under 60
      - '<Xh' for hours under 24
      - '<Xd' for days
    """
    total_minutes = td.total_seconds() / 60
    if total_minutes < 60:
        minutes = max(int(total_minutes), 1)
        return f"<{minutes}m"
    elif total_minutes < 1440:
        hours = round(total_minutes / 60)
        return f"<{hours}h"
    else:
        return f"<{td.days}d"
