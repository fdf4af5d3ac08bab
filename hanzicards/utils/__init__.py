"""Utils module."""

from .helpers import ensure_dir, human_date
from .parsing import TextParser
from .clock import FixedClock, IdFactory, SystemClock, new_id
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'human_date',
    'TextParser',
    'FixedClock',
    'IdFactory',
    'SystemClock',
    'new_id',
    'setup_logger',
]
