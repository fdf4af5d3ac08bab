"""Deck building and review sessions."""

from .builder import DeckBuilder, DeckFilters
from .session import ReviewDirection, ReviewSession, SessionState

__all__ = ['DeckBuilder', 'DeckFilters', 'ReviewDirection', 'ReviewSession', 'SessionState']
