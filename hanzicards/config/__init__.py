"""Configuration module for hanzicards."""

from .settings import Config, DEMO_WORDS
from .config_manager import SettingsManager

__all__ = [
    'Config',
    'DEMO_WORDS',
    'SettingsManager',
]
