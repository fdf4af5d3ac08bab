"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


@dataclass
class Config:
    """Application-wide configuration."""

    # Cross-platform paths using pathlib
    # BASE_DIR is the project root (parent of hanzicards/)
    BASE_DIR: Path = Path(__file__).parent.parent.parent.resolve()

    DATA_DIR: str = str(BASE_DIR / "data")
    STORE_FILE: str = os.environ.get(
        "HANZICARDS_STORE_FILE", str(BASE_DIR / "data" / "vocab_cards.json")
    )
    EXPORT_DIR: str = str(BASE_DIR / "data" / "export")
    SETTINGS_FILE: str = str(BASE_DIR / "settings.json")

    # Top-level key of the persisted JSON document
    STORAGE_KEY: str = "words"

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # Default export file names
    EXPORT_JSON_NAME: str = "vocab_export.json"
    EXPORT_CSV_NAME: str = "vocab_export.csv"


# Seeded into an empty store on first start
DEMO_WORDS = [
    {
        "hanzi": "学习",
        "pinyin": "xuéxí",
        "meaning": "to study",
        "partOfSpeech": "verb",
        "example": "我每天学习中文。",
    },
    {
        "hanzi": "咖啡",
        "pinyin": "kāfēi",
        "meaning": "coffee",
        "partOfSpeech": "noun",
        "example": "咖啡很好喝。",
    },
]
