import json

import pytest

import review_deck
from hanzicards.config import Config, SettingsManager


@pytest.fixture
def store(tmp_path, settings_file):
    SettingsManager().set("SEED_DEMO_WORDS", False)
    return tmp_path / "cards.json"


def _run(store, *args):
    return review_deck.main(["--store", str(store), *args])


def test_add_and_list(store, capsys):
    assert _run(store, "add", "学习", "to study", "--pinyin", "xuéxí", "--pos", "verb") == 0
    assert _run(store, "list", "--query", "study") == 0

    out = capsys.readouterr().out
    assert "1 cards" in out
    assert "学习\txuéxí\tto study\tverb" in out


def test_add_rejects_blank_meaning(store, capsys):
    assert _run(store, "add", "学习", " ") == 1
    assert "[ERROR]" in capsys.readouterr().out


def test_seeds_demo_words_when_enabled(store):
    SettingsManager().set("SEED_DEMO_WORDS", True)

    _run(store, "stats")

    words = json.loads(store.read_text(encoding="utf-8"))["words"]
    assert {w["hanzi"] for w in words} == {"学习", "咖啡"}


def test_review_flips_and_grades(store, monkeypatch, capsys):
    _run(store, "add", "学习", "to study")
    keys = iter(["", "2", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(keys))

    assert _run(store, "review", "--due-only") == 0

    out = capsys.readouterr().out
    assert "meaning: to study" in out
    words = json.loads(store.read_text(encoding="utf-8"))["words"]
    assert words[0]["interval"] == 1
    assert words[0]["reps"] == 1


def test_export_and_import(store, tmp_path, capsys):
    _run(store, "add", "茶", "tea")
    export_path = tmp_path / "out.csv"

    assert _run(store, "export", str(export_path)) == 0
    other = tmp_path / "other.json"
    assert _run(other, "import", str(export_path)) == 0

    assert "Imported 1 cards" in capsys.readouterr().out
    words = json.loads(other.read_text(encoding="utf-8"))["words"]
    assert [w["hanzi"] for w in words] == ["茶"]


def test_unknown_id_for_delete(store, capsys):
    assert _run(store, "delete", "nope") == 1


def test_csv_backend_defaults_to_csv_file(tmp_path, settings_file, monkeypatch):
    default_store = str(tmp_path / "vocab_cards.json")
    monkeypatch.setattr(Config, "STORE_FILE", default_store)
    settings = SettingsManager()
    settings.set("SEED_DEMO_WORDS", False)
    settings.set("STORAGE_BACKEND", "csv")
    settings.set("STORE_FILE", default_store)

    assert review_deck.main(["add", "茶", "tea"]) == 0

    assert (tmp_path / "vocab_cards.csv").read_text(encoding="utf-8").startswith("id,hanzi")
    assert not (tmp_path / "vocab_cards.json").exists()
