from datetime import datetime, timezone

import pytest

from hanzicards.models import (
    DEFAULT_EASE,
    Grade,
    SchedulingState,
    VocabCard,
    is_well_formed,
    normalize_card,
)


def test_missing_scheduling_state_gets_defaults(clock):
    card = normalize_card({"id": "a", "hanzi": "咖啡", "meaning": "coffee"}, clock.now())

    assert card.srs == SchedulingState(interval=0, ease=DEFAULT_EASE, due=clock.now(), reps=0)
    assert card.chapter == ""
    assert card.pinyin == ""
    assert card.created_at == clock.now()
    assert card.updated_at == clock.now()


def test_partial_nested_state_is_completed(clock):
    raw = {
        "id": "a", "hanzi": "学习", "meaning": "to study", "pos": "verb",
        "createdAt": "2024-01-01T00:00:00.000Z",
        "srs": {"interval": 4, "ease": 2.3},
    }

    card = normalize_card(raw, clock.now())

    assert card.part_of_speech == "verb"
    assert card.srs.interval == 4
    assert card.srs.ease == pytest.approx(2.3)
    assert card.srs.due == clock.now()
    assert card.srs.reps == 0


def test_flat_record_with_string_numbers(clock):
    raw = {
        "id": "a", "hanzi": "学习", "meaning": "to study",
        "interval": "3", "ease": "2.54", "reps": "2", "due": "2024-03-04T09:00:00.000Z",
    }

    card = normalize_card(raw, clock.now())

    assert card.srs.interval == 3
    assert card.srs.ease == pytest.approx(2.54)
    assert card.srs.reps == 2
    assert card.srs.due == datetime(2024, 3, 4, 9, tzinfo=timezone.utc)


def test_out_of_range_values_are_clamped(clock):
    raw = {"id": "a", "hanzi": "x", "meaning": "y", "ease": 9, "interval": -2, "reps": -1}

    card = normalize_card(raw, clock.now())

    assert card.srs.ease == 3.0
    assert card.srs.interval == 0
    assert card.srs.reps == 0


def test_missing_id_uses_factory(clock):
    card = normalize_card({"hanzi": "x", "meaning": "y"}, clock.now(), lambda: "generated")
    assert card.id == "generated"


def test_updated_at_never_before_created_at(clock):
    raw = {
        "id": "a", "hanzi": "x", "meaning": "y",
        "createdAt": "2024-02-01", "updatedAt": "2024-01-01",
    }

    card = normalize_card(raw, clock.now())

    assert card.updated_at == card.created_at


def test_missing_updated_at_falls_back_to_created_at(clock):
    raw = {"id": "a", "hanzi": "x", "meaning": "y", "createdAt": "2024-02-01"}

    card = normalize_card(raw, clock.now())

    assert card.updated_at == datetime(2024, 2, 1, tzinfo=timezone.utc)


def test_pinyin_is_nfc_normalized(clock):
    decomposed = "xue\u0301xi\u0301"
    card = normalize_card({"id": "a", "hanzi": "学习", "meaning": "m", "pinyin": decomposed}, clock.now())
    assert card.pinyin == "xu\u00e9x\u00ed"


def test_card_input_is_repaired_copy(clock):
    card = VocabCard(
        id="a", hanzi="x", meaning="y",
        created_at=clock.now(), updated_at=clock.now(),
        srs=SchedulingState(interval=2, ease=5.0, due=None, reps=1),
    )

    repaired = normalize_card(card, clock.now())

    assert repaired is not card
    assert repaired.srs.ease == 3.0
    assert repaired.srs.due == clock.now()
    assert card.srs.ease == 5.0


def test_to_record_round_trips_through_normalize(make_card, clock):
    card = make_card("a", pinyin="kāfēi", chapter="L1", interval=3, ease=2.6, reps=2)

    again = normalize_card(card.to_record(), clock.now())

    assert again == card


def test_is_well_formed():
    assert is_well_formed({"hanzi": "x", "meaning": "y"})
    assert not is_well_formed({"hanzi": "x", "meaning": "  "})
    assert not is_well_formed({"meaning": "y"})


def test_grade_parse():
    assert Grade.parse("GOOD") is Grade.GOOD
    assert Grade.parse(Grade.EASY) is Grade.EASY
    with pytest.raises(ValueError):
        Grade.parse("meh")


def test_placeholder_words_are_real_text(clock):
    raw = {"id": "a", "hanzi": "无", "pinyin": "nan", "meaning": "none", "createdAt": "null", "due": "NaT"}

    card = normalize_card(raw, clock.now())

    assert is_well_formed(raw)
    assert card.pinyin == "nan"
    assert card.meaning == "none"
    assert card.created_at == clock.now()
    assert card.srs.due == clock.now()
