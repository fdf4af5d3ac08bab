import json

from hanzicards.models import Grade, MAX_INTERVAL_DAYS
from hanzicards.services import CSVRepository, JSONRepository, VocabularyService


def test_json_store_round_trip(tmp_path, clock, id_factory):
    path = tmp_path / "store.json"
    service = VocabularyService(repository=JSONRepository(str(path), clock), clock=clock, id_factory=id_factory)
    card = service.upsert({"hanzi": "学习", "pinyin": "xuéxí", "meaning": "to study", "chapter": "L1"})
    service.grade(card.id, Grade.GOOD)

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["words"][0]["hanzi"] == "学习"
    assert stored["words"][0]["interval"] == 1

    reloaded = VocabularyService(repository=JSONRepository(str(path), clock), clock=clock)
    assert reloaded.load() == 1
    assert reloaded.get(card.id).to_record() == card.to_record()


def test_json_store_leaves_no_temp_files(tmp_path, clock):
    path = tmp_path / "store.json"
    service = VocabularyService(repository=JSONRepository(str(path), clock), clock=clock)
    service.upsert({"hanzi": "一", "meaning": "one"})

    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


def test_missing_store_loads_empty(tmp_path, clock):
    assert JSONRepository(str(tmp_path / "nope.json"), clock).load_all() == []
    assert CSVRepository(str(tmp_path / "nope.csv"), clock).load_all() == []


def test_malformed_store_loads_empty(tmp_path, clock):
    path = tmp_path / "store.json"
    path.write_text("{\"words\": [", encoding="utf-8")
    assert JSONRepository(str(path), clock).load_all() == []

    path.write_text("{\"something\": 1}", encoding="utf-8")
    assert JSONRepository(str(path), clock).load_all() == []


def test_legacy_nested_records_are_loaded(tmp_path, clock):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"words": [
        {
            "id": "a", "hanzi": "咖啡", "pinyin": "kāfēi", "meaning": "coffee", "pos": "noun",
            "example": "咖啡很好喝。", "createdAt": "2024-01-01T00:00:00.000Z",
            "updatedAt": "2024-01-02T00:00:00.000Z",
            "srs": {"interval": 3, "ease": 2.6, "due": "2024-01-05T00:00:00.000Z", "reps": 1},
        },
        {"id": "b", "hanzi": "茶", "meaning": "tea"},
        "not a record",
        {"id": "a", "hanzi": "dup", "meaning": "dup"},
    ]}, ensure_ascii=False), encoding="utf-8")

    cards = {card.id: card for card in JSONRepository(str(path), clock).load_all()}

    assert set(cards) == {"a", "b"}
    assert cards["a"].part_of_speech == "noun"
    assert cards["a"].srs.interval == 3
    assert cards["b"].srs.due == clock.now()


def test_csv_store_round_trip(tmp_path, clock, id_factory):
    path = tmp_path / "store.csv"
    service = VocabularyService(repository=CSVRepository(str(path), clock), clock=clock, id_factory=id_factory)
    card = service.upsert({"hanzi": "说", "meaning": 'to say "hello", or\nspeak'})

    reloaded = CSVRepository(str(path), clock).load_all()

    assert len(reloaded) == 1
    assert reloaded[0].meaning == card.meaning


def test_words_that_look_like_placeholders_survive_reload(tmp_path, clock, id_factory):
    path = tmp_path / "store.json"
    service = VocabularyService(repository=JSONRepository(str(path), clock), clock=clock, id_factory=id_factory)
    service.upsert({"hanzi": "难", "pinyin": "nan", "meaning": "difficult"})
    service.upsert({"hanzi": "无", "pinyin": "wu", "meaning": "none"})

    cards = {card.hanzi: card for card in JSONRepository(str(path), clock).load_all()}

    assert cards["难"].pinyin == "nan"
    assert cards["无"].meaning == "none"


def test_non_finite_numbers_fall_back_to_defaults(tmp_path, clock):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"words": [
        {"id": "x", "hanzi": "学", "meaning": "m", "interval": "inf", "reps": "1e999", "ease": "nan"},
        {"id": "y", "hanzi": "习", "meaning": "m", "srs": {"interval": float("inf"), "reps": 2}},
    ]}, ensure_ascii=False), encoding="utf-8")

    cards = {card.id: card for card in JSONRepository(str(path), clock).load_all()}

    assert cards["x"].srs.interval == 0
    assert cards["x"].srs.reps == 0
    assert cards["x"].srs.ease == 2.5
    assert cards["y"].srs.interval == 0
    assert cards["y"].srs.reps == 2


def test_huge_stored_interval_is_capped(tmp_path, clock):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"words": [
        {"id": "x", "hanzi": "学", "meaning": "m", "interval": 10 ** 12},
    ]}), encoding="utf-8")

    card = JSONRepository(str(path), clock).load_all()[0]

    assert card.srs.interval == MAX_INTERVAL_DAYS
