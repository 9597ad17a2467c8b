import json

from autommr.utils.counter_store import (
    MINUTES_SAVED_KEY,
    PROCESSED_COUNT_KEY,
    JsonFileStore,
    MemoryStore,
    UsageCounters,
)


def test_record_extraction_increments_by_fixed_amounts():
    counters = UsageCounters(MemoryStore(), minutes_per_page=15)
    counters.record_extraction(pages=1)
    assert counters.get_stats() == {'documents_processed': 1, 'minutes_saved': 15}

    counters.record_extraction(pages=3)
    assert counters.get_stats() == {'documents_processed': 2, 'minutes_saved': 60}


def test_counters_survive_reload(tmp_path):
    path = tmp_path / "counters.json"
    counters = UsageCounters(JsonFileStore(str(path)), minutes_per_page=15)
    counters.record_extraction(pages=2)

    reloaded = UsageCounters(JsonFileStore(str(path)), minutes_per_page=15)
    assert reloaded.documents_processed == 1
    assert reloaded.minutes_saved == 30

    with open(path) as f:
        assert json.load(f) == {PROCESSED_COUNT_KEY: 1, MINUTES_SAVED_KEY: 30}


def test_missing_or_corrupt_values_read_as_zero(tmp_path):
    path = tmp_path / "counters.json"
    path.write_text("{not json")
    assert UsageCounters(JsonFileStore(str(path))).get_stats() == {'documents_processed': 0, 'minutes_saved': 0}

    store = MemoryStore({PROCESSED_COUNT_KEY: "abc", MINUTES_SAVED_KEY: "45"})
    counters = UsageCounters(store)
    assert counters.documents_processed == 0
    assert counters.minutes_saved == 45


def test_store_creates_parent_directory(tmp_path):
    store = JsonFileStore(str(tmp_path / "nested" / "dir" / "counters.json"))
    store.set("k", 3)
    assert store.get("k") == 3
    assert store.get("missing", 7) == 7
