import json

from store import (
    CATEGORIES_KEY,
    PINNED_KEY,
    CategoryStore,
    PinStore,
    PreferenceStore,
    parse_category_map,
    prefs_path,
)


def _prefs(tmp_path) -> PreferenceStore:
    return PreferenceStore(prefs_path(str(tmp_path / "data")))


def test_category_store_absent_then_saved(tmp_path) -> None:
    store = CategoryStore(_prefs(tmp_path))
    assert store.load() is None
    assert store.load_raw() is None
    assert store.save('{"com.a": "Games"}') is True
    assert store.load() == {"com.a": "Games"}


def test_category_store_overwrites_whole_value(tmp_path) -> None:
    store = CategoryStore(_prefs(tmp_path))
    store.save('{"com.a": "Games", "com.b": "Tools"}')
    store.save('{"com.c": "Finance & Business"}')
    assert store.load() == {"com.c": "Finance & Business"}


def test_category_store_malformed_degrades_to_empty(tmp_path) -> None:
    store = CategoryStore(_prefs(tmp_path))
    store.save('{"com.a": "Games"')
    assert store.load() == {}
    store.save('["com.a"]')
    assert store.load() == {}


def test_category_store_clear(tmp_path) -> None:
    store = CategoryStore(_prefs(tmp_path))
    store.save("{}")
    assert store.load() == {}
    assert store.clear() is True
    assert store.load() is None


def test_parse_category_map_skips_non_string_values() -> None:
    assert parse_category_map('{"com.a": "Games", "com.b": null}') == {"com.a": "Games"}


def test_preferences_file_layout(tmp_path) -> None:
    prefs = _prefs(tmp_path)
    CategoryStore(prefs).save('{"com.a": "Games"}')
    PinStore(prefs).toggle("com.b")
    with open(prefs.path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    assert payload[CATEGORIES_KEY] == '{"com.a": "Games"}'
    assert payload[PINNED_KEY] == ["com.b"]


def test_corrupt_preferences_file_reads_empty(tmp_path) -> None:
    prefs = _prefs(tmp_path)
    (tmp_path / "data").mkdir()
    with open(prefs.path, "w", encoding="utf-8") as fh:
        fh.write("not json")
    assert CategoryStore(prefs).load() is None
    assert PinStore(prefs).pinned == frozenset()


def test_pin_toggle_round_trip(tmp_path) -> None:
    prefs = _prefs(tmp_path)
    pins = PinStore(prefs)
    pins.toggle("com.a")
    original = pins.pinned
    assert pins.toggle("com.x") == original | {"com.x"}
    assert pins.is_pinned("com.x")
    assert pins.toggle("com.x") == original
    assert not pins.is_pinned("com.x")


def test_pin_store_survives_restart(tmp_path) -> None:
    PinStore(_prefs(tmp_path)).toggle("com.a")
    reopened = PinStore(_prefs(tmp_path))
    assert reopened.pinned == frozenset({"com.a"})
    assert reopened.load() == frozenset({"com.a"})


def test_write_failure_reports_false(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    prefs = PreferenceStore(prefs_path(str(blocker / "nested")))
    assert CategoryStore(prefs).save("{}") is False
    pins = PinStore(prefs)
    assert pins.toggle("com.a") == frozenset({"com.a"})


def test_invalid_utf8_preferences_read_empty(tmp_path) -> None:
    prefs = _prefs(tmp_path)
    (tmp_path / "data").mkdir()
    with open(prefs.path, "wb") as fh:
        fh.write(b'{"categories": "\xff\xfe"}')
    assert CategoryStore(prefs).load() is None
    assert PinStore(prefs).pinned == frozenset()
