import json
import os

import pytest

from lokal.errors import IOFailure, SecurityViolation
from lokal.storage.hashing import ContentHasher
from lokal.storage.locale_store import FORBIDDEN_KEYS, LocaleStore, sanitize_locale_data


@pytest.fixture
def store(tmp_path):
    return LocaleStore(tmp_path / "locales")


def has_forbidden_key(data) -> bool:
    if not isinstance(data, dict):
        return False
    return any(key in FORBIDDEN_KEYS or has_forbidden_key(value) for key, value in data.items())


def test_save_then_load_round_trips(store):
    data = {"greeting": "Hello", "nav": {"home": "Home", "about": "About us"}, "emoji": "Olé ✓"}

    saved = store.save_locale("en", data)
    loaded = store.load_locale("en")

    assert loaded.data == data
    assert loaded.locale == "en"
    assert loaded.hash == saved.hash == ContentHasher.hash_locale_data(data)
    assert loaded.last_updated
    assert loaded.source_hashes == {}


def test_document_shape(store):
    store.save_locale("en", {"b": "B", "a": "A"})
    document = json.loads((store.base_path / "en.json").read_text(encoding="utf-8"))

    assert set(document) == {"locale", "data", "hash", "lastUpdated"}
    assert document["locale"] == "en"
    assert document["data"] == {"a": "A", "b": "B"}


def test_hash_ignores_key_order():
    first = ContentHasher.hash_locale_data({"a": "1", "b": {"c": "2", "d": "3"}})
    second = ContentHasher.hash_locale_data({"b": {"d": "3", "c": "2"}, "a": "1"})
    assert first == second


def test_source_hashes_are_persisted(store):
    store.save_locale("es", {"greeting": "Hola"}, source_hashes={"greeting": "abc123"})
    assert store.load_locale("es").source_hashes == {"greeting": "abc123"}


def test_missing_locale_loads_as_none(store):
    assert store.load_locale("fr") is None
    assert store.warnings == []


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({"locale": "en", "data": {"count": 3}}),
        json.dumps({"locale": "en", "data": "text"}),
        json.dumps({"locale": "en", "data": {}, "sourceHashes": ["x"]}),
    ],
)
def test_malformed_locale_is_absent_with_warning(store, content):
    (store.base_path / "en.json").write_text(content, encoding="utf-8")

    assert store.load_locale("en") is None
    assert len(store.warnings) == 1
    assert "en" in store.warnings[0]


@pytest.mark.parametrize(
    "locale",
    ["../x", "..", "/etc/passwd", "a/b", "a\\b", "", "   ", "en\0"],
)
def test_unsafe_locale_ids_are_rejected(tmp_path, store, locale):
    with pytest.raises(SecurityViolation):
        store.save_locale(locale, {"pwned": "yes"})
    with pytest.raises(SecurityViolation):
        store.load_locale(locale)
    with pytest.raises(SecurityViolation):
        store.merge_locale_data(locale, {"pwned": "yes"})

    assert not (tmp_path / "x.json").exists()
    assert os.listdir(store.base_path) == []


def test_save_leaves_no_temporary_files(store):
    store.save_locale("en", {"a": "A"})
    store.save_locale("en", {"a": "B"})
    assert os.listdir(store.base_path) == ["en.json"]


def test_failed_save_keeps_previous_document(store, monkeypatch):
    store.save_locale("en", {"a": "A"})

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(IOFailure):
        store.save_locale("en", {"a": "B"})
    monkeypatch.undo()

    assert store.load_locale("en").data == {"a": "A"}
    assert os.listdir(store.base_path) == ["en.json"]


def test_merge_keeps_existing_values(store):
    store.save_locale("en", {"greeting": "Hello (edited)", "nav": {"home": "Home"}})

    merged = store.merge_locale_data(
        "en", {"greeting": "Hello", "nav": {"about": "About"}, "farewell": "Bye"}
    )

    assert merged == {
        "greeting": "Hello (edited)",
        "nav": {"home": "Home", "about": "About"},
        "farewell": "Bye",
    }
    # Nothing is written by a merge
    assert store.load_locale("en").data == {"greeting": "Hello (edited)", "nav": {"home": "Home"}}


def test_merge_without_preserving_takes_incoming(store):
    store.save_locale("en", {"greeting": "Old"})
    assert store.merge_locale_data("en", {"greeting": "New"}, preserve_existing=False) == {
        "greeting": "New"
    }


def test_merge_into_missing_locale_returns_incoming(store):
    assert store.merge_locale_data("de", {"a": "A"}) == {"a": "A"}


PAYLOAD = {
    "__proto__": {"polluted": "yes"},
    "constructor": {"prototype": {"polluted": "yes"}},
    "prototype": "yes",
    "nested": {
        "__proto__": {"polluted": "yes"},
        "deeper": {"constructor": "yes", "ok": "fine"},
        "ok": "fine",
    },
}


@pytest.mark.parametrize("preserve_existing", [True, False])
@pytest.mark.parametrize("existing", [None, {"nested": {"kept": "Kept"}}])
def test_merge_never_copies_forbidden_keys(store, preserve_existing, existing):
    if existing is not None:
        store.save_locale("en", existing)

    merged = store.merge_locale_data("en", PAYLOAD, preserve_existing=preserve_existing)

    assert not has_forbidden_key(merged)
    assert merged["nested"]["ok"] == "fine"
    assert merged["nested"]["deeper"] == {"ok": "fine"}


def test_save_then_load_keeps_object_property_names(store):
    data = {"constructor": "Konstruktor", "class": {"prototype": "Prototyp", "__proto__": "Proto"}}

    saved = store.save_locale("de", data)
    loaded = store.load_locale("de")

    assert loaded.data == data
    assert loaded.hash == saved.hash


def test_sanitize_drops_non_string_leaves():
    assert sanitize_locale_data({"a": "A", "b": 1, "c": None, "d": {"e": ["x"], "f": "F"}}) == {
        "a": "A",
        "d": {"f": "F"},
    }


def test_listing_and_deleting(store):
    store.save_locale("es", {"a": "A"})
    store.save_locale("de", {"a": "A"})
    (store.base_path / "fr.json").write_text("{broken", encoding="utf-8")

    assert store.get_available_locales() == ["de", "es", "fr"]
    assert set(store.load_all_locales()) == {"de", "es"}
    assert store.locale_exists("es")

    assert store.delete_locale("es")
    assert not store.delete_locale("es")
    assert not store.locale_exists("es")
