import json

import pytest

from src.fingerspell.core.config import ACTIVE_LANGUAGE_KEY
from src.fingerspell.core.errors import InvalidImportError, StorageWriteError
from src.fingerspell.core.languages import SignLanguage
from src.fingerspell.training.storage import FileStorage, MemoryStorage
from src.fingerspell.training.store import ReferenceStore
from tests.conftest import FailingStorage

SAMPLES_A = [[0.1] * 60, [0.2] * 60, [0.3] * 60]
SAMPLES_B = [[1.5] * 60]


def test_load_empty_when_never_written(store):
    assert store.load() == []
    assert store.load(SignLanguage.FSL) == []
    assert not store.has_training_data()


def test_save_then_load_round_trip(store):
    store.save("A", SAMPLES_A)
    entries = store.load()
    matching = [e for e in entries if e.letter == "A"]
    assert len(matching) == 1
    assert matching[0].samples == SAMPLES_A
    assert matching[0].captured_at > 0


def test_save_replaces_existing_letter(store):
    store.save("A", SAMPLES_A)
    store.save("B", SAMPLES_B)
    store.save("A", SAMPLES_B)
    entries = store.load()
    assert [e.letter for e in entries] == ["A", "B"]
    assert entries[0].samples == SAMPLES_B


def test_languages_are_independent(store):
    store.save("A", SAMPLES_A, SignLanguage.ASL)
    store.save("NG", SAMPLES_B, "fsl")
    assert [e.letter for e in store.load("ASL")] == ["A"]
    assert [e.letter for e in store.load(SignLanguage.FSL)] == ["NG"]


def test_corrupt_payload_is_treated_as_empty(storage, store):
    storage.set_item(SignLanguage.ASL.storage_key, "{not json")
    assert store.load() == []
    storage.set_item(SignLanguage.ASL.storage_key, json.dumps([{"letter": "A"}]))
    assert store.load() == []


def test_clear_removes_only_that_language(store):
    store.save("A", SAMPLES_A, "ASL")
    store.save("A", SAMPLES_A, "FSL")
    store.clear("ASL")
    assert store.load("ASL") == []
    assert len(store.load("FSL")) == 1
    # clearing twice is harmless
    store.clear("ASL")


def test_write_failure_is_raised():
    store = ReferenceStore(FailingStorage())
    with pytest.raises(StorageWriteError):
        store.save("A", SAMPLES_A)


def test_active_language_defaults_and_persists(storage):
    store = ReferenceStore(storage)
    assert store.active_language is SignLanguage.ASL
    store.active_language = "FSL"
    assert storage.get_item(ACTIVE_LANGUAGE_KEY) == "FSL"
    assert ReferenceStore(storage).active_language is SignLanguage.FSL


def test_unknown_active_language_falls_back(storage):
    storage.set_item(ACTIVE_LANGUAGE_KEY, "KSL")
    assert ReferenceStore(storage).active_language is SignLanguage.ASL


def test_operations_use_active_language(store):
    store.active_language = SignLanguage.FSL
    store.save_training_data("Ñ", SAMPLES_A)
    assert [e.letter for e in store.get_training_data()] == ["Ñ"]
    assert store.load("ASL") == []
    store.clear_training_data()
    assert store.load("FSL") == []


def test_invalid_language_is_rejected(store):
    with pytest.raises(ValueError):
        store.load("XYZ")


@pytest.mark.parametrize("language", list(SignLanguage))
def test_combined_without_user_data_covers_defaults(store, language):
    combined = store.get_combined(language)
    defaults = store.get_default(language)
    assert {e.letter for e in combined} == {e.letter for e in defaults}
    assert all(e.samples for e in combined)


def test_combined_prefers_user_entries(store, rng):
    defaults = store.get_default("ASL", rng=rng)
    store.save("M", SAMPLES_B)
    combined = store.get_combined("ASL", defaults=defaults)
    letters = [e.letter for e in combined]
    assert len(letters) == len(set(letters)) == 26
    m_entry = next(e for e in combined if e.letter == "M")
    assert m_entry.samples == SAMPLES_B


def test_combined_includes_user_letters_outside_alphabet(store):
    store.save("HELLO", SAMPLES_A)
    letters = [e.letter for e in store.get_combined("ASL")]
    assert "HELLO" in letters
    assert len(letters) == 27


def test_clear_then_combined_equals_defaults(store, rng):
    defaults = store.get_default("ASL", rng=rng)
    store.save("A", SAMPLES_A)
    store.clear()
    assert store.load() == []
    assert store.get_combined(defaults=defaults) == defaults


def test_export_and_import(store):
    store.save("A", SAMPLES_A)
    store.save("B", SAMPLES_B)
    exported = store.export_json()
    data = json.loads(exported)
    assert [item["letter"] for item in data] == ["A", "B"]
    assert set(data[0]) == {"letter", "samples", "timestamp"}

    other = ReferenceStore(MemoryStorage())
    other.save("Z", SAMPLES_B)
    imported = other.import_json(exported)
    assert [e.letter for e in imported] == ["A", "B"]
    assert [e.letter for e in other.load()] == ["A", "B"]


@pytest.mark.parametrize("payload", [
    "not json at all",
    '{"letter": "A"}',
    '[{"letter": "A", "samples": "oops", "timestamp": 1}]',
    '[{"letter": "A", "samples": [], "timestamp": 1}, {"letter": "A", "samples": [], "timestamp": 2}]',
])
def test_invalid_import_leaves_storage_unchanged(store, payload):
    store.save("A", SAMPLES_A)
    before = store.export_json()
    with pytest.raises(InvalidImportError):
        store.import_json(payload)
    assert store.export_json() == before


def test_file_storage_round_trip(tmp_path):
    store = ReferenceStore(FileStorage(tmp_path / "storage"))
    store.save("A", SAMPLES_A)
    store.active_language = "FSL"

    reopened = ReferenceStore(FileStorage(tmp_path / "storage"))
    assert reopened.active_language is SignLanguage.FSL
    assert reopened.load("ASL")[0].samples == SAMPLES_A
    reopened.clear("ASL")
    assert reopened.load("ASL") == []


def test_file_storage_rejects_unsafe_keys(tmp_path):
    storage = FileStorage(tmp_path)
    with pytest.raises(ValueError):
        storage.get_item("../escape")
