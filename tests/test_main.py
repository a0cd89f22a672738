import json

import pytest

import main
from src.fingerspell.core.languages import SignLanguage
from tests.conftest import FakeFrameSource, FakeProvider

SAMPLES = [[0.5] * 60]


def make_app(store, tmp_path, *argv):
    args = main.parse_args(["--mode", "train", "--export-dir", str(tmp_path / "exports"), *argv])
    return main.App(args, store=store, camera=FakeFrameSource(0), provider=FakeProvider())


def press(app, *keys):
    for key in keys:
        assert app.handle_key(ord(key) if isinstance(key, str) else key)


def test_export_then_import_through_keys(store, tmp_path):
    app = make_app(store, tmp_path)
    store.save("B", SAMPLES)
    press(app, "1")
    exported = tmp_path / "exports" / "asl-training-data.json"
    assert [item["letter"] for item in json.loads(exported.read_text(encoding="utf-8"))] == ["B"]

    store.clear()
    press(app, "2")
    assert [e.letter for e in store.load()] == ["B"]
    assert app.message == "Imported 1 letters"


def test_undecodable_import_file_is_rejected(store, tmp_path):
    app = make_app(store, tmp_path)
    store.save("A", SAMPLES)
    before = store.export_json()
    export_dir = tmp_path / "exports"
    export_dir.mkdir()
    (export_dir / "asl-training-data.json").write_bytes(b"\xff\xfe garbage")

    press(app, "2")
    assert "Invalid training data file" in app.message
    assert store.export_json() == before


def test_failed_export_is_reported(store, tmp_path):
    # a file where the export directory should be
    (tmp_path / "exports").write_text("in the way", encoding="utf-8")
    app = make_app(store, tmp_path)
    press(app, "1")
    assert app.message.startswith("Export failed")


@pytest.mark.parametrize("letter", ["Ñ", "NG"])
def test_every_fsl_letter_can_be_selected(store, tmp_path, letter):
    app = make_app(store, tmp_path, "--language", "FSL")
    letters = SignLanguage.FSL.letters
    press(app, *["]"] * (letters.index(letter) + 1))
    assert app.session.selected_letter == letter
    press(app, "[")
    assert app.session.selected_letter == letters[letters.index(letter) - 1]


def test_letter_keys_select_directly(store, tmp_path):
    app = make_app(store, tmp_path)
    press(app, "q")
    assert app.session.selected_letter == "Q"
    assert not app.handle_key(main.KEY_ESC)


def test_training_errors_become_messages(store, tmp_path):
    app = make_app(store, tmp_path)
    press(app, " ")
    assert app.message.startswith("No hand detected")
    press(app, main.KEY_ENTER)
    assert app.message.startswith("No samples captured")
