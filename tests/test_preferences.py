import json

from kitchen_quote.services.preferences import PreferencesStore, PREFERENCES_KEY


def test_missing_file_gives_defaults(tmp_path):
    store = PreferencesStore(tmp_path / "prefs.json")
    assert store.load().dark_mode is False


def test_toggle_persists_under_preferences_key(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    store = PreferencesStore(path)
    store.load()

    assert store.toggle_dark_mode() is True
    assert json.loads(path.read_text()) == {PREFERENCES_KEY: {"dark_mode": True}}
    assert PreferencesStore(path).load().dark_mode is True


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json")
    assert PreferencesStore(path).load().dark_mode is False


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({PREFERENCES_KEY: {"dark_mode": True, "font": "large"}}))
    store = PreferencesStore(path)

    assert store.load().dark_mode is True
    store.update(font="small")
    assert json.loads(path.read_text())[PREFERENCES_KEY] == {"dark_mode": True}
