"""
Unit tests for the local preferences store.
"""

import json

from niko.infrastructure.local.preferences_store import LocalPreferencesStore
from niko.models.enums import Theme
from niko.models.notion import NotionConfig
from niko.models.preferences import NOTION_CONFIG_KEY, THEME_KEY


def test_defaults_when_file_missing(tmp_path, test_user_id):
    prefs = LocalPreferencesStore(tmp_path / "missing.json").load(test_user_id)

    assert prefs.theme == Theme.LIGHT
    assert prefs.notion_config == NotionConfig()


def test_notion_config_stored_as_json_blob(tmp_path, test_user_id):
    path = tmp_path / "prefs.json"
    store = LocalPreferencesStore(path)
    config = NotionConfig(
        integration_token="secret_token",
        word_database_id="word-db",
        sentence_database_id="sentence-db",
        enabled=True,
    )

    prefs = store.save_notion_config(test_user_id, config)

    assert prefs.notion_config == config
    raw = json.loads(path.read_text(encoding="utf-8"))
    blob = json.loads(raw[test_user_id][NOTION_CONFIG_KEY])
    assert blob == {
        "apiKey": "secret_token",
        "wordDbId": "word-db",
        "sentenceDbId": "sentence-db",
        "enabled": True,
    }


def test_theme_saved_alongside_notion_config(tmp_path, test_user_id):
    path = tmp_path / "prefs.json"
    store = LocalPreferencesStore(path)
    store.save_notion_config(test_user_id, NotionConfig(enabled=True))

    prefs = store.save_theme(test_user_id, Theme.DARK)

    assert prefs.theme == Theme.DARK
    assert prefs.notion_config.enabled is True
    assert json.loads(path.read_text(encoding="utf-8"))[test_user_id][THEME_KEY] == "dark"


def test_preferences_are_kept_per_user(tmp_path):
    store = LocalPreferencesStore(tmp_path / "prefs.json")
    store.save_notion_config(
        "alice", NotionConfig(integration_token="alice-secret", word_database_id="alice-db", enabled=True)
    )
    store.save_theme("alice", Theme.DARK)

    bob = store.load("bob")
    assert bob.notion_config == NotionConfig()
    assert bob.theme == Theme.LIGHT

    store.save_notion_config("bob", NotionConfig(integration_token="bob-secret"))
    alice = store.load("alice")
    assert alice.notion_config.integration_token == "alice-secret"
    assert alice.theme == Theme.DARK
    assert store.load("bob").notion_config.integration_token == "bob-secret"


def test_corrupt_values_fall_back_to_defaults(tmp_path, test_user_id):
    path = tmp_path / "prefs.json"
    path.write_text(
        json.dumps({test_user_id: {NOTION_CONFIG_KEY: "{not json", THEME_KEY: "sepia"}}),
        encoding="utf-8",
    )

    prefs = LocalPreferencesStore(path).load(test_user_id)

    assert prefs.theme == Theme.LIGHT
    assert prefs.notion_config == NotionConfig()


def test_unreadable_file_is_ignored(tmp_path, test_user_id):
    path = tmp_path / "prefs.json"
    path.write_text("[]garbage", encoding="utf-8")

    assert LocalPreferencesStore(path).load(test_user_id).theme == Theme.LIGHT
