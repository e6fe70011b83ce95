"""Tests for reading and updating the TOML config file."""

import pytest

from anki_lang.core import config_store
from anki_lang.core.config_store import ConfigFileStore
from anki_lang.core.errors import ConfigError, PersistenceError

EXISTING = """# my anki settings
openai_model = "gpt-4o-mini"  # cheaper
hindi_deck = "Old Hindi"
tags = ["vocab"]
my_own_key = "do not touch"

[notes]
owner = "me"
"""


class TestLoad:
    def test_missing_default_file_is_empty_layer(self, config_path):
        assert ConfigFileStore(config_path).load() == {}

    def test_missing_explicit_file_is_fatal(self, config_path):
        with pytest.raises(ConfigError, match="does not exist"):
            ConfigFileStore(config_path, explicit=True).load()

    def test_invalid_toml_is_fatal(self, config_path):
        config_path.write_text("openai_model = ", encoding="utf-8")
        with pytest.raises(ConfigError, match="failed to parse"):
            ConfigFileStore(config_path).load()

    def test_reads_values(self, config_path):
        config_path.write_text(EXISTING, encoding="utf-8")
        data = ConfigFileStore(config_path).load()
        assert data["openai_model"] == "gpt-4o-mini"
        assert data["tags"] == ["vocab"]


class TestUpdate:
    def test_only_deck_keys_change(self, config_path):
        config_path.write_text(EXISTING, encoding="utf-8")
        store = ConfigFileStore(config_path)

        store.update({"hindi_deck": "New Hindi", "english_deck": "New English"})

        text = config_path.read_text(encoding="utf-8")
        assert "# my anki settings" in text
        assert "# cheaper" in text
        data = store.load()
        assert data["hindi_deck"] == "New Hindi"
        assert data["english_deck"] == "New English"
        assert data["openai_model"] == "gpt-4o-mini"
        assert data["my_own_key"] == "do not touch"
        assert data["notes"] == {"owner": "me"}

    def test_creates_missing_file_and_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "config.toml"
        store = ConfigFileStore(path)

        store.update({"english_deck": "Cloze"})

        assert store.load() == {"english_deck": "Cloze"}

    def test_refuses_other_keys(self, config_path):
        with pytest.raises(PersistenceError, match="non-persistable"):
            ConfigFileStore(config_path).update({"openai_api_key": "leak"})
        assert not config_path.exists()

    def test_write_failure_is_persistence_error(self, tmp_path):
        directory = tmp_path / "config.toml"
        directory.mkdir()
        with pytest.raises(PersistenceError):
            ConfigFileStore(directory).update({"hindi_deck": "X"})

    def test_failed_write_keeps_the_old_file(self, config_path, monkeypatch):
        config_path.write_text(EXISTING, encoding="utf-8")

        def no_space(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(config_store.os, "replace", no_space)
        with pytest.raises(PersistenceError, match="No space left"):
            ConfigFileStore(config_path).update({"hindi_deck": "New Hindi"})

        assert config_path.read_text(encoding="utf-8") == EXISTING
        assert list(config_path.parent.iterdir()) == [config_path]
