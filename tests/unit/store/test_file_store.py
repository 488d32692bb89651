"""Unit tests for the file-backed configuration store."""

import json

import pytest
import yaml

from settings_sync.core.exceptions import StoreError
from settings_sync.store.file_store import FileConfigurationStore


@pytest.fixture
def file_store(tmp_path):
    claude_dir = tmp_path / ".claude"
    return FileConfigurationStore(
        claude_dir / "settings.json",
        claude_dir / "settings-sync.preferences.yaml",
    )


class TestSettingsDocument:
    """Reading and writing settings.json."""

    async def test_missing_file_reads_as_empty(self, file_store):
        """A fresh machine has no settings file yet."""
        assert await file_store.get_claude_settings() == {}

    async def test_save_creates_directory_and_round_trips(self, file_store):
        document = {
            "permissions": {"allow": ["Bash(ls:*)"], "deny": []},
            "env": {"NODE_ENV": "development"},
            "statusLine": {"type": "command", "command": "~/status.sh"},
        }

        await file_store.save_claude_settings(document)

        assert file_store.settings_path.exists()
        assert await file_store.get_claude_settings() == document

    async def test_output_is_indented_json(self, file_store):
        await file_store.save_claude_settings({"verbose": True})

        text = file_store.settings_path.read_text(encoding="utf-8")
        assert text == '{\n  "verbose": true\n}\n'

    async def test_no_temporary_file_left_behind(self, file_store):
        await file_store.save_claude_settings({"env": {}})

        leftovers = [
            p.name for p in file_store.settings_path.parent.iterdir()
            if p.name.endswith(".tmp")
        ]
        assert leftovers == []

    async def test_invalid_json_raises_store_error(self, file_store):
        file_store.settings_path.parent.mkdir(parents=True)
        file_store.settings_path.write_text("{ not json", encoding="utf-8")

        with pytest.raises(StoreError, match="Failed to read settings"):
            await file_store.get_claude_settings()

    async def test_non_object_json_is_returned_as_is(self, file_store):
        """Shape checks belong to the caller."""
        file_store.settings_path.parent.mkdir(parents=True)
        file_store.settings_path.write_text("[1, 2]", encoding="utf-8")

        assert await file_store.get_claude_settings() == [1, 2]

    async def test_unserializable_document_keeps_previous_file(self, file_store):
        await file_store.save_claude_settings({"verbose": False})

        with pytest.raises(StoreError, match="Failed to save settings"):
            await file_store.save_claude_settings({"bad": object()})

        saved = json.loads(file_store.settings_path.read_text(encoding="utf-8"))
        assert saved == {"verbose": False}


class TestPreferences:
    """Single-value preferences kept in YAML."""

    async def test_missing_preference_is_none(self, file_store):
        assert await file_store.get_setting("lm_studio_enabled") is None

    async def test_save_and_read_back(self, file_store):
        await file_store.save_setting("lm_studio_enabled", "true")
        await file_store.save_setting("lm_studio_url", "http://localhost:1234")

        assert await file_store.get_setting("lm_studio_enabled") == "true"
        assert await file_store.get_setting("lm_studio_url") == (
            "http://localhost:1234"
        )

        on_disk = yaml.safe_load(
            file_store.preferences_path.read_text(encoding="utf-8")
        )
        assert on_disk == {
            "lm_studio_enabled": "true",
            "lm_studio_url": "http://localhost:1234",
        }

    async def test_hand_edited_booleans_are_normalized(self, file_store):
        file_store.preferences_path.parent.mkdir(parents=True)
        file_store.preferences_path.write_text(
            "lm_studio_enabled: true\nstartup_intro_enabled: no\n", encoding="utf-8"
        )

        assert await file_store.get_setting("lm_studio_enabled") == "true"
        assert await file_store.get_setting("startup_intro_enabled") == "false"

    async def test_unreadable_preferences_read_as_missing(self, file_store):
        file_store.preferences_path.parent.mkdir(parents=True)
        file_store.preferences_path.write_text("- a\n- list\n", encoding="utf-8")

        assert await file_store.get_setting("lm_studio_url") is None

    async def test_save_replaces_unreadable_preferences(self, file_store):
        file_store.preferences_path.parent.mkdir(parents=True)
        file_store.preferences_path.write_text("key: [unclosed", encoding="utf-8")

        await file_store.save_setting("lm_studio_selected_model", "phi-3")

        assert await file_store.get_setting("lm_studio_selected_model") == "phi-3"

    async def test_preferences_do_not_touch_settings(self, file_store):
        await file_store.save_setting("startup_intro_enabled", "false")
        assert not file_store.settings_path.exists()


class TestUndecodableFiles:
    """Bytes that are not UTF-8 surface as StoreError, or as absence for preferences."""

    async def test_settings_raise_store_error(self, file_store):
        file_store.settings_path.parent.mkdir(parents=True)
        file_store.settings_path.write_bytes(b'{"env": {"A": "\xff\xfe"}}')

        with pytest.raises(StoreError, match="Failed to read settings"):
            await file_store.get_claude_settings()

    async def test_preference_reads_as_missing(self, file_store):
        file_store.preferences_path.parent.mkdir(parents=True)
        file_store.preferences_path.write_bytes(b"lm_studio_url: \xff\xfe\n")

        assert await file_store.get_setting("lm_studio_url") is None

    async def test_save_replaces_undecodable_preferences(self, file_store):
        file_store.preferences_path.parent.mkdir(parents=True)
        file_store.preferences_path.write_bytes(b"lm_studio_url: \xff\xfe\n")

        await file_store.save_setting("lm_studio_enabled", "true")

        assert await file_store.get_setting("lm_studio_enabled") == "true"
