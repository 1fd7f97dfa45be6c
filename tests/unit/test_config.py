"""Unit tests for configuration models and loading."""

from pathlib import Path

import pytest

from promptweave.config import load_config
from promptweave.models.config import Config, EditorConfig, StorageConfig


class TestStorageConfig:
    """Test storage configuration model."""

    def test_defaults(self, isolated_home):
        config = StorageConfig()

        assert Path(config.data_dir) == isolated_home / ".local" / "share" / "promptweave"
        assert config.draft_history_limit == 50

    def test_expands_user(self, isolated_home):
        config = StorageConfig(data_dir="~/prompts")

        assert Path(config.data_dir) == isolated_home / "prompts"

    def test_store_file_paths(self, tmp_path):
        config = StorageConfig(data_dir=str(tmp_path))

        assert config.prompts_file == tmp_path / "prompts.json"
        assert config.drafts_file == tmp_path / "drafts.json"

    def test_rejects_file_as_data_dir(self, tmp_path):
        file_path = tmp_path / "not-a-dir.txt"
        file_path.touch()

        with pytest.raises(ValueError, match="not a directory"):
            StorageConfig(data_dir=str(file_path))

    def test_validates_history_limit(self):
        with pytest.raises(Exception):  # Pydantic ValidationError
            StorageConfig(draft_history_limit=0)

    def test_immutable(self):
        config = StorageConfig()

        with pytest.raises(Exception):  # Pydantic ValidationError
            config.draft_history_limit = 10


class TestEditorConfig:
    """Test editor configuration model."""

    def test_defaults(self):
        config = EditorConfig()

        assert config.default_title == "New prompt"
        assert config.untitled_title == "Untitled"


class TestLoadConfig:
    """Test YAML loading with environment overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config == Config()

    def test_default_path_is_under_home(self, isolated_home):
        config_dir = isolated_home / ".config" / "promptweave"
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("editor:\n  default_title: Scratch\n")

        config = load_config()

        assert config.editor.default_title == "Scratch"

    def test_load_valid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"""
storage:
  data_dir: {tmp_path / "data"}
  draft_history_limit: 10

editor:
  untitled_title: No title
""")

        config = load_config(config_file)

        assert config.storage.data_dir == str(tmp_path / "data")
        assert config.storage.draft_history_limit == 10
        assert config.editor.untitled_title == "No title"
        assert config.editor.default_title == "New prompt"

    def test_invalid_yaml_raises_value_error(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("storage: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(config_file)

    def test_validation_error_raises_value_error(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("storage:\n  draft_history_limit: -5\n")

        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config(config_file)

    def test_env_overrides(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("storage:\n  draft_history_limit: 10\n")
        monkeypatch.setenv("PROMPTWEAVE_DATA_DIR", str(tmp_path / "elsewhere"))
        monkeypatch.setenv("PROMPTWEAVE_DRAFT_HISTORY_LIMIT", "7")

        config = load_config(config_file)

        assert config.storage.data_dir == str(tmp_path / "elsewhere")
        assert config.storage.draft_history_limit == 7

    def test_invalid_env_integer_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PROMPTWEAVE_DRAFT_HISTORY_LIMIT", "lots")

        config = load_config(tmp_path / "missing.yaml")

        assert config.storage.draft_history_limit == 50
