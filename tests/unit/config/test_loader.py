"""Tests for layered config loading in patchbridge.config.loader."""

import json
from pathlib import Path

import pytest

from patchbridge.config import Config, load_config
from patchbridge.core.errors import ConfigError


def _write_config(directory: Path, data: dict) -> Path:
    config_dir = directory / ".patchbridge"
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadConfigDefaults:
    """Tests for loading with no config files."""

    def test_defaults(self, isolated_env: Path) -> None:
        config = load_config(cwd=isolated_env)

        assert config == Config()
        assert config.diff.context_lines == 3
        assert config.apply.mode == "strict"
        assert config.apply.fuzzy_threshold == 0.8
        assert config.apply.search_window == 50
        assert config.apply.ignore_case is False
        assert config.log_level == "WARNING"


class TestLoadConfigLayers:
    """Tests for global and local layer merging."""

    def test_global_layer(self, isolated_env: Path) -> None:
        _write_config(Path.home(), {"apply": {"mode": "tolerant"}})

        config = load_config(cwd=isolated_env)

        assert config.apply.mode == "tolerant"

    def test_local_overrides_global(self, isolated_env: Path) -> None:
        _write_config(Path.home(), {"apply": {"mode": "tolerant", "search_window": 10}})
        _write_config(isolated_env, {"apply": {"mode": "fuzzy"}})

        config = load_config(cwd=isolated_env)

        assert config.apply.mode == "fuzzy"
        # Sibling keys from the global layer survive the merge
        assert config.apply.search_window == 10

    def test_defaults_to_current_directory(self, isolated_env: Path) -> None:
        _write_config(isolated_env, {"diff": {"context_lines": 1}})

        assert load_config().diff.context_lines == 1

    def test_invalid_layer_raises(self, isolated_env: Path) -> None:
        config_dir = isolated_env / ".patchbridge"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{oops", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(cwd=isolated_env)

        assert "Invalid JSON" in exc_info.value.message

    def test_merged_validation_error_names_sources(self, isolated_env: Path) -> None:
        local = _write_config(isolated_env, {"apply": {"fuzzy_threshold": 0.1}})

        with pytest.raises(ConfigError) as exc_info:
            load_config(cwd=isolated_env)

        assert "Config validation failed" in exc_info.value.message
        assert str(local.resolve()) in exc_info.value.message


class TestLoadConfigExplicitPath:
    """Tests for loading a specific file."""

    def test_explicit_path_skips_layers(self, isolated_env: Path) -> None:
        _write_config(isolated_env, {"apply": {"mode": "fuzzy"}})
        explicit = isolated_env / "custom.json"
        explicit.write_text('{"diff": {"context_lines": 0}}', encoding="utf-8")

        config = load_config(explicit, cwd=isolated_env)

        assert config.diff.context_lines == 0
        assert config.apply.mode == "strict"

    def test_missing_explicit_path(self, isolated_env: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(isolated_env / "nope.json")

        assert "Config file not found" in exc_info.value.message

    @pytest.mark.parametrize(
        "data",
        [
            {"unknown": True},
            {"apply": {"mode": "sloppy"}},
            {"apply": {"search_window": -1}},
            {"diff": {"context_lines": -2}},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values_rejected(self, isolated_env: Path, data: dict) -> None:
        explicit = isolated_env / "custom.json"
        explicit.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(explicit)


class TestConfigFileContents:
    """Tests for how a single config file is read."""

    def test_empty_file_uses_defaults(self, isolated_env: Path) -> None:
        explicit = isolated_env / "custom.json"
        explicit.write_text("  \n\t\n", encoding="utf-8")

        assert load_config(explicit) == Config()

    def test_byte_order_mark_accepted(self, isolated_env: Path) -> None:
        """Files saved with a UTF-8 BOM still parse."""
        explicit = isolated_env / "custom.json"
        explicit.write_bytes(b'\xef\xbb\xbf{"log_level": "DEBUG"}')

        assert load_config(explicit).log_level == "DEBUG"

    def test_non_object_json(self, isolated_env: Path) -> None:
        """A top-level array is not a config object."""
        explicit = isolated_env / "custom.json"
        explicit.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(explicit)

        assert "Expected object" in exc_info.value.message
        assert "list" in exc_info.value.message

    def test_directory_as_explicit_path(self, isolated_env: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(isolated_env)

        assert "Failed to read config file" in exc_info.value.message

    def test_directory_layer_is_skipped(self, isolated_env: Path) -> None:
        (isolated_env / ".patchbridge" / "config.json").mkdir(parents=True)

        assert load_config(cwd=isolated_env) == Config()


class TestLayerOverlay:
    """Tests for how layers combine."""

    def test_top_level_values_replaced(self, isolated_env: Path) -> None:
        _write_config(Path.home(), {"log_level": "INFO", "diff": {"context_lines": 5}})
        _write_config(isolated_env, {"log_level": "DEBUG"})

        config = load_config(cwd=isolated_env)

        assert config.log_level == "DEBUG"
        assert config.diff.context_lines == 5

    def test_layer_files_not_modified(self, isolated_env: Path) -> None:
        global_path = _write_config(Path.home(), {"apply": {"mode": "tolerant"}})
        _write_config(isolated_env, {"apply": {"ignore_case": True}})

        config = load_config(cwd=isolated_env)

        assert config.apply.mode == "tolerant"
        assert config.apply.ignore_case is True
        assert json.loads(global_path.read_text(encoding="utf-8")) == {"apply": {"mode": "tolerant"}}
