"""Configuration loading with layered merging.

Layers, later overriding earlier:
1. Global user config (~/.patchbridge/config.json)
2. Project local config (<cwd>/.patchbridge/config.json)

An explicit path skips layering. With no files at all, Pydantic defaults
are used.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from patchbridge.config.schema import Config
from patchbridge.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".patchbridge"
CONFIG_FILE_NAME = "config.json"


def get_global_dir() -> Path:
    """Get ~/.patchbridge (global config directory)."""
    return Path.home() / CONFIG_DIR_NAME


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read one config file as a JSON object.

    A byte-order mark is accepted and an empty or whitespace-only file reads
    as {}.

    Raises:
        ConfigError: If the file is missing or unreadable, holds invalid
            JSON, or holds something other than an object.
    """
    try:
        content = path.read_text(encoding="utf-8-sig").strip()
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected object in config file {path}, got {type(data).__name__}"
        )
    return data


def _overlay(merged: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Overlay one layer: sections (diff, apply) merge key by key, the rest replace."""
    result = dict(merged)
    for key, value in layer.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = {**current, **value}
        else:
            result[key] = value
    return result


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for the local layer. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or the merged
            config fails validation.
    """
    if path is not None:
        return _load_from_path(path)

    effective_cwd = cwd or Path.cwd()
    layers = [
        get_global_dir() / CONFIG_FILE_NAME,
        effective_cwd / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
    ]

    merged: dict[str, Any] = {}
    loaded_from: list[Path] = []
    for layer in dict.fromkeys(p.resolve() for p in layers):
        if not layer.is_file():
            logger.debug("Config layer not present: %s", layer)
            continue
        data = _read_config_file(layer)
        if data:
            merged = _overlay(merged, data)
            loaded_from.append(layer)

    if not loaded_from:
        logger.debug("No config files found, using Pydantic defaults")
        return Config()

    logger.info("Config loaded from: %s", [str(p) for p in loaded_from])
    try:
        return Config.model_validate(merged)
    except ValidationError as e:
        sources = ", ".join(str(p) for p in loaded_from)
        raise ConfigError(f"Config validation failed (merged from {sources}): {e}") from e


def _load_from_path(path: Path) -> Config:
    """Load and validate config from a specific path.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON, or fails validation.
    """
    data = _read_config_file(path)
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e
