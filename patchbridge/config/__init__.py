"""Configuration loading and validation."""

from patchbridge.config.loader import load_config
from patchbridge.config.schema import ApplyConfig, Config, DiffConfig

__all__ = [
    "ApplyConfig",
    "Config",
    "DiffConfig",
    "load_config",
]
