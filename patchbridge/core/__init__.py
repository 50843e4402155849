"""Core errors and text utilities."""

from patchbridge.core.errors import (
    ConfigError,
    InvalidRangeError,
    LoadError,
    OverlapError,
    ParseError,
    PatchBridgeError,
    TargetNotFoundError,
)
from patchbridge.core.text import (
    MARKER,
    Document,
    detect_line_ending,
    has_marker,
    preserve_marker,
    restore_marker,
    split_lines,
    split_terminated,
    strip_marker,
)

__all__ = [
    # Errors
    "PatchBridgeError",
    "ParseError",
    "OverlapError",
    "InvalidRangeError",
    "TargetNotFoundError",
    "LoadError",
    "ConfigError",
    # Text
    "MARKER",
    "Document",
    "detect_line_ending",
    "has_marker",
    "strip_marker",
    "restore_marker",
    "preserve_marker",
    "split_lines",
    "split_terminated",
]
