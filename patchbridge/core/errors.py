"""Typed exception hierarchy for patchbridge."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from patchbridge.patch.types import RangePatch


class PatchBridgeError(Exception):
    """Base class for all patchbridge errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ParseError(PatchBridgeError):
    """Raised when diff text is structurally malformed.

    Covers invalid hunk headers and hunk body lines without a valid prefix.
    The whole parse fails; no partial result is returned.
    """

    def __init__(self, message: str, line_number: int | None = None, line: str = "") -> None:
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class OverlapError(PatchBridgeError):
    """Raised when two range patches in one batch intersect."""

    def __init__(self, first: RangePatch, second: RangePatch) -> None:
        self.first = first
        self.second = second
        super().__init__(
            f"Overlapping range patches: [{first.start}, {first.end}) "
            f"and [{second.start}, {second.end})"
        )


class InvalidRangeError(PatchBridgeError):
    """Raised when a range patch falls outside the text it targets."""

    def __init__(self, patch: RangePatch, length: int) -> None:
        self.patch = patch
        self.length = length
        super().__init__(
            f"Invalid patch range: [{patch.start}, {patch.end}) "
            f"(text length: {length})"
        )


class TargetNotFoundError(PatchBridgeError):
    """Raised when a diff has no file section for the requested path."""

    def __init__(self, path: str, available: list[str]) -> None:
        self.path = path
        self.available = available
        listed = ", ".join(available) if available else "none"
        super().__init__(f"No hunks found for '{path}'. Files in diff: {listed}")


class LoadError(PatchBridgeError):
    """Raised when a JSON file cannot be found, read or decoded."""


class ConfigError(PatchBridgeError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""
