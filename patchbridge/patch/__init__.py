"""Patch module for parsing, synthesizing, and applying unified diffs.

This module provides tools for working with unified diff format patches,
commonly produced by git diff, diff -u, and automation agents, plus raw
character-range patches.

Main components:
- Types: DiffLine, Hunk, FileDiff, RangePatch, ApplyReport
- Parser: parse_diff() - convert diff text to objects
- Synthesizer: create_diff() - compute a unified diff between two texts
- Applier: apply_diff() - apply hunks with drift-tolerant location
- Ranges: apply_range_patches() - apply exact offset replacements
- Validator: validate_diff(), check_diff() - structural checks and dry runs

Example usage:
    >>> from patchbridge.patch import apply_diff, create_diff
    >>> diff = create_diff("a\\nb\\nc\\n", "a\\nX\\nc\\n", "f.cs", "f.cs", 1)
    >>> result = apply_diff("a\\nb\\nc\\n", diff)
    >>> result.content
    'a\\nX\\nc\\n'
    >>> result.result.success
    True
"""

from patchbridge.patch.applier import ApplyMode, apply_diff, apply_hunks
from patchbridge.patch.parser import parse_diff
from patchbridge.patch.ranges import apply_range_patches, check_range_patches
from patchbridge.patch.synthesizer import create_diff
from patchbridge.patch.types import (
    ApplyReport,
    ApplyResult,
    DiffLine,
    FileDiff,
    Hunk,
    HunkResult,
    LineKind,
    RangePatch,
)
from patchbridge.patch.validator import (
    ValidationResult,
    check_diff,
    validate_diff,
    validate_hunk_counts,
)

__all__ = [
    # Types
    "LineKind",
    "DiffLine",
    "Hunk",
    "FileDiff",
    "RangePatch",
    "HunkResult",
    "ApplyReport",
    "ApplyResult",
    # Parser
    "parse_diff",
    # Synthesizer
    "create_diff",
    # Applier
    "ApplyMode",
    "apply_diff",
    "apply_hunks",
    # Ranges
    "apply_range_patches",
    "check_range_patches",
    # Validator
    "ValidationResult",
    "validate_diff",
    "validate_hunk_counts",
    "check_diff",
]
