"""Parser for unified diff format.

This module provides functions to parse unified diff text into
structured FileDiff and Hunk objects.
"""

import dataclasses
import logging
import re

from patchbridge.core.errors import ParseError
from patchbridge.core.text import split_lines, strip_marker
from patchbridge.patch.types import DiffLine, FileDiff, Hunk, LineKind

logger = logging.getLogger(__name__)

# Pattern for hunk header: @@ -old_start[,old_count] +new_start[,new_count] @@ [section]
HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$"
)

# Pattern for file header pair, optionally followed by a tab and timestamp
SOURCE_HEADER_RE = re.compile(r"^--- (.*?)(?:\t.*)?$")
TARGET_HEADER_RE = re.compile(r"^\+\+\+ (.*?)(?:\t.*)?$")

DEV_NULL = "/dev/null"

_PREFIX_KINDS = {kind.value: kind for kind in LineKind}


def _strip_path_prefix(path: str) -> str:
    """Strip a/ or b/ prefix from path if present."""
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _is_file_header(lines: list[str], idx: int) -> bool:
    """Check for a --- line immediately followed by a +++ line."""
    return (
        lines[idx].startswith("--- ")
        and idx + 1 < len(lines)
        and lines[idx + 1].startswith("+++ ")
    )


def _parse_file_header(source_line: str, target_line: str) -> FileDiff:
    """Build an empty FileDiff from a ---/+++ header pair."""
    source_match = SOURCE_HEADER_RE.match(source_line)
    target_match = TARGET_HEADER_RE.match(target_line)
    source = source_match.group(1).strip() if source_match else ""
    target = target_match.group(1).strip() if target_match else ""

    return FileDiff(
        source_path=_strip_path_prefix(source),
        target_path=_strip_path_prefix(target),
        hunks=[],
        is_new_file=source == DEV_NULL,
        is_deleted=target == DEV_NULL,
    )


def _parse_hunk_header(line: str, line_number: int) -> Hunk:
    """Parse a hunk header line into an empty Hunk.

    Raises:
        ParseError: If the header does not match the unified diff syntax.
    """
    match = HUNK_HEADER_RE.match(line)
    if not match:
        raise ParseError(f"Malformed hunk header: {line!r}", line_number, line)

    # Count defaults to 1 if omitted (e.g., @@ -1 +1,2 @@)
    return Hunk(
        old_start=int(match.group(1)),
        old_count=int(match.group(2)) if match.group(2) is not None else 1,
        new_start=int(match.group(3)),
        new_count=int(match.group(4)) if match.group(4) is not None else 1,
        lines=[],
        section=match.group(5).strip(),
    )


def parse_diff(text: str) -> list[FileDiff]:
    """Parse unified diff text into structured FileDiff objects.

    Handles:
    - Standard unified diff format (--- a/path, +++ b/path, @@ ... @@)
    - Git extended format (diff --git, index and mode lines are skipped)
    - Context lines (space prefix), removals (-), additions (+)
    - '\\ No newline at end of file' marker
    - Hunks with no preceding file header (collected in an unnamed FileDiff)

    Parsing is structural: declared hunk counts are not validated against
    the body. They are only consulted to tell a ---/+++ file header from
    body lines, and to decide whether a bare empty line is a blank context
    line (hunk still expects lines) or the end of the hunk.

    Args:
        text: Unified diff text to parse

    Returns:
        List of FileDiff objects in input order. Empty if text has no
        file sections or hunks.

    Raises:
        ParseError: On a malformed hunk header or a hunk body line without
            a ' ', '-' or '+' prefix.

    Example:
        >>> files = parse_diff("--- a/f.txt\\n+++ b/f.txt\\n@@ -1 +1 @@\\n-a\\n+b\\n")
        >>> files[0].path
        'f.txt'
    """
    lines = split_lines(strip_marker(text))
    files: list[FileDiff] = []
    current: FileDiff | None = None
    hunk: Hunk | None = None
    remaining_old = 0
    remaining_new = 0

    idx = 0
    while idx < len(lines):
        line = lines[idx]
        line_number = idx + 1
        expecting = hunk is not None and (remaining_old > 0 or remaining_new > 0)

        if line.startswith("@@"):
            hunk = _parse_hunk_header(line, line_number)
            if current is None:
                current = FileDiff(source_path="", target_path="")
                files.append(current)
            current.hunks.append(hunk)
            remaining_old, remaining_new = hunk.old_count, hunk.new_count
            idx += 1
            continue

        if not expecting and _is_file_header(lines, idx):
            current = _parse_file_header(line, lines[idx + 1])
            files.append(current)
            hunk = None
            idx += 2
            continue

        if hunk is None:
            # Preamble: diff --git, index, mode lines, commentary
            idx += 1
            continue

        if line.startswith("diff "):
            hunk = None
        elif line.startswith("\\"):
            if hunk.lines:
                hunk.lines[-1] = dataclasses.replace(hunk.lines[-1], no_newline=True)
        elif line == "":
            if expecting:
                # Blank context line that lost its space prefix
                hunk.lines.append(DiffLine(LineKind.CONTEXT, ""))
                remaining_old -= 1
                remaining_new -= 1
            else:
                hunk = None
        else:
            kind = _PREFIX_KINDS.get(line[0])
            if kind is None and not expecting:
                # Trailing text after a complete hunk
                hunk = None
                idx += 1
                continue
            if kind is None:
                raise ParseError(
                    f"Hunk line must start with ' ', '-' or '+': {line!r}",
                    line_number,
                    line,
                )
            hunk.lines.append(DiffLine(kind, line[1:]))
            if kind is not LineKind.ADDITION:
                remaining_old -= 1
            if kind is not LineKind.DELETION:
                remaining_new -= 1

        idx += 1

    logger.debug(
        "Parsed %d file diff(s) with %d hunk(s)",
        len(files),
        sum(len(fd.hunks) for fd in files),
    )
    return files
