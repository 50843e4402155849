"""Applier for unified diff hunks.

This module applies parsed hunks to text. Hunk headers are treated as
hints: each hunk is searched nearest-first around its hinted position, so
diffs still apply when line numbers have drifted. A hunk that cannot be
located is reported as failed while the remaining hunks still apply.
"""

import logging
import os
from collections.abc import Callable, Iterator, Sequence
from difflib import SequenceMatcher
from enum import Enum
from typing import NamedTuple

from patchbridge.core.errors import TargetNotFoundError
from patchbridge.core.text import Document
from patchbridge.patch.parser import parse_diff
from patchbridge.patch.types import (
    ApplyReport,
    ApplyResult,
    DiffLine,
    FileDiff,
    Hunk,
    HunkResult,
    LineKind,
)

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_WINDOW = 50
DEFAULT_FUZZY_THRESHOLD = 0.8


class ApplyMode(Enum):
    """Strictness level for locating hunks."""

    STRICT = "strict"  # Exact line match required
    TOLERANT = "tolerant"  # Whitespace runs collapsed, ends trimmed
    FUZZY = "fuzzy"  # SequenceMatcher fallback


class _State(NamedTuple):
    """Document state threaded from one hunk to the next."""

    lines: list[str]
    endings: list[str]
    final_newline: bool
    delta: int


def _make_key(mode: ApplyMode, ignore_case: bool) -> Callable[[str], str]:
    """Build the line normalization used for comparisons."""

    def key(line: str) -> str:
        if mode is not ApplyMode.STRICT:
            line = " ".join(line.split())
        if ignore_case:
            line = line.casefold()
        return line

    return key


def _candidate_positions(hint: int, window: int, upper: int) -> Iterator[int]:
    """Yield positions in [0, upper] within window of hint, nearest first."""
    if 0 <= hint <= upper:
        yield hint
    for distance in range(1, window + 1):
        for pos in (hint - distance, hint + distance):
            if 0 <= pos <= upper:
                yield pos


def _block_matches(
    lines: list[str], expected: list[str], pos: int, key: Callable[[str], str]
) -> bool:
    """Check that lines starting at pos match the (normalized) expected block."""
    for offset, exp_line in enumerate(expected):
        if key(lines[pos + offset]) != exp_line:
            return False
    return True


def _find_block(
    lines: list[str],
    expected: list[str],
    hint: int,
    window: int,
    key: Callable[[str], str],
    accept: Callable[[int], bool],
) -> int | None:
    """Find the nearest position to hint where expected matches."""
    upper = len(lines) - len(expected)
    for pos in _candidate_positions(hint, window, upper):
        if accept(pos) and _block_matches(lines, expected, pos, key):
            return pos
    return None


def _find_fuzzy_block(
    lines: list[str],
    expected: list[str],
    hint: int,
    window: int,
    threshold: float,
    accept: Callable[[int], bool],
) -> tuple[int, float] | None:
    """Find the most similar block within window of hint.

    Returns:
        Tuple of (position, similarity) or None if nothing reaches threshold.
        Ties go to the position nearest the hint.
    """
    expected_text = "\n".join(expected)
    upper = len(lines) - len(expected)
    best_pos = -1
    best_ratio = 0.0

    for pos in _candidate_positions(hint, window, upper):
        if not accept(pos):
            continue
        window_text = "\n".join(lines[pos : pos + len(expected)])
        ratio = SequenceMatcher(None, expected_text, window_text).ratio()
        if ratio > best_ratio:
            best_ratio = ratio
            best_pos = pos

    if best_pos >= 0 and best_ratio >= threshold:
        return best_pos, best_ratio
    return None


def _hint_position(hunk: Hunk, delta: int) -> int:
    """0-indexed position implied by the header, adjusted by prior hunks."""
    # An empty old range names the line before the hunk
    start = hunk.old_start if hunk.old_count == 0 else hunk.old_start - 1
    return max(0, start + delta)


def _build_section(
    state: _State, hunk: Hunk, pos: int, default_ending: str
) -> tuple[list[str], list[str]]:
    """Build the replacement lines and terminators for the matched block.

    Context lines keep the document's own text so tolerated differences
    (whitespace, case) are not rewritten. An added line takes the
    terminator of the deleted line it replaces, else the default ending.
    """
    section: list[str] = []
    section_endings: list[str] = []
    replaced: list[str] = []
    file_idx = pos
    for line in hunk.lines:
        if line.kind is LineKind.CONTEXT:
            section.append(state.lines[file_idx])
            section_endings.append(state.endings[file_idx])
            replaced = []
            file_idx += 1
        elif line.kind is LineKind.DELETION:
            replaced.append(state.endings[file_idx])
            file_idx += 1
        else:
            section.append(line.text)
            section_endings.append(replaced.pop(0) if replaced else default_ending)
    return section, section_endings


def _terminate(endings: list[str], final_newline: bool, default_ending: str) -> list[str]:
    """Give every line but an unterminated last one a terminator."""
    fixed = [ending or default_ending for ending in endings]
    if fixed and not final_newline:
        fixed[-1] = ""
    return fixed


def _apply_hunk(
    state: _State,
    hunk: Hunk,
    index: int,
    mode: ApplyMode,
    fuzzy_threshold: float,
    search_window: int,
    key: Callable[[str], str],
    default_ending: str,
) -> tuple[_State, HunkResult, str | None]:
    """Apply a single hunk to the current state.

    Returns:
        Tuple of (new_state, hunk_result, warning_or_none). On failure the
        state is returned unchanged.
    """
    lines = state.lines
    before: list[DiffLine] = hunk.before_lines()
    after: list[DiffLine] = hunk.after_lines()
    expected = [key(line.text) for line in before]
    hint = min(_hint_position(hunk, state.delta), max(0, len(lines) - len(before)))

    # A before-block ending in "no newline" can only sit at an unterminated end of file
    needs_eof = bool(before) and before[-1].no_newline

    def accept(pos: int) -> bool:
        if needs_eof:
            return pos + len(before) == len(lines) and not state.final_newline
        return True

    pos = _find_block(lines, expected, hint, search_window, key, accept)
    warning = None

    if pos is None and mode is ApplyMode.FUZZY and before:
        found = _find_fuzzy_block(
            lines,
            [line.text for line in before],
            hint,
            search_window,
            fuzzy_threshold,
            accept,
        )
        if found is not None:
            pos, similarity = found
            warning = (
                f"Hunk {index + 1} applied via fuzzy match "
                f"({similarity:.0%} similarity at line {pos + 1})"
            )

    if pos is None:
        reason, suggestion = _failure_reason(lines, hunk, hint, search_window, key, mode)
        logger.warning("Hunk %d failed: %s", index + 1, reason)
        result = HunkResult(
            index=index,
            applied=False,
            reason=reason,
            expected_context=[line.text for line in before],
            actual_context=lines[hint : hint + len(before)],
            suggestion=suggestion,
        )
        return state, result, None

    end = pos + len(before)
    section, section_endings = _build_section(state, hunk, pos, default_ending)
    new_lines = lines[:pos] + section + lines[end:]
    new_endings = state.endings[:pos] + section_endings + state.endings[end:]

    final_newline = state.final_newline
    after_flag = bool(after) and after[-1].no_newline
    if end == len(lines) and (needs_eof or after_flag):
        final_newline = not after_flag

    added = len(after) - hunk.count_context()
    removed = len(before) - hunk.count_context()
    drift = pos - hint
    if drift and warning is None:
        warning = f"Hunk {index + 1} applied at line {pos + 1} (offset {drift:+d} lines)"

    logger.debug(
        "Hunk %d applied at line %d (offset %d): +%d -%d",
        index + 1,
        pos + 1,
        drift,
        added,
        removed,
    )

    new_state = _State(
        lines=new_lines,
        endings=new_endings,
        final_newline=final_newline,
        delta=state.delta + len(after) - len(before),
    )
    result = HunkResult(
        index=index,
        applied=True,
        start_line=pos + 1,
        offset=drift,
        lines_added=added,
        lines_removed=removed,
    )
    return new_state, result, warning


_SUGGESTIONS = {
    ApplyMode.STRICT: "retry with tolerant or fuzzy mode if only whitespace differs",
    ApplyMode.TOLERANT: "retry with fuzzy mode if the context was edited slightly",
    ApplyMode.FUZZY: "regenerate the diff against the current text",
}


def _failure_reason(
    lines: list[str],
    hunk: Hunk,
    hint: int,
    window: int,
    key: Callable[[str], str],
    mode: ApplyMode,
) -> tuple[str, str | None]:
    """Explain why a hunk could not be located.

    Returns:
        Tuple of (reason, suggestion). There is no suggestion for a hunk
        that is already applied.
    """
    after = [key(line.text) for line in hunk.after_lines()]
    if after and hunk.count_removals() + hunk.count_additions() > 0:
        upper = len(lines) - len(after)
        for pos in _candidate_positions(hint, window, upper):
            if _block_matches(lines, after, pos, key):
                return f"hunk appears to be already applied at line {pos + 1}", None

    if hunk.before_lines() and hunk.before_lines()[-1].no_newline:
        reason = (
            f"context mismatch near line {hint + 1}: expected block at "
            "end of file without trailing newline"
        )
    else:
        reason = f"context mismatch near line {hint + 1} (searched ±{window} lines)"
    return reason, _SUGGESTIONS[mode]


def apply_hunks(
    original: str,
    hunks: Sequence[Hunk],
    mode: ApplyMode = ApplyMode.STRICT,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    search_window: int = DEFAULT_SEARCH_WINDOW,
    ignore_case: bool = False,
    stop_on_error: bool = False,
) -> ApplyResult:
    """Apply hunks in order to original text.

    Each hunk is located relative to the text produced by the hunks before
    it. Failed hunks leave their region untouched and, unless stop_on_error
    is set, do not stop the rest. The result keeps the original byte-order
    mark, the terminator of every untouched line and the final-newline
    state (unless a hunk changes the latter explicitly).

    Args:
        original: Original text
        hunks: Hunks to apply, in diff order
        mode: Matching strictness (STRICT, TOLERANT, FUZZY)
        fuzzy_threshold: Minimum similarity for FUZZY mode (0.0-1.0)
        search_window: Lines searched on each side of the hinted position
        ignore_case: Compare lines case-insensitively
        stop_on_error: After the first failed hunk, report the remaining
            hunks as failed without attempting them. Hunks applied before
            the failure are kept.

    Returns:
        ApplyResult with best-effort content and a per-hunk report.
    """
    doc = Document.from_text(original)
    key = _make_key(mode, ignore_case)

    state = _State(
        lines=list(doc.lines),
        endings=list(doc.endings),
        final_newline=doc.final_newline,
        delta=0,
    )
    report = ApplyReport()
    stopped_at: int | None = None

    for index, hunk in enumerate(hunks):
        if stopped_at is not None:
            report.per_hunk.append(HunkResult(
                index=index,
                applied=False,
                reason=f"not attempted: stopped after hunk {stopped_at + 1} failed",
            ))
            continue

        state, hunk_result, warning = _apply_hunk(
            state, hunk, index, mode, fuzzy_threshold, search_window, key, doc.line_ending
        )
        report.per_hunk.append(hunk_result)
        if warning:
            report.warnings.append(warning)
        if stop_on_error and not hunk_result.applied:
            stopped_at = index

    if report.hunks_applied == 0:
        content = original
    else:
        content = Document(
            lines=state.lines,
            endings=_terminate(state.endings, state.final_newline, doc.line_ending),
            line_ending=doc.line_ending,
            has_marker=doc.has_marker,
        ).to_text()

    logger.debug(
        "Applied %d/%d hunk(s)", report.hunks_applied, report.hunks_total
    )
    return ApplyResult(content=content, result=report)


def _select_file_diff(
    file_diffs: list[FileDiff], path: str | None, warnings: list[str]
) -> FileDiff | None:
    """Pick the FileDiff to apply.

    With a path, match the full path first, then the basename. Without
    one, take the first section and note any that are ignored.
    """
    if not file_diffs:
        return None

    if path is None:
        if len(file_diffs) > 1:
            warnings.append(
                f"Diff contains {len(file_diffs)} files, "
                f"applying only hunks for {file_diffs[0].path or '(unnamed)'}"
            )
        return file_diffs[0]

    for fd in file_diffs:
        if path in (fd.path, fd.source_path, fd.target_path):
            return fd

    basename = os.path.basename(path)
    for fd in file_diffs:
        names = (fd.path, fd.source_path, fd.target_path)
        if any(name and os.path.basename(name) == basename for name in names):
            return fd

    raise TargetNotFoundError(path, [fd.path for fd in file_diffs])


def apply_diff(
    original: str,
    diff: str | FileDiff | Sequence[FileDiff],
    path: str | None = None,
    mode: ApplyMode = ApplyMode.STRICT,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    search_window: int = DEFAULT_SEARCH_WINDOW,
    ignore_case: bool = False,
    stop_on_error: bool = False,
) -> ApplyResult:
    """Apply a unified diff to original text.

    Args:
        original: Original text
        diff: Diff text, a parsed FileDiff, or a list of FileDiffs
        path: File the diff should target. Without it the first file
            section is used.
        mode: Matching strictness (STRICT, TOLERANT, FUZZY)
        fuzzy_threshold: Minimum similarity for FUZZY mode (0.0-1.0)
        search_window: Lines searched on each side of the hinted position
        ignore_case: Compare lines case-insensitively
        stop_on_error: Stop at the first failed hunk (see apply_hunks)

    Returns:
        ApplyResult with best-effort content and a per-hunk report. An empty
        diff returns the original unchanged with a successful 0/0 report.

    Raises:
        ParseError: If diff text is structurally malformed.
        TargetNotFoundError: If path is given and no file section matches.

    Example:
        >>> diff = "--- f\\n+++ f\\n@@ -1,2 +1,2 @@\\n a\\n-b\\n+c\\n"
        >>> apply_diff("a\\nb\\n", diff).content
        'a\\nc\\n'
    """
    if isinstance(diff, str):
        file_diffs = parse_diff(diff)
    elif isinstance(diff, FileDiff):
        file_diffs = [diff]
    else:
        file_diffs = list(diff)

    warnings: list[str] = []
    selected = _select_file_diff(file_diffs, path, warnings)
    if selected is None:
        return ApplyResult(content=original, result=ApplyReport(warnings=["Diff contains no hunks"]))

    result = apply_hunks(
        original,
        selected.hunks,
        mode=mode,
        fuzzy_threshold=fuzzy_threshold,
        search_window=search_window,
        ignore_case=ignore_case,
        stop_on_error=stop_on_error,
    )
    result.result.warnings[:0] = warnings
    return result
