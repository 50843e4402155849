"""Unified diff synthesis.

This module computes a minimal line-level edit script between two texts
(Myers' O(ND) shortest edit script) and renders it as unified diff text
that parse_diff() reads back with identical hunk boundaries.
"""

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from difflib import SequenceMatcher

from patchbridge.core.text import Document
from patchbridge.patch.types import DiffLine, Hunk, LineKind

logger = logging.getLogger(__name__)

NO_NEWLINE_MARKER = "\\ No newline at end of file"

# Edit distance above which the minimal search gives way to SequenceMatcher
MAX_EDIT_DISTANCE = 1000


@dataclass
class _Change:
    """A maximal run of edits: a[i1:i2] replaced by b[j1:j2]."""

    i1: int
    i2: int
    j1: int
    j2: int


def _backtrack(trace: list[list[int]], n: int, m: int) -> list[tuple[str, int, int]]:
    """Walk the saved frontiers back from (n, m) to recover the edit path.

    trace[d] holds the furthest x reached on diagonals -d..d after round d,
    indexed by k + d.

    Returns:
        Moves in forward order as (tag, i, j) where tag is "equal",
        "delete" (a[i] removed) or "insert" (b[j] added).
    """
    moves: list[tuple[str, int, int]] = []
    x, y = n, m

    for d in range(len(trace) - 1, 0, -1):
        prev = trace[d - 1]
        k = x - y
        if k == -d or (k != d and prev[k - 1 + d - 1] < prev[k + 1 + d - 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = prev[prev_k + d - 1]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            moves.append(("equal", x, y))

        if x == prev_x:
            moves.append(("insert", prev_x, prev_y))
        else:
            moves.append(("delete", prev_x, prev_y))
        x, y = prev_x, prev_y

    # Leading snake of round 0
    while x > 0 and y > 0:
        x -= 1
        y -= 1
        moves.append(("equal", x, y))

    moves.reverse()
    return moves


def _shortest_edit(
    a: Sequence[Hashable], b: Sequence[Hashable], max_edits: int = MAX_EDIT_DISTANCE
) -> list[tuple[str, int, int]] | None:
    """Compute a shortest edit script from a to b (Myers greedy algorithm).

    Only the diagonals reachable in each round are saved, so memory grows
    with the square of the edit distance rather than with the input size.

    Returns:
        The moves of the edit script, or None if it needs more than
        max_edits insertions and deletions.
    """
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    trace: list[list[int]] = []

    for d in range(min(max_d, max_edits) + 1):
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                trace.append(v[offset - d : offset + d + 1])
                return _backtrack(trace, n, m)
        trace.append(v[offset - d : offset + d + 1])

    return None


def _moves_to_changes(moves: list[tuple[str, int, int]], prefix: int) -> list[_Change]:
    """Collapse consecutive edit moves into change regions."""
    changes: list[_Change] = []
    current: _Change | None = None
    for tag, i, j in moves:
        i += prefix
        j += prefix
        if tag == "equal":
            current = None
            continue
        if current is None:
            current = _Change(i, i, j, j)
            changes.append(current)
        if tag == "delete":
            current.i2 = i + 1
        else:
            current.j2 = j + 1
    return changes


def _opcode_changes(
    a: Sequence[Hashable], b: Sequence[Hashable], prefix: int
) -> list[_Change]:
    """Change regions from difflib's matching blocks (not always minimal)."""
    matcher = SequenceMatcher(None, a, b, autojunk=False)
    return [
        _Change(i1 + prefix, i2 + prefix, j1 + prefix, j2 + prefix)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes()
        if tag != "equal"
    ]


def compute_changes(a: Sequence[Hashable], b: Sequence[Hashable]) -> list[_Change]:
    """Compute the change regions turning sequence a into sequence b.

    The common prefix and suffix are trimmed before running the edit
    search, which keeps the common case of a small edit in a large file
    cheap. When the remaining edit distance exceeds MAX_EDIT_DISTANCE the
    regions come from difflib.SequenceMatcher instead; they are still a
    correct edit, just not guaranteed minimal.
    """
    prefix = 0
    limit = min(len(a), len(b))
    while prefix < limit and a[prefix] == b[prefix]:
        prefix += 1

    suffix = 0
    while (
        suffix < limit - prefix
        and a[len(a) - 1 - suffix] == b[len(b) - 1 - suffix]
    ):
        suffix += 1

    a_mid = a[prefix:len(a) - suffix]
    b_mid = b[prefix:len(b) - suffix]
    moves = _shortest_edit(a_mid, b_mid, MAX_EDIT_DISTANCE)
    if moves is None:
        logger.debug(
            "Edit distance over %d for %d/%d lines, using SequenceMatcher",
            MAX_EDIT_DISTANCE,
            len(a_mid),
            len(b_mid),
        )
        return _opcode_changes(a_mid, b_mid, prefix)

    return _moves_to_changes(moves, prefix)


def _group_changes(changes: list[_Change], context_lines: int) -> list[list[_Change]]:
    """Group changes whose context windows overlap or touch."""
    groups: list[list[_Change]] = []
    for change in changes:
        if groups and change.i1 - groups[-1][-1].i2 <= 2 * context_lines:
            groups[-1].append(change)
        else:
            groups.append([change])
    return groups


def _line_keys(doc: Document) -> list[tuple[str, bool]]:
    """Comparison keys: an unterminated last line differs from a terminated one."""
    keys = [(line, True) for line in doc.lines]
    if keys and not doc.final_newline:
        keys[-1] = (keys[-1][0], False)
    return keys


def _header_start(start: int, count: int) -> int:
    """1-indexed start; an empty range names the line before it."""
    return start + 1 if count else start


def build_hunks(
    original: Document, modified: Document, context_lines: int = 3
) -> list[Hunk]:
    """Compute the hunks turning original into modified.

    Args:
        original: Original document
        modified: Modified document
        context_lines: Unchanged lines to keep around each change

    Returns:
        Hunks with header counts matching their bodies.
    """
    a, b = original.lines, modified.lines
    a_last = len(a) - 1 if not original.final_newline else -1
    b_last = len(b) - 1 if not modified.final_newline else -1

    hunks: list[Hunk] = []
    for group in _group_changes(compute_changes(_line_keys(original), _line_keys(modified)), context_lines):
        first, last = group[0], group[-1]
        i_lo = max(0, first.i1 - context_lines)
        i_hi = min(len(a), last.i2 + context_lines)
        j_lo = first.j1 - (first.i1 - i_lo)
        j_hi = last.j2 + (i_hi - last.i2)

        body: list[DiffLine] = []
        i = i_lo
        for change in group:
            for ci in range(i, change.i1):
                body.append(DiffLine(LineKind.CONTEXT, a[ci], ci == a_last))
            for di in range(change.i1, change.i2):
                body.append(DiffLine(LineKind.DELETION, a[di], di == a_last))
            for aj in range(change.j1, change.j2):
                body.append(DiffLine(LineKind.ADDITION, b[aj], aj == b_last))
            i = change.i2
        for ci in range(i, i_hi):
            body.append(DiffLine(LineKind.CONTEXT, a[ci], ci == a_last))

        old_count = i_hi - i_lo
        new_count = j_hi - j_lo
        hunks.append(
            Hunk(
                old_start=_header_start(i_lo, old_count),
                old_count=old_count,
                new_start=_header_start(j_lo, new_count),
                new_count=new_count,
                lines=body,
            )
        )

    return hunks


def render_hunks(hunks: list[Hunk], source_label: str, target_label: str) -> str:
    """Render hunks as unified diff text with a ---/+++ header."""
    out = [f"--- {source_label}", f"+++ {target_label}"]
    for hunk in hunks:
        out.append(hunk.header())
        for line in hunk.lines:
            out.append(line.render())
            if line.no_newline:
                out.append(NO_NEWLINE_MARKER)
    return "\n".join(out) + "\n"


def create_diff(
    original: str,
    modified: str,
    source_label: str = "original",
    target_label: str = "modified",
    context_lines: int = 3,
) -> str:
    """Create a unified diff between two texts.

    Both texts are compared with their byte-order marks stripped, split into
    lines at each "\\n" or "\\r\\n". Terminators are not part of the
    comparison, so a change of line ending alone is not a difference. A
    last line without a terminating newline is marked with
    '\\ No newline at end of file'.

    Args:
        original: Original text
        modified: Modified text
        source_label: Label for the --- line
        target_label: Label for the +++ line
        context_lines: Unchanged lines of context around each change

    Returns:
        Unified diff text ending in a newline, or "" if nothing changed.

    Raises:
        ValueError: If context_lines is negative.

    Example:
        >>> print(create_diff("a\\nb\\nc\\n", "a\\nX\\nc\\n", "f", "f", 1), end="")
        --- f
        +++ f
        @@ -1,3 +1,3 @@
         a
        -b
        +X
         c
    """
    if context_lines < 0:
        raise ValueError(f"context_lines must be >= 0, got {context_lines}")

    hunks = build_hunks(
        Document.from_text(original), Document.from_text(modified), context_lines
    )
    if not hunks:
        return ""

    logger.debug(
        "Created diff %s -> %s: %d hunk(s), %d context line(s)",
        source_label,
        target_label,
        len(hunks),
        context_lines,
    )
    return render_hunks(hunks, source_label, target_label)
