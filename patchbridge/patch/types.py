"""Types for unified diff and range patch representation.

This module provides dataclasses for representing unified diffs, raw
character-range patches, and the reports produced when applying them.
"""

from dataclasses import dataclass, field
from enum import Enum


class LineKind(str, Enum):
    """Tag of a hunk body line; the value is its unified-diff prefix."""

    CONTEXT = " "
    ADDITION = "+"
    DELETION = "-"


@dataclass(frozen=True)
class DiffLine:
    """A single line of a hunk body.

    Attributes:
        kind: Whether the line is context, an addition or a deletion
        text: Line content without prefix or terminator
        no_newline: True if followed by "\\ No newline at end of file"
    """

    kind: LineKind
    text: str
    no_newline: bool = False

    def render(self) -> str:
        """Render the line with its unified-diff prefix."""
        return f"{self.kind.value}{self.text}"


@dataclass
class Hunk:
    """A single hunk in a unified diff.

    Start and count values come from the @@ header and are treated as hints
    for locating the hunk, not as authoritative addresses.

    Attributes:
        old_start: Line number in original file (1-indexed, 0 for empty)
        old_count: Number of lines from original (context + removed)
        new_start: Line number in new file (1-indexed, 0 for empty)
        new_count: Number of lines in new version (context + added)
        lines: Ordered body lines
        section: Optional function/class context after the closing @@
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = field(default_factory=list)
    section: str = ""

    def count_removals(self) -> int:
        """Count lines being removed (- prefix)."""
        return sum(1 for line in self.lines if line.kind is LineKind.DELETION)

    def count_additions(self) -> int:
        """Count lines being added (+ prefix)."""
        return sum(1 for line in self.lines if line.kind is LineKind.ADDITION)

    def count_context(self) -> int:
        """Count context lines (space prefix)."""
        return sum(1 for line in self.lines if line.kind is LineKind.CONTEXT)

    def compute_counts(self) -> tuple[int, int]:
        """Compute actual old_count and new_count from lines.

        Returns:
            Tuple of (old_count, new_count) based on actual line kinds.
        """
        context = self.count_context()
        return (context + self.count_removals(), context + self.count_additions())

    def before_lines(self) -> list[DiffLine]:
        """Lines the hunk expects to find (context and deletions)."""
        return [line for line in self.lines if line.kind is not LineKind.ADDITION]

    def after_lines(self) -> list[DiffLine]:
        """Lines the hunk leaves behind (context and additions)."""
        return [line for line in self.lines if line.kind is not LineKind.DELETION]

    def header(self) -> str:
        """Render the @@ header line."""
        header = f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"
        if self.section:
            header += f" {self.section}"
        return header


@dataclass
class FileDiff:
    """All hunks targeting a single file.

    Attributes:
        source_path: Label from the --- line (without a/ prefix)
        target_path: Label from the +++ line (without b/ prefix)
        hunks: Hunks in diff order
        is_new_file: True if the source side is /dev/null
        is_deleted: True if the target side is /dev/null
    """

    source_path: str
    target_path: str
    hunks: list[Hunk] = field(default_factory=list)
    is_new_file: bool = False
    is_deleted: bool = False

    @property
    def path(self) -> str:
        """Effective file path (target for edits/creates, source for deletes)."""
        if self.is_deleted:
            return self.source_path
        return self.target_path


@dataclass(frozen=True)
class RangePatch:
    """Replacement of the half-open range [start, end) of the original text."""

    start: int
    end: int
    replacement: str = ""


@dataclass
class HunkResult:
    """Outcome of applying one hunk.

    Attributes:
        index: Position of the hunk in the diff (0-indexed)
        applied: True if the hunk was applied
        reason: Why the hunk failed (None when applied)
        start_line: 1-indexed line where the hunk landed (None when failed)
        offset: Lines between the hinted and actual position
        lines_added: Number of lines added
        lines_removed: Number of lines removed
        expected_context: Lines the hunk expected to find (failed hunks)
        actual_context: Lines found at the hinted position (failed hunks)
        suggestion: How the caller might get the hunk to apply
    """

    index: int
    applied: bool
    reason: str | None = None
    start_line: int | None = None
    offset: int = 0
    lines_added: int = 0
    lines_removed: int = 0
    expected_context: list[str] = field(default_factory=list)
    actual_context: list[str] = field(default_factory=list)
    suggestion: str | None = None


@dataclass
class ApplyReport:
    """Per-hunk report of a diff application.

    Counts and success are derived from per_hunk so they always agree.
    """

    per_hunk: list[HunkResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def hunks_total(self) -> int:
        return len(self.per_hunk)

    @property
    def hunks_applied(self) -> int:
        return sum(1 for result in self.per_hunk if result.applied)

    @property
    def success(self) -> bool:
        """True only when every hunk applied."""
        return self.hunks_applied == self.hunks_total

    @property
    def applied_hunks(self) -> list[int]:
        """Indices of successfully applied hunks."""
        return [result.index for result in self.per_hunk if result.applied]

    @property
    def failed_hunks(self) -> list[tuple[int, str]]:
        """List of (index, reason) for failed hunks."""
        return [
            (result.index, result.reason or "unknown error")
            for result in self.per_hunk
            if not result.applied
        ]


@dataclass
class ApplyResult:
    """Best-effort patched content plus the report describing it."""

    content: str
    result: ApplyReport

    @property
    def success(self) -> bool:
        return self.result.success
