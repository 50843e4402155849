"""Validator for unified diffs.

This module checks diffs for structural problems, detects common
machine-generated diff errors (wrong hunk counts), auto-fixes them where
possible, and dry-runs diffs against target content.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from patchbridge.core.errors import ParseError
from patchbridge.patch.applier import ApplyMode, apply_diff
from patchbridge.patch.parser import parse_diff
from patchbridge.patch.types import FileDiff, Hunk, HunkResult


@dataclass
class ValidationResult:
    """Result of diff validation.

    Attributes:
        valid: True if the diff is structurally sound
        applicable: True if a dry run applied every hunk
        errors: Critical problems that prevent application
        warnings: Non-critical issues (diff may still apply)
        conflicts: Per-hunk results of hunks that failed the dry run
        fixed_diff: Auto-corrected file diffs (if any hunk was fixed)
    """

    valid: bool
    applicable: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    conflicts: list[HunkResult] = field(default_factory=list)
    fixed_diff: list[FileDiff] | None = None


def validate_hunk_counts(hunk: Hunk) -> str | None:
    """Check that a hunk's header counts match its lines.

    Returns:
        Description of the mismatch, or None if the counts agree.
    """
    actual_old, actual_new = hunk.compute_counts()
    if actual_old == hunk.old_count and actual_new == hunk.new_count:
        return None

    return (
        f"Hunk at line {hunk.old_start}: line count mismatch. "
        f"Header claims -{hunk.old_count},+{hunk.new_count} "
        f"but actual is -{actual_old},+{actual_new}"
    )


def _fix_hunk_counts(hunk: Hunk) -> Hunk:
    """Create a copy of hunk with header counts recomputed from its lines."""
    actual_old, actual_new = hunk.compute_counts()
    return Hunk(
        old_start=hunk.old_start,
        old_count=actual_old,
        new_start=hunk.new_start,
        new_count=actual_new,
        lines=list(hunk.lines),
        section=hunk.section,
    )


def _as_file_diffs(diff: str | FileDiff | Sequence[FileDiff]) -> list[FileDiff]:
    if isinstance(diff, str):
        return parse_diff(diff)
    if isinstance(diff, FileDiff):
        return [diff]
    return list(diff)


def validate_diff(diff: str | FileDiff | Sequence[FileDiff]) -> ValidationResult:
    """Validate the structure of a diff without a target.

    Checks:
    1. Diff text parses
    2. At least one file section exists, and each has hunks
    3. Hunk header counts match the hunk bodies

    Auto-fixes:
    - Line count mismatches (recomputes header from actual lines)

    Args:
        diff: Diff text, a FileDiff, or a list of FileDiffs

    Returns:
        ValidationResult; `applicable` is always False here since no
        target was checked.
    """
    try:
        file_diffs = _as_file_diffs(diff)
    except ParseError as e:
        return ValidationResult(valid=False, errors=[e.message])

    errors: list[str] = []
    warnings: list[str] = []
    if not file_diffs:
        errors.append("No valid diff content found")

    needs_fix = False
    fixed: list[FileDiff] = []
    for fd in file_diffs:
        if not fd.hunks and not (fd.is_new_file or fd.is_deleted):
            errors.append(f"No hunks found for {fd.path or '(unnamed)'}")

        fixed_hunks: list[Hunk] = []
        for hunk in fd.hunks:
            mismatch = validate_hunk_counts(hunk)
            if mismatch is not None:
                warnings.append(mismatch)
                needs_fix = True
                fixed_hunks.append(_fix_hunk_counts(hunk))
            else:
                fixed_hunks.append(hunk)

        fixed.append(
            FileDiff(
                source_path=fd.source_path,
                target_path=fd.target_path,
                hunks=fixed_hunks,
                is_new_file=fd.is_new_file,
                is_deleted=fd.is_deleted,
            )
        )

    return ValidationResult(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        fixed_diff=fixed if needs_fix and not errors else None,
    )


def check_diff(
    original: str,
    diff: str | FileDiff | Sequence[FileDiff],
    path: str | None = None,
    mode: ApplyMode = ApplyMode.STRICT,
    **apply_options: object,
) -> ValidationResult:
    """Validate a diff and dry-run it against target content.

    Nothing is written; the patched content of the dry run is discarded.

    Args:
        original: Content the diff should apply to
        diff: Diff text, a FileDiff, or a list of FileDiffs
        path: File section to check (first section if omitted)
        mode: Matching strictness for the dry run
        **apply_options: Forwarded to apply_diff (fuzzy_threshold,
            search_window, ignore_case)

    Returns:
        ValidationResult with `applicable` reflecting the dry run and
        failed hunks listed in `conflicts`.
    """
    result = validate_diff(diff)
    if not result.valid:
        return result

    # Dry-run the count-corrected diff when one was produced
    target = result.fixed_diff if result.fixed_diff is not None else _as_file_diffs(diff)
    dry_run = apply_diff(original, target, path=path, mode=mode, **apply_options)  # type: ignore[arg-type]

    report = dry_run.result
    result.applicable = report.success
    result.conflicts = [r for r in report.per_hunk if not r.applied]
    result.warnings.extend(report.warnings)
    return result
