"""Unit tests for patchbridge.patch.validator module."""

from patchbridge.patch import (
    ApplyMode,
    DiffLine,
    FileDiff,
    Hunk,
    LineKind,
    check_diff,
    validate_diff,
    validate_hunk_counts,
)

VALID_DIFF = """\
--- a/test.py
+++ b/test.py
@@ -1,3 +1,4 @@
 line1
-line2
+new_line2a
+new_line2b
 line3
"""


class TestValidateHunkCounts:
    """Tests for validate_hunk_counts()."""

    def test_matching_counts(self) -> None:
        hunk = Hunk(1, 2, 1, 2, [DiffLine(LineKind.CONTEXT, "a"), DiffLine(LineKind.DELETION, "b"),
                                 DiffLine(LineKind.ADDITION, "c")])
        assert validate_hunk_counts(hunk) is None

    def test_mismatched_counts(self) -> None:
        hunk = Hunk(7, 5, 7, 5, [DiffLine(LineKind.DELETION, "b"), DiffLine(LineKind.ADDITION, "c")])

        message = validate_hunk_counts(hunk)

        assert message is not None
        assert "Hunk at line 7" in message
        assert "-5,+5" in message
        assert "-1,+1" in message


class TestValidateDiff:
    """Tests for validate_diff()."""

    def test_valid_diff(self) -> None:
        """A well-formed diff passes with nothing to fix."""
        result = validate_diff(VALID_DIFF)

        assert result.valid is True
        assert result.errors == []
        assert result.warnings == []
        assert result.fixed_diff is None
        assert result.applicable is False

    def test_count_mismatch_is_fixed(self) -> None:
        """Wrong header counts are a warning with a corrected copy."""
        diff = "--- a/f\n+++ b/f\n@@ -1,5 +1,5 @@\n a\n-b\n+c\n"

        result = validate_diff(diff)

        assert result.valid is True
        assert len(result.warnings) == 1
        assert "line count mismatch" in result.warnings[0]
        assert result.fixed_diff is not None
        fixed = result.fixed_diff[0].hunks[0]
        assert (fixed.old_count, fixed.new_count) == (2, 2)
        assert fixed.lines == [
            DiffLine(LineKind.CONTEXT, "a"),
            DiffLine(LineKind.DELETION, "b"),
            DiffLine(LineKind.ADDITION, "c"),
        ]

    def test_parse_error(self) -> None:
        result = validate_diff("--- a/f\n+++ b/f\n@@ bogus @@\n")

        assert result.valid is False
        assert "Malformed hunk header" in result.errors[0]

    def test_no_content(self) -> None:
        result = validate_diff("just some prose\n")

        assert result.valid is False
        assert result.errors == ["No valid diff content found"]

    def test_file_header_without_hunks(self) -> None:
        result = validate_diff("--- a/f.txt\n+++ b/f.txt\n")

        assert result.valid is False
        assert result.errors == ["No hunks found for f.txt"]

    def test_accepts_parsed_file_diffs(self) -> None:
        fd = FileDiff("f", "f", [Hunk(1, 1, 1, 1, [DiffLine(LineKind.DELETION, "a"),
                                                  DiffLine(LineKind.ADDITION, "b")])])

        assert validate_diff(fd).valid is True
        assert validate_diff([fd]).valid is True


class TestCheckDiff:
    """Tests for check_diff() dry runs."""

    def test_applicable(self) -> None:
        result = check_diff("line1\nline2\nline3\n", VALID_DIFF)

        assert result.valid is True
        assert result.applicable is True
        assert result.conflicts == []

    def test_conflict(self) -> None:
        result = check_diff("line1\nsomething else\nline3\n", VALID_DIFF)

        assert result.valid is True
        assert result.applicable is False
        assert len(result.conflicts) == 1
        assert result.conflicts[0].index == 0
        assert "context mismatch" in (result.conflicts[0].reason or "")

    def test_drift_reported_as_warning(self) -> None:
        result = check_diff("header\nline1\nline2\nline3\n", VALID_DIFF)

        assert result.applicable is True
        assert any("offset +1" in w for w in result.warnings)

    def test_invalid_diff_skips_dry_run(self) -> None:
        result = check_diff("anything\n", "no diff here\n")

        assert result.valid is False
        assert result.applicable is False

    def test_miscounted_diff_checked_after_fix(self) -> None:
        diff = "--- a/f\n+++ b/f\n@@ -1,5 +1,5 @@\n a\n-b\n+c\n"

        result = check_diff("a\nb\n", diff)

        assert result.applicable is True
        assert result.fixed_diff is not None

    def test_tolerant_mode(self) -> None:
        result = check_diff("line1  \nline2\nline3\n", VALID_DIFF)
        assert result.applicable is False

        result = check_diff("line1  \nline2\nline3\n", VALID_DIFF, mode=ApplyMode.TOLERANT)
        assert result.applicable is True
