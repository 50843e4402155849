"""Unit tests for patchbridge.patch.synthesizer module."""

import pytest

from patchbridge.core.text import MARKER
from patchbridge.patch import create_diff, parse_diff, synthesizer
from patchbridge.patch.synthesizer import _shortest_edit, compute_changes


def _edit_size(a: list[str], b: list[str]) -> int:
    return sum((c.i2 - c.i1) + (c.j2 - c.j1) for c in compute_changes(a, b))


def _rebuild(a: list[str], b: list[str]) -> list[str]:
    """Apply the computed change regions to a, back to front."""
    result = list(a)
    for c in reversed(compute_changes(a, b)):
        result[c.i1:c.i2] = b[c.j1:c.j2]
    return result


class TestComputeChanges:
    """Tests for the shortest edit script."""

    def test_identical(self) -> None:
        assert compute_changes(["a", "b"], ["a", "b"]) == []

    def test_single_replacement(self) -> None:
        changes = compute_changes(["a", "b", "c"], ["a", "X", "c"])

        assert len(changes) == 1
        c = changes[0]
        assert (c.i1, c.i2, c.j1, c.j2) == (1, 2, 1, 2)

    def test_pure_insertion(self) -> None:
        changes = compute_changes(["a", "c"], ["a", "b", "c"])

        assert len(changes) == 1
        c = changes[0]
        assert (c.i1, c.i2, c.j1, c.j2) == (1, 1, 1, 2)

    def test_edit_script_is_minimal(self) -> None:
        """The classic abcabba -> cbabac example needs exactly five edits."""
        assert _edit_size(list("abcabba"), list("cbabac")) == 5

    def test_everything_replaced(self) -> None:
        assert _edit_size(["a", "b"], ["c", "d", "e"]) == 5

    def test_empty_sides(self) -> None:
        assert _edit_size([], ["a", "b"]) == 2
        assert _edit_size(["a", "b"], []) == 2

    def test_edit_search_gives_up_past_limit(self) -> None:
        assert _shortest_edit(list("abc"), list("xyz"), max_edits=5) is None
        assert _shortest_edit(list("abc"), list("xyz"), max_edits=6) is not None

    def test_large_rewrite_is_one_region(self) -> None:
        a = [f"old {i}" for i in range(1500)]
        b = [f"new {i}" for i in range(1500)]

        changes = compute_changes(a, b)

        assert [(c.i1, c.i2, c.j1, c.j2) for c in changes] == [(0, 1500, 0, 1500)]

    @pytest.mark.parametrize("limit", [0, 2, synthesizer.MAX_EDIT_DISTANCE])
    def test_changes_rebuild_target(self, monkeypatch: pytest.MonkeyPatch, limit: int) -> None:
        """Both the minimal search and the SequenceMatcher fallback give a valid edit."""
        monkeypatch.setattr(synthesizer, "MAX_EDIT_DISTANCE", limit)
        a = list("the quick brown fox jumps over the lazy dog")
        b = list("a quick brown cat leaps over lazy dogs")

        assert _rebuild(a, b) == b


class TestCreateDiff:
    """Tests for create_diff() output text."""

    def test_concrete_example(self) -> None:
        """One replaced line with one line of context."""
        diff = create_diff("a\nb\nc\n", "a\nX\nc\n", "f.cs", "f.cs", 1)

        assert diff == "--- f.cs\n+++ f.cs\n@@ -1,3 +1,3 @@\n a\n-b\n+X\n c\n"

    def test_identical_texts(self) -> None:
        """Identical inputs produce no diff at all."""
        assert create_diff("same\n", "same\n") == ""
        assert create_diff("", "") == ""

    def test_negative_context_rejected(self) -> None:
        with pytest.raises(ValueError):
            create_diff("a\n", "b\n", context_lines=-1)

    def test_default_labels(self) -> None:
        diff = create_diff("a\n", "b\n")
        assert diff.startswith("--- original\n+++ modified\n")

    def test_zero_context(self) -> None:
        diff = create_diff("a\nb\nc\n", "a\nX\nc\n", "f", "f", 0)
        assert diff == "--- f\n+++ f\n@@ -2,1 +2,1 @@\n-b\n+X\n"

    def test_zero_context_insertion_names_previous_line(self) -> None:
        """An empty old range starts at the line before the insertion."""
        diff = create_diff("a\nc\n", "a\nb\nc\n", "f", "f", 0)
        assert diff == "--- f\n+++ f\n@@ -1,0 +2,1 @@\n+b\n"

    def test_create_file(self) -> None:
        diff = create_diff("", "x\n", "f", "f")
        assert diff == "--- f\n+++ f\n@@ -0,0 +1,1 @@\n+x\n"

    def test_delete_everything(self) -> None:
        diff = create_diff("x\n", "", "f", "f")
        assert diff == "--- f\n+++ f\n@@ -1,1 +0,0 @@\n-x\n"

    def test_context_clipped_at_file_edges(self) -> None:
        diff = create_diff("a\nb\n", "a\nB\n", "f", "f", 3)
        assert "@@ -1,2 +1,2 @@" in diff

    def test_missing_final_newline_marked(self) -> None:
        diff = create_diff("a\nb", "a\nc", "f", "f")

        assert diff == (
            "--- f\n+++ f\n@@ -1,2 +1,2 @@\n a\n-b\n"
            "\\ No newline at end of file\n+c\n"
            "\\ No newline at end of file\n"
        )

    def test_adding_final_newline(self) -> None:
        """Only the newline changes, but the last line is still replaced."""
        diff = create_diff("a\nb", "a\nb\n", "f", "f")

        assert "-b\n\\ No newline at end of file\n+b\n" in diff

    def test_distant_changes_make_separate_hunks(self) -> None:
        original = "".join(f"line{i}\n" for i in range(1, 21))
        modified = original.replace("line2\n", "LINE2\n").replace("line18\n", "LINE18\n")

        diff = create_diff(original, modified, "f", "f", 2)

        hunks = parse_diff(diff)[0].hunks
        assert len(hunks) == 2
        assert hunks[0].header() == "@@ -1,4 +1,4 @@"
        assert hunks[1].header() == "@@ -16,5 +16,5 @@"

    def test_nearby_changes_share_a_hunk(self) -> None:
        """Changes separated by at most 2 * context lines are merged."""
        original = "".join(f"line{i}\n" for i in range(1, 11))
        modified = original.replace("line3\n", "X\n").replace("line6\n", "Y\n")

        diff = create_diff(original, modified, "f", "f", 1)

        hunks = parse_diff(diff)[0].hunks
        assert len(hunks) == 1
        assert hunks[0].header() == "@@ -2,6 +2,6 @@"

    def test_header_counts_match_bodies(self) -> None:
        original = "".join(f"{i}\n" for i in range(30))
        modified = original.replace("5\n", "").replace("20\n", "20\nnew\nnew\n")

        for hunk in parse_diff(create_diff(original, modified))[0].hunks:
            assert hunk.compute_counts() == (hunk.old_count, hunk.new_count)

    def test_crlf_inputs_produce_lf_diff(self) -> None:
        diff = create_diff("a\r\nb\r\n", "a\r\nc\r\n", "f", "f")

        assert "\r" not in diff
        assert diff.endswith(" a\n-b\n+c\n")

    def test_marker_ignored(self) -> None:
        """Byte-order marks never show up as changed content."""
        assert create_diff(MARKER + "a\n", "a\n") == ""
        diff = create_diff(MARKER + "a\nb\n", MARKER + "a\nc\n", "f", "f")
        assert MARKER not in diff
