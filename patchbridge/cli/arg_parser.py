"""Argument parsing for the patchbridge CLI."""

import argparse
from pathlib import Path


def add_match_args(parser: argparse.ArgumentParser) -> None:
    """Add hunk matching options to a parser.

    Defaults are None so unset flags fall back to the loaded config.
    """
    parser.add_argument(
        "--mode",
        choices=["strict", "tolerant", "fuzzy"],
        default=None,
        help="Matching strictness (default: from config, strict)",
    )
    parser.add_argument(
        "--fuzzy-threshold",
        dest="fuzzy_threshold",
        type=float,
        default=None,
        help="Similarity threshold for fuzzy mode, 0.5-1.0 (default: from config, 0.8)",
    )
    parser.add_argument(
        "--search-window",
        dest="search_window",
        type=int,
        default=None,
        help="Lines searched around each hunk's hinted position (default: from config, 50)",
    )
    parser.add_argument(
        "--ignore-case",
        dest="ignore_case",
        action="store_true",
        help="Compare lines case-insensitively",
    )


def add_output_args(parser: argparse.ArgumentParser) -> None:
    """Add --dry-run and --output arguments to a parser."""
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Report what would change without writing",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write the result here instead of overwriting the target",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="patchbridge",
        description="Create and apply unified diffs and range patches to text files",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: ~/.patchbridge/config.json merged with ./.patchbridge/config.json)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # patchbridge diff ORIGINAL MODIFIED
    diff_parser = subparsers.add_parser(
        "diff",
        help="Print a unified diff between two files",
    )
    diff_parser.add_argument("original", type=Path, help="Original file")
    diff_parser.add_argument("modified", type=Path, help="Modified file")
    diff_parser.add_argument(
        "--context", "-U",
        dest="context_lines",
        type=int,
        default=None,
        help="Lines of context around each change (default: from config, 3)",
    )
    diff_parser.add_argument(
        "--source-label",
        dest="source_label",
        default=None,
        help="Label for the --- line (default: original path)",
    )
    diff_parser.add_argument(
        "--target-label",
        dest="target_label",
        default=None,
        help="Label for the +++ line (default: modified path)",
    )

    # patchbridge apply TARGET [DIFF]
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply a unified diff to a file",
    )
    apply_parser.add_argument("target", type=Path, help="File to patch")
    apply_parser.add_argument(
        "diff",
        nargs="?",
        default=None,
        help="Diff file to read (default: stdin)",
    )
    add_match_args(apply_parser)
    add_output_args(apply_parser)
    apply_parser.add_argument(
        "--partial",
        action="store_true",
        help="Write the result even if some hunks failed",
    )
    apply_parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Do not attempt hunks after the first one that fails",
    )

    # patchbridge ranges TARGET PATCHES
    ranges_parser = subparsers.add_parser(
        "ranges",
        help="Apply character-range patches from a JSON file",
    )
    ranges_parser.add_argument("target", type=Path, help="File to patch")
    ranges_parser.add_argument(
        "patches",
        type=Path,
        help='JSON list of {"start": int, "end": int, "replacement": str}',
    )
    add_output_args(ranges_parser)

    # patchbridge check TARGET [DIFF]
    check_parser = subparsers.add_parser(
        "check",
        help="Validate a diff and dry-run it against a file",
    )
    check_parser.add_argument("target", type=Path, help="File the diff targets")
    check_parser.add_argument(
        "diff",
        nargs="?",
        default=None,
        help="Diff file to read (default: stdin)",
    )
    add_match_args(check_parser)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
