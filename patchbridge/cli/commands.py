"""Command handlers for the patchbridge CLI.

Exit codes:
    0: success (diff: inputs identical)
    1: some hunks failed or the diff does not apply (diff: inputs differ)
    2: hard error (malformed input, invalid ranges, bad config, I/O)
"""

import argparse
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from patchbridge.cli.arg_parser import parse_args
from patchbridge.cli.output import (
    print_apply_report,
    print_error,
    print_info,
    print_validation,
    write_raw,
)
from patchbridge.config import Config, load_config
from patchbridge.core.errors import LoadError, ParseError, PatchBridgeError
from patchbridge.core.paths import ENCODING, ENCODING_ERRORS, read_text_exact, write_text_exact
from patchbridge.patch import (
    ApplyMode,
    RangePatch,
    apply_diff,
    apply_range_patches,
    check_diff,
    create_diff,
    parse_diff,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


class RangePatchInput(BaseModel):
    """One entry of a range patch JSON file."""

    model_config = ConfigDict(extra="forbid")

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    replacement: str = ""


_range_list = TypeAdapter(list[RangePatchInput])


def configure_logging(level: int | str) -> None:
    """Send patchbridge.* logs to stderr at the given level."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))

    pb_logger = logging.getLogger("patchbridge")
    pb_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates on reconfigure
    pb_logger.handlers.clear()
    pb_logger.addHandler(handler)
    pb_logger.propagate = False


def _read_diff_text(source: str | None) -> str:
    """Read diff text from a file, or from stdin when source is None or '-'."""
    if source is None or source == "-":
        return sys.stdin.buffer.read().decode(ENCODING, ENCODING_ERRORS)
    return read_text_exact(Path(source))


def _match_options(args: argparse.Namespace, config: Config) -> dict[str, object]:
    """Merge CLI matching flags over config defaults."""
    defaults = config.apply
    mode = args.mode or defaults.mode
    return {
        "mode": ApplyMode(mode),
        "fuzzy_threshold": (
            args.fuzzy_threshold if args.fuzzy_threshold is not None else defaults.fuzzy_threshold
        ),
        "search_window": (
            args.search_window if args.search_window is not None else defaults.search_window
        ),
        "ignore_case": args.ignore_case or defaults.ignore_case,
    }


def _target_selector(diff_text: str, target: Path) -> str | None:
    """Select a file section by the target path only when the diff has several.

    Malformed diffs select nothing here; the caller reports the parse error.
    """
    try:
        file_diffs = parse_diff(diff_text)
    except ParseError:
        return None
    return str(target) if len(file_diffs) > 1 else None


def cmd_diff(args: argparse.Namespace, config: Config) -> int:
    """Print a unified diff between two files."""
    context_lines = (
        args.context_lines if args.context_lines is not None else config.diff.context_lines
    )
    if context_lines < 0:
        print_error(f"--context must be >= 0, got {context_lines}")
        return EXIT_ERROR

    original = read_text_exact(args.original)
    modified = read_text_exact(args.modified)

    diff = create_diff(
        original,
        modified,
        source_label=args.source_label or str(args.original),
        target_label=args.target_label or str(args.modified),
        context_lines=context_lines,
    )
    if not diff:
        return EXIT_OK

    write_raw(diff)
    return EXIT_FAILED


def cmd_apply(args: argparse.Namespace, config: Config) -> int:
    """Apply a unified diff to a file."""
    diff_text = _read_diff_text(args.diff)
    original = read_text_exact(args.target)

    result = apply_diff(
        original,
        diff_text,
        path=_target_selector(diff_text, args.target),
        stop_on_error=args.stop_on_error,
        **_match_options(args, config),  # type: ignore[arg-type]
    )
    report = result.result
    print_apply_report(report, str(args.target))

    if args.dry_run:
        print_info("Dry run - no changes written")
    elif report.hunks_applied and (report.success or args.partial):
        destination = args.output or args.target
        write_text_exact(destination, result.content)
        logger.info("Wrote %s", destination)
    elif not report.success:
        print_info("No changes written (use --partial to keep applied hunks)")

    return EXIT_OK if report.success else EXIT_FAILED


def cmd_ranges(args: argparse.Namespace, config: Config) -> int:
    """Apply character-range patches from a JSON file."""
    raw = read_text_exact(args.patches)
    try:
        entries = _range_list.validate_python(json.loads(raw))
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON in {args.patches}: {e}") from e
    except ValidationError as e:
        raise LoadError(f"Invalid range patches in {args.patches}: {e}") from e

    patches = [RangePatch(e.start, e.end, e.replacement) for e in entries]
    original = read_text_exact(args.target)
    content = apply_range_patches(original, patches)

    print_info(f"{args.target}: {len(patches)} range patch(es) applied")
    if args.dry_run:
        print_info("Dry run - no changes written")
    else:
        write_text_exact(args.output or args.target, content)
    return EXIT_OK


def cmd_check(args: argparse.Namespace, config: Config) -> int:
    """Validate a diff and dry-run it against a file."""
    diff_text = _read_diff_text(args.diff)
    original = read_text_exact(args.target)

    result = check_diff(
        original,
        diff_text,
        path=_target_selector(diff_text, args.target),
        **_match_options(args, config),  # type: ignore[arg-type]
    )
    print_validation(result, str(args.target))
    return EXIT_OK if result.valid and result.applicable else EXIT_FAILED


COMMANDS: dict[str, Callable[[argparse.Namespace, Config], int]] = {
    "diff": cmd_diff,
    "apply": cmd_apply,
    "ranges": cmd_ranges,
    "check": cmd_check,
}


def main(argv: list[str] | None = None) -> int:
    """Entry point for the patchbridge command."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except PatchBridgeError as e:
        print_error(e.message)
        return EXIT_ERROR

    configure_logging(logging.DEBUG if args.verbose else config.log_level)

    try:
        return COMMANDS[args.command](args, config)
    except PatchBridgeError as e:
        print_error(e.message)
        return EXIT_ERROR
    except OSError as e:
        print_error(str(e))
        return EXIT_ERROR
