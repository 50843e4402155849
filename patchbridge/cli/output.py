"""Rich-based output utilities for the patchbridge CLI."""

import sys

from rich.console import Console
from rich.text import Text

from patchbridge.patch.types import ApplyReport, HunkResult
from patchbridge.patch.validator import ValidationResult

# Shared console instances
console = Console(soft_wrap=True)
error_console = Console(stderr=True, soft_wrap=True)


def write_raw(text: str) -> None:
    """Write machine-readable output (diffs, content) to stdout unstyled."""
    sys.stdout.write(text)
    sys.stdout.flush()


def print_error(message: str) -> None:
    """Print an error message in red to stderr.

    Args:
        message: The error message to display.
    """
    error_console.print(Text.assemble(("Error:", "bold red"), " ", message))


def print_info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The info message to display.
    """
    console.print(Text(message, style="dim"))


def _print_failure_details(result: HunkResult) -> None:
    """Print what a failed hunk expected, what was found and a suggestion."""
    if result.expected_context:
        console.print(Text("    Expected:", style="dim"))
        for line in result.expected_context:
            console.print(Text(f"      {line}"))
    if result.expected_context or result.actual_context:
        console.print(Text("    Found:", style="dim"))
        for line in result.actual_context:
            console.print(Text(f"      {line}"))
    if result.suggestion:
        console.print(Text(f"    Suggestion: {result.suggestion}", style="dim"))


def print_apply_report(report: ApplyReport, path: str) -> None:
    """Print a per-hunk application report."""
    if report.success:
        style = "bold green"
    elif report.hunks_applied:
        style = "bold yellow"
    else:
        style = "bold red"

    console.print(
        Text(f"{path}: {report.hunks_applied}/{report.hunks_total} hunk(s) applied", style=style)
    )

    for result in report.per_hunk:
        if not result.applied:
            console.print(Text(f"  Hunk {result.index + 1} failed: {result.reason}", style="red"))
            _print_failure_details(result)
            continue
        line = Text(
            f"  Hunk {result.index + 1}: applied at line {result.start_line} "
            f"(+{result.lines_added} -{result.lines_removed})"
        )
        if result.offset:
            line.append(f" offset {result.offset:+d}", style="dim")
        console.print(line)

    for warning in report.warnings:
        console.print(Text(f"  Warning: {warning}", style="yellow"))


def print_validation(result: ValidationResult, path: str) -> None:
    """Print a validation and dry-run report."""
    if result.valid and result.applicable:
        console.print(Text(f"{path}: diff is valid and applies cleanly", style="bold green"))
    elif result.valid:
        console.print(Text(f"{path}: diff is valid but does not apply cleanly", style="bold yellow"))
    else:
        console.print(Text(f"{path}: diff is invalid", style="bold red"))

    for error in result.errors:
        console.print(Text(f"  - {error}", style="red"))
    for conflict in result.conflicts:
        console.print(Text(f"  Hunk {conflict.index + 1} conflict: {conflict.reason}", style="red"))
        _print_failure_details(conflict)
    for warning in result.warnings:
        console.print(Text(f"  Warning: {warning}", style="yellow"))
    if result.fixed_diff is not None:
        console.print(Text("  Note: hunk counts would be auto-corrected", style="dim"))
