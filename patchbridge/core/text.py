"""Line and marker utilities shared by the diff engine.

Line-numbered operations (parsing, synthesizing, applying hunks) work on
marker-stripped text split into lines at each "\\n" or "\\r\\n". Character-offset
operations work on the raw text so caller offsets are never shifted.
"""

from dataclasses import dataclass, field

# Byte-order mark as it appears in decoded text
MARKER = "\ufeff"


def detect_line_ending(text: str) -> str:
    """Detect the line ending style from the first newline in text.

    Returns:
        "\\r\\n" if the first newline is preceded by a carriage return,
        otherwise "\\n" (also the default for text without newlines).
    """
    idx = text.find("\n")
    if idx > 0 and text[idx - 1] == "\r":
        return "\r\n"
    return "\n"


def has_marker(text: str) -> bool:
    """Check whether text starts with a byte-order mark."""
    return text.startswith(MARKER)


def strip_marker(text: str) -> str:
    """Remove one leading byte-order mark, if present."""
    if has_marker(text):
        return text[len(MARKER):]
    return text


def restore_marker(text: str, marker: bool) -> str:
    """Prepend a byte-order mark when marker is set.

    Inverse of strip_marker: restore_marker(strip_marker(t), has_marker(t)) == t.
    """
    if marker:
        return MARKER + text
    return text


def preserve_marker(original: str, new: str) -> str:
    """Give new text exactly one leading marker iff original had one."""
    return restore_marker(strip_marker(new), has_marker(original))


def split_terminated(text: str) -> list[tuple[str, str]]:
    """Split text into (line, terminator) pairs.

    Each line ends at its own "\\n" or "\\r\\n", so a document with mixed
    endings never leaves a terminator inside a line. A lone "\\r" is line
    content. An unterminated last line gets the terminator "".
    """
    if not text:
        return []
    parts = text.split("\n")
    tail = parts.pop()
    pairs = [
        (part[:-1], "\r\n") if part.endswith("\r") else (part, "\n")
        for part in parts
    ]
    if tail:
        pairs.append((tail, ""))
    return pairs


def split_lines(text: str) -> list[str]:
    """Split text into lines without terminators.

    The empty tail produced by a terminating newline is dropped.
    """
    return [line for line, _ in split_terminated(text)]


@dataclass
class Document:
    """Text broken into lines with everything needed to rebuild it exactly.

    Attributes:
        lines: Line contents without terminators (marker stripped)
        endings: Terminator of each line; "" only for an unterminated last line
        line_ending: Terminator detected from the first newline, used for
            lines that have no terminator of their own yet
        has_marker: True if the text started with a byte-order mark
    """

    lines: list[str] = field(default_factory=list)
    endings: list[str] = field(default_factory=list)
    line_ending: str = "\n"
    has_marker: bool = False

    @property
    def final_newline(self) -> bool:
        """True if the last line is terminated (or there are no lines)."""
        return not self.endings or self.endings[-1] != ""

    @classmethod
    def from_text(cls, text: str) -> "Document":
        """Build a Document from raw text."""
        body = strip_marker(text)
        pairs = split_terminated(body)
        return cls(
            lines=[line for line, _ in pairs],
            endings=[ending for _, ending in pairs],
            line_ending=detect_line_ending(body),
            has_marker=has_marker(text),
        )

    def to_text(self) -> str:
        """Rebuild the raw text (inverse of from_text)."""
        body = "".join(line + ending for line, ending in zip(self.lines, self.endings))
        return restore_marker(body, self.has_marker)
