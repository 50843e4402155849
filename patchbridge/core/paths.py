"""File reading and writing that keeps text byte-exact.

Files are decoded as UTF-8 with surrogateescape so undecodable bytes,
line endings and byte-order marks survive a read/write round trip.
"""

import os
import tempfile
from pathlib import Path

ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


def read_text_exact(path: Path) -> str:
    """Read a file as text without newline translation or BOM stripping."""
    return path.read_bytes().decode(ENCODING, ENCODING_ERRORS)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write bytes to a file atomically using temp file + rename."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, str(path))
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_text_exact(path: Path, text: str) -> None:
    """Atomically write text encoded the same way read_text_exact decodes it."""
    atomic_write_bytes(path, text.encode(ENCODING, ENCODING_ERRORS))
