"""Character-range patches.

Range patches replace exact half-open offset ranges of the raw text. There
is no searching: offsets are taken against the text as passed in, including
any leading byte-order mark.
"""

import logging
from collections.abc import Sequence

from patchbridge.core.errors import InvalidRangeError, OverlapError
from patchbridge.core.text import preserve_marker
from patchbridge.patch.types import RangePatch

logger = logging.getLogger(__name__)


def check_range_patches(text: str, patches: Sequence[RangePatch]) -> None:
    """Validate a batch of range patches against text without applying it.

    Ranges that merely touch (end of one == start of the other) are allowed,
    as are several zero-length insertions at the same offset.

    Raises:
        InvalidRangeError: If a range is inverted or outside the text.
        OverlapError: If two ranges intersect.
    """
    length = len(text)
    for patch in patches:
        if not 0 <= patch.start <= patch.end <= length:
            raise InvalidRangeError(patch, length)

    ordered = sorted(patches, key=lambda p: (p.start, p.end))
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.start < prev.end:
            raise OverlapError(prev, cur)


def apply_range_patches(text: str, patches: Sequence[RangePatch]) -> str:
    """Apply character-range replacements to text.

    All offsets refer to the original, unmodified text. Patches are applied
    back-to-front (descending start) so no replacement shifts the offsets of
    another. The whole batch is validated first; on error nothing is
    applied. Insertions at the same offset keep their list order.

    The result begins with a byte-order mark iff text did.

    Args:
        text: Raw original text
        patches: Range patches with offsets into text

    Returns:
        The patched text.

    Raises:
        InvalidRangeError: If a range is inverted or outside the text.
        OverlapError: If two ranges intersect.

    Example:
        >>> apply_range_patches("hello world", [RangePatch(0, 5, "goodbye")])
        'goodbye world'
    """
    check_range_patches(text, patches)

    indexed = sorted(
        enumerate(patches),
        key=lambda item: (item[1].start, item[1].end, item[0]),
        reverse=True,
    )

    content = text
    for _, patch in indexed:
        logger.debug(
            "Applying range patch [%d, %d) -> %d chars",
            patch.start,
            patch.end,
            len(patch.replacement),
        )
        content = content[: patch.start] + patch.replacement + content[patch.end :]

    logger.debug("Applied %d range patch(es)", len(patches))
    return preserve_marker(text, content)
