"""Line and path-segment splitting for raw ``git ls-files`` output.

Both splitters are generators over the input string and never raise.
Overlong tokens are truncated to a fixed width while the scan still resumes
at the correct position, so one bad line cannot corrupt the ones after it.
"""

from __future__ import annotations

from collections.abc import Iterator

MAX_LINE_LENGTH = 4_096
MAX_SEGMENT_LENGTH = 255


def _iter_tokens(text: str, separator: str, max_length: int) -> Iterator[str]:
    """Yield non-empty tokens between runs of ``separator``."""
    if not text:
        return
    if not separator:
        yield text[: max(0, max_length)]
        return

    width = max(0, max_length)
    length = len(text)
    pos = 0
    while pos < length:
        end = text.find(separator, pos)
        if end < 0:
            end = length
        if end > pos:
            token = text[pos:end]
            yield token if len(token) <= width else token[:width]
        pos = end + len(separator)


def iter_lines(text: str, max_length: int = MAX_LINE_LENGTH) -> Iterator[str]:
    """Yield non-empty lines of ``text``, truncating lines over ``max_length``."""
    return _iter_tokens(text, "\n", max_length)


def iter_segments(path: str, separator: str = "/", max_length: int = MAX_SEGMENT_LENGTH) -> Iterator[str]:
    """Yield non-empty segments of ``path`` split on ``separator``."""
    return _iter_tokens(path, separator, max_length)


__all__ = [
    "MAX_LINE_LENGTH",
    "MAX_SEGMENT_LENGTH",
    "iter_lines",
    "iter_segments",
]
