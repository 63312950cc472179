"""Expansion of the filename pattern into the list of local paths."""

from __future__ import annotations

import glob
import logging

from drive_upload.exceptions import NoFilesMatchedError, PatternError

logger = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> None:
    """Reject patterns with an unterminated character class.

    The glob module treats such patterns as literal text and silently matches
    nothing useful, so they are reported as errors instead.

    Raises:
        PatternError: If the pattern is malformed.
    """
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "[":
            # A ']' right after '[' or '[!' is a literal member of the class.
            j = i + 1
            if j < len(pattern) and pattern[j] == "!":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close == -1:
                raise PatternError(
                    f"Invalid filename pattern: unterminated '[' at {i} in {pattern!r}"
                )
            i = close + 1
            continue
        i += 1


def expand_files(pattern: str) -> list[str]:
    """Expand ``pattern`` into a sorted list of matching paths.

    ``**`` matches across directories and hidden files are included.
    Directories that match are returned too; the upload step skips them.

    Args:
        pattern: Glob pattern, relative to the working directory or absolute.

    Returns:
        Matching paths in lexicographic order.

    Raises:
        PatternError: If the pattern is malformed.
        NoFilesMatchedError: If nothing matches.
    """
    validate_pattern(pattern)
    files = sorted(glob.glob(pattern, recursive=True, include_hidden=True))
    logger.info("files: %s", files)
    if not files:
        raise NoFilesMatchedError(f"No file found! pattern: {pattern}")
    return files
