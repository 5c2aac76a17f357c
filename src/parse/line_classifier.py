"""Blank and comment line detection."""

from __future__ import annotations

from core.constants import BLANK_LINE_REGEX, COMMENT_MARKER


def is_blank(text: str) -> bool:
    """Return whether a line carries no declaration.

    Empty lines, whitespace-only lines and comment lines (optionally
    indented) are blank and must be skipped before parsing.
    """
    if not text:
        return True
    first_char = text[0]
    if first_char == COMMENT_MARKER:
        return True
    if not first_char.isspace():
        return False
    return BLANK_LINE_REGEX.match(text) is not None
