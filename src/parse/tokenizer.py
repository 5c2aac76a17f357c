"""Group-aware string splitting.

This module splits values on a separator while keeping quoted and
bracketed groups intact, e.g. list values such as ``a,"b,c",d``.
"""

from __future__ import annotations

from core.constants import CLOSING_BRACKET_PAIRS, OPENING_BRACKETS, QUOTE_CHARACTERS


def split(text: str, separator: str, limit: int = -1) -> list[str]:
    """Split text on a separator outside quote and bracket groups.

    Groups are ``'...'``, ``"..."``, ```...``` and ``(...)``, ``[...]``,
    ``{...}``. Only one group is open at a time: inside a group other
    openers are ordinary characters and the first matching closer ends it.
    An unmatched opener keeps the rest of the string in the current field.

    Args:
        text: String to split.
        separator: Non-empty separator string.
        limit: ``0`` returns no fields, ``1`` returns the whole text,
            ``n > 1`` returns at most ``n`` fields with the last one
            holding the unsplit remainder, and ``n < 0`` splits fully.

    Returns:
        Ordered list of fields.

    Raises:
        ValueError: If separator is empty.

    Examples:
        >>> split("a,(b,c),d", ",")
        ['a', '(b,c)', 'd']
        >>> split("a,b,c,d", ",", 2)
        ['a', 'b,c,d']
    """
    if not separator:
        raise ValueError("Separator must be a non-empty string.")
    if limit == 0:
        return []
    if limit == 1:
        return [text]

    fields: list[str] = []
    current: list[str] = []
    group_opener: str | None = None
    ended_on_separator = False
    index = 0
    while index < len(text):
        char = text[index]
        ended_on_separator = False
        if group_opener is None:
            if char in QUOTE_CHARACTERS or char in OPENING_BRACKETS:
                group_opener = char
            elif text.startswith(separator, index):
                fields.append("".join(current))
                current = []
                index += len(separator)
                ended_on_separator = True
                if limit > 0 and len(fields) + 1 == limit:
                    current = [text[index:]]
                    break
                continue
        elif _closes_group(group_opener, char):
            group_opener = None
        current.append(char)
        index += 1

    remainder = "".join(current)
    if remainder or ended_on_separator:
        fields.append(remainder)
    return fields


def _closes_group(group_opener: str, char: str) -> bool:
    """Return whether char ends the group started by group_opener."""
    if group_opener in QUOTE_CHARACTERS:
        return char == group_opener
    return CLOSING_BRACKET_PAIRS.get(char) == group_opener
