"""Env-file declaration parsing.

This module converts one ``[export] KEY=VALUE [# comment]`` line into a
key/value pair. It owns the quoting, escaping and inline comment rules.
"""

from __future__ import annotations

import secrets

from core.constants import (
    COMMENT_MARKER,
    DECLARATION_KEY_REGEX,
    DECLARATION_VALUE_REGEX,
    ESCAPE_CHARACTER,
    QUOTE_CHARACTERS,
    QUOTE_MARKER_PREFIX,
    QUOTE_MARKER_SUFFIX,
    QUOTE_MARKER_TOKEN_BYTES,
)
from core.errors import IncorrectValueError, MissingKeyNameError


def parse_expression(text: str) -> tuple[str, str]:
    """Parse a declaration line into key and value.

    Args:
        text: Raw declaration line, already known not to be blank.

    Returns:
        Tuple of variable name and processed value.

    Raises:
        MissingKeyNameError: If the line has no valid ``KEY=`` prefix.
        IncorrectValueError: If the value is empty, starts with whitespace,
            or has unbalanced quotes.

    Examples:
        >>> parse_expression('export KEY="a # b" # note')
        ('KEY', 'a # b')
        >>> parse_expression("KEY=value # note")
        ('KEY', 'value')
    """
    key_match = DECLARATION_KEY_REGEX.match(text)
    if key_match is None:
        raise MissingKeyNameError(
            f"Missing variable name in '{text}': expected [export] KEY=VALUE "
            "with KEY made of letters, digits and '_' not starting with a digit.",
            expression=text,
        )
    key = key_match.group(1)

    raw_value = text[text.index("=") :]
    if DECLARATION_VALUE_REGEX.match(raw_value) is None:
        raise IncorrectValueError(
            f"Incorrect value '{raw_value}' for {key}: the value must start right "
            "after '='. Quote empty values as KEY=''.",
            expression=text,
        )
    value = raw_value[1:].strip()

    quote = value[0] if value[0] in QUOTE_CHARACTERS else None
    if quote is None:
        return key, _strip_unquoted_comment(value)
    return key, _unquote(text, key, value, quote)


def _strip_unquoted_comment(value: str) -> str:
    """Drop an inline comment from an unquoted value.

    When a comment is present only the first space-delimited token
    before it is kept.
    """
    if COMMENT_MARKER not in value:
        return value
    before_comment = value.split(COMMENT_MARKER)[0]
    return before_comment.split(" ")[0].strip()


def _unquote(text: str, key: str, value: str, quote: str) -> str:
    """Strip comment and surrounding quotes from a quoted value.

    Args:
        text: Full declaration line for error context.
        key: Parsed variable name.
        value: Trimmed value starting with the quote character.
        quote: Quote character that opens the value.

    Returns:
        Value with escaped quotes turned into literal quotes.

    Raises:
        IncorrectValueError: If the quotes are unbalanced.
    """
    marker = _build_quote_marker()
    escaped_quote = ESCAPE_CHARACTER + quote
    value = value.replace(escaped_quote, marker)
    value = remove_inline_comment(value, quote)
    if value.count(quote) % 2 != 0:
        raise IncorrectValueError(
            f"Incorrect value '{value}' for {key}: unbalanced {quote} quotes. "
            f"Close the quoted value or escape inner quotes as {escaped_quote}.",
            expression=text,
        )
    return value[1:-1].replace(marker, quote)


def remove_inline_comment(value: str, quote: str) -> str:
    """Remove a ``#`` comment that sits outside the quoted region.

    Args:
        value: Quoted value, possibly followed by a comment.
        quote: Quote character delimiting the value.

    Returns:
        Value truncated before the first unquoted ``#``.
    """
    if COMMENT_MARKER not in value:
        return value
    inside = False
    result: list[str] = []
    for index, char in enumerate(value):
        if char == quote:
            if not inside:
                inside = True
            elif index > 0 and value[index - 1] != ESCAPE_CHARACTER:
                inside = False
        elif char == COMMENT_MARKER and not inside:
            return "".join(result).strip()
        result.append(char)
    return "".join(result)


def _build_quote_marker() -> str:
    """Build a placeholder unlikely to collide with value content."""
    return QUOTE_MARKER_PREFIX + secrets.token_hex(QUOTE_MARKER_TOKEN_BYTES) + QUOTE_MARKER_SUFFIX
