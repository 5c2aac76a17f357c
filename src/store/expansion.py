"""Variable reference expansion.

This module replaces ``${NAME}`` and ``$NAME`` references in a value
using a lookup callable, mirroring shell-style parameter expansion.
"""

from __future__ import annotations

import re
from typing import Callable

_REFERENCE_REGEX = re.compile(
    r"\$(?:\{(?P<braced>[^}]*)\}|(?P<unclosed>\{)|(?P<bare>[*#$@!?\-0-9]|[A-Za-z_][A-Za-z0-9_]*))"
)


def expand(value: str, lookup: Callable[[str], str]) -> str:
    """Replace variable references in a value.

    ``${NAME}`` and ``$NAME`` resolve through ``lookup``; ``$`` followed by
    a single shell special character (``$1``, ``$@``, ``$?``...) resolves
    the same way. A ``$`` that starts no reference is kept literally,
    ``${}`` expands to an empty string and an unclosed ``${`` is dropped
    while the text after it is kept.

    Args:
        value: Raw value that may contain references.
        lookup: Callable returning the value of a name, ``""`` when unset.

    Returns:
        Expanded value.

    Examples:
        >>> expand("${HOST}:$PORT", {"HOST": "0.0.0.0", "PORT": "80"}.get)
        '0.0.0.0:80'
    """
    if "$" not in value:
        return value

    def replace_reference(match: re.Match[str]) -> str:
        name = match.group("braced")
        if name is None:
            name = match.group("bare")
        if not name:
            return ""
        return lookup(name) or ""

    return _REFERENCE_REGEX.sub(replace_reference, value)
