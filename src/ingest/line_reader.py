"""Env-file line scanning.

This module opens env-files read-only and yields numbered raw lines.
All file system failures surface as EnvFileReadError.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, TextIO

from core.constants import ENV_FILE_ENCODING
from core.errors import EnvFileReadError
from core.types import RawLine


def open_env_file(path: Path) -> TextIO:
    """Open an env-file for reading.

    Args:
        path: Path to the env-file.

    Returns:
        Open text handle; the caller closes it.

    Raises:
        EnvFileReadError: If the file is missing or cannot be opened.
    """
    try:
        return path.open("r", encoding=ENV_FILE_ENCODING)
    except OSError as error:
        raise EnvFileReadError(
            f"Failed to open env-file {path}: {error.strerror or error}. "
            "Provide an existing, readable file."
        ) from error


def read_raw_lines(handle: TextIO, path: Path) -> Iterator[RawLine]:
    """Yield lines with zero-based numbers in file order.

    Args:
        handle: Open text handle from open_env_file.
        path: Source path for error context.

    Yields:
        Raw lines without trailing newlines.

    Raises:
        EnvFileReadError: If reading or decoding fails mid-file.
    """
    number = 0
    try:
        for text in handle:
            yield RawLine(text=text.rstrip("\n"), number=number)
            number += 1
    except (OSError, UnicodeDecodeError) as error:
        raise EnvFileReadError(
            f"Failed to read env-file {path} after line {number}: {error}. "
            f"Save the file as {ENV_FILE_ENCODING} text and retry."
        ) from error
