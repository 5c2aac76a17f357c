"""Shared typed models.

This module defines the data models passed between the scanner,
parse workers, and the apply phase of one env-file ingestion.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class RawLine:
    """One physical line of an env-file.

    Attributes:
        text: Line text without the trailing newline.
        number: Zero-based position in the source file.
    """

    text: str
    number: int


@dataclass(frozen=True)
class ParsedEntry:
    """Validated declaration produced by a parse worker.

    Attributes:
        key: Variable name.
        value: Processed value with quotes and comments removed.
        expandable: Whether the value must be expanded before apply.
        line: Source line the entry was parsed from.
    """

    key: str
    value: str
    expandable: bool
    line: RawLine


@dataclass(frozen=True)
class IngestionPolicy:
    """Update and tolerance rules for one ingestion call.

    Attributes:
        expand: Replace ``${NAME}``/``$NAME`` tokens before storing values.
        update: Overwrite keys that already exist in the store.
        forced: Drop malformed lines instead of failing the call.
    """

    expand: bool = True
    update: bool = False
    forced: bool = False

    @classmethod
    def load(cls, forced: bool = False) -> "IngestionPolicy":
        """Add new keys only, expanding references."""
        return cls(expand=True, update=False, forced=forced)

    @classmethod
    def load_safe(cls, forced: bool = False) -> "IngestionPolicy":
        """Add new keys only, keeping values verbatim."""
        return cls(expand=False, update=False, forced=forced)

    @classmethod
    def update_all(cls, forced: bool = False) -> "IngestionPolicy":
        """Add and overwrite keys, expanding references."""
        return cls(expand=True, update=True, forced=forced)

    @classmethod
    def update_safe(cls, forced: bool = False) -> "IngestionPolicy":
        """Add and overwrite keys, keeping values verbatim."""
        return cls(expand=False, update=True, forced=forced)


class IngestionResult:
    """Thread-safe collection of parsed entries keyed by line number."""

    def __init__(self) -> None:
        self._entries: dict[int, ParsedEntry] = {}
        self._lock = threading.Lock()

    def add(self, entry: ParsedEntry) -> None:
        """Store an entry under its source line number."""
        with self._lock:
            self._entries[entry.line.number] = entry

    def ordered(self) -> list[ParsedEntry]:
        """Return entries sorted ascending by source line number."""
        with self._lock:
            return [self._entries[number] for number in sorted(self._entries)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
