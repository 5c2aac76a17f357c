"""Key/value environment stores.

This module defines the store surface that ingestion writes into and
two implementations: an isolated in-memory store and the process
environment (``os.environ``).
"""

from __future__ import annotations

import os
import threading
from typing import Mapping, Protocol

from core.errors import StoreWriteError
from store.expansion import expand


class EnvironmentStore(Protocol):
    """Minimal settable key/value store consumed by ingestion.

    ``get`` reads unset keys as ``""``; ``lookup`` tells empty from unset.
    ``set`` raises StoreWriteError when the backend rejects a write.
    """

    def get(self, key: str) -> str: ...

    def lookup(self, key: str) -> tuple[str, bool]: ...

    def set(self, key: str, value: str) -> None: ...

    def unset(self, key: str) -> None: ...

    def exists(self, *keys: str) -> bool: ...

    def clear(self) -> None: ...

    def list(self) -> list[str]: ...

    def expand(self, value: str) -> str: ...


class MemoryEnvironmentStore:
    """Dict-backed store isolated from the process environment."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        """Create a store, optionally pre-populated.

        Args:
            initial: Starting variables (copied, not referenced).
        """
        self._values: dict[str, str] = dict(initial) if initial else {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str:
        with self._lock:
            return self._values.get(key, "")

    def lookup(self, key: str) -> tuple[str, bool]:
        with self._lock:
            if key in self._values:
                return self._values[key], True
            return "", False

    def set(self, key: str, value: str) -> None:
        if not key or "=" in key:
            raise StoreWriteError(
                f"Failed to set '{key}': variable names must be non-empty "
                "and must not contain '='."
            )
        with self._lock:
            self._values[key] = value

    def unset(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def exists(self, *keys: str) -> bool:
        with self._lock:
            return all(key in self._values for key in keys)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def list(self) -> list[str]:
        with self._lock:
            return [f"{key}={value}" for key, value in self._values.items()]

    def expand(self, value: str) -> str:
        return expand(value, self.get)

    def to_dict(self) -> dict[str, str]:
        """Return a snapshot copy of all variables."""
        with self._lock:
            return dict(self._values)


class ProcessEnvironmentStore:
    """Store backed by the real process environment."""

    def get(self, key: str) -> str:
        return os.environ.get(key, "")

    def lookup(self, key: str) -> tuple[str, bool]:
        value = os.environ.get(key)
        if value is None:
            return "", False
        return value, True

    def set(self, key: str, value: str) -> None:
        """Set key in ``os.environ``.

        Raises:
            StoreWriteError: If the platform rejects the name or value.
        """
        if not key or "=" in key:
            raise StoreWriteError(
                f"Failed to set '{key}': variable names must be non-empty "
                "and must not contain '='."
            )
        try:
            os.environ[key] = value
        except (OSError, ValueError) as error:
            raise StoreWriteError(
                f"Failed to set '{key}' in the process environment: {error}."
            ) from error

    def unset(self, key: str) -> None:
        os.environ.pop(key, None)

    def exists(self, *keys: str) -> bool:
        return all(key in os.environ for key in keys)

    def clear(self) -> None:
        os.environ.clear()

    def list(self) -> list[str]:
        return [f"{key}={value}" for key, value in os.environ.items()]

    def expand(self, value: str) -> str:
        return expand(value, self.get)
