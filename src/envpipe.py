"""Public SDK surface for Envpipe.

This module provides a stable import path for env-file loading and
process environment helpers. The helpers act on ``os.environ``; pass a
``store`` to the loaders to target an isolated store instead.
"""

from __future__ import annotations

from pathlib import Path

from core.config import EnvpipeConfig
from core.errors import (
    EnvFileReadError,
    EnvParseError,
    EnvpipeConfigError,
    EnvpipeError,
    IncorrectValueError,
    MissingKeyNameError,
    StoreWriteError,
)
from core.types import IngestionPolicy, ParsedEntry, RawLine
from ingest.parallelism import parallel_tasks, set_parallel_tasks
from ingest.pipeline import ingest, read_parse_store
from parse.expression_parser import parse_expression
from parse.line_classifier import is_blank
from parse.tokenizer import split
from store.environment_store import (
    EnvironmentStore,
    MemoryEnvironmentStore,
    ProcessEnvironmentStore,
)

__all__ = [
    "EnvFileReadError",
    "EnvParseError",
    "EnvironmentStore",
    "EnvpipeConfig",
    "EnvpipeConfigError",
    "EnvpipeError",
    "IncorrectValueError",
    "IngestionPolicy",
    "MemoryEnvironmentStore",
    "MissingKeyNameError",
    "ParsedEntry",
    "ProcessEnvironmentStore",
    "RawLine",
    "StoreWriteError",
    "clear",
    "environ",
    "exists",
    "expand",
    "get",
    "ingest",
    "is_blank",
    "load",
    "load_safe",
    "lookup",
    "parallel_tasks",
    "parse_expression",
    "read_parse_store",
    "set",
    "set_parallel_tasks",
    "split",
    "unset",
    "update",
    "update_safe",
]

_PROCESS_STORE = ProcessEnvironmentStore()


def load(path: str | Path, store: EnvironmentStore | None = None) -> None:
    """Add new keys from an env-file, expanding ``${NAME}``/``$NAME``.

    Keys already present in the store keep their values.

    Examples:
        With ``KEY_0=default`` already set and a file containing::

            LAST_ID=002
            KEY_0=VALUE_000
            KEY_2=VALUE_${LAST_ID}

        ``load(".env")`` leaves ``KEY_0=default`` and sets
        ``LAST_ID=002`` and ``KEY_2=VALUE_002``.
    """
    ingest(path, IngestionPolicy.load(), store=store)


def load_safe(path: str | Path, store: EnvironmentStore | None = None) -> None:
    """Add new keys from an env-file without expanding references."""
    ingest(path, IngestionPolicy.load_safe(), store=store)


def update(path: str | Path, store: EnvironmentStore | None = None) -> None:
    """Add and overwrite keys from an env-file, expanding references."""
    ingest(path, IngestionPolicy.update_all(), store=store)


def update_safe(path: str | Path, store: EnvironmentStore | None = None) -> None:
    """Add and overwrite keys from an env-file without expanding references."""
    ingest(path, IngestionPolicy.update_safe(), store=store)


def get(key: str) -> str:
    """Return a process variable, or an empty string when unset."""
    return _PROCESS_STORE.get(key)


def lookup(key: str) -> tuple[str, bool]:
    """Return a process variable and whether it is set."""
    return _PROCESS_STORE.lookup(key)


def set(key: str, value: str) -> None:
    """Set a process variable.

    Raises:
        StoreWriteError: If the platform rejects the name or value.
    """
    _PROCESS_STORE.set(key, value)


def unset(key: str) -> None:
    """Remove a process variable if present."""
    _PROCESS_STORE.unset(key)


def exists(*keys: str) -> bool:
    """Return whether every given process variable is set."""
    return _PROCESS_STORE.exists(*keys)


def clear() -> None:
    """Remove every process variable."""
    _PROCESS_STORE.clear()


def environ() -> list[str]:
    """Return process variables as ``KEY=VALUE`` strings."""
    return _PROCESS_STORE.list()


def expand(value: str) -> str:
    """Replace ``${NAME}``/``$NAME`` using process variables."""
    return _PROCESS_STORE.expand(value)
