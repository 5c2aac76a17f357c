"""Process-scope parse worker count.

This module holds the number of parse workers used by ingestion calls.
Requested values are clamped to the available hardware parallelism.
"""

from __future__ import annotations

import os
import threading

from core.config import EnvpipeConfig
from core.constants import MIN_PARALLEL_TASKS, PARALLEL_TASKS_PER_CPU
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)
_LOCK = threading.Lock()
_parallel_tasks: int | None = None


def available_parallelism() -> int:
    """Return the number of CPUs usable by this process."""
    return os.cpu_count() or 1


def clamp_parallel_tasks(count: int) -> int:
    """Clamp a requested worker count to the supported range.

    Args:
        count: Requested number of workers.

    Returns:
        Count within ``[2, 2 * available_parallelism()]``.
    """
    upper_bound = max(MIN_PARALLEL_TASKS, PARALLEL_TASKS_PER_CPU * available_parallelism())
    return min(max(count, MIN_PARALLEL_TASKS), upper_bound)


def set_parallel_tasks(count: int) -> int:
    """Set the worker count for subsequent ingestion calls.

    Args:
        count: Requested number of workers.

    Returns:
        Effective clamped worker count.
    """
    global _parallel_tasks
    effective_count = clamp_parallel_tasks(count)
    with _LOCK:
        _parallel_tasks = effective_count
    _LOGGER.debug("parallel_tasks_configured", requested=count, effective=effective_count)
    return effective_count


def parallel_tasks() -> int:
    """Return the current worker count.

    The first call reads ``ENVPIPE_PARALLEL_TASKS`` and falls back to the
    available hardware parallelism.

    Raises:
        EnvpipeConfigError: If ``ENVPIPE_PARALLEL_TASKS`` is invalid.
    """
    global _parallel_tasks
    with _LOCK:
        if _parallel_tasks is None:
            requested = EnvpipeConfig.from_env().parallel_tasks
            _parallel_tasks = clamp_parallel_tasks(requested or available_parallelism())
        return _parallel_tasks


def reset_parallel_tasks() -> None:
    """Forget the configured count so the next read re-resolves it."""
    global _parallel_tasks
    with _LOCK:
        _parallel_tasks = None
