"""Runtime configuration model for Envpipe.

This module owns all ``ENVPIPE_*`` environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from core.constants import PARALLEL_TASKS_ENV_VAR
from core.errors import EnvpipeConfigError


@dataclass(frozen=True)
class EnvpipeConfig:
    """Validated runtime configuration.

    Attributes:
        parallel_tasks: Requested parse worker count, or None for the
            hardware default.
    """

    parallel_tasks: int | None

    @classmethod
    def from_env(cls) -> "EnvpipeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            EnvpipeConfigError: If environment values are invalid.
        """
        parallel_tasks_value = os.getenv(PARALLEL_TASKS_ENV_VAR)
        if parallel_tasks_value is None or not parallel_tasks_value.strip():
            return cls(parallel_tasks=None)
        return cls(parallel_tasks=_parse_parallel_tasks(parallel_tasks_value))


def _parse_parallel_tasks(raw_value: str) -> int:
    """Parse the parallel task count environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive integer.

    Raises:
        EnvpipeConfigError: If value is not a positive integer.
    """
    try:
        parsed_value = int(raw_value)
    except ValueError as error:
        raise EnvpipeConfigError(
            f"Invalid {PARALLEL_TASKS_ENV_VAR} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {PARALLEL_TASKS_ENV_VAR} to a positive number."
        ) from error
    if parsed_value < 1:
        raise EnvpipeConfigError(
            f"Invalid {PARALLEL_TASKS_ENV_VAR} value: "
            f"expected a positive integer, got {parsed_value}. "
            f"Set {PARALLEL_TASKS_ENV_VAR} to 1 or more."
        )
    return parsed_value
