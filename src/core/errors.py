"""Envpipe exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each ingestion stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class EnvpipeError(Exception):
    """Base exception for all Envpipe failures."""


class EnvpipeConfigError(EnvpipeError):
    """Raised for invalid runtime configuration."""


class EnvFileReadError(EnvpipeError):
    """Raised when an env-file cannot be opened or read."""


class EnvParseError(EnvpipeError):
    """Raised for a malformed declaration line.

    Attributes:
        expression: Raw declaration text that failed to parse.
        line_number: Zero-based line position, set during file ingestion.
    """

    def __init__(self, message: str, expression: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.expression = expression
        self.line_number = line_number

    def __str__(self) -> str:
        message = super().__str__()
        if self.line_number is None:
            return message
        return f"line {self.line_number + 1}: {message}"


class MissingKeyNameError(EnvParseError):
    """Raised when a declaration has no valid variable name."""


class IncorrectValueError(EnvParseError):
    """Raised when a declaration value is empty, spaced or unbalanced."""


class StoreWriteError(EnvpipeError):
    """Raised when the environment store rejects a write."""
