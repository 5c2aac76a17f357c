"""Core constants used across Envpipe modules.

This module centralizes env-file syntax rules and runtime defaults.
Keeping values here avoids magic literals in parsing and ingest logic.
"""

from __future__ import annotations

import re

KEY_NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
VALID_KEY_REGEX = re.compile(rf"^{KEY_NAME_PATTERN}$")
DECLARATION_KEY_REGEX = re.compile(rf"^(?:\s*)?(?:export\s+)?({KEY_NAME_PATTERN})=")
DECLARATION_VALUE_REGEX = re.compile(r"^=[^\s].*")
BLANK_LINE_REGEX = re.compile(r"^\s*(?:#.*)?$")
COMMENT_MARKER = "#"
ESCAPE_CHARACTER = "\\"
QUOTE_CHARACTERS = "\"'`"
OPENING_BRACKETS = "({["
CLOSING_BRACKET_PAIRS = {")": "(", "]": "[", "}": "{"}
EXPANSION_SIGIL = "$"
QUOTE_MARKER_PREFIX = "<::"
QUOTE_MARKER_SUFFIX = "::>"
QUOTE_MARKER_TOKEN_BYTES = 8
ENV_FILE_ENCODING = "utf-8"
MIN_PARALLEL_TASKS = 2
PARALLEL_TASKS_PER_CPU = 2
LINE_QUEUE_SIZE_PER_WORKER = 4
LINE_QUEUE_POLL_SECONDS = 0.05
PARALLEL_TASKS_ENV_VAR = "ENVPIPE_PARALLEL_TASKS"
DEFAULT_ENV_FILE_NAME = ".env"
