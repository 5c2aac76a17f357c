"""Env-file ingestion orchestration.

This module scans an env-file, parses its lines on a worker pool, and
applies the parsed entries to an environment store. Parsing runs in
parallel; every store mutation happens afterwards on the calling thread
in ascending line order, so the final state does not depend on scheduling.
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, TextIO

from core.constants import (
    EXPANSION_SIGIL,
    LINE_QUEUE_POLL_SECONDS,
    LINE_QUEUE_SIZE_PER_WORKER,
)
from core.errors import EnvParseError, EnvpipeConfigError, StoreWriteError
from core.logging_config import get_logger
from core.types import IngestionPolicy, IngestionResult, ParsedEntry, RawLine
from ingest.line_reader import open_env_file, read_raw_lines
from ingest.parallelism import parallel_tasks
from parse.expression_parser import parse_expression
from parse.line_classifier import is_blank
from store.environment_store import EnvironmentStore, ProcessEnvironmentStore

_LOGGER = get_logger(__name__)
_END_OF_LINES = None


@dataclass(frozen=True)
class ApplySummary:
    """Counts produced by the apply phase."""

    applied_count: int
    kept_count: int


class EnvFileIngestRunner:
    """Single-use runner for one env-file ingestion call."""

    def __init__(
        self,
        path: Path,
        policy: IngestionPolicy,
        store: EnvironmentStore,
        worker_count: int,
    ) -> None:
        self._path = path
        self._policy = policy
        self._store = store
        self._worker_count = worker_count
        self._cancelled = threading.Event()
        self._failure_lock = threading.Lock()
        self._first_failure: EnvParseError | None = None
        self._line_count = 0

    def run(self) -> None:
        """Parse the file, then apply its entries to the store.

        Raises:
            EnvFileReadError: If the file cannot be opened or read.
            EnvParseError: If a line is malformed and the policy is not forced.
            StoreWriteError: If the store rejects a write.
        """
        handle = open_env_file(self._path)
        with handle:
            result = self._parse_concurrently(handle)
        entries = result.ordered()
        summary = self._apply_entries(entries)
        _log_ingest_completion(
            self._path,
            self._policy,
            self._worker_count,
            self._line_count,
            len(entries),
            summary,
        )

    def _parse_concurrently(self, handle: TextIO) -> IngestionResult:
        result = IngestionResult()
        lines: queue.Queue[RawLine | None] = queue.Queue(
            maxsize=self._worker_count * LINE_QUEUE_SIZE_PER_WORKER
        )
        with ThreadPoolExecutor(
            max_workers=self._worker_count, thread_name_prefix="envpipe-parse"
        ) as executor:
            futures = [
                executor.submit(self._parse_worker, lines, result)
                for _ in range(self._worker_count)
            ]
            try:
                self._dispatch_lines(handle, lines, futures)
            except Exception:
                self._cancelled.set()
                raise
            finally:
                for _ in range(self._worker_count):
                    if not _offer(lines, _END_OF_LINES, futures):
                        break
            for future in futures:
                future.result()
        if self._first_failure is not None:
            raise self._first_failure
        return result

    @property
    def dispatched_line_count(self) -> int:
        """Number of lines handed to the parse workers so far."""
        return self._line_count

    def _dispatch_lines(
        self,
        handle: TextIO,
        lines: queue.Queue[RawLine | None],
        futures: list[Future[None]],
    ) -> None:
        for raw_line in read_raw_lines(handle, self._path):
            if self._cancelled.is_set():
                return
            if not _offer(lines, raw_line, futures):
                self._cancelled.set()
                return
            self._line_count += 1

    def _parse_worker(self, lines: queue.Queue[RawLine | None], result: IngestionResult) -> None:
        while True:
            raw_line = lines.get()
            if raw_line is _END_OF_LINES:
                return
            if self._cancelled.is_set():
                continue
            entry = self._parse_line(raw_line)
            if entry is not None:
                result.add(entry)

    def _parse_line(self, raw_line: RawLine) -> ParsedEntry | None:
        if is_blank(raw_line.text):
            return None
        try:
            key, value = parse_expression(raw_line.text)
        except EnvParseError as error:
            error.line_number = raw_line.number
            if self._policy.forced:
                _LOGGER.debug(
                    "env_line_skipped",
                    path=str(self._path),
                    line_number=raw_line.number + 1,
                    reason=str(error),
                )
            else:
                self._record_failure(error)
            return None
        return ParsedEntry(
            key=key,
            value=value,
            expandable=self._policy.expand and EXPANSION_SIGIL in value,
            line=raw_line,
        )

    def _record_failure(self, error: EnvParseError) -> None:
        with self._failure_lock:
            if self._first_failure is None:
                self._first_failure = error
        self._cancelled.set()

    def _apply_entries(self, entries: Iterable[ParsedEntry]) -> ApplySummary:
        applied_count = 0
        kept_count = 0
        for entry in entries:
            _, present = self._store.lookup(entry.key)
            if present and not self._policy.update:
                kept_count += 1
                continue
            value = self._store.expand(entry.value) if entry.expandable else entry.value
            _write_entry(self._store, entry, value)
            applied_count += 1
        return ApplySummary(applied_count=applied_count, kept_count=kept_count)


def ingest(
    path: str | Path,
    policy: IngestionPolicy,
    store: EnvironmentStore | None = None,
    workers: int | None = None,
) -> None:
    """Load an env-file into an environment store.

    Entries already applied stay in the store when a later write fails;
    a parse failure aborts the call before any write.

    Args:
        path: Path to the env-file.
        policy: Expansion, update and tolerance rules.
        store: Target store, the process environment by default.
        workers: Explicit parse worker count; defaults to parallel_tasks().

    Raises:
        EnvFileReadError: If the file cannot be opened or read.
        EnvParseError: If a line is malformed and the policy is not forced.
        StoreWriteError: If the store rejects a write.
        EnvpipeConfigError: If workers is less than one.
    """
    worker_count = parallel_tasks() if workers is None else workers
    if worker_count < 1:
        raise EnvpipeConfigError(
            f"Invalid worker count {worker_count}: expected at least 1 parse worker."
        )
    runner = EnvFileIngestRunner(
        Path(path).expanduser(),
        policy,
        store if store is not None else ProcessEnvironmentStore(),
        worker_count,
    )
    runner.run()


def read_parse_store(
    path: str | Path,
    expand: bool,
    update: bool,
    forced: bool,
    store: EnvironmentStore | None = None,
) -> None:
    """Load an env-file with explicit policy flags.

    Args:
        path: Path to the env-file.
        expand: Replace ``${NAME}``/``$NAME`` references in values.
        update: Overwrite keys that already exist in the store.
        forced: Skip malformed lines instead of failing.
        store: Target store, the process environment by default.
    """
    policy = IngestionPolicy(expand=expand, update=update, forced=forced)
    ingest(path, policy, store=store)


def _offer(
    lines: queue.Queue[RawLine | None],
    item: RawLine | None,
    futures: list[Future[None]],
) -> bool:
    """Put item on the line queue unless every worker has exited.

    Returns:
        False when no worker is left to take the item.
    """
    while True:
        try:
            lines.put(item, timeout=LINE_QUEUE_POLL_SECONDS)
            return True
        except queue.Full:
            if all(future.done() for future in futures):
                return False


def _write_entry(store: EnvironmentStore, entry: ParsedEntry, value: str) -> None:
    """Set one entry, normalizing store failures to StoreWriteError."""
    try:
        store.set(entry.key, value)
    except StoreWriteError:
        raise
    except (OSError, ValueError) as error:
        raise StoreWriteError(
            f"Failed to set {entry.key} from line {entry.line.number + 1}: {error}."
        ) from error


def _log_ingest_completion(
    path: Path,
    policy: IngestionPolicy,
    worker_count: int,
    line_count: int,
    entry_count: int,
    summary: ApplySummary,
) -> None:
    """Log ingestion completion with contextual metadata."""
    _LOGGER.debug(
        "env_file_ingested",
        path=str(path),
        line_count=line_count,
        entry_count=entry_count,
        applied_count=summary.applied_count,
        kept_count=summary.kept_count,
        worker_count=worker_count,
        expand=policy.expand,
        update=policy.update,
        forced=policy.forced,
    )
