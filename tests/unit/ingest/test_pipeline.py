"""Unit tests for the env-file ingestion pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import (
    EnvFileReadError,
    EnvpipeConfigError,
    IncorrectValueError,
    MissingKeyNameError,
    StoreWriteError,
)
from core.types import IngestionPolicy, ParsedEntry, RawLine
from ingest.pipeline import EnvFileIngestRunner, ingest, read_parse_store
from store.environment_store import MemoryEnvironmentStore
from tests.fixture_paths import fixture_path


class _FailingStore(MemoryEnvironmentStore):
    """Memory store that rejects writes for one key."""

    def __init__(self, failing_key: str) -> None:
        super().__init__()
        self._failing_key = failing_key

    def set(self, key: str, value: str) -> None:
        if key == self._failing_key:
            raise OSError(f"cannot write {key}")
        super().set(key, value)


class _CrashingRunner(EnvFileIngestRunner):
    """Runner whose parse workers die on the first line they take."""

    def _parse_line(self, raw_line: RawLine) -> ParsedEntry | None:
        raise RuntimeError(f"worker crashed on line {raw_line.number}")


def _write_env_file(tmp_path: Path, lines: list[str]) -> Path:
    env_path = tmp_path / ".env"
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


def test_ingest_load_keeps_existing_keys() -> None:
    """Load mode should add new keys without overwriting existing ones."""
    store = MemoryEnvironmentStore({"KEY_0": "default"})

    ingest(fixture_path("variables.env"), IngestionPolicy.load(), store=store)

    assert store.get("KEY_0") == "default"
    assert store.get("KEY_1") == "value_1"
    assert store.get("KEY_2") == "default01"


def test_ingest_update_overwrites_existing_keys() -> None:
    """Update mode should overwrite keys and expand with new values."""
    store = MemoryEnvironmentStore({"KEY_0": "default"})

    ingest(fixture_path("variables.env"), IngestionPolicy.update_all(), store=store)

    assert store.get("KEY_0") == "value_0"
    assert store.get("KEY_2") == "value_001"


@pytest.mark.parametrize("policy", [IngestionPolicy.load_safe(), IngestionPolicy.update_safe()])
def test_ingest_safe_modes_keep_references(policy: IngestionPolicy) -> None:
    """Safe modes should store values without expanding references."""
    store = MemoryEnvironmentStore({"KEY_0": "default"})

    ingest(fixture_path("variables.env"), policy, store=store)

    assert store.get("KEY_2") == "${KEY_0}01"


def test_ingest_applies_quoting_and_comment_rules() -> None:
    """Quoted values, escapes and grouped lists should load as written."""
    store = MemoryEnvironmentStore()

    ingest(fixture_path("variables.env"), IngestionPolicy.load(), store=store)

    assert store.get("KEY_3") == "quoted # value"
    assert store.get("KEY_4") == "single 'escaped' quotes"
    assert store.get("KEY_5") == 'one,"two,three",four'
    assert len(store.list()) == 6


def test_ingest_expansion_sees_values_of_earlier_lines() -> None:
    """A later redefinition must not change an already expanded value."""
    store = MemoryEnvironmentStore()

    ingest(fixture_path("redefined.env"), IngestionPolicy.update_all(), store=store)

    assert store.get("KEY_0") == "c"
    assert store.get("KEY_1") == "ab"


def test_ingest_load_keeps_first_definition_of_duplicate_key() -> None:
    """Without update, the first definition in the file wins."""
    store = MemoryEnvironmentStore()

    ingest(fixture_path("redefined.env"), IngestionPolicy.load(), store=store)

    assert store.get("KEY_0") == "a"


def test_ingest_unresolved_reference_expands_to_empty(tmp_path: Path) -> None:
    """References to unknown names should expand to an empty string."""
    env_path = _write_env_file(tmp_path, ["URL=http://${MISSING_HOST}:$PORT/", "PORT=80"])
    store = MemoryEnvironmentStore()

    ingest(env_path, IngestionPolicy.load(), store=store)

    assert store.get("URL") == "http://:/"


@pytest.mark.parametrize("workers", [1, 2, 8])
def test_ingest_final_state_does_not_depend_on_worker_count(
    tmp_path: Path, workers: int
) -> None:
    """Different worker counts should produce identical stores."""
    lines = [f"KEY_{index % 7}=${{KEY_{(index + 3) % 7}}}{index}" for index in range(200)]
    env_path = _write_env_file(tmp_path, lines)
    reference_store = MemoryEnvironmentStore({"KEY_3": "seed"})
    store = MemoryEnvironmentStore({"KEY_3": "seed"})

    ingest(env_path, IngestionPolicy.update_all(), store=reference_store, workers=1)
    ingest(env_path, IngestionPolicy.update_all(), store=store, workers=workers)

    assert store.to_dict() == reference_store.to_dict()


def test_ingest_forced_skips_malformed_line() -> None:
    """Forced mode should drop the malformed line and load the rest."""
    store = MemoryEnvironmentStore()

    ingest(fixture_path("damaged.env"), IngestionPolicy.load(forced=True), store=store)

    assert len(store.list()) == 9
    assert store.exists("1BC") is False
    assert store.get("EMAIL") == "goloop@example.com"


def test_ingest_unforced_error_leaves_store_untouched() -> None:
    """A malformed line should abort the call before any write."""
    store = MemoryEnvironmentStore({"HOST": "localhost"})

    with pytest.raises(MissingKeyNameError) as raised:
        ingest(fixture_path("damaged.env"), IngestionPolicy.update_all(), store=store)

    assert raised.value.line_number == 3
    assert store.to_dict() == {"HOST": "localhost"}


def test_ingest_reports_incorrect_value(tmp_path: Path) -> None:
    """A spaced value should surface as IncorrectValueError."""
    env_path = _write_env_file(tmp_path, ["GOOD=1", "BAD= value"])
    store = MemoryEnvironmentStore()

    with pytest.raises(IncorrectValueError):
        ingest(env_path, IngestionPolicy.load(), store=store, workers=4)

    assert store.list() == []


def test_ingest_missing_file_raises_read_error(tmp_path: Path) -> None:
    """Missing files should fail before any parsing."""
    store = MemoryEnvironmentStore()

    with pytest.raises(EnvFileReadError):
        ingest(tmp_path / "missing.env", IngestionPolicy.load(forced=True), store=store)

    assert store.list() == []


def test_ingest_undecodable_file_raises_read_error() -> None:
    """Bytes that are not UTF-8 should fail the call without writes."""
    store = MemoryEnvironmentStore()

    with pytest.raises(EnvFileReadError):
        ingest(fixture_path("not_utf8.env"), IngestionPolicy.load(forced=True), store=store)

    assert store.list() == []


def test_ingest_store_failure_keeps_earlier_writes(tmp_path: Path) -> None:
    """A failed write should stop the apply phase but keep earlier writes."""
    env_path = _write_env_file(tmp_path, ["FIRST=1", "SECOND=2", "THIRD=3"])
    store = _FailingStore(failing_key="SECOND")

    with pytest.raises(StoreWriteError):
        ingest(env_path, IngestionPolicy.load(), store=store)

    assert store.to_dict() == {"FIRST": "1"}


def test_ingest_rejects_non_positive_worker_count() -> None:
    """An explicit worker count must be at least one."""
    with pytest.raises(EnvpipeConfigError):
        ingest(fixture_path("variables.env"), IngestionPolicy.load(), workers=0)


def test_read_parse_store_builds_policy_from_flags() -> None:
    """Flag-based entry point should behave like the matching policy."""
    store = MemoryEnvironmentStore({"KEY_0": "default"})

    read_parse_store(fixture_path("variables.env"), True, False, False, store=store)

    assert store.get("KEY_0") == "default"
    assert store.get("KEY_2") == "default01"


def test_ingest_empty_file_is_a_no_op(tmp_path: Path) -> None:
    """A file with only comments and blanks should change nothing."""
    env_path = _write_env_file(tmp_path, ["# only a comment", "", "   "])
    store = MemoryEnvironmentStore({"KEEP": "1"})

    ingest(env_path, IngestionPolicy.update_all(), store=store)

    assert store.to_dict() == {"KEEP": "1"}


def test_runner_stops_dispatching_after_first_parse_error(tmp_path: Path) -> None:
    """An early malformed line should cancel the scan of the remaining file."""
    line_total = 100_001
    lines = ["1BAD=x"] + [f"KEY_{index}=value_{index}" for index in range(line_total - 1)]
    env_path = _write_env_file(tmp_path, lines)
    store = MemoryEnvironmentStore({"KEEP": "1"})
    runner = EnvFileIngestRunner(env_path, IngestionPolicy.update_all(), store, worker_count=2)

    with pytest.raises(MissingKeyNameError) as raised:
        runner.run()

    assert raised.value.line_number == 0
    assert runner.dispatched_line_count < line_total // 10
    assert store.to_dict() == {"KEEP": "1"}


def test_runner_does_not_hang_when_every_worker_dies(tmp_path: Path) -> None:
    """Unexpected worker failures should surface instead of blocking the scanner."""
    env_path = _write_env_file(tmp_path, [f"KEY_{index}=value" for index in range(500)])
    store = MemoryEnvironmentStore()
    runner = _CrashingRunner(env_path, IngestionPolicy.load(), store, worker_count=2)

    with pytest.raises(RuntimeError, match="worker crashed"):
        runner.run()

    assert store.list() == []
