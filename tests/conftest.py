"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _reset_parallel_tasks() -> Iterator[None]:
    """Keep the process-scope worker count from leaking between tests."""
    from ingest.parallelism import reset_parallel_tasks

    yield
    reset_parallel_tasks()
