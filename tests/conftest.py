"""Pytest configuration for test isolation.

CLI commands load ``.env`` from the current working directory, write default
report files there, and configure package logging once per process. To keep
tests hermetic, each test runs inside its own temporary directory with the
``BRANCH_LEDGER_*`` variables cleared, and package logging is reset around
every test so records keep propagating to ``caplog``.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from branch_ledger.logging_setup import LOG_LEVEL_ENV, reset_logging


@pytest.fixture(autouse=True)
def _isolate_workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test from its own temporary working directory."""

    monkeypatch.chdir(tmp_path)
    for var in ("BRANCH_LEDGER_WEEK_START", "BRANCH_LEDGER_LOCALE"):
        monkeypatch.delenv(var, raising=False)
    # Keep CLI output free of INFO lines; warnings still show.
    monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")

    reset_logging()
    yield
    reset_logging()
