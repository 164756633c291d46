"""Pytest configuration for test isolation.

Makes the workspace ``packages/`` dir importable and strips any ``SE_*``
tuning overrides (and the log-level override) inherited from the developer's
shell or a local ``.env`` so every test sees the default settings.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
# Ensure `packages/` precedes the repo root on sys.path so local packages resolve first.
sys.path[:0] = [p for p in [str(_PKG_DIR)] if p not in sys.path]

from statement_entities.logging_setup import reset_logging  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear engine overrides and run each test from its own directory.

    The CLI loads ``.env`` from the working directory, so tests chdir into
    ``tmp_path`` where no such file exists.
    """

    for key in list(os.environ):
        if key.startswith("SE_") or key == "STATEMENT_ENTITIES_LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop any handler a CLI invocation installed on the package logger."""

    yield
    reset_logging()
