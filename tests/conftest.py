"""Shared pytest fixtures and configuration for pytest."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def reset_patchbridge_logger() -> Iterator[None]:
    """Undo CLI logging setup so handlers never outlive captured streams."""
    yield
    pb_logger = logging.getLogger("patchbridge")
    pb_logger.handlers.clear()
    pb_logger.setLevel(logging.NOTSET)
    pb_logger.propagate = True


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run with an empty home and working directory so no real config loads."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(work)
    return work
