"""Shared test fixtures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from fakes import START, TickingClock

from mdtodo.config import Settings
from mdtodo.logging_setup import HANDLER_NAME
from mdtodo.tasks.repository import TodoRepository


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep developer environment variables out of every test."""

    for name in (
        "MDTODO_ROOT_DIR",
        "MDTODO_SOON_DAYS",
        "MDTODO_EDITOR",
        "EDITOR",
        "MDTODO_AUTO_ARCHIVE",
        "MDTODO_SELECTOR",
        "MDTODO_SEARCH",
        "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    """Drop the stderr handler a CLI invocation installs; its stream dies with the runner."""

    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(False)


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock(START)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(root_dir=tmp_path / "todo", selector="none", search="none")


@pytest.fixture()
def repository(settings: Settings) -> TodoRepository:
    repository = TodoRepository(settings)
    repository.ensure_dirs()
    return repository
