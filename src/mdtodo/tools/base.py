"""Interfaces for host-environment tools used by the task core."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from mdtodo.tasks.models import TodoFile


class Selector(Protocol):
    """Interactive picker. Returning None means unavailable or aborted."""

    def select_todo(self, todos: Sequence[TodoFile]) -> TodoFile | None:
        """Let the operator pick one record."""

    def select_path(self, paths: Sequence[Path]) -> Path | None:
        """Let the operator pick one file path."""


class Editor(Protocol):
    """Blocking "open this file in an editor" action."""

    def edit(self, path: Path) -> None:
        """Return when the editor exits; raise ExternalToolError on failure."""


class TextSearch(Protocol):
    """Full-text search over a directory."""

    def search(self, directory: Path, query: str) -> set[Path] | None:
        """Matching file paths, or None when the tool is unavailable."""


class NullSelector:
    """Selector used when no interactive picker is configured."""

    def select_todo(self, todos: Sequence[TodoFile]) -> TodoFile | None:
        return None

    def select_path(self, paths: Sequence[Path]) -> Path | None:
        return None


class NullSearch:
    """Search that always defers to the in-process substring fallback."""

    def search(self, directory: Path, query: str) -> set[Path] | None:
        return None
