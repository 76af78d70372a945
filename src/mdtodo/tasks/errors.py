"""Error taxonomy for the task store and lifecycle engine."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdtodo.tasks.models import TodoFile

MAX_LISTED_CANDIDATES = 30


class TodoError(RuntimeError):
    """Base class for errors surfaced to the operator."""


class MalformedRecordError(TodoError):
    """Header block is missing or cannot be deserialized."""

    def __init__(self, path: Path, cause: str) -> None:
        super().__init__(f"Malformed task file {path}: {cause}")
        self.path = path
        self.cause = cause


class NoMatchError(TodoError):
    """No record id equals or starts with the requested prefix."""

    def __init__(self, id_or_prefix: str) -> None:
        super().__init__(f"No match for: {id_or_prefix}")
        self.id_or_prefix = id_or_prefix


class AmbiguousMatchError(TodoError):
    """Several records match and no interactive choice was made."""

    def __init__(self, id_or_prefix: str, candidates: Sequence[TodoFile]) -> None:
        self.id_or_prefix = id_or_prefix
        self.candidates = list(candidates)
        lines = [f"Multiple matches for {id_or_prefix!r} (use a longer prefix or install fzf):"]
        for todo in self.candidates[:MAX_LISTED_CANDIDATES]:
            lines.append(
                f"  {todo.short_id()}  [{todo.header.importance}]  {todo.header.title}  "
                f"({','.join(todo.header.tags)})",
            )
        super().__init__("\n".join(lines))


class InvalidTransitionError(TodoError):
    """Requested status change or archive step is not allowed."""


class StorageIOError(TodoError):
    """Filesystem read, write or rename failure with path context."""


class ExternalToolError(TodoError):
    """External editor could not be launched or exited non-zero."""
