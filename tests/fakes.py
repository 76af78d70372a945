"""Test doubles for host tools plus helpers to build task files on disk."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from mdtodo.tasks.codec import render_todo_file
from mdtodo.tasks.errors import ExternalToolError
from mdtodo.tasks.models import TaskHeader, TaskStatus, TodoFile

JST = timezone(timedelta(hours=9))
START = datetime(2026, 1, 5, 12, 0, 0, tzinfo=JST)


class TickingClock:
    """Deterministic clock: every call returns the previous moment plus `step`."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start - step
        self.step = step

    def __call__(self) -> datetime:
        self.current = self.current + self.step
        return self.current


@dataclass
class FakeSelector:
    """Picks by callback; records what it was offered."""

    pick_todo: Callable[[Sequence[TodoFile]], TodoFile | None] = lambda todos: None
    pick_path: Callable[[Sequence[Path]], Path | None] = lambda paths: None
    offered_todos: list[list[TodoFile]] = field(default_factory=list)
    offered_paths: list[list[Path]] = field(default_factory=list)

    def select_todo(self, todos: Sequence[TodoFile]) -> TodoFile | None:
        self.offered_todos.append(list(todos))
        return self.pick_todo(todos)

    def select_path(self, paths: Sequence[Path]) -> Path | None:
        self.offered_paths.append(list(paths))
        return self.pick_path(paths)


@dataclass
class FakeEditor:
    """Applies `rewrite` to the file text instead of launching an editor."""

    rewrite: Callable[[str], str] | None = None
    fail: bool = False
    edited: list[Path] = field(default_factory=list)

    def edit(self, path: Path) -> None:
        self.edited.append(path)
        if self.fail:
            raise ExternalToolError(f"Editor 'fake' exited with code 1 for {path}")
        if self.rewrite is not None:
            path.write_text(self.rewrite(path.read_text("utf-8")), "utf-8")


@dataclass
class FakeSearch:
    hits: set[Path] | None = None
    queries: list[tuple[Path, str]] = field(default_factory=list)

    def search(self, directory: Path, query: str) -> set[Path] | None:
        self.queries.append((directory, query))
        return self.hits


def make_todo(  # noqa: PLR0913
    path: Path,
    *,
    task_id: str = "2026-01-05T10:00:00.000000+09:00",
    title: str = "Sample task",
    status: TaskStatus = TaskStatus.TODO,
    importance: int = 3,
    due: str | None = None,
    tags: list[str] | None = None,
    created_at: str | None = None,
    updated_at: str | None = None,
    done_at: str | None = None,
    body: str = "## Log\n",
) -> TodoFile:
    return TodoFile(
        path=path,
        header=TaskHeader(
            id=task_id,
            title=title,
            status=status,
            created_at=created_at or task_id,
            updated_at=updated_at or task_id,
            importance=importance,
            due=due,
            tags=list(tags or []),
            done_at=done_at,
        ),
        body=body,
    )


def write_todo(path: Path, **fields) -> TodoFile:
    """Create the record with `make_todo` and write it to `path`."""

    todo = make_todo(path, **fields)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_todo_file(todo), "utf-8")
    return todo


def relative_files(root: Path) -> list[str]:
    """Every task file under `root` as sorted POSIX paths relative to it."""

    return sorted(path.relative_to(root).as_posix() for path in root.rglob("*.md"))
