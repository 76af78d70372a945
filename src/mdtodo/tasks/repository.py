"""Filesystem-backed task repository.

The directory tree is both storage and index. Nothing is cached between
calls: every load re-reads the files from disk.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from mdtodo.config import Settings
from mdtodo.tasks.codec import parse_todo_file, render_todo_file
from mdtodo.tasks.errors import InvalidTransitionError, MalformedRecordError, StorageIOError
from mdtodo.tasks.models import TaskStatus, TodoFile
from mdtodo.tasks.naming import TASK_SUFFIX, unique_destination

logger = logging.getLogger(__name__)

BROKEN_DIR_NAME = "broken"
UNKNOWN_DIR_NAME = "unknown"


@dataclass(slots=True)
class ScanEntry:
    """Outcome of reading one file during a lenient scan."""

    path: Path
    todo: TodoFile | None
    error: str | None = None


class TodoRepository:
    """Scan, load, save and move task files under the configured root."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def ensure_dirs(self) -> None:
        for directory in (
            self.settings.active_dir,
            self.settings.done_dir,
            self.settings.canceled_dir,
            self.settings.templates_dir,
        ):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as error:
                raise StorageIOError(f"Failed to create {directory}: {error}") from error

    def archive_root(self, status: TaskStatus) -> Path:
        if status is TaskStatus.DONE:
            return self.settings.done_dir
        if status is TaskStatus.CANCELED:
            return self.settings.canceled_dir
        raise InvalidTransitionError(
            f"Only done/canceled tasks have an archive, got status {status.value}",
        )

    def is_active_path(self, path: Path) -> bool:
        return path.is_relative_to(self.settings.active_dir)

    def task_paths(self, directory: Path, *, skip_quarantine: bool = False) -> list[Path]:
        """Every task file below `directory`, sorted by path."""

        if not directory.is_dir():
            return []
        paths = []
        for path in directory.rglob(f"*{TASK_SUFFIX}"):
            if not path.is_file():
                continue
            if skip_quarantine and path.relative_to(directory).parts[0] == BROKEN_DIR_NAME:
                continue
            paths.append(path)
        return sorted(paths)

    def read(self, path: Path) -> TodoFile:
        """Read and parse one file; any failure is raised."""

        try:
            text = path.read_text("utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise StorageIOError(f"Failed to read {path}: {error}") from error
        return parse_todo_file(path, text)

    def load_dir(self, directory: Path, *, skip_quarantine: bool = False) -> list[TodoFile]:
        """Strict recursive load: the first unreadable or malformed file aborts."""

        return [
            self.read(path)
            for path in self.task_paths(directory, skip_quarantine=skip_quarantine)
        ]

    def scan_archive(self, root: Path) -> list[ScanEntry]:
        """Lenient recursive scan of one archive tree, skipping the quarantine."""

        entries: list[ScanEntry] = []
        for path in self.task_paths(root, skip_quarantine=True):
            try:
                text = path.read_text("utf-8")
            except (OSError, UnicodeDecodeError) as error:
                entries.append(ScanEntry(path=path, todo=None, error=f"unreadable: {error}"))
                continue
            try:
                entries.append(ScanEntry(path=path, todo=parse_todo_file(path, text)))
            except MalformedRecordError as error:
                entries.append(ScanEntry(path=path, todo=None, error=str(error)))
        return entries

    def load_active(self) -> list[TodoFile]:
        return self.load_dir(self.settings.active_dir)

    def load_closed(self) -> list[TodoFile]:
        """Closed records from active/ (not yet archived) plus both archive trees.

        Quarantined files under `broken/` are left to fix-broken.
        """

        todos = [
            *self.load_dir(self.settings.active_dir),
            *self.load_dir(self.settings.done_dir, skip_quarantine=True),
            *self.load_dir(self.settings.canceled_dir, skip_quarantine=True),
        ]
        return [todo for todo in todos if todo.header.status.is_closed]

    def list_broken(self) -> list[Path]:
        paths: list[Path] = []
        for root in (self.settings.done_dir, self.settings.canceled_dir):
            paths.extend(self.task_paths(root / BROKEN_DIR_NAME))
        return paths

    def save(self, todo: TodoFile) -> None:
        """Rewrite the whole file at `todo.path`.

        The text goes to a temporary file in the same directory that then
        replaces the record, so a crash leaves either the old or the new file.
        """

        text = render_todo_file(todo)
        temp_path: Path | None = None
        try:
            todo.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=todo.path.parent,
                prefix=f".{todo.path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, todo.path)
        except OSError as error:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise StorageIOError(f"Failed to write {todo.path}: {error}") from error

    def move(self, source: Path, dest_dir: Path) -> Path:
        """Move keeping the file name; a move into the current directory is a no-op."""

        if source.parent == dest_dir:
            return source
        return self.rename(source, unique_destination(dest_dir, source.name))

    def rename(self, source: Path, dest: Path) -> Path:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            source.rename(dest)
        except OSError as error:
            raise StorageIOError(f"Failed to move {source} -> {dest}: {error}") from error
        logger.info("Moved %s -> %s", source, dest)
        return dest
