"""Archive placement and reconciliation of the done/ and canceled/ trees.

Directory placement is a projection of each record's own status and dates.
`organize` recomputes that projection for every archived file and moves the
file when it disagrees; running it on a consistent tree changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from mdtodo.tasks.dates import Clock, local_now, log_date, parse_datetime, stamp
from mdtodo.tasks.errors import InvalidTransitionError, MalformedRecordError, StorageIOError
from mdtodo.tasks.models import TaskHeader, TodoFile
from mdtodo.tasks.repository import BROKEN_DIR_NAME, UNKNOWN_DIR_NAME, TodoRepository
from mdtodo.tools.base import Editor

logger = logging.getLogger(__name__)

RESTORED_LOG_MESSAGE = "restored from archive"


@dataclass(slots=True)
class FixResult:
    """Outcome of one fix-broken attempt."""

    path: Path
    placed_path: Path | None
    error: str | None = None

    @property
    def fixed(self) -> bool:
        return self.placed_path is not None


def month_dir(root: Path, moment: datetime) -> Path:
    return root / f"{moment.year:04d}" / f"{moment.month:02d}"


class ArchiveOrganizer:
    """Moves closed records into the archive and keeps the archive consistent."""

    def __init__(self, repository: TodoRepository, *, clock: Clock = local_now) -> None:
        self.repository = repository
        self.clock = clock

    def archive_one(self, todo: TodoFile) -> Path:
        """Move a closed record to `{status}/{YYYY}/{MM}/` of its `done_at`."""

        header = todo.header
        if not header.status.is_closed:
            raise InvalidTransitionError(
                f"Only done/canceled tasks can be archived, got status {header.status.value}",
            )
        done_at = parse_datetime(header.done_at)
        if done_at is None:
            raise InvalidTransitionError(
                f"Cannot archive {todo.path}: done_at is missing or invalid ({header.done_at!r})",
            )

        source = todo.path
        dest_dir = month_dir(self.repository.archive_root(header.status), done_at)
        new_path = self.repository.move(source, dest_dir)
        if new_path != source:
            todo.path = new_path
            header.updated_at = stamp(self.clock, header.updated_at)
            self.repository.save(todo)
        return new_path

    def archive_active(self) -> int:
        """Archive every closed record still sitting in active/."""

        archived = 0
        for todo in self.repository.load_active():
            if not todo.header.status.is_closed:
                continue
            if parse_datetime(todo.header.done_at) is None:
                logger.warning(
                    "Leaving %s in place: %s task without a valid done_at",
                    todo.path,
                    todo.header.status.value,
                )
                continue
            self.archive_one(todo)
            archived += 1
        return archived

    def organize(self) -> int:
        """Re-home every archived file; returns the number of files visited."""

        # Both trees are scanned up front so a file moved between them is visited once.
        scanned = [
            (root, entry)
            for root in (self.repository.settings.done_dir, self.repository.settings.canceled_dir)
            for entry in self.repository.scan_archive(root)
        ]
        for root, entry in scanned:
            if entry.todo is None:
                self.quarantine(root, entry.path, reason=entry.error or "unparsable")
            else:
                self.place_by_status(entry.todo)
        logger.info("Organized %d archived file(s)", len(scanned))
        return len(scanned)

    def quarantine(self, root: Path, path: Path, *, reason: str) -> Path:
        dest = self.repository.move(path, root / BROKEN_DIR_NAME)
        logger.warning("Quarantined %s -> %s (%s)", path, dest, reason)
        return dest

    def place_by_status(self, todo: TodoFile) -> Path:
        """Put a record where its status and dates say it belongs.

        Active statuses go back to active/ with a journal line. Closed ones go
        to the year/month of done_at, else updated_at, else created_at, else
        to unknown/. Re-filing a closed record adds no journal line.
        """

        header = todo.header
        if header.status.is_active:
            return self.restore_to_active(todo)

        root = self.repository.archive_root(header.status)
        date_source, moment = _placement_moment(header)
        dest_dir = root / UNKNOWN_DIR_NAME if moment is None else month_dir(root, moment)

        source = todo.path
        new_path = self.repository.move(source, dest_dir)
        if new_path == source:
            return source

        todo.path = new_path
        header.restored_from = str(source)
        if moment is not None:
            if parse_datetime(header.done_at) is None:
                header.done_at = date_source
            header.updated_at = stamp(self.clock, header.updated_at)
        self.repository.save(todo)
        return new_path

    def restore_to_active(self, todo: TodoFile) -> Path:
        """Move an active-status record out of the archive, keeping its file name."""

        if self.repository.is_active_path(todo.path):
            return todo.path

        source = todo.path
        new_path = self.repository.move(source, self.repository.settings.active_dir)
        header = todo.header
        todo.path = new_path
        header.updated_at = stamp(self.clock, header.updated_at)
        header.restored_from = str(source)
        header.done_at = None
        todo.append_log_line(log_date(self.clock()), RESTORED_LOG_MESSAGE)
        self.repository.save(todo)
        return new_path

    def fix_broken(self, path: Path, editor: Editor) -> FixResult:
        """Edit a quarantined file and re-home it once it parses."""

        editor.edit(path)
        try:
            todo = self.repository.read(path)
        except (MalformedRecordError, StorageIOError) as error:
            logger.warning("Still broken after edit: %s", path)
            return FixResult(path=path, placed_path=None, error=str(error))
        return FixResult(path=path, placed_path=self.place_by_status(todo))


def _placement_moment(header: TaskHeader) -> tuple[str | None, datetime | None]:
    for value in (header.done_at, header.updated_at, header.created_at):
        moment = parse_datetime(value)
        if moment is not None:
            return value, moment
    return None, None
