"""Status transitions, creation and post-edit stamping of task records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from mdtodo.tasks.archive import ArchiveOrganizer
from mdtodo.tasks.dates import Clock, format_timestamp, local_now, log_date, parse_datetime, stamp
from mdtodo.tasks.errors import InvalidTransitionError
from mdtodo.tasks.models import DEFAULT_IMPORTANCE, TaskHeader, TaskStatus, TodoFile
from mdtodo.tasks.naming import active_filename, slugify, unique_destination
from mdtodo.tasks.repository import TodoRepository
from mdtodo.tasks.templates import initial_body

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NewTodo:
    """Input for the add operation."""

    title: str | None = None
    due: str | None = None
    tags: tuple[str, ...] = ()
    importance: int = DEFAULT_IMPORTANCE
    slug: str | None = None


@dataclass(slots=True)
class TransitionOutcome:
    """Record after a transition, plus where auto-archive put it."""

    todo: TodoFile
    previous: TaskStatus
    archived_path: Path | None = None
    log_message: str = ""


def transition_action(previous: TaskStatus, target: TaskStatus) -> str:
    if target is TaskStatus.DOING:
        return "start" if previous is TaskStatus.TODO else "set doing"
    if target is TaskStatus.WAITING:
        return "set waiting"
    if target is TaskStatus.DONE:
        return "done"
    if target is TaskStatus.CANCELED:
        return "canceled"
    return "reopen"


class TaskLifecycle:
    """Applies lifecycle changes and persists each one in a single rewrite."""

    def __init__(
        self,
        repository: TodoRepository,
        *,
        organizer: ArchiveOrganizer | None = None,
        auto_archive: bool = False,
        clock: Clock = local_now,
    ) -> None:
        self.repository = repository
        self.organizer = organizer or ArchiveOrganizer(repository, clock=clock)
        self.auto_archive = auto_archive
        self.clock = clock

    def create(self, new: NewTodo) -> TodoFile:
        settings = self.repository.settings
        moment = self.clock()
        now = format_timestamp(moment)
        title = new.title or ""
        slug = new.slug if new.slug is not None else slugify(title)
        path = unique_destination(settings.active_dir, active_filename(moment, slug or None))

        todo = TodoFile(
            path=path,
            header=TaskHeader(
                id=now,
                title=title,
                status=TaskStatus.TODO,
                created_at=now,
                updated_at=now,
                importance=new.importance,
                due=new.due,
                tags=[tag for tag in new.tags if tag],
            ),
            body=initial_body(
                settings.template_path,
                task_id=now,
                title=title,
                now=now,
                date=log_date(moment),
            ),
        )
        self.repository.save(todo)
        logger.info("Created %s", path)
        return todo

    def set_status(self, todo: TodoFile, target: TaskStatus) -> TransitionOutcome:
        """start / wait / done / cancel. Location is untouched unless auto-archive is on."""

        if target is TaskStatus.TODO:
            raise InvalidTransitionError("Only reopen can move a task back to todo")

        header = todo.header
        previous = header.status
        updated_at = stamp(self.clock, header.updated_at)
        header.status = target
        header.updated_at = updated_at
        header.done_at = updated_at if target.is_closed else None
        message = self._journal(todo, previous, target, updated_at)
        self.repository.save(todo)

        outcome = TransitionOutcome(todo=todo, previous=previous, log_message=message)
        if self.auto_archive and target.is_closed:
            outcome.archived_path = self.organizer.archive_one(todo)
        return outcome

    def reopen(self, todo: TodoFile) -> TransitionOutcome:
        """done|canceled -> todo, moved back to active/ under a fresh file name."""

        header = todo.header
        previous = header.status
        if not previous.is_closed:
            raise InvalidTransitionError(
                f"Reopen is only allowed for done/canceled tasks, got status {previous.value}",
            )

        active_dir = self.repository.settings.active_dir
        source = todo.path
        dest = unique_destination(
            active_dir,
            active_filename(self.clock(), slugify(header.title) or None),
        )
        todo.path = self.repository.rename(source, dest)

        updated_at = stamp(self.clock, header.updated_at)
        header.status = TaskStatus.TODO
        header.updated_at = updated_at
        header.done_at = None
        header.restored_from = str(source)
        message = self._journal(todo, previous, TaskStatus.TODO, updated_at)
        self.repository.save(todo)
        return TransitionOutcome(todo=todo, previous=previous, log_message=message)

    def touch_after_edit(self, path: Path) -> TodoFile:
        """Re-stamp a manually edited file and repair its done_at."""

        todo = self.repository.read(path)
        header = todo.header
        header.updated_at = stamp(self.clock, header.updated_at)
        if header.status.is_closed and header.done_at is None:
            header.done_at = header.updated_at
        elif header.status.is_active and header.done_at is not None:
            header.done_at = None
        self.repository.save(todo)
        return todo

    def _journal(
        self,
        todo: TodoFile,
        previous: TaskStatus,
        target: TaskStatus,
        timestamp: str,
    ) -> str:
        action = transition_action(previous, target)
        message = f"{action} (status {previous.value} -> {target.value})"
        moment = parse_datetime(timestamp) or self.clock()
        todo.append_log_line(log_date(moment), message)
        return message
