"""Controllers for task CLI commands."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import rich_click as click

from mdtodo.config import Settings
from mdtodo.tasks.archive import ArchiveOrganizer
from mdtodo.tasks.dates import Clock, local_now
from mdtodo.tasks.errors import StorageIOError
from mdtodo.tasks.lifecycle import NewTodo, TaskLifecycle
from mdtodo.tasks.listing import (
    DueLabel,
    ListFilter,
    due_label,
    filter_todos,
    format_row,
    sort_todos,
)
from mdtodo.tasks.models import TaskStatus, TodoFile
from mdtodo.tasks.repository import TodoRepository
from mdtodo.tasks.resolver import resolve_one
from mdtodo.tools import (
    Editor,
    FzfSelector,
    NullSearch,
    NullSelector,
    RipgrepSearch,
    Selector,
    SubprocessEditor,
    TextSearch,
)

logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "no selection (fzf not available / canceled / no candidates)"
NO_CLOSED_SELECTION_MESSAGE = "no selection (fzf not available / canceled / no closed todos)"
NO_BROKEN_MESSAGE = "no broken files (or fzf not available / canceled)"

_LABEL_COLORS = {
    DueLabel.OVERDUE: "red",
    DueLabel.TODAY: "yellow",
    DueLabel.SOON: "cyan",
    DueLabel.NO_DUE: "bright_black",
}


@dataclass(slots=True)
class AddCommand:
    """CLI inputs for add command."""

    root: Path | None
    title: str | None
    due: str | None = None
    tags: tuple[str, ...] = ()
    importance: int = 3
    slug: str | None = None
    edit: bool = False


@dataclass(slots=True)
class ListCommand:
    """CLI inputs for list command."""

    root: Path | None
    criteria: ListFilter = field(default_factory=ListFilter)


@dataclass(slots=True)
class ShowCommand:
    root: Path | None
    id_or_prefix: str


@dataclass(slots=True)
class EditCommand:
    root: Path | None
    id_or_prefix: str


@dataclass(slots=True)
class StatusCommand:
    """CLI inputs for start/wait/done/cancel; no id means pick interactively."""

    root: Path | None
    id_or_prefix: str | None
    target: TaskStatus


@dataclass(slots=True)
class ReopenCommand:
    root: Path | None
    id_or_prefix: str | None


@dataclass(slots=True)
class ArchiveCommand:
    root: Path | None


@dataclass(slots=True)
class FixBrokenCommand:
    root: Path | None


class TodoCliController:
    """Coordinates task command execution.

    Host tools default to what the settings name; tests inject fakes.
    """

    def __init__(
        self,
        *,
        selector: Selector | None = None,
        editor: Editor | None = None,
        search: TextSearch | None = None,
        clock: Clock = local_now,
    ) -> None:
        self.selector = selector
        self.editor = editor
        self.search = search
        self.clock = clock

    def add(self, command: AddCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        lifecycle = self._lifecycle(settings, repository)
        todo = lifecycle.create(
            NewTodo(
                title=command.title,
                due=command.due,
                tags=command.tags,
                importance=command.importance,
                slug=command.slug,
            ),
        )
        if command.edit:
            self._editor(settings).edit(todo.path)
            lifecycle.touch_after_edit(todo.path)
            return [f"updated: {todo.path}"]
        return [f"created: {todo.path}"]

    def list_todos(self, command: ListCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        criteria = command.criteria
        now = self.clock()
        todos = repository.load_active()
        search_hits = None
        if criteria.text:
            search_hits = self._search(settings).search(settings.active_dir, criteria.text)
        selected = sort_todos(
            filter_todos(todos, criteria, now=now, search_hits=search_hits),
            now=now,
        )

        style = None if os.getenv("NO_COLOR") is not None else _style_label
        return [
            format_row(
                todo,
                due_label(todo, now=now, soon_days=settings.soon_days),
                style=style,
            )
            for todo in selected
        ]

    def show(self, command: ShowCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        todo = self._resolve_active(settings, repository, command.id_or_prefix)
        try:
            text = todo.path.read_text("utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise StorageIOError(f"Failed to read {todo.path}: {error}") from error
        return [text]

    def edit(self, command: EditCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        todo = self._resolve_active(settings, repository, command.id_or_prefix)
        self._editor(settings).edit(todo.path)
        self._lifecycle(settings, repository).touch_after_edit(todo.path)
        return [f"updated: {todo.path}"]

    def set_status(self, command: StatusCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        if command.id_or_prefix is None:
            picked = self._selector(settings).select_todo(
                [todo for todo in repository.load_active() if todo.header.status.is_active],
            )
            if picked is None:
                return [NO_SELECTION_MESSAGE]
            todo = picked
        else:
            todo = self._resolve_active(settings, repository, command.id_or_prefix)

        outcome = self._lifecycle(settings, repository).set_status(todo, command.target)
        if outcome.archived_path is not None:
            return [f"archived: {outcome.archived_path}"]
        return [f"updated: {outcome.todo.path}"]

    def reopen(self, command: ReopenCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        closed = repository.load_closed()
        if command.id_or_prefix is None:
            picked = self._selector(settings).select_todo(closed)
            if picked is None:
                return [NO_CLOSED_SELECTION_MESSAGE]
            todo = picked
        else:
            todo = resolve_one(
                closed,
                command.id_or_prefix,
                selector=self._selector(settings),
            )

        outcome = self._lifecycle(settings, repository).reopen(todo)
        return [f"reopened: {outcome.todo.path}"]

    def archive(self, command: ArchiveCommand) -> list[str]:
        settings = _settings(command.root)
        organizer = ArchiveOrganizer(_open_repository(settings), clock=self.clock)
        archived = organizer.archive_active()
        reorganized = organizer.organize()
        return [
            f"archived {archived} file(s) from active, "
            f"reorganized {reorganized} file(s) in archive",
        ]

    def fix_broken(self, command: FixBrokenCommand) -> list[str]:
        settings = _settings(command.root)
        repository = _open_repository(settings)
        path = self._selector(settings).select_path(repository.list_broken())
        if path is None:
            return [NO_BROKEN_MESSAGE]
        result = ArchiveOrganizer(repository, clock=self.clock).fix_broken(
            path,
            self._editor(settings),
        )

        if result.placed_path is None:
            return [f"still broken: {result.path} ({result.error})"]
        return [f"fixed and placed: {result.placed_path}"]

    def _lifecycle(self, settings: Settings, repository: TodoRepository) -> TaskLifecycle:
        return TaskLifecycle(
            repository,
            auto_archive=settings.auto_archive,
            clock=self.clock,
        )

    def _resolve_active(
        self,
        settings: Settings,
        repository: TodoRepository,
        id_or_prefix: str,
    ) -> TodoFile:
        return resolve_one(
            repository.load_active(),
            id_or_prefix,
            selector=self._selector(settings),
        )

    def _selector(self, settings: Settings) -> Selector:
        if self.selector is not None:
            return self.selector
        if settings.selector == "fzf":
            return FzfSelector(settings.editor)
        return NullSelector()

    def _editor(self, settings: Settings) -> Editor:
        if self.editor is not None:
            return self.editor
        return SubprocessEditor(settings.editor)

    def _search(self, settings: Settings) -> TextSearch:
        if self.search is not None:
            return self.search
        if settings.search == "rg":
            return RipgrepSearch()
        return NullSearch()


def _settings(root: Path | None) -> Settings:
    settings = Settings.from_env(root_dir=root)
    settings.validate()
    return settings


def _open_repository(settings: Settings) -> TodoRepository:
    repository = TodoRepository(settings)
    repository.ensure_dirs()
    logger.debug("Using task root %s", settings.root_dir)
    return repository


def _style_label(label: DueLabel, text: str) -> str:
    color = _LABEL_COLORS.get(label)
    if color is None:
        return text
    return click.style(text, fg=color, bold=label is DueLabel.OVERDUE)
