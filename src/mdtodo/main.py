"""CLI entrypoint for mdtodo."""

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import rich_click as click

from mdtodo import __version__
from mdtodo.controllers import (
    AddCommand,
    ArchiveCommand,
    EditCommand,
    FixBrokenCommand,
    ListCommand,
    ReopenCommand,
    ShowCommand,
    StatusCommand,
    TodoCliController,
)
from mdtodo.logging_setup import setup_logging
from mdtodo.tasks.errors import TodoError
from mdtodo.tasks.listing import ListFilter
from mdtodo.tasks.models import DEFAULT_IMPORTANCE, TaskStatus

click.rich_click.USE_MARKDOWN = True
CONTROLLER = TodoCliController()

CommandT = TypeVar("CommandT")

_root_option = click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Task root directory (defaults to MDTODO_ROOT_DIR or ~/todo).",
)


@click.group()
@click.version_option(version=__version__, prog_name="mdtodo")
@click.option("-v", "--verbose", is_flag=True, help="Log debug details to stderr.")
def mdtodo(verbose: bool) -> None:
    """Markdown task tracker: one file per task under `active/`, `done/`, `canceled/`."""

    setup_logging(verbose=verbose)


@mdtodo.command("add")
@_root_option
@click.argument("title", required=False)
@click.option("--due", default=None, help="Due date, YYYY-MM-DD or RFC 3339 datetime.")
@click.option("--tags", default=None, help="Comma separated tags, for example home,money.")
@click.option(
    "--importance",
    type=click.IntRange(min=1, max=5),
    default=DEFAULT_IMPORTANCE,
    show_default=True,
    help="Importance from 1 (low) to 5 (high).",
)
@click.option("--edit", "open_editor", is_flag=True, help="Open the new file in the editor.")
@click.option("--slug", default=None, help="File name slug instead of one derived from the title.")
def add(  # noqa: PLR0913
    root: Path | None,
    title: str | None,
    due: str | None,
    tags: str | None,
    importance: int,
    open_editor: bool,
    slug: str | None,
) -> None:
    """Create a new task in `active/`."""

    _run(
        CONTROLLER.add,
        AddCommand(
            root=root,
            title=title,
            due=due,
            tags=_split_tags(tags),
            importance=importance,
            slug=slug,
            edit=open_editor,
        ),
    )


@mdtodo.command("list")
@_root_option
@click.option("--due-within", default=None, help="Only tasks due within a window, like 14d.")
@click.option("--due-from", default=None, help="Only tasks due on or after this date.")
@click.option("--due-to", default=None, help="Only tasks due on or before this date.")
@click.option("--tag", default=None, help="Only tasks with this tag (case-insensitive).")
@click.option(
    "--status",
    type=click.Choice([status.value for status in TaskStatus] + ["cancelled"]),
    default=None,
    help="Only tasks with this status instead of every active one.",
)
@click.option("--importance", default=None, help="Importance filter: >=4, <3, =5 or 5.")
@click.option("--text", default=None, help="Free-text query over title and body.")
@click.option(
    "--include-overdue",
    is_flag=True,
    help="With --due-within, also keep tasks that are already overdue.",
)
def list_command(  # noqa: PLR0913
    root: Path | None,
    due_within: str | None,
    due_from: str | None,
    due_to: str | None,
    tag: str | None,
    status: str | None,
    importance: str | None,
    text: str | None,
    include_overdue: bool,
) -> None:
    """List active tasks, overdue first."""

    _run(
        CONTROLLER.list_todos,
        ListCommand(
            root=root,
            criteria=ListFilter(
                status=TaskStatus.parse(status) if status else None,
                tag=tag,
                importance=importance,
                text=text,
                due_within=due_within,
                due_from=due_from,
                due_to=due_to,
                include_overdue=include_overdue,
            ),
        ),
    )


@mdtodo.command("show")
@_root_option
@click.argument("id_or_prefix")
def show(root: Path | None, id_or_prefix: str) -> None:
    """Print a task file."""

    _run(CONTROLLER.show, ShowCommand(root=root, id_or_prefix=id_or_prefix))


@mdtodo.command("edit")
@_root_option
@click.argument("id_or_prefix")
def edit(root: Path | None, id_or_prefix: str) -> None:
    """Open a task in the editor and stamp `updated_at` afterwards."""

    _run(CONTROLLER.edit, EditCommand(root=root, id_or_prefix=id_or_prefix))


def _status_command(name: str, target: TaskStatus, summary: str) -> None:
    @mdtodo.command(name, help=summary)
    @_root_option
    @click.argument("id_or_prefix", required=False)
    def command(root: Path | None, id_or_prefix: str | None) -> None:
        _run(
            CONTROLLER.set_status,
            StatusCommand(root=root, id_or_prefix=id_or_prefix, target=target),
        )


_status_command("start", TaskStatus.DOING, "Mark a task as doing.")
_status_command("wait", TaskStatus.WAITING, "Mark a task as waiting.")
_status_command("done", TaskStatus.DONE, "Mark a task as done.")
_status_command("cancel", TaskStatus.CANCELED, "Mark a task as canceled.")


@mdtodo.command("reopen")
@_root_option
@click.argument("id_or_prefix", required=False)
def reopen(root: Path | None, id_or_prefix: str | None) -> None:
    """Move a done or canceled task back to `active/` as todo."""

    _run(CONTROLLER.reopen, ReopenCommand(root=root, id_or_prefix=id_or_prefix))


@mdtodo.command("archive")
@_root_option
def archive(root: Path | None) -> None:
    """Archive closed tasks from `active/` and reorganize the archive."""

    _run(CONTROLLER.archive, ArchiveCommand(root=root))


@mdtodo.command("fix-broken")
@_root_option
def fix_broken(root: Path | None) -> None:
    """Edit a quarantined file and re-home it once it parses."""

    _run(CONTROLLER.fix_broken, FixBrokenCommand(root=root))


def _run(handler: Callable[[CommandT], list[str]], command: CommandT) -> None:
    try:
        lines = handler(command)
    except (TodoError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _split_tags(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(tag.strip() for tag in raw.split(",") if tag.strip())


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    mdtodo()
