"""Interactive selection through fzf."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from mdtodo.tasks.listing import due_display, truncate
from mdtodo.tasks.models import TodoFile

logger = logging.getLogger(__name__)

TITLE_WIDTH = 60


class FzfSelector:
    """Selector backed by the `fzf` binary; None when missing or aborted."""

    def __init__(self, editor_command: str, *, executable: str = "fzf") -> None:
        self.editor_command = editor_command
        self.executable = executable

    def select_todo(self, todos: Sequence[TodoFile]) -> TodoFile | None:
        if not todos:
            return None
        by_id = {todo.header.id: todo for todo in todos}
        lines = [_todo_line(todo) for todo in todos]
        chosen = self._run(lines, prompt="todo> ", with_nth="2", preview_field="{3}")
        if chosen is None:
            return None
        return by_id.get(chosen.split("\t", 1)[0])

    def select_path(self, paths: Sequence[Path]) -> Path | None:
        if not paths:
            return None
        chosen = self._run(
            [str(path) for path in paths],
            prompt="broken> ",
            with_nth=None,
            preview_field="{}",
        )
        return Path(chosen) if chosen else None

    def _run(
        self,
        lines: list[str],
        *,
        prompt: str,
        with_nth: str | None,
        preview_field: str,
    ) -> str | None:
        resolved = shutil.which(self.executable)
        if resolved is None:
            logger.debug("fzf executable %r not found on PATH", self.executable)
            return None

        argv = [
            resolved,
            "--delimiter=\t",
            f"--prompt={prompt}",
            "--height=40%",
            "--reverse",
            "--preview-window=right:60%:wrap",
            f"--preview={_preview_command(preview_field)}",
            f"--bind=ctrl-o:execute({self.editor_command} {preview_field})",
        ]
        if with_nth is not None:
            argv.insert(2, f"--with-nth={with_nth}")

        logger.debug("Running selector: %s", shlex.join(argv))
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                input="\n".join(lines),
                check=False,
                stdout=subprocess.PIPE,
                text=True,
            )
        except OSError as error:
            logger.debug("fzf failed to start: %s", error)
            return None

        if completed.returncode != 0:
            logger.debug("fzf exit code=%s", completed.returncode)
            return None
        chosen = completed.stdout.strip()
        return chosen or None


def _todo_line(todo: TodoFile) -> str:
    header = todo.header
    tags = f" ({','.join(header.tags)})" if header.tags else ""
    display = (
        f"[{header.importance}] {due_display(todo):<10} "
        f"{truncate(header.title, TITLE_WIDTH)}{tags}  {todo.path.name}"
    )
    return f"{header.id}\t{display}\t{todo.path}"


def _preview_command(field: str) -> str:
    for viewer in ("bat", "batcat"):
        if shutil.which(viewer) is not None:
            return f"{viewer} --style=plain --color=always {field}"
    return f"sed -n '1,200p' {field}"
