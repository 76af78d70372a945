"""Seed body for new tasks, optionally from `templates/todo.md`."""

from __future__ import annotations

from pathlib import Path

from mdtodo.tasks.codec import split_front_matter
from mdtodo.tasks.errors import StorageIOError

DEFAULT_BODY = "## Notes\n\n## Subtasks\n- [ ] \n\n## Log\n"


def render_placeholders(template: str, *, task_id: str, title: str, now: str, date: str) -> str:
    return (
        template.replace("{{id}}", task_id)
        .replace("{{title}}", title)
        .replace("{{now}}", now)
        .replace("{{date}}", date)
    )


def initial_body(
    template_path: Path,
    *,
    task_id: str,
    title: str,
    now: str,
    date: str,
) -> str:
    """Body for a new task; a template's own header block is discarded."""

    if not template_path.is_file():
        return DEFAULT_BODY
    try:
        template = template_path.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise StorageIOError(f"Failed to read template {template_path}: {error}") from error

    rendered = render_placeholders(template, task_id=task_id, title=title, now=now, date=date)
    parts = split_front_matter(rendered)
    if parts is None:
        return rendered
    return parts[1]
