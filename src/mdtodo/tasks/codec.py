"""Parse and render task files: YAML header between `---` lines, then the body."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from mdtodo.tasks.errors import MalformedRecordError
from mdtodo.tasks.models import TaskHeader, TaskStatus, TodoFile

DELIMITER = "---"

_REQUIRED_FIELDS = ("id", "title", "status", "importance", "created_at", "updated_at")


class _HeaderLoader(yaml.SafeLoader):
    """SafeLoader that resolves only null and plain decimal integers.

    Every other plain scalar stays text, so ids, timestamps and titles such as
    `3.10` or `0123` survive a load and save unchanged.
    """


_HeaderLoader.yaml_implicit_resolvers = {}
_HeaderLoader.add_implicit_resolver(
    "tag:yaml.org,2002:null",
    re.compile(r"^(?:~|null|Null|NULL|)$"),
    [*"~nN", ""],
)
_HeaderLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:0|-?[1-9][0-9]*)$"),
    [*"-0123456789"],
)


def split_front_matter(text: str) -> tuple[str, str] | None:
    """Return (header_yaml, body) or None when the text has no header block.

    The first line must be the delimiter and a second delimiter line must
    close the block. Leading newlines of the body are dropped.
    """

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == DELIMITER:
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1 :]).lstrip("\r\n")
            return header, body
    return None


def parse_todo_file(path: Path, text: str) -> TodoFile:
    """Parse file text into a record or raise MalformedRecordError naming the file."""

    first_line = text.splitlines()[0] if text else ""
    if first_line != DELIMITER:
        raise MalformedRecordError(path, f"missing header start {DELIMITER!r}")
    parts = split_front_matter(text)
    if parts is None:
        raise MalformedRecordError(path, f"missing header end {DELIMITER!r}")
    header_text, body = parts

    try:
        raw = yaml.load(header_text, Loader=_HeaderLoader)  # noqa: S506
    except yaml.YAMLError as error:
        raise MalformedRecordError(path, f"YAML parse error: {error}") from error
    if not isinstance(raw, dict):
        raise MalformedRecordError(path, "header block must be a mapping")

    try:
        header = _header_from_mapping(raw)
    except (TypeError, ValueError) as error:
        raise MalformedRecordError(path, str(error)) from error
    return TodoFile(path=path, header=header, body=body)


def render_todo_file(todo: TodoFile) -> str:
    """Serialize header and body back to file text."""

    header_text = yaml.safe_dump(
        _header_to_mapping(todo.header),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    body = todo.body.lstrip("\r\n")
    return f"{DELIMITER}\n{header_text}{DELIMITER}\n{body}"


def _header_from_mapping(raw: dict[str, Any]) -> TaskHeader:
    missing = [name for name in _REQUIRED_FIELDS if raw.get(name) is None]
    if missing:
        raise ValueError(f"missing required fields: {', '.join(missing)}")

    importance = raw["importance"]
    if isinstance(importance, bool) or not isinstance(importance, int):
        raise TypeError(f"importance must be an integer, got {importance!r}")

    tags_raw = raw.get("tags")
    if tags_raw is None:
        tags: list[str] = []
    elif isinstance(tags_raw, list):
        tags = [_scalar_to_str("tags", item) for item in tags_raw]
    else:
        raise TypeError("tags must be a list")

    status_raw = raw["status"]
    if not isinstance(status_raw, str):
        raise TypeError(f"status must be a string, got {status_raw!r}")

    return TaskHeader(
        id=_scalar_to_str("id", raw["id"]),
        title=_scalar_to_str("title", raw["title"]),
        status=TaskStatus.parse(status_raw),
        created_at=_scalar_to_str("created_at", raw["created_at"]),
        updated_at=_scalar_to_str("updated_at", raw["updated_at"]),
        importance=importance,
        due=_optional_str("due", raw.get("due")),
        tags=tags,
        done_at=_optional_str("done_at", raw.get("done_at")),
        restored_from=_optional_str("restored_from", raw.get("restored_from")),
    )


def _header_to_mapping(header: TaskHeader) -> dict[str, Any]:
    return {
        "id": header.id,
        "title": header.title,
        "status": header.status.value,
        "due": header.due,
        "tags": list(header.tags),
        "importance": header.importance,
        "created_at": header.created_at,
        "updated_at": header.updated_at,
        "done_at": header.done_at,
        "restored_from": header.restored_from,
    }


def _scalar_to_str(name: str, value: Any) -> str:
    # The loader only yields ints for plain decimal text, so str() gives it back verbatim.
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise TypeError(f"{name} must be a string, got {value!r}")


def _optional_str(name: str, value: Any) -> str | None:
    if value is None:
        return None
    return _scalar_to_str(name, value)
