"""Domain models for task records."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

SHORT_ID_LENGTH = 12
LOG_HEADING = "## Log"
DEFAULT_IMPORTANCE = 3

_LOG_HEADING_RE = re.compile(r"^## Log[ \t]*\r?$", re.MULTILINE)


class TaskStatus(str, Enum):
    """Task lifecycle states."""

    TODO = "todo"
    DOING = "doing"
    WAITING = "waiting"
    DONE = "done"
    CANCELED = "canceled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_closed(self) -> bool:
        return self in CLOSED_STATUSES

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """Parse a status name, accepting the British spelling of canceled."""

        normalized = raw.strip().lower()
        if normalized == "cancelled":
            normalized = "canceled"
        try:
            return cls(normalized)
        except ValueError as error:
            raise ValueError(f"Invalid status: {raw!r}") from error


ACTIVE_STATUSES = frozenset({TaskStatus.TODO, TaskStatus.DOING, TaskStatus.WAITING})
CLOSED_STATUSES = frozenset({TaskStatus.DONE, TaskStatus.CANCELED})


@dataclass(slots=True)
class TaskHeader:
    """Structured header block stored at the top of each task file."""

    id: str
    title: str
    status: TaskStatus
    created_at: str
    updated_at: str
    importance: int = DEFAULT_IMPORTANCE
    due: str | None = None
    tags: list[str] = field(default_factory=list)
    done_at: str | None = None
    restored_from: str | None = None


@dataclass(slots=True)
class TodoFile:
    """One task record bound to its file path."""

    path: Path
    header: TaskHeader
    body: str = ""

    def short_id(self) -> str:
        """Display-only prefix of the id."""

        return self.header.id[:SHORT_ID_LENGTH]

    def append_log_line(self, date: str, message: str) -> None:
        """Insert a journal line as the first entry under the Log heading."""

        line = f"- {date}: {message}\n"
        match = _LOG_HEADING_RE.search(self.body)
        if match is None:
            if self.body and not self.body.endswith("\n"):
                self.body += "\n"
            separator = "\n" if self.body else ""
            self.body += f"{separator}{LOG_HEADING}\n{line}"
            return

        heading_end = match.end()
        if heading_end >= len(self.body):
            self.body += "\n" + line
            return
        insert_at = heading_end + 1
        self.body = self.body[:insert_at] + line + self.body[insert_at:]
