"""Filtering, ordering and row rendering for the task list."""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path

from mdtodo.tasks.dates import parse_datetime
from mdtodo.tasks.models import TaskStatus, TodoFile

TITLE_WIDTH = 40
NO_DUE_PLACEHOLDER = "----"

_IMPORTANCE_OPERATORS: tuple[tuple[str, Callable[[int, int], bool]], ...] = (
    (">=", operator.ge),
    ("<=", operator.le),
    (">", operator.gt),
    ("<", operator.lt),
    ("=", operator.eq),
)


class DueLabel(str, Enum):
    """Due-proximity label shown in the first list column."""

    OVERDUE = "OVERDUE"
    TODAY = "TODAY"
    SOON = "SOON"
    NO_DUE = "NO DUE"
    NONE = ""


@dataclass(slots=True)
class ListFilter:
    """Criteria for the list command; unset fields do not filter."""

    status: TaskStatus | None = None
    tag: str | None = None
    importance: str | None = None
    text: str | None = None
    due_within: str | None = None
    due_from: str | None = None
    due_to: str | None = None
    include_overdue: bool = False


def parse_days(raw: str) -> int:
    """Parse a day window such as `14d`."""

    normalized = raw.strip().lower()
    if normalized.endswith("d"):
        try:
            return int(normalized[:-1])
        except ValueError:
            pass
    raise ValueError(f"Invalid duration: {raw!r} (use like 14d)")


def parse_importance_expr(raw: str) -> Callable[[int], bool]:
    """Parse `>=4`, `<3`, `=5` or a bare `3` into a predicate."""

    expr = raw.strip()
    compare: Callable[[int, int], bool] = operator.eq
    for prefix, candidate in _IMPORTANCE_OPERATORS:
        if expr.startswith(prefix):
            compare = candidate
            expr = expr[len(prefix) :].strip()
            break
    try:
        threshold = int(expr)
    except ValueError as error:
        raise ValueError(f"Invalid importance filter: {raw!r}") from error
    return lambda value: compare(value, threshold)


def due_label(todo: TodoFile, *, now: datetime, soon_days: int) -> DueLabel:
    if todo.header.due is None:
        return DueLabel.NO_DUE
    due = parse_datetime(todo.header.due)
    if due is None:
        return DueLabel.NONE
    if due < now:
        return DueLabel.OVERDUE
    if due.astimezone(now.tzinfo).date() == now.date():
        return DueLabel.TODAY
    if due <= now + timedelta(days=soon_days):
        return DueLabel.SOON
    return DueLabel.NONE


def due_display(todo: TodoFile) -> str:
    raw = todo.header.due
    if raw is None:
        return NO_DUE_PLACEHOLDER
    due = parse_datetime(raw)
    if due is None:
        return raw
    return due.strftime("%Y-%m-%d")


def truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - 1, 0)] + "…"


def filter_todos(
    todos: Iterable[TodoFile],
    criteria: ListFilter,
    *,
    now: datetime,
    search_hits: set[Path] | None = None,
) -> list[TodoFile]:
    """Apply list criteria; `search_hits` replaces the substring text match."""

    if criteria.status is not None:
        selected = [todo for todo in todos if todo.header.status is criteria.status]
    else:
        selected = [todo for todo in todos if todo.header.status.is_active]

    if criteria.tag:
        wanted = criteria.tag.lower()
        selected = [
            todo for todo in selected if any(tag.lower() == wanted for tag in todo.header.tags)
        ]

    if criteria.importance:
        matches = parse_importance_expr(criteria.importance)
        selected = [todo for todo in selected if matches(todo.header.importance)]

    if criteria.text:
        if search_hits is not None:
            resolved_hits = {path.resolve() for path in search_hits}
            selected = [todo for todo in selected if todo.path.resolve() in resolved_hits]
        else:
            query = criteria.text.lower()
            selected = [
                todo
                for todo in selected
                if query in todo.header.title.lower() or query in todo.body.lower()
            ]

    if criteria.due_within:
        end = now + timedelta(days=parse_days(criteria.due_within))
        selected = [
            todo
            for todo in selected
            if _due_in_window(todo, now=now, end=end, include_overdue=criteria.include_overdue)
        ]
    elif criteria.due_from or criteria.due_to:
        lower = _bound(criteria.due_from, "--due-from")
        upper = _bound(criteria.due_to, "--due-to")
        selected = [todo for todo in selected if _due_between(todo, lower, upper)]

    return selected


def sort_todos(todos: Iterable[TodoFile], *, now: datetime) -> list[TodoFile]:
    """Overdue first, then earliest due, then highest importance, then id."""

    def key(todo: TodoFile) -> tuple[int, tuple[int, float], int, str]:
        due = parse_datetime(todo.header.due)
        overdue = due is not None and due < now
        due_key = (0, due.timestamp()) if due is not None else (1, 0.0)
        return (0 if overdue else 1, due_key, -todo.header.importance, todo.header.id)

    return sorted(todos, key=key)


def format_row(
    todo: TodoFile,
    label: DueLabel,
    *,
    style: Callable[[DueLabel, str], str] | None = None,
) -> str:
    """One list line; `style` may wrap the padded label in terminal styling."""

    padded = f"{label.value:<7}"
    shown = style(label, padded) if style is not None else padded
    tags = f" ({','.join(todo.header.tags)})" if todo.header.tags else ""
    return (
        f"{shown} {due_display(todo):<10} {f'[{todo.header.importance}]':<6} "
        f"{todo.short_id():<12} {truncate(todo.header.title, TITLE_WIDTH):<{TITLE_WIDTH}}{tags}"
    )


def _due_in_window(todo: TodoFile, *, now: datetime, end: datetime, include_overdue: bool) -> bool:
    due = parse_datetime(todo.header.due)
    if due is None:
        return False
    if due < now:
        return include_overdue
    return due <= end


def _due_between(todo: TodoFile, lower: datetime | None, upper: datetime | None) -> bool:
    due = parse_datetime(todo.header.due)
    if due is None:
        return False
    if lower is not None and due < lower:
        return False
    return upper is None or due <= upper


def _bound(raw: str | None, option: str) -> datetime | None:
    if raw is None:
        return None
    parsed = parse_datetime(raw)
    if parsed is None:
        raise ValueError(f"Invalid {option} value: {raw!r}")
    return parsed
