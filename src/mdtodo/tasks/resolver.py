"""Resolve a user-supplied id or id prefix to exactly one record."""

from __future__ import annotations

from collections.abc import Sequence

from mdtodo.tasks.errors import AmbiguousMatchError, NoMatchError
from mdtodo.tasks.models import TodoFile
from mdtodo.tools.base import Selector


def resolve_one(
    candidates: Sequence[TodoFile],
    id_or_prefix: str,
    *,
    selector: Selector | None = None,
) -> TodoFile:
    """Exact id or prefix match; several matches go to the selector."""

    matches = [
        todo
        for todo in candidates
        if todo.header.id == id_or_prefix or todo.header.id.startswith(id_or_prefix)
    ]
    if not matches:
        raise NoMatchError(id_or_prefix)
    if len(matches) == 1:
        return matches[0]

    if selector is not None:
        chosen = selector.select_todo(matches)
        if chosen is not None:
            return chosen
    raise AmbiguousMatchError(id_or_prefix, matches)
