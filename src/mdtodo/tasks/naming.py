"""Filename derivation and collision-free destinations."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from mdtodo.tasks.dates import file_timestamp
from mdtodo.tasks.errors import StorageIOError

TASK_SUFFIX = ".md"
MAX_COLLISION_PROBES = 9999

_NON_WORD_RE = re.compile(r"[^\w]+")
_UNDERSCORE_RE = re.compile(r"_+")


def slugify(title: str) -> str:
    """Lowercase filesystem-safe slug; unicode letters are kept."""

    lowered = _UNDERSCORE_RE.sub("-", title.strip().lower())
    return _NON_WORD_RE.sub("-", lowered).strip("-")


def active_filename(moment: datetime, slug: str | None) -> str:
    stamp = file_timestamp(moment)
    if slug:
        return f"{stamp}__{slug}{TASK_SUFFIX}"
    return f"{stamp}{TASK_SUFFIX}"


def unique_destination(directory: Path, file_name: str) -> Path:
    """First free path among `name`, `stem_1.ext` .. `stem_9999.ext`."""

    candidate = directory / file_name
    if not candidate.exists():
        return candidate
    stem = candidate.stem or "todo"
    suffix = candidate.suffix or TASK_SUFFIX
    for index in range(1, MAX_COLLISION_PROBES + 1):
        candidate = directory / f"{stem}_{index}{suffix}"
        if not candidate.exists():
            return candidate
    raise StorageIOError(f"No free file name for {file_name} in {directory}")
