"""Blocking external editor invocation."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from mdtodo.tasks.errors import ExternalToolError

logger = logging.getLogger(__name__)


class SubprocessEditor:
    """Runs `command path` and waits for it to exit."""

    def __init__(self, command: str) -> None:
        self.command = command

    def edit(self, path: Path) -> None:
        argv = shlex.split(self.command)
        if not argv:
            raise ExternalToolError("Editor command is empty.")
        argv.append(str(path))

        logger.debug("Launching editor: %s", shlex.join(argv))
        try:
            completed = subprocess.run(argv, check=False)  # noqa: S603
        except OSError as error:
            raise ExternalToolError(f"Failed to launch editor {argv[0]!r}: {error}") from error
        if completed.returncode != 0:
            raise ExternalToolError(
                f"Editor {argv[0]!r} exited with code {completed.returncode} for {path}",
            )
