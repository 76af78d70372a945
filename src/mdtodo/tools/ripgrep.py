"""Full-text search through ripgrep."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

_NO_MATCHES_EXIT_CODE = 1


class RipgrepSearch:
    """`rg -l` over a directory; None tells the caller to fall back."""

    def __init__(self, *, executable: str = "rg") -> None:
        self.executable = executable

    def search(self, directory: Path, query: str) -> set[Path] | None:
        resolved = shutil.which(self.executable)
        if resolved is None:
            logger.debug("ripgrep executable %r not found on PATH", self.executable)
            return None

        argv = [resolved, "-l", "--", query, str(directory)]
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as error:
            logger.debug("ripgrep failed to start: %s", error)
            return None

        if completed.returncode == _NO_MATCHES_EXIT_CODE:
            return set()
        if completed.returncode != 0:
            logger.debug(
                "ripgrep exit code=%s stderr=%s",
                completed.returncode,
                completed.stderr.strip(),
            )
            return None
        return {Path(line) for line in completed.stdout.splitlines() if line.strip()}
