"""Runtime configuration for the task store and host tools."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

SUPPORTED_SELECTORS = ("fzf", "none")
SUPPORTED_SEARCHES = ("rg", "none")


@dataclass(slots=True)
class Settings:
    """Application settings; every directory is derived from `root_dir`."""

    root_dir: Path = Path.home() / "todo"
    soon_days: int = 7
    editor: str = "nvim"
    auto_archive: bool = False
    selector: str = "fzf"
    search: str = "rg"

    @classmethod
    def from_env(cls, root_dir: Path | None = None) -> Settings:
        """Load settings from MDTODO_* variables with sane local defaults."""

        env_root = os.getenv("MDTODO_ROOT_DIR", "").strip()
        if root_dir is None:
            root_dir = Path(env_root).expanduser() if env_root else Path.home() / "todo"
        return cls(
            root_dir=root_dir,
            soon_days=int(os.getenv("MDTODO_SOON_DAYS", "7")),
            editor=_first_env("MDTODO_EDITOR", "EDITOR", default="nvim"),
            auto_archive=_env_bool("MDTODO_AUTO_ARCHIVE", default=False),
            selector=os.getenv("MDTODO_SELECTOR", "fzf").strip().lower(),
            search=os.getenv("MDTODO_SEARCH", "rg").strip().lower(),
        )

    def validate(self) -> None:
        """Raise configuration error on out-of-range values."""

        if self.soon_days < 0:
            raise ValueError("MDTODO_SOON_DAYS must be >= 0.")
        if self.selector not in SUPPORTED_SELECTORS:
            raise ValueError(
                f"Unsupported MDTODO_SELECTOR {self.selector!r}. "
                f"Expected one of: {', '.join(SUPPORTED_SELECTORS)}.",
            )
        if self.search not in SUPPORTED_SEARCHES:
            raise ValueError(
                f"Unsupported MDTODO_SEARCH {self.search!r}. "
                f"Expected one of: {', '.join(SUPPORTED_SEARCHES)}.",
            )

    @property
    def active_dir(self) -> Path:
        return self.root_dir / "active"

    @property
    def done_dir(self) -> Path:
        return self.root_dir / "done"

    @property
    def canceled_dir(self) -> Path:
        return self.root_dir / "canceled"

    @property
    def templates_dir(self) -> Path:
        return self.root_dir / "templates"

    @property
    def template_path(self) -> Path:
        return self.templates_dir / "todo.md"


def _first_env(*names: str, default: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value
    return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
