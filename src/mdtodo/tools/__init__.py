"""Host-environment collaborators: selection, editing and text search."""

from mdtodo.tools.base import Editor, NullSearch, NullSelector, Selector, TextSearch
from mdtodo.tools.editor import SubprocessEditor
from mdtodo.tools.fzf import FzfSelector
from mdtodo.tools.ripgrep import RipgrepSearch

__all__ = [
    "Editor",
    "FzfSelector",
    "NullSearch",
    "NullSelector",
    "RipgrepSearch",
    "Selector",
    "SubprocessEditor",
    "TextSearch",
]
