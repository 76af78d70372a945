from __future__ import annotations

import subprocess
from pathlib import Path

import allure
import pytest
from fakes import make_todo

from mdtodo.tasks.errors import ExternalToolError
from mdtodo.tools import editor as editor_module
from mdtodo.tools import fzf as fzf_module
from mdtodo.tools import ripgrep as ripgrep_module
from mdtodo.tools.editor import SubprocessEditor
from mdtodo.tools.fzf import FzfSelector
from mdtodo.tools.ripgrep import RipgrepSearch

pytestmark = [
    allure.epic("Host Tools"),
    allure.feature("Subprocess Collaborators"),
]


class _Recorder:
    """Stands in for subprocess.run and remembers each call."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        return subprocess.CompletedProcess(argv, self.returncode, self.stdout, self.stderr)


def _which(*available: str):
    return lambda name: f"/usr/bin/{name}" if name in available else None


class TestRipgrepSearch:
    def test_matching_paths(self, monkeypatch, tmp_path: Path) -> None:
        run = _Recorder(stdout=f"{tmp_path}/a.md\n{tmp_path}/b.md\n")
        monkeypatch.setattr(ripgrep_module.shutil, "which", _which("rg"))
        monkeypatch.setattr(ripgrep_module.subprocess, "run", run)

        hits = RipgrepSearch().search(tmp_path, "-rent")

        assert hits == {tmp_path / "a.md", tmp_path / "b.md"}
        assert run.calls[0][0] == ["/usr/bin/rg", "-l", "--", "-rent", str(tmp_path)]

    def test_exit_one_means_no_matches(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setattr(ripgrep_module.shutil, "which", _which("rg"))
        monkeypatch.setattr(ripgrep_module.subprocess, "run", _Recorder(returncode=1))

        assert RipgrepSearch().search(tmp_path, "rent") == set()

    def test_errors_and_missing_binary_fall_back(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setattr(ripgrep_module.subprocess, "run", _Recorder(returncode=2))
        monkeypatch.setattr(ripgrep_module.shutil, "which", _which("rg"))
        assert RipgrepSearch().search(tmp_path, "(") is None

        monkeypatch.setattr(ripgrep_module.shutil, "which", _which())
        assert RipgrepSearch().search(tmp_path, "rent") is None


class TestSubprocessEditor:
    def test_command_is_split_and_path_appended(self, monkeypatch, tmp_path: Path) -> None:
        run = _Recorder()
        monkeypatch.setattr(editor_module.subprocess, "run", run)

        SubprocessEditor("code --wait").edit(tmp_path / "a.md")

        assert run.calls[0][0] == ["code", "--wait", str(tmp_path / "a.md")]

    def test_non_zero_exit_is_an_error(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setattr(editor_module.subprocess, "run", _Recorder(returncode=3))

        with pytest.raises(ExternalToolError, match="exited with code 3"):
            SubprocessEditor("vi").edit(tmp_path / "a.md")

    def test_launch_failure_is_an_error(self, monkeypatch, tmp_path: Path) -> None:
        def _missing(argv, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", argv[0])

        monkeypatch.setattr(editor_module.subprocess, "run", _missing)

        with pytest.raises(ExternalToolError, match="Failed to launch editor 'no-such-editor'"):
            SubprocessEditor("no-such-editor").edit(tmp_path / "a.md")

    def test_empty_command_is_an_error(self, tmp_path: Path) -> None:
        with pytest.raises(ExternalToolError, match="empty"):
            SubprocessEditor("  ").edit(tmp_path / "a.md")


class TestFzfSelector:
    def _todos(self):
        return [
            make_todo(Path("/todo/active/a.md"), task_id="id-a", title="Pay rent", tags=["home"]),
            make_todo(Path("/todo/active/b.md"), task_id="id-b", title="Email bank"),
        ]

    def test_picked_line_maps_back_to_the_record(self, monkeypatch) -> None:
        todos = self._todos()
        run = _Recorder(stdout="id-b\t[3] ----       Email bank  b.md\t/todo/active/b.md\n")
        monkeypatch.setattr(fzf_module.shutil, "which", _which("fzf"))
        monkeypatch.setattr(fzf_module.subprocess, "run", run)

        chosen = FzfSelector("nvim").select_todo(todos)

        assert chosen is todos[1]
        argv, kwargs = run.calls[0]
        assert "--with-nth=2" in argv
        assert "--bind=ctrl-o:execute(nvim {3})" in argv
        assert "--preview=sed -n '1,200p' {3}" in argv
        assert kwargs["input"].splitlines()[0].startswith("id-a\t[3] ----")
        assert kwargs["input"].splitlines()[0].endswith("\t/todo/active/a.md")

    def test_abort_or_missing_binary_returns_none(self, monkeypatch) -> None:
        monkeypatch.setattr(fzf_module.subprocess, "run", _Recorder(returncode=130))
        monkeypatch.setattr(fzf_module.shutil, "which", _which("fzf"))
        assert FzfSelector("nvim").select_todo(self._todos()) is None

        monkeypatch.setattr(fzf_module.shutil, "which", _which())
        assert FzfSelector("nvim").select_todo(self._todos()) is None

    def test_no_candidates_skips_fzf(self, monkeypatch) -> None:
        run = _Recorder()
        monkeypatch.setattr(fzf_module.subprocess, "run", run)

        assert FzfSelector("nvim").select_todo([]) is None
        assert FzfSelector("nvim").select_path([]) is None
        assert run.calls == []

    def test_select_path_uses_bat_preview_when_installed(self, monkeypatch) -> None:
        run = _Recorder(stdout="/todo/done/broken/x.md\n")
        monkeypatch.setattr(fzf_module.shutil, "which", _which("fzf", "batcat"))
        monkeypatch.setattr(fzf_module.subprocess, "run", run)

        chosen = FzfSelector("nvim").select_path([Path("/todo/done/broken/x.md")])

        assert chosen == Path("/todo/done/broken/x.md")
        argv = run.calls[0][0]
        assert "--prompt=broken> " in argv
        assert "--preview=batcat --style=plain --color=always {}" in argv
