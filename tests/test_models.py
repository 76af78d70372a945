from __future__ import annotations

from pathlib import Path

import allure
import pytest
from fakes import make_todo

from mdtodo.tasks.models import TaskStatus

pytestmark = [
    allure.epic("Task Store"),
    allure.feature("Task Entity"),
]


def _with_body(body: str):
    return make_todo(Path("task.md"), body=body)


def test_new_log_line_goes_first_under_leading_heading() -> None:
    todo = _with_body("## Log\n- 2024-01-01: old\n")

    todo.append_log_line("2024-01-02", "done")

    assert todo.body == "## Log\n- 2024-01-02: done\n- 2024-01-01: old\n"


def test_new_log_line_goes_under_heading_in_the_middle() -> None:
    todo = _with_body("## Notes\ntext\n\n## Log\n- 2024-01-01: old\n\n## Extra\nkeep\n")

    todo.append_log_line("2024-01-02", "start (status todo -> doing)")

    assert todo.body == (
        "## Notes\ntext\n\n## Log\n"
        "- 2024-01-02: start (status todo -> doing)\n"
        "- 2024-01-01: old\n\n## Extra\nkeep\n"
    )


def test_missing_heading_is_appended_after_a_trailing_newline() -> None:
    todo = _with_body("## Notes\nno newline at end")

    todo.append_log_line("2024-01-02", "done")

    assert todo.body == "## Notes\nno newline at end\n\n## Log\n- 2024-01-02: done\n"


def test_empty_body_gets_a_log_section() -> None:
    todo = _with_body("")

    todo.append_log_line("2024-01-02", "done")

    assert todo.body == "## Log\n- 2024-01-02: done\n"


def test_heading_as_last_text_without_newline() -> None:
    todo = _with_body("## Notes\n## Log")

    todo.append_log_line("2024-01-02", "done")

    assert todo.body == "## Notes\n## Log\n- 2024-01-02: done\n"


def test_similar_headings_are_not_mistaken_for_the_log() -> None:
    todo = _with_body("## Logbook\nentries\n")

    todo.append_log_line("2024-01-02", "done")

    assert todo.body == "## Logbook\nentries\n\n## Log\n- 2024-01-02: done\n"


def test_short_id_is_the_first_twelve_characters() -> None:
    todo = make_todo(Path("task.md"), task_id="2026-01-05T10:00:00.000000+09:00")

    assert todo.short_id() == "2026-01-05T1"


class TestTaskStatus:
    def test_active_and_closed_partition_the_statuses(self) -> None:
        assert {status for status in TaskStatus if status.is_active} == {
            TaskStatus.TODO,
            TaskStatus.DOING,
            TaskStatus.WAITING,
        }
        assert {status for status in TaskStatus if status.is_closed} == {
            TaskStatus.DONE,
            TaskStatus.CANCELED,
        }

    def test_parse_is_case_insensitive_and_accepts_cancelled(self) -> None:
        assert TaskStatus.parse(" Doing ") is TaskStatus.DOING
        assert TaskStatus.parse("Cancelled") is TaskStatus.CANCELED

    def test_parse_rejects_unknown_names(self) -> None:
        with pytest.raises(ValueError, match="Invalid status"):
            TaskStatus.parse("someday")
