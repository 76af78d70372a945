from __future__ import annotations

from pathlib import Path

import allure
import pytest
from fakes import FakeSelector, make_todo

from mdtodo.tasks.errors import AmbiguousMatchError, NoMatchError
from mdtodo.tasks.resolver import resolve_one

pytestmark = [
    allure.epic("Task Store"),
    allure.feature("Resolver"),
]


def _candidates():
    return [
        make_todo(Path("a1.md"), task_id="a1", title="first", tags=["x"]),
        make_todo(Path("a2.md"), task_id="a2", title="second", importance=5),
        make_todo(Path("b1.md"), task_id="b1", title="third"),
    ]


def test_exact_id_returns_that_record() -> None:
    assert resolve_one(_candidates(), "a1").header.id == "a1"


def test_unique_prefix_returns_that_record() -> None:
    assert resolve_one(_candidates(), "b").header.id == "b1"


def test_no_match() -> None:
    with pytest.raises(NoMatchError, match="No match for: zz"):
        resolve_one(_candidates(), "zz")


def test_ambiguous_without_selector_lists_candidates() -> None:
    with pytest.raises(AmbiguousMatchError) as excinfo:
        resolve_one(_candidates(), "a")

    assert [todo.header.id for todo in excinfo.value.candidates] == ["a1", "a2"]
    message = str(excinfo.value)
    assert "a1  [3]  first  (x)" in message
    assert "a2  [5]  second  ()" in message


def test_ambiguous_goes_to_selector_with_only_the_matches() -> None:
    selector = FakeSelector(pick_todo=lambda todos: todos[-1])

    chosen = resolve_one(_candidates(), "a", selector=selector)

    assert chosen.header.id == "a2"
    assert [[todo.header.id for todo in offered] for offered in selector.offered_todos] == [
        ["a1", "a2"],
    ]


def test_aborted_selection_is_ambiguous() -> None:
    with pytest.raises(AmbiguousMatchError):
        resolve_one(_candidates(), "a", selector=FakeSelector())


def test_message_lists_at_most_thirty_candidates() -> None:
    many = [make_todo(Path(f"{index}.md"), task_id=f"t{index:03d}") for index in range(40)]

    with pytest.raises(AmbiguousMatchError) as excinfo:
        resolve_one(many, "t")

    assert len(excinfo.value.candidates) == 40
    assert len(str(excinfo.value).splitlines()) == 1 + 30
