from __future__ import annotations

import pytest

from exam_drill.quizzer.grading import (
    Verdict,
    grade,
    grade_free_entry,
    grade_multi_select,
    grade_single_choice,
)
from fixtures import free_entry, multi_select, single_choice


def test_single_choice_exact_option_is_correct() -> None:
    question = single_choice()
    assert grade(question, "4") == Verdict(True, ("4",))


@pytest.mark.parametrize("response", ["3", "5"])
def test_single_choice_other_options_are_incorrect(response: str) -> None:
    verdict = grade(single_choice(), response)
    assert verdict.is_correct is False
    assert verdict.correct_answers == ("4",)


def test_single_choice_is_case_sensitive() -> None:
    question = single_choice(
        prompt="Pick the noble gas", choices=["Neon", "neon"], answer="Neon"
    )
    assert grade_single_choice(question, "Neon")
    assert not grade_single_choice(question, "neon")


def test_multi_select_exact_set_in_any_order() -> None:
    question = multi_select()
    assert grade(question, ["3", "2"]).is_correct
    assert grade(question, ("2", "3")).is_correct
    assert grade(question, frozenset({"2", "3"})).is_correct


@pytest.mark.parametrize(
    "selected",
    [
        ["2"],
        ["2", "3", "4"],
        ["2", "9"],
        [],
    ],
    ids=["subset", "superset", "swapped", "empty"],
)
def test_multi_select_mismatches_are_incorrect(selected) -> None:
    verdict = grade(multi_select(), selected)
    assert verdict.is_correct is False
    assert verdict.correct_answers == ("2", "3")


def test_multi_select_duplicates_collapse() -> None:
    assert grade_multi_select(multi_select(), ["2", "2", "3"])


def test_free_entry_accepts_any_literal() -> None:
    question = free_entry(answer=["Paris", "paris", "PARIS"])
    for literal in ("Paris", "paris", "PARIS"):
        assert grade(question, literal).is_correct
    assert not grade_free_entry(question, "Lyon")
    assert not grade_free_entry(question, "Paris ")


def test_grading_is_pure() -> None:
    question = multi_select()
    response = ["2", "9"]
    first = grade(question, response)
    second = grade(question, response)
    assert first == second
    assert response == ["2", "9"]


def test_response_shape_is_checked() -> None:
    with pytest.raises(TypeError):
        grade(multi_select(), "2")
    with pytest.raises(TypeError):
        grade(single_choice(), ["4"])
