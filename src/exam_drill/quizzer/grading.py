"""Per-type grading rules.

Every grader is a pure function of the question and the response, so the
same pair always yields the same verdict.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Union

from .models import Question, QuestionType

Response = Union[str, Iterable[str]]


@dataclass(frozen=True)
class Verdict:
    """Outcome of grading one response."""

    is_correct: bool
    correct_answers: tuple[str, ...]


def grade_single_choice(question: Question, response: str) -> bool:
    """Exact, case-sensitive match against the sole stored answer."""

    return response in question.answer and len(question.answer) == 1


def grade_multi_select(question: Question, response: Iterable[str]) -> bool:
    """The selected set must equal the answer set; order does not matter."""

    selected = frozenset(response)
    return (
        len(selected) == len(question.answer)
        and question.answer <= selected
    )


def grade_free_entry(question: Question, response: str) -> bool:
    """Any one of the acceptable literals counts."""

    return any(response == literal for literal in question.answer)


_GRADERS: dict[QuestionType, Callable[[Question, object], bool]] = {
    QuestionType.SINGLE_CHOICE: grade_single_choice,  # type: ignore[dict-item]
    QuestionType.MULTI_SELECT: grade_multi_select,  # type: ignore[dict-item]
    QuestionType.FREE_ENTRY: grade_free_entry,  # type: ignore[dict-item]
}


def grade(question: Question, response: Response) -> Verdict:
    """Grade ``response`` with the rule for ``question.type``."""

    multi = question.type is QuestionType.MULTI_SELECT
    if multi and isinstance(response, str):
        raise TypeError(
            "MultiSelect responses must be a collection of options"
        )
    if not multi and not isinstance(response, str):
        raise TypeError(f"{question.type.value} responses must be a string")
    is_correct = _GRADERS[question.type](question, response)
    return Verdict(
        is_correct=is_correct, correct_answers=question.correct_answers
    )
