"""Exam and question value types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

# Typed in place of a FreeEntry answer to reveal hints.
HINT_COMMAND = "hint"


class QuestionType(Enum):
    """Supported question kinds; values match the exam file format."""

    SINGLE_CHOICE = "SingleChoice"
    MULTI_SELECT = "MultiSelect"
    FREE_ENTRY = "FreeEntry"

    @property
    def uses_choices(self) -> bool:
        return self is not QuestionType.FREE_ENTRY


@dataclass(frozen=True)
class Question:
    """Immutable gradable item.

    Equality and hashing cover every field, so identical entries collapse
    when questions are gathered into a set. For ``FREE_ENTRY`` questions
    ``choices`` holds optional hints instead of options.
    """

    type: QuestionType
    prompt: str
    choices: frozenset[str] = frozenset()
    answer: frozenset[str] = frozenset()
    explanation: str = ""
    refs: tuple[str, ...] = ()

    @property
    def correct_answers(self) -> tuple[str, ...]:
        return tuple(sorted(self.answer))

    @property
    def hints(self) -> tuple[str, ...]:
        if self.type is not QuestionType.FREE_ENTRY:
            return ()
        return tuple(sorted(hint for hint in self.choices if hint.strip()))


@dataclass(frozen=True)
class Exam:
    """Named, deduplicated collection of questions."""

    name: str
    questions: frozenset[Question]

    @classmethod
    def from_questions(
        cls, name: str, questions: Iterable[Question]
    ) -> "Exam":
        return cls(name=name, questions=frozenset(questions))

    def __len__(self) -> int:
        return len(self.questions)
