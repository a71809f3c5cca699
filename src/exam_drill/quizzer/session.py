"""Quiz session state machine.

A session walks ``AWAITING_COUNT -> PRESENTING -> AWAITING_RESPONSE ->
GRADED`` for each selected question and ends in ``COMPLETE``. ``restart``
returns a finished session to ``AWAITING_COUNT`` so the same exam can be
replayed without building a new object. The session holds no I/O; the Rich
loop in :mod:`exam_drill.quizzer.runner` drives it.
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import InputError, SessionStateError
from .grading import Response, Verdict, grade as grade_response
from .models import Exam, Question, QuestionType


class SessionState(Enum):
    AWAITING_COUNT = "awaiting_count"
    PRESENTING = "presenting"
    AWAITING_RESPONSE = "awaiting_response"
    GRADED = "graded"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Score:
    """Final tally for one run through the exam."""

    correct: int
    total: int

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    def __str__(self) -> str:
        return f"{self.correct}/{self.total}"


@dataclass(frozen=True)
class Presentation:
    """A question as shown to the user, with lettered options."""

    number: int
    total: int
    question: Question
    options: tuple[str, ...]

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(string.ascii_uppercase[: len(self.options)])

    def option_for(self, key: str) -> Optional[str]:
        normalized = key.strip().upper()
        if len(normalized) != 1:
            return None
        for letter, option in zip(self.keys, self.options):
            if letter == normalized:
                return option
        return None


@dataclass(frozen=True)
class GradedResponse:
    """A response together with its verdict."""

    number: int
    question: Question
    response: Response
    verdict: Verdict
    hints_revealed: bool = False


def question_order(
    exam: Exam, rng: Optional[random.Random] = None
) -> list[Question]:
    """Return every question of ``exam`` in shuffled order.

    Questions are first sorted by content so that a seeded ``rng`` always
    produces the same order, whatever the set iteration order is.
    """

    rng = rng or random.Random()
    ordered = sorted(exam.questions, key=_content_key)
    rng.shuffle(ordered)
    return ordered


def _content_key(question: Question) -> tuple:
    return (
        question.type.value,
        question.prompt,
        tuple(sorted(question.choices)),
        tuple(sorted(question.answer)),
        question.explanation,
        question.refs,
    )


@dataclass
class QuizSession:
    """Mutable progress through a borrowed, read-only ``Exam``."""

    exam: Exam
    rng: random.Random = field(default_factory=random.Random)
    state: SessionState = SessionState.AWAITING_COUNT
    index: int = 0
    order: tuple[Question, ...] = ()
    responses: list[GradedResponse] = field(default_factory=list)
    _hints_revealed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def begin(
        cls,
        exam: Exam,
        requested_count: int,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> "QuizSession":
        """Build a session and start it with ``requested_count`` questions."""

        session = cls(exam, rng=rng or random.Random(seed))
        session.start(requested_count)
        return session

    @property
    def total(self) -> int:
        return len(self.order)

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.responses if r.verdict.is_correct)

    @property
    def current(self) -> Question:
        if self.state in (SessionState.AWAITING_COUNT, SessionState.COMPLETE):
            raise SessionStateError(
                f"No current question in state {self.state.value}."
            )
        return self.order[self.index]

    def start(self, requested_count: int) -> int:
        """Pick the questions for this run; returns the clamped count."""

        self._expect(SessionState.AWAITING_COUNT)
        if requested_count <= 0:
            raise InputError("Question count must be a positive number.")
        count = min(requested_count, len(self.exam))
        self.order = tuple(question_order(self.exam, self.rng)[:count])
        self.index = 0
        self.responses = []
        self.state = (
            SessionState.PRESENTING if self.order else SessionState.COMPLETE
        )
        return count

    def present(self) -> Presentation:
        self._expect(SessionState.PRESENTING)
        question = self.order[self.index]
        if question.type.uses_choices:
            options = sorted(question.choices)
            self.rng.shuffle(options)
        else:
            options = []
        self._hints_revealed = False
        self.state = SessionState.AWAITING_RESPONSE
        return Presentation(
            number=self.index + 1,
            total=self.total,
            question=question,
            options=tuple(options),
        )

    def reveal_hints(self) -> tuple[str, ...]:
        """Return the hints for the current free-entry question."""

        self._expect(SessionState.AWAITING_RESPONSE)
        self._hints_revealed = True
        return self.current.hints

    def grade(self, question: Question, response: Response) -> Verdict:
        return grade_response(question, response)

    def submit(self, response: Response) -> Verdict:
        self._expect(SessionState.AWAITING_RESPONSE)
        question = self.current
        if question.type is QuestionType.MULTI_SELECT:
            response = frozenset(response)
        verdict = self.grade(question, response)
        self.responses.append(
            GradedResponse(
                number=self.index + 1,
                question=question,
                response=response,
                verdict=verdict,
                hints_revealed=self._hints_revealed,
            )
        )
        self.state = SessionState.GRADED
        return verdict

    def advance(self) -> SessionState:
        self._expect(SessionState.GRADED)
        self.index += 1
        if self.index < self.total:
            self.state = SessionState.PRESENTING
        else:
            self.state = SessionState.COMPLETE
        return self.state

    def finish(self) -> Score:
        self._expect(SessionState.COMPLETE)
        return Score(correct=self.correct_count, total=self.total)

    def restart(self) -> None:
        self._expect(SessionState.COMPLETE)
        self.state = SessionState.AWAITING_COUNT
        self.index = 0
        self.order = ()
        self.responses = []

    def _expect(self, expected: SessionState) -> None:
        if self.state is not expected:
            raise SessionStateError(
                f"Expected session state {expected.value}, "
                f"found {self.state.value}."
            )
