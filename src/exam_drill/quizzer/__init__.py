from .errors import (
    InputError,
    LoadError,
    SelectionError,
    SessionStateError,
)
from .grading import Verdict, grade
from .loader import load_exam, parse_exam, parse_question
from .models import Exam, Question, QuestionType
from .runner import Pacing, QuizRunResult, run_quiz_session
from .session import (
    GradedResponse,
    Presentation,
    QuizSession,
    Score,
    SessionState,
    question_order,
)

__all__ = [
    "InputError",
    "LoadError",
    "SelectionError",
    "SessionStateError",
    "Verdict",
    "grade",
    "load_exam",
    "parse_exam",
    "parse_question",
    "Exam",
    "Question",
    "QuestionType",
    "Pacing",
    "QuizRunResult",
    "run_quiz_session",
    "GradedResponse",
    "Presentation",
    "QuizSession",
    "Score",
    "SessionState",
    "question_order",
]
