from __future__ import annotations

import logging
import random
from typing import List

import pytest
from rich.console import Console

from exam_drill.quizzer.loader import parse_question
from exam_drill.quizzer.models import Exam
from exam_drill.quizzer.runner import Pacing, run_quiz_session
from exam_drill.quizzer.session import Score
from fixtures import ScriptedInput, free_entry, multi_select, single_choice


class _SortedRandom(random.Random):
    """Keeps questions and options in their sorted order."""

    def shuffle(self, x) -> None:  # noqa: D401
        return None


def _run(exam: Exam, lines: List[str], **kwargs):
    console = Console(record=True, width=100)
    kwargs.setdefault("pacing", Pacing.disabled())
    result = run_quiz_session(
        exam,
        console,
        ScriptedInput.of(lines),
        rng=_SortedRandom(),
        **kwargs,
    )
    return result, console.export_text()


def _demo() -> Exam:
    return Exam.from_questions("Demo", [single_choice()])


def test_correct_answer_scores_full_marks() -> None:
    result, output = _run(_demo(), ["1", "B", "n"])
    assert result.exit_action == "completed"
    assert result.scores == [Score(1, 1)]
    assert "Correct!" in output
    assert "Quiz Summary" in output
    assert "1/1" in output
    assert "100.0%" in output


def test_wrong_answer_shows_answer_key() -> None:
    result, output = _run(_demo(), ["1", "a", "n"])
    assert result.scores == [Score(0, 1)]
    assert "Incorrect." in output
    assert "Correct answer: 4" in output
    assert "0/1" in output


def test_invalid_choice_is_reprompted() -> None:
    result, output = _run(_demo(), ["1", "Q", "B", "n"])
    assert result.scores == [Score(1, 1)]
    assert "'Q' is not a valid choice." in output


def test_count_is_clamped_to_exam_size() -> None:
    result, output = _run(_demo(), ["9", "B", "n"])
    assert result.scores == [Score(1, 1)]
    assert "Question 1 / 1" in output


def test_replay_runs_the_exam_again() -> None:
    result, _ = _run(_demo(), ["1", "B", "y", "1", "C", "n"])
    assert result.exit_action == "completed"
    assert result.scores == [Score(1, 1), Score(0, 1)]


def test_end_of_input_interrupts_session() -> None:
    result, output = _run(_demo(), ["1"])
    assert result.exit_action == "quit"
    assert result.scores == []
    assert "Session interrupted." in output


def test_multi_select_requires_exact_set() -> None:
    exam = Exam.from_questions("Primes", [multi_select()])
    result, output = _run(exam, ["1", "A Z", "A B", "y", "1", "A", "n"])
    assert result.scores == [Score(1, 1), Score(0, 1)]
    assert "Unrecognized selection: Z" in output
    assert "More than one option may be correct." in output
    assert "Correct answers: 2, 3" in output


def test_multi_select_accepts_empty_selection() -> None:
    exam = Exam.from_questions("Primes", [multi_select()])
    result, output = _run(exam, ["1", "none", "n"])
    assert result.scores == [Score(0, 1)]
    assert "(none)" in output


def test_free_entry_hint_does_not_cost_an_attempt() -> None:
    exam = Exam.from_questions("Capitals", [free_entry()])
    result, output = _run(exam, ["1", "hint", "Paris", "n"])
    assert result.scores == [Score(1, 1)]
    assert "Hints" in output
    assert "City of light" in output


def test_free_entry_without_hints_says_so() -> None:
    exam = Exam.from_questions("Capitals", [free_entry(hints=())])
    result, output = _run(exam, ["1", "HINT", "paris", "n"])
    assert result.scores == [Score(1, 1)]
    assert "No hints available for this question." in output


def test_free_entry_is_case_sensitive() -> None:
    exam = Exam.from_questions("Capitals", [free_entry()])
    result, _ = _run(exam, ["1", "PARIS", "n"])
    assert result.scores == [Score(0, 1)]


def test_review_shows_explanation_and_references() -> None:
    exam = Exam.from_questions(
        "Demo", [single_choice(explanation="Two plus two.", refs=("arith",))]
    )
    _, output = _run(exam, ["1", "B", "n"])
    assert "Explanation" in output
    assert "Two plus two." in output
    assert "References:" in output
    assert "- arith" in output


def test_review_without_references() -> None:
    exam = Exam.from_questions("Demo", [single_choice(refs=())])
    _, output = _run(exam, ["1", "B", "n"])
    assert "Explanation" not in output
    assert "(none)" in output


def test_pacing_pauses_after_verdict_and_review() -> None:
    pauses: List[float] = []
    _run(
        _demo(),
        ["1", "B", "n"],
        pacing=Pacing(verdict_delay=0.5, review_delay=2.0),
        sleep=pauses.append,
    )
    assert pauses == [0.5, 2.0]


def test_disabled_pacing_never_sleeps() -> None:
    pauses: List[float] = []
    _run(_demo(), ["1", "B", "n"], sleep=pauses.append)
    assert pauses == []


def test_session_events_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("exam_drill.tests.runner")
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        _run(_demo(), ["1", "B", "n"], logger=logger)
    messages = [record.getMessage() for record in caplog.records]
    assert "Session started" in messages
    assert "Graded response" in messages
    assert "Session finished" in messages
    finished = next(
        r for r in caplog.records if r.getMessage() == "Session finished"
    )
    assert finished.correct == 1
    assert finished.total == 1


def test_bracketed_text_is_shown_literally() -> None:
    exam = Exam.from_questions(
        "Types [draft]",
        [
            single_choice(
                prompt="What does [/] close in List[int]?",
                choices=("[/]", "[int]"),
                answer="[/]",
            )
        ],
    )
    result, output = _run(exam, ["1", "A", "n"])
    assert result.scores == [Score(1, 1)]
    assert "Types [draft]" in output
    assert "What does [/] close in List[int]?" in output
    assert "Correct answer: [/]" in output
    assert "[int]" in output


def test_summary_keeps_bracketed_cells() -> None:
    exam = Exam.from_questions(
        "Types",
        [single_choice(prompt="x: List[int]", choices=("3", "4"))],
    )
    _, output = _run(exam, ["1", "A", "n"])
    assert output.count("x: List[int]") == 2


def test_padded_free_entry_answer_can_be_typed() -> None:
    question = parse_question(
        {"type": "FreeEntry", "prompt": "Capital?", "answer": [" Paris "]}
    )
    exam = Exam.from_questions("Capitals", [question])
    result, _ = _run(exam, ["1", "  Paris  ", "n"])
    assert result.scores == [Score(1, 1)]
