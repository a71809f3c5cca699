"""Rich-powered quiz loop.

``run_quiz_session`` drives a :class:`QuizSession` through the console:
ask for a question count, present each question, collect and grade the
response, show the verdict with the answer key, explanation and references,
then print the score and offer a replay. Replays restart the same session
object inside a loop.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import InputError
from .grading import Response, Verdict
from .models import HINT_COMMAND, Exam, Question, QuestionType
from .prompts import (
    InputProvider,
    ask,
    ask_count,
    ask_yes_no,
    is_hint_request,
    parse_choice,
    parse_selections,
)
from .session import (
    GradedResponse,
    Presentation,
    QuizSession,
    Score,
    SessionState,
)

ExitAction = Literal["completed", "quit"]
Sleeper = Callable[[float], None]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pacing:
    """Pauses, in seconds, that give the reader time after each question."""

    verdict_delay: float = 1.0
    review_delay: float = 2.5

    @classmethod
    def disabled(cls) -> "Pacing":
        return cls(verdict_delay=0.0, review_delay=0.0)


@dataclass(frozen=True)
class QuizRunResult:
    """Return value from ``run_quiz_session``: one score per completed run."""

    scores: list[Score] = field(default_factory=list)
    exit_action: ExitAction = "completed"


def run_quiz_session(
    exam: Exam,
    console: Console,
    input_provider: InputProvider,
    *,
    rng: Optional[random.Random] = None,
    pacing: Pacing = Pacing(),
    sleep: Sleeper = time.sleep,
    logger: Optional[logging.Logger] = None,
) -> QuizRunResult:
    """Run the exam interactively until the user declines a replay."""

    log = logger or _LOGGER
    session = QuizSession(exam, rng=rng or random.Random())
    scores: list[Score] = []
    console.rule(Text(exam.name, style="bold magenta"))

    try:
        while True:
            requested = ask_count(console, input_provider, len(exam))
            count = session.start(requested)
            log.info(
                "Session started",
                extra={
                    "exam": exam.name,
                    "requested": requested,
                    "count": count,
                },
            )
            while session.state is not SessionState.COMPLETE:
                _run_question(
                    session, console, input_provider, pacing, sleep, log
                )

            score = session.finish()
            scores.append(score)
            log.info(
                "Session finished",
                extra={"correct": score.correct, "total": score.total},
            )
            _render_summary(console, exam, score, session.responses)

            again = ask_yes_no(console, input_provider, "Play again? (y/n): ")
            if not again:
                break
            log.info("Replaying exam", extra={"exam": exam.name})
            session.restart()
    except (EOFError, KeyboardInterrupt):
        console.print("\n[bold yellow]Session interrupted.[/]")
        log.info("Session interrupted", extra={"completed_runs": len(scores)})
        return QuizRunResult(scores, "quit")

    return QuizRunResult(scores, "completed")


def _run_question(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
    pacing: Pacing,
    sleep: Sleeper,
    log: logging.Logger,
) -> None:
    presentation = session.present()
    _render_question(console, presentation)
    response = _collect_response(
        session, presentation, console, input_provider
    )
    verdict = session.submit(response)
    log.debug(
        "Graded response",
        extra={
            "number": presentation.number,
            "type": presentation.question.type.value,
            "correct": verdict.is_correct,
        },
    )
    _render_verdict(console, verdict)
    _pause(sleep, pacing.verdict_delay)
    _render_review(console, presentation.question)
    _pause(sleep, pacing.review_delay)
    session.advance()


def _collect_response(
    session: QuizSession,
    presentation: Presentation,
    console: Console,
    input_provider: InputProvider,
) -> Response:
    qtype = presentation.question.type
    while True:
        if qtype is QuestionType.FREE_ENTRY:
            raw = ask(
                console,
                input_provider,
                f"Your answer (type '{HINT_COMMAND}' for hints): ",
            )
            if is_hint_request(raw):
                _render_hints(console, session.reveal_hints())
                continue
            return raw
        try:
            if qtype is QuestionType.MULTI_SELECT:
                raw = ask(
                    console,
                    input_provider,
                    "Select all that apply (e.g. A C, or 'none'): ",
                )
                return parse_selections(presentation, raw)
            raw = ask(console, input_provider, "Your choice: ")
            return parse_choice(presentation, raw)
        except InputError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")


def _pause(sleep: Sleeper, seconds: float) -> None:
    if seconds > 0:
        sleep(seconds)


def _render_question(console: Console, presentation: Presentation) -> None:
    question = presentation.question
    header = Text.assemble(
        (f"Question {presentation.number}", "bold cyan"),
        (f" / {presentation.total}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.prompt, style="bold"))

    if question.type is QuestionType.FREE_ENTRY:
        return

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")
    for key, option in zip(presentation.keys, presentation.options):
        table.add_row(key, Text(option))
    console.print(table)
    if question.type is QuestionType.MULTI_SELECT:
        console.print(
            Text("More than one option may be correct.", style="dim")
        )


def _render_hints(console: Console, hints: tuple[str, ...]) -> None:
    if not hints:
        console.print("[yellow]No hints available for this question.[/]")
        return
    lines = Text("\n").join(Text(f"- {hint}") for hint in hints)
    console.print(Panel(lines, title="Hints", border_style="yellow"))


def _render_verdict(console: Console, verdict: Verdict) -> None:
    if verdict.is_correct:
        console.print("[bold green]Correct![/]")
    else:
        console.print("[bold red]Incorrect.[/]")
    label = "Correct answer" if len(verdict.correct_answers) == 1 else (
        "Correct answers"
    )
    console.print(Text(f"{label}: " + ", ".join(verdict.correct_answers)))


def _render_review(console: Console, question: Question) -> None:
    if question.explanation:
        console.print(
            Panel(Text(question.explanation), title="Explanation")
        )
    console.print(Text("References:", style="bold"))
    if not question.refs:
        console.print(Text("  (none)", style="dim"))
    for ref in question.refs:
        console.print(Text(f"  - {ref}"))


def _render_summary(
    console: Console,
    exam: Exam,
    score: Score,
    responses: list[GradedResponse],
) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Exam", Text(exam.name))
    overview.add_row("Score", str(score))
    overview.add_row("Accuracy", f"{score.accuracy * 100:.1f}%")
    console.print(overview)

    table = Table(title="Responses", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Question", overflow="fold")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    table.add_column("Result", justify="center")
    for item in responses:
        table.add_row(
            str(item.number),
            Text(item.question.prompt),
            Text(_format_response(item.response)),
            Text(", ".join(item.verdict.correct_answers)),
            "✅" if item.verdict.is_correct else "❌",
        )
    console.print(table)


def _format_response(response: Response) -> str:
    if isinstance(response, str):
        return response
    chosen = sorted(response)
    return ", ".join(chosen) if chosen else "(none)"
