"""Line-based prompts and response parsing for the interactive quiz.

Input is read through an ``InputProvider`` (a zero-argument callable
returning one line) so tests can script a whole conversation. Parsing
helpers raise :class:`InputError` or :class:`SelectionError`; the ``ask_*``
helpers report those and ask again.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from .errors import InputError, SelectionError
from .models import HINT_COMMAND
from .session import Presentation

InputProvider = Callable[[], str]

EMPTY_SELECTION = "none"

_SPLIT_RE = re.compile(r"[\s,;]+")


def ask(console: Console, input_provider: InputProvider, prompt: str) -> str:
    """Prompt until a non-empty (stripped) line is entered."""

    while True:
        console.print(prompt, end="")
        entry = input_provider().strip()
        if entry:
            return entry
        console.print("[red]Entry must not be empty![/red]")


def ask_confirmed(
    console: Console, input_provider: InputProvider, prompt: str
) -> str:
    """Prompt twice and only accept the value once both entries match."""

    while True:
        first = ask(console, input_provider, prompt)
        second = ask(console, input_provider, "Confirm entry: ")
        if first == second:
            return second
        console.print("[red]Entries must match![/red]")


def ask_yes_no(
    console: Console, input_provider: InputProvider, prompt: str
) -> bool:
    while True:
        entry = ask(console, input_provider, prompt).lower()
        if entry in {"y", "yes"}:
            return True
        if entry in {"n", "no"}:
            return False
        console.print("[red]Please answer 'y' or 'n'.[/red]")


def parse_count(raw: str) -> int:
    """Parse a requested question count; it must be a positive integer."""

    try:
        count = int(raw.strip())
    except ValueError:
        raise InputError(f"'{raw.strip()}' is not a number.") from None
    if count <= 0:
        raise InputError("The number of questions must be at least 1.")
    return count


def ask_count(
    console: Console, input_provider: InputProvider, available: int
) -> int:
    """Ask how many questions to take; the session clamps to ``available``."""

    prompt = f"How many questions? (1-{available}): "
    while True:
        try:
            return parse_count(ask(console, input_provider, prompt))
        except InputError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")


def render_exam_listing(console: Console, files: Sequence[Path]) -> None:
    """Print ``files`` numbered from 1."""

    width = len(str(len(files)))
    for number, path in enumerate(files, start=1):
        console.print(Text(f"{str(number).rjust(width)}. {path.name}"))


def parse_exam_index(raw: str, total: int) -> int:
    """Map a 1-based listing number to a 0-based index."""

    try:
        number = int(raw.strip())
    except ValueError:
        raise SelectionError(
            f"'{raw.strip()}' is not a listing number."
        ) from None
    if not 1 <= number <= total:
        raise SelectionError(f"Pick a number between 1 and {total}.")
    return number - 1


def choose_exam_file(
    console: Console,
    input_provider: InputProvider,
    files: Sequence[Path],
) -> Path:
    """List candidate exam files and return the one the user picks."""

    if not files:
        raise SelectionError("No exam files found.")
    console.print(Text("Available exams:", style="bold"))
    render_exam_listing(console, files)
    while True:
        raw = ask(console, input_provider, "Select an exam by number: ")
        try:
            return files[parse_exam_index(raw, len(files))]
        except SelectionError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")


def parse_choice(presentation: Presentation, raw: str) -> str:
    """Resolve a single choice letter to its option text."""

    key = raw.strip()
    option = presentation.option_for(key)
    if option is None:
        raise InputError(
            f"'{key}' is not a valid choice. Use one of: "
            + ", ".join(presentation.keys)
        )
    return option


def parse_selections(presentation: Presentation, raw: str) -> frozenset[str]:
    """Resolve letters such as ``A C``, ``A,C`` or ``AC`` to option texts.

    ``none`` selects nothing. Any unknown letter rejects the whole entry.
    """

    text = raw.strip()
    if text.lower() == EMPTY_SELECTION:
        return frozenset()
    tokens = [token for token in _SPLIT_RE.split(text) if token]
    if len(tokens) == 1 and len(tokens[0]) > 1 and tokens[0].isalpha():
        tokens = list(tokens[0])

    selected: set[str] = set()
    unknown: list[str] = []
    for token in tokens:
        option = presentation.option_for(token)
        if option is None:
            unknown.append(token)
        else:
            selected.add(option)
    if unknown or not tokens:
        raise InputError(
            "Unrecognized selection: "
            + ", ".join(unknown or [text])
            + ". Use letters from: "
            + ", ".join(presentation.keys)
        )
    return frozenset(selected)


def is_hint_request(raw: str) -> bool:
    return raw.strip().lower() == HINT_COMMAND
