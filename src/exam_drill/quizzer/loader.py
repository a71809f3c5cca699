"""Turn exam JSON documents into ``Exam`` values.

Expected shape::

    {
      "name": "Networking basics",
      "questions": [
        {
          "type": "SingleChoice" | "MultiSelect" | "FreeEntry",
          "prompt": "...",
          "choices": ["..."],
          "answer": ["..."],
          "explanation": "...",
          "refs": ["..."]
        }
      ]
    }

Every failure, from an unreadable file to an unknown question type, is
raised as :class:`LoadError` so a bad file never reaches a session.

Text fields are stored as written. FreeEntry answer literals are the one
exception: they are stripped, because typed responses are stripped too, and
must not be blank or collide with the hint command. Choice questions are
limited to one option per letter key (``MAX_CHOICES``).
"""

from __future__ import annotations

import json
import string
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .errors import LoadError, LoadFailure
from .models import HINT_COMMAND, Exam, Question, QuestionType

ExamSource = Union[bytes, str]

MAX_CHOICES = len(string.ascii_uppercase)


def load_exam(path: Path) -> Exam:
    """Read and parse the exam stored at ``path``."""

    source = Path(path)
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise LoadError(
            f"Unable to read exam file ({exc.strerror or exc}).",
            reason="unreadable",
            source=source,
        ) from exc
    return parse_exam(data, source=source)


def parse_exam(data: ExamSource, *, source: Optional[Path] = None) -> Exam:
    """Parse an exam document from raw bytes or text."""

    try:
        document = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise LoadError(
            f"Malformed exam document: {exc}",
            reason="malformed",
            source=source,
        ) from exc
    if not isinstance(document, dict):
        raise LoadError(
            "Exam document must be a JSON object.",
            reason="malformed",
            source=source,
        )

    name = _require(document, "name", source=source)
    if not isinstance(name, str) or not name.strip():
        raise LoadError(
            "'name' must be a non-empty string.",
            reason="invalid_field",
            source=source,
        )
    raw_questions = _require(document, "questions", source=source)
    if not isinstance(raw_questions, list):
        raise LoadError(
            "'questions' must be a list.",
            reason="invalid_field",
            source=source,
        )
    if not raw_questions:
        raise LoadError(
            "Exam contains no questions.",
            reason="invalid_field",
            source=source,
        )

    questions = [
        parse_question(raw, index=index, source=source)
        for index, raw in enumerate(raw_questions)
    ]
    return Exam.from_questions(name, questions)


def parse_question(
    raw: Any, *, index: int = 0, source: Optional[Path] = None
) -> Question:
    """Validate one question mapping and build a ``Question``."""

    def fail(message: str, reason: LoadFailure = "invalid_field") -> LoadError:
        return LoadError(message, reason=reason, source=source, index=index)

    if not isinstance(raw, dict):
        raise fail("question entry must be a JSON object")

    raw_type = _require(raw, "type", source=source, index=index)
    try:
        qtype = QuestionType(raw_type)
    except (ValueError, TypeError):
        expected = ", ".join(member.value for member in QuestionType)
        raise fail(
            f"unrecognized question type {raw_type!r}; expected one of: "
            f"{expected}",
            reason="unknown_type",
        ) from None

    prompt = _require(raw, "prompt", source=source, index=index)
    if not isinstance(prompt, str) or not prompt.strip():
        raise fail("'prompt' must be a non-empty string")

    if qtype.uses_choices:
        raw_choices = _require(raw, "choices", source=source, index=index)
    else:
        raw_choices = raw.get("choices", [])
    choices = _string_set(raw_choices, "choices", fail)

    answer = _string_set(
        _require(raw, "answer", source=source, index=index), "answer", fail
    )
    if not answer:
        raise fail("'answer' must list at least one entry")
    if qtype is QuestionType.FREE_ENTRY:
        answer = frozenset(literal.strip() for literal in answer)
        if "" in answer:
            raise fail("FreeEntry answers must not be blank")
        if any(literal.lower() == HINT_COMMAND for literal in answer):
            raise fail(
                f"FreeEntry answer '{HINT_COMMAND}' is reserved for hints"
            )

    if qtype.uses_choices:
        if not choices:
            raise fail("'choices' must list at least one option")
        if len(choices) > MAX_CHOICES:
            raise fail(f"'choices' may list at most {MAX_CHOICES} options")
        missing = sorted(answer - choices)
        if missing:
            raise fail(
                "answer entries not among choices: " + ", ".join(missing)
            )
    if qtype is QuestionType.SINGLE_CHOICE and len(answer) != 1:
        raise fail("SingleChoice questions require exactly one answer")

    explanation = raw.get("explanation", "")
    if explanation is None:
        explanation = ""
    if not isinstance(explanation, str):
        raise fail("'explanation' must be a string")

    refs = raw.get("refs", [])
    if not isinstance(refs, list) or not all(isinstance(r, str) for r in refs):
        raise fail("'refs' must be a list of strings")

    return Question(
        type=qtype,
        prompt=prompt,
        choices=choices,
        answer=answer,
        explanation=explanation,
        refs=tuple(refs),
    )


def _require(
    mapping: Mapping[str, Any],
    key: str,
    *,
    source: Optional[Path],
    index: Optional[int] = None,
) -> Any:
    if key not in mapping:
        raise LoadError(
            f"missing required field '{key}'",
            reason="missing_field",
            source=source,
            index=index,
        )
    return mapping[key]


def _string_set(value: Any, field: str, fail) -> frozenset[str]:
    if not isinstance(value, list) or not all(
        isinstance(item, str) for item in value
    ):
        raise fail(f"'{field}' must be a list of strings")
    return frozenset(value)
