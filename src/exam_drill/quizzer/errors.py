"""Exceptions raised by the quizzer."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

LoadFailure = Literal[
    "unreadable",
    "malformed",
    "missing_field",
    "invalid_field",
    "unknown_type",
]


class LoadError(RuntimeError):
    """Raised when an exam source cannot be turned into an ``Exam``."""

    def __init__(
        self,
        message: str,
        *,
        reason: LoadFailure,
        source: Optional[Path] = None,
        index: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.source = source
        self.index = index
        super().__init__(message)

    def __str__(self) -> str:
        detail = super().__str__()
        if self.index is not None:
            detail = f"question {self.index + 1}: {detail}"
        if self.source is not None:
            detail = f"{self.source}: {detail}"
        return detail


class SelectionError(RuntimeError):
    """Raised when no exam file can be picked from a listing."""


class InputError(ValueError):
    """Raised when a typed response cannot be understood."""


class SessionStateError(RuntimeError):
    """Raised when a session operation is called in the wrong state."""
