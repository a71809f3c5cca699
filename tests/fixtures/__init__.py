"""Shared testing fixtures for the exam-drill test suite."""

from .exams import (  # noqa: F401
    demo_exam_document,
    free_entry,
    multi_select,
    single_choice,
)
from .prompts import ScriptedInput  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "ScriptedInput",
    "WorkspaceBuilder",
    "build_tree",
    "demo_exam_document",
    "free_entry",
    "multi_select",
    "single_choice",
]
