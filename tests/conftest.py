from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from exam_drill.core import workspace as workspace_mod  # noqa: E402
from fixtures import WorkspaceBuilder, demo_exam_document  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def data_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the exam-drill workspace at a throwaway directory."""

    home = tmp_path / "home"
    monkeypatch.setenv(workspace_mod.WORKSPACE_ENV, str(home))
    for key in (
        "EXAM_DRILL_CONFIG",
        "EXAM_DRILL_ASSETS_DIR",
        "EXAM_DRILL_EXTENSIONS",
        "EXAM_DRILL_SEED",
        "EXAM_DRILL_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def demo_exam_file(workspace: WorkspaceBuilder) -> Path:
    return workspace.write(
        "assets/demo.json", json.dumps(demo_exam_document())
    )


@pytest.fixture(autouse=True)
def _close_quizzer_log_handlers() -> Iterator[None]:
    yield
    import logging

    logger = logging.getLogger("exam_drill.quizzer")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
