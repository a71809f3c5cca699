from __future__ import annotations

from pathlib import Path

import pytest

from exam_drill.quizzer import settings as settings_mod
from exam_drill.quizzer.runner import Pacing
from exam_drill.quizzer.settings import (
    QuizzerConfigError,
    SettingsOverrides,
    load_settings,
)


def _write_config(home: Path, body: str) -> Path:
    path = home / "config" / settings_mod.CONFIG_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_without_config(tmp_path: Path) -> None:
    result = load_settings(
        env={}, workspace_path=tmp_path / "home", cwd=tmp_path
    )
    settings = result.settings
    assert settings.assets_dir == (tmp_path / "assets").resolve()
    assert settings.extensions == ("json",)
    assert settings.seed is None
    assert settings.pacing == Pacing()
    assert settings.log_level == "INFO"
    assert result.config_path is None
    assert result.layout.path_for("logs").is_dir()


def test_toml_values_are_applied(tmp_path: Path) -> None:
    home = tmp_path / "home"
    config = _write_config(
        home,
        """
[paths]
assets_dir = "banks"

[discovery]
extensions = [".JSON", "quiz"]

[session]
seed = 7

[pacing]
verdict_delay = 0
review_delay = 0.5

[logging]
level = "debug"
""",
    )
    result = load_settings(env={}, workspace_path=home, cwd=tmp_path)
    settings = result.settings
    assert result.config_path == config
    assert settings.assets_dir == (tmp_path / "banks").resolve()
    assert settings.extensions == ("json", "quiz")
    assert settings.seed == 7
    assert settings.pacing == Pacing(verdict_delay=0.0, review_delay=0.5)
    assert settings.log_level == "DEBUG"


def test_precedence_cli_over_env_over_file(tmp_path: Path) -> None:
    home = tmp_path / "home"
    _write_config(home, '[paths]\nassets_dir = "from-file"\n')
    env = {
        "EXAM_DRILL_ASSETS_DIR": str(tmp_path / "from-env"),
        "EXAM_DRILL_SEED": "11",
        "EXAM_DRILL_EXTENSIONS": "json, txt",
        "EXAM_DRILL_LOG_LEVEL": "warning",
    }

    result = load_settings(env=env, workspace_path=home, cwd=tmp_path)
    assert result.settings.assets_dir == (tmp_path / "from-env").resolve()
    assert result.settings.seed == 11
    assert result.settings.extensions == ("json", "txt")
    assert result.settings.log_level == "WARNING"

    overrides = SettingsOverrides(
        assets_dir=tmp_path / "from-cli",
        seed=3,
        no_pacing=True,
        log_level="error",
    )
    result = load_settings(
        env=env, overrides=overrides, workspace_path=home, cwd=tmp_path
    )
    assert result.settings.assets_dir == (tmp_path / "from-cli").resolve()
    assert result.settings.seed == 3
    assert result.settings.pacing == Pacing.disabled()
    assert result.settings.log_level == "ERROR"


def test_workspace_comes_from_environment(tmp_path: Path) -> None:
    home = tmp_path / "env-home"
    result = load_settings(
        env={"EXAM_DRILL_HOME": str(home)}, cwd=tmp_path
    )
    assert result.layout.home == home.resolve()


def test_explicit_config_path(tmp_path: Path) -> None:
    config = tmp_path / "custom.toml"
    config.write_text("[session]\nseed = 5\n", encoding="utf-8")
    result = load_settings(
        config_path=config,
        env={},
        workspace_path=tmp_path / "home",
        cwd=tmp_path,
    )
    assert result.settings.seed == 5
    assert result.config_path == config


def test_config_path_from_environment(tmp_path: Path) -> None:
    config = tmp_path / "env.toml"
    config.write_text("[session]\nseed = 9\n", encoding="utf-8")
    result = load_settings(
        env={"EXAM_DRILL_CONFIG": str(config)},
        workspace_path=tmp_path / "home",
        cwd=tmp_path,
    )
    assert result.settings.seed == 9


@pytest.mark.parametrize("use_env", [False, True])
def test_missing_requested_config_is_an_error(
    tmp_path: Path, use_env: bool
) -> None:
    missing = tmp_path / "missing.toml"
    kwargs = {"workspace_path": tmp_path / "home", "cwd": tmp_path}
    if use_env:
        kwargs["env"] = {"EXAM_DRILL_CONFIG": str(missing)}
    else:
        kwargs["env"] = {}
        kwargs["config_path"] = missing
    with pytest.raises(QuizzerConfigError, match="not found"):
        load_settings(**kwargs)


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("[paths]\nunknown = 1\n", "Unknown configuration key"),
        ("[extras]\nvalue = 1\n", "Unknown configuration key"),
        ("paths = 3\n", "Expected table"),
        ("[session]\nseed = \"abc\"\n", "session.seed"),
        ("[session]\nseed = true\n", "session.seed"),
        ("[pacing]\nverdict_delay = -1\n", "must not be negative"),
        ("[pacing]\nreview_delay = \"slow\"\n", "must be a number"),
        ("[discovery]\nextensions = []\n", "discovery.extensions"),
        ("[paths]\nassets_dir = \"\"\n", "paths.assets_dir"),
        ("[logging]\nlevel = 10\n", "logging.level"),
        ("[paths\n", "Failed to parse"),
    ],
)
def test_invalid_config_values(tmp_path: Path, body: str, message: str):
    home = tmp_path / "home"
    _write_config(home, body)
    with pytest.raises(QuizzerConfigError, match=message):
        load_settings(env={}, workspace_path=home, cwd=tmp_path)


def test_template_round_trips_to_defaults(tmp_path: Path) -> None:
    home = tmp_path / "home"
    _write_config(home, settings_mod.CONFIG_TEMPLATE)
    with_template = load_settings(env={}, workspace_path=home, cwd=tmp_path)
    without = load_settings(
        env={}, workspace_path=tmp_path / "other", cwd=tmp_path
    )
    assert with_template.settings == without.settings
