"""Configuration loader for the quizzer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Sequence

from exam_drill.core import config as core_config
from exam_drill.core import workspace as workspace_mod
from exam_drill.core.files import parse_extensions

from .runner import Pacing

CONFIG_FILENAME = "quizzer.toml"
CONFIG_ENV = "EXAM_DRILL_CONFIG"
ENV_PREFIX = "EXAM_DRILL_"

CONFIG_TEMPLATE = """\
# exam-drill quizzer configuration

[paths]
# Directory scanned for exam files; relative paths resolve against the
# directory exam-drill is started from.
assets_dir = "assets"

[discovery]
extensions = ["json"]

[session]
# Uncomment to make question and option order reproducible.
# seed = 1234

[pacing]
# Seconds to pause after the verdict and after the explanation/references.
verdict_delay = 1.0
review_delay = 2.5

[logging]
level = "INFO"
"""


class QuizzerConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizzerSettings:
    """Fully resolved settings for a quizzer run."""

    assets_dir: Path
    extensions: tuple[str, ...]
    seed: Optional[int]
    pacing: Pacing
    log_level: str


@dataclass(frozen=True)
class SettingsOverrides:
    """CLI-sourced overrides applied on top of file and env options."""

    assets_dir: Optional[Path] = None
    extensions: Optional[Sequence[str]] = None
    seed: Optional[int] = None
    no_pacing: bool = False
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    settings: QuizzerSettings
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_settings(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[SettingsOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> LoadResult:
    """Load settings applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or SettingsOverrides()
    env_map = os.environ if env is None else env
    base_dir = cwd or Path.cwd()

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizzerConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )
    table = default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(table, core_config.load_toml(requested))
        except core_config.TomlConfigError as exc:
            raise QuizzerConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or env_map.get(CONFIG_ENV, "").strip():
        raise QuizzerConfigError(f"Config file not found: {requested}")

    assets_dir = _resolve_assets_dir(
        _pick_first(
            overrides.assets_dir,
            _env_string(env_map, "ASSETS_DIR"),
            table["paths"]["assets_dir"],
        ),
        base_dir,
    )
    extensions = _resolve_extensions(
        _pick_first(
            overrides.extensions,
            _env_extensions(env_map),
            table["discovery"]["extensions"],
        )
    )
    seed = _resolve_seed(
        _pick_first(
            overrides.seed,
            _env_string(env_map, "SEED"),
            table["session"]["seed"],
        )
    )
    if overrides.no_pacing:
        pacing = Pacing.disabled()
    else:
        pacing = Pacing(
            verdict_delay=_delay(table["pacing"]["verdict_delay"], "verdict"),
            review_delay=_delay(table["pacing"]["review_delay"], "review"),
        )
    log_level = _resolve_log_level(
        _pick_first(
            overrides.log_level,
            _env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        )
    )

    settings = QuizzerSettings(
        assets_dir=assets_dir,
        extensions=extensions,
        seed=seed,
        pacing=pacing,
        log_level=log_level,
    )
    return LoadResult(
        settings=settings, layout=layout, config_path=loaded_path
    )


def default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    defaults = Pacing()
    return {
        "paths": {"assets_dir": "assets"},
        "discovery": {"extensions": ["json"]},
        "session": {"seed": None},
        "pacing": {
            "verdict_delay": defaults.verdict_delay,
            "review_delay": defaults.review_delay,
        },
        "logging": {"level": "INFO"},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = env_map.get(CONFIG_ENV, "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_assets_dir(value: object, base_dir: Path) -> Path:
    if isinstance(value, str) and value.strip():
        value = Path(value.strip())
    if not isinstance(value, Path):
        raise QuizzerConfigError(
            "paths.assets_dir must be a non-empty string."
        )
    candidate = value.expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()


def _resolve_extensions(value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise QuizzerConfigError(
            "discovery.extensions must be a non-empty list of strings."
        )
    return tuple(sorted(parse_extensions(list(value))))


def _resolve_seed(value: object) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise QuizzerConfigError("session.seed must be an integer.")
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise QuizzerConfigError("session.seed must be an integer.") from exc


def _delay(value: object, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizzerConfigError(f"pacing.{name}_delay must be a number.")
    if value < 0:
        raise QuizzerConfigError(f"pacing.{name}_delay must not be negative.")
    return float(value)


def _resolve_log_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizzerConfigError("logging.level must be a non-empty string.")
    return value.strip().upper()


def _env_extensions(env_map: Mapping[str, str]) -> Optional[list[str]]:
    raw = _env_string(env_map, "EXTENSIONS")
    if raw is None:
        return None
    parts = [part for part in raw.replace(",", " ").split() if part]
    return parts or None


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
