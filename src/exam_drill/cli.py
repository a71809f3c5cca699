"""Command-line entry point for exam-drill."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape

from exam_drill.core import workspace as workspace_mod
from exam_drill.core.config import TomlConfigError, write_toml_template
from exam_drill.core.files import iter_exam_files
from exam_drill.core.logging import configure_logger

from .quizzer.errors import LoadError, SelectionError
from .quizzer.loader import load_exam
from .quizzer.models import Exam
from .quizzer.prompts import (
    InputProvider,
    ask,
    ask_confirmed,
    choose_exam_file,
    render_exam_listing,
)
from .quizzer.runner import run_quiz_session
from .quizzer.settings import (
    CONFIG_FILENAME,
    CONFIG_TEMPLATE,
    LoadResult,
    QuizzerConfigError,
    SettingsOverrides,
    load_settings,
)

LOGGER_NAME = "exam_drill.quizzer"


def _version() -> str:
    try:
        return metadata.version("exam-drill")
    except metadata.PackageNotFoundError:
        return "unknown"


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="exam-drill",
        description="Drill yourself on JSON exam files in the terminal.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--version", action="version", version=_version())
    p.add_argument(
        "--config",
        type=Path,
        help="Path to quizzer.toml (defaults to the workspace config dir).",
    )
    p.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to EXAM_DRILL_HOME).",
    )
    p.add_argument("--log-level", help="Log level for the JSON log file.")
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Also echo log records to stderr.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser(
        "init", help="Create the directory exam files are read from"
    )
    sp_init.add_argument(
        "--path",
        type=Path,
        help="Directory to create (prompted with confirmation when omitted).",
    )

    sp_config = sub.add_parser("config", help="Manage quizzer.toml")
    config_sub = sp_config.add_subparsers(dest="action", required=True)
    sp_c_init = config_sub.add_parser(
        "init", help="Write the default quizzer.toml template"
    )
    sp_c_init.add_argument("--path", type=Path)
    sp_c_init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file.",
    )

    sp_list = sub.add_parser("list", help="List available exam files")
    sp_list.add_argument("--assets-dir", type=Path)

    sp_validate = sub.add_parser(
        "validate", help="Check that exam files load cleanly"
    )
    sp_validate.add_argument("paths", nargs="+", type=Path)

    sp_start = sub.add_parser("start", help="Start a quiz session")
    sp_start.add_argument(
        "--file",
        type=Path,
        help="Exam file to load instead of choosing from the assets dir.",
    )
    sp_start.add_argument("--assets-dir", type=Path)
    sp_start.add_argument(
        "--seed",
        type=int,
        help="Seed for question and option order.",
    )
    sp_start.add_argument(
        "--no-pacing",
        action="store_true",
        help="Skip the pauses after each verdict and review.",
    )
    return p


def _build_console() -> Console:
    return Console()


def _build_input_provider(console: Console) -> InputProvider:
    def _provider() -> str:
        return console.input()

    return _provider


def _load(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> LoadResult:
    overrides = SettingsOverrides(
        assets_dir=getattr(args, "assets_dir", None),
        seed=getattr(args, "seed", None),
        no_pacing=bool(getattr(args, "no_pacing", False)),
        log_level=args.log_level,
    )
    try:
        return load_settings(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizzerConfigError as exc:
        parser.error(str(exc))
    raise AssertionError("unreachable")  # pragma: no cover


def _ensure_assets_dir(console: Console, directory: Path) -> bool:
    if directory.is_dir():
        console.print(
            f"The {escape(str(directory))} directory already exists; "
            "no need to create it."
        )
        return True
    try:
        directory.mkdir(parents=True)
    except OSError as exc:
        console.print(
            f"[red]Unable to create {escape(str(directory))}: "
            f"{escape(str(exc))}[/red]"
        )
        return False
    console.print(f"Created the {escape(str(directory))} directory.")
    return True


def _cmd_init(
    args: argparse.Namespace,
    console: Console,
    input_provider: InputProvider,
) -> int:
    target = args.path
    if target is None:
        entry = ask_confirmed(
            console, input_provider, "Enter the exam directory to create: "
        )
        target = Path(entry)
    created = _ensure_assets_dir(console, target.expanduser().resolve())
    return 0 if created else 1


def _cmd_config_init(args: argparse.Namespace) -> int:
    if args.path is not None:
        target = args.path.expanduser()
    else:
        try:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
        except workspace_mod.WorkspaceError as exc:
            sys.stderr.write(str(exc) + "\n")
            return 1
        target = layout.path_for("config") / CONFIG_FILENAME
    try:
        written = write_toml_template(
            target, template=CONFIG_TEMPLATE, overwrite=args.force
        )
    except TomlConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    sys.stdout.write(f"Wrote quizzer config to {written}\n")
    return 0


def _cmd_list(result: LoadResult, console: Console) -> int:
    settings = result.settings
    files = iter_exam_files(settings.assets_dir, settings.extensions)
    if not files:
        console.print(
            f"No exam files found in {escape(str(settings.assets_dir))}."
        )
        return 1
    render_exam_listing(console, files)
    return 0


def _cmd_validate(
    args: argparse.Namespace, console: Console, logger: logging.Logger
) -> int:
    failures = 0
    for path in args.paths:
        try:
            exam = load_exam(path)
        except LoadError as exc:
            failures += 1
            logger.warning(
                "Exam failed validation",
                extra={"source": str(path), "reason": exc.reason},
            )
            console.print(f"[red]FAIL[/red] {escape(str(exc))}")
            continue
        console.print(
            f"[green]OK[/green]   {escape(str(path))}: {escape(exam.name)} "
            f"({len(exam)} question(s))"
        )
    return 1 if failures else 0


def _discover_candidates(
    result: LoadResult,
    console: Console,
    input_provider: InputProvider,
) -> list[Path]:
    settings = result.settings
    if not _ensure_assets_dir(console, settings.assets_dir):
        return []
    while True:
        files = iter_exam_files(settings.assets_dir, settings.extensions)
        if files:
            return files
        exts = ", ".join(f".{ext}" for ext in settings.extensions)
        console.print(
            f"[yellow]No exam files ({exts}) found in "
            f"{escape(str(settings.assets_dir))}.[/]"
        )
        reply = ask(
            console,
            input_provider,
            "Add exam files, then type 'r' to rescan or 'q' to quit: ",
        )
        if reply.lower() in {"q", "quit"}:
            return []


def _select_exam(
    candidates: list[Path],
    console: Console,
    input_provider: InputProvider,
    logger: logging.Logger,
    *,
    direct: bool,
) -> Optional[Exam]:
    while candidates:
        if direct:
            chosen = candidates[0]
        else:
            try:
                chosen = choose_exam_file(console, input_provider, candidates)
            except SelectionError as exc:
                console.print(f"[red]{escape(str(exc))}[/red]")
                return None
        try:
            exam = load_exam(chosen)
        except LoadError as exc:
            logger.warning(
                "Exam failed to load",
                extra={"source": str(chosen), "reason": exc.reason},
            )
            console.print(
                f"[red]Unable to load exam: {escape(str(exc))}[/red]"
            )
            candidates.remove(chosen)
            continue
        logger.info(
            "Exam loaded",
            extra={
                "source": str(chosen),
                "exam": exam.name,
                "questions": len(exam),
            },
        )
        return exam
    return None


def _cmd_start(
    args: argparse.Namespace,
    result: LoadResult,
    console: Console,
    input_provider: InputProvider,
    logger: logging.Logger,
) -> int:
    try:
        if args.file is not None:
            candidates = [args.file.expanduser()]
        else:
            candidates = _discover_candidates(result, console, input_provider)
        exam = _select_exam(
            candidates,
            console,
            input_provider,
            logger,
            direct=args.file is not None,
        )
    except (EOFError, KeyboardInterrupt):
        console.print("\n[bold yellow]Aborted.[/]")
        return 1
    if exam is None:
        console.print("[bold red]No exam could be loaded.[/]")
        return 1

    settings = result.settings
    run_quiz_session(
        exam,
        console,
        input_provider,
        rng=random.Random(settings.seed),
        pacing=settings.pacing,
        logger=logger,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.command == "config":
        return _cmd_config_init(args)

    result = _load(parser, args)
    logger, _ = configure_logger(
        LOGGER_NAME,
        log_dir=result.layout.path_for("logs"),
        level=result.settings.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "Settings resolved",
        extra={
            "command": args.command,
            "config_path": result.config_path,
            "assets_dir": result.settings.assets_dir,
        },
    )

    console = _build_console()
    if args.command == "validate":
        return _cmd_validate(args, console, logger)
    if args.command == "list":
        return _cmd_list(result, console)

    input_provider = _build_input_provider(console)
    if args.command == "init":
        try:
            return _cmd_init(args, console, input_provider)
        except (EOFError, KeyboardInterrupt):
            console.print("\n[bold yellow]Aborted.[/]")
            return 1
    if args.command == "start":
        return _cmd_start(args, result, console, input_provider, logger)
    parser.print_help()  # pragma: no cover - fallback guard
    return 2  # pragma: no cover


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
