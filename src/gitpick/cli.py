"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .config import AppConfig, get_config_path, load_config
from .entities import COMMANDS, ENTITY_FLOWS
from .errors import ExitCode, GitPickError, user_facing_error
from .flows.engine import render_preview
from .flows.model import Candidate
from .flows.selector import PREVIEW_COMMAND, select
from .logging import LOG_LEVELS, configure_logging, default_log_path, normalize_level
from .session import Session, console_echo, create_session

HELP_COMMAND = "help"
EXIT_COMMAND = "exit"

SessionFactory = Callable[..., Session]


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized not in LOG_LEVELS:
        accepted = ", ".join(LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitpick",
        description="Browse and act on Git and GitHub entities through fuzzy-picker menus.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (TOML)")
    parser.add_argument("--log-level", type=_log_level_type, default="WARN")
    parser.add_argument("--log-file", type=Path, default=None)
    parser.add_argument("command", nargs="?", default=None, help="Command to run; omit for the menu")
    parser.add_argument("rest", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def help_text() -> str:
    width = max(len(name) for name in [*COMMANDS, HELP_COMMAND, EXIT_COMMAND])
    lines = [
        "Usage: gitpick [--config PATH] [--log-level LEVEL] [--log-file PATH] [COMMAND]",
        "",
        "Commands:",
    ]
    lines.extend(f"  {name.ljust(width)}  {command.description}" for name, command in COMMANDS.items())
    lines.append(f"  {HELP_COMMAND.ljust(width)}  Show this help")
    lines.append(f"  {EXIT_COMMAND.ljust(width)}  Leave gitpick")
    lines.append("")
    lines.append("Run without a command to pick one from a menu.")
    return "\n".join(lines)


def resolve_alias(config: AppConfig, name: str) -> str:
    return config.aliases.get(name, name)


def choose_command(session: Session) -> str:
    """Top-level menu; cancelling it is the same as choosing exit."""
    candidates = [Candidate.from_fields(name, command.description) for name, command in COMMANDS.items()]
    candidates.append(Candidate.from_fields(HELP_COMMAND, "Show help"))
    candidates.append(Candidate.from_fields(EXIT_COMMAND, "Leave gitpick"))
    selection = select(session, candidates, header="gitpick: choose a command")
    if selection.is_empty:
        return EXIT_COMMAND
    return selection.items[0].primary_key


def run_preview(session: Session, args: Sequence[str]) -> int:
    if len(args) != 2 or args[0] not in ENTITY_FLOWS:
        print("Preview unavailable.")
        return int(ExitCode.SUCCESS)
    entity, line = args
    console_echo(render_preview(session, ENTITY_FLOWS[entity], line))
    return int(ExitCode.SUCCESS)


def run_command(session: Session, name: str) -> int:
    if name == HELP_COMMAND:
        print(help_text())
        return int(ExitCode.SUCCESS)
    if name == EXIT_COMMAND:
        print("Bye.")
        return int(ExitCode.SUCCESS)
    command = COMMANDS.get(name)
    if command is None:
        print(f"Unknown command: {name}")
        print(help_text())
        return int(ExitCode.INVALID_ARGS)
    command.run(session)
    # Handler outcomes are already reported; only raised errors change the exit status.
    return int(ExitCode.SUCCESS)


def main(
    argv: Sequence[str] | None = None,
    *,
    session_factory: SessionFactory | None = None,
) -> int:
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code or 0)

    log_path = namespace.log_file.expanduser() if namespace.log_file is not None else default_log_path()
    level = namespace.log_level
    if namespace.command == PREVIEW_COMMAND:
        # fzf renders the preview command's stderr inside the preview pane.
        level = "ERROR"
    logger = configure_logging(level=level, log_file=log_path)

    try:
        config_path = get_config_path(namespace.config)
        config = load_config(config_path)
        factory = session_factory or create_session
        session = factory(config, config_path=config_path)

        if namespace.command == PREVIEW_COMMAND:
            return run_preview(session, namespace.rest)
        if namespace.rest:
            print(user_facing_error(f"Unexpected arguments: {' '.join(namespace.rest)}"), file=sys.stderr)
            return int(ExitCode.INVALID_ARGS)

        name = namespace.command
        if name is None:
            logger.debug("Starting top-level menu")
            name = choose_command(session)
        name = resolve_alias(config, name)
        logger.debug("Running command name=%s", name)
        return run_command(session, name)
    except GitPickError as exc:
        logger.error(
            "Handled GitPickError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        print(user_facing_error("Unexpected runtime failure", hint=f"Inspect logs: {log_path}"), file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
