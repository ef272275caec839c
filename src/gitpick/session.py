"""Explicit per-invocation context shared by listers, handlers and the guard."""

from __future__ import annotations

import logging as py_logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from gitpick.config import AppConfig
from gitpick.errors import ExitCode, GitPickError
from gitpick.tools.adapter import ToolRunner
from gitpick.tools.picker import FzfPicker, Picker

logger = py_logging.getLogger(__name__)


def console_echo(text: str) -> None:
    """print() for tool output that may carry undecodable bytes."""
    print(text.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace"))


class Prompter(Protocol):
    def ask(self, prompt: str) -> str: ...


class ConsolePrompter:
    """Blocking line input; EOF and Ctrl-C read as an empty answer."""

    def __init__(self, reader: Callable[[str], str] = input) -> None:
        self._reader = reader

    def ask(self, prompt: str) -> str:
        try:
            return self._reader(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return ""


@dataclass
class Session:
    repo_path: Path
    config: AppConfig
    tools: ToolRunner
    picker: Picker
    prompter: Prompter
    echo: Callable[[str], None] = console_echo
    clock: Callable[[], datetime] = field(default=datetime.now)
    config_path: Path | None = None

    def ask(self, prompt: str) -> str:
        return self.prompter.ask(prompt)

    def confirm(self, prompt: str, *, word: str | None = None) -> bool:
        expected = word or self.config.confirm_word
        answer = self.ask(f"{prompt} (type '{expected}' to continue): ")
        return answer == expected

    def require_work_tree(self) -> None:
        if not self.tools.inside_work_tree():
            logger.debug("Not inside a work tree path=%s", self.repo_path)
            raise GitPickError(
                "Not inside a Git repository",
                code=ExitCode.NOT_A_REPOSITORY,
                hint="cd into a repository or run `gitpick init`.",
            )


def create_session(
    config: AppConfig,
    *,
    repo_path: str | Path | None = None,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    picker: Picker | None = None,
    prompter: Prompter | None = None,
    echo: Callable[[str], None] = console_echo,
    config_path: Path | None = None,
) -> Session:
    path = Path(repo_path) if repo_path is not None else Path.cwd()
    tools = ToolRunner(
        git_binary=config.git_binary,
        gh_binary=config.gh_binary,
        cwd=path,
        runner=runner,
    )
    return Session(
        repo_path=path,
        config=config,
        tools=tools,
        picker=picker or FzfPicker(config.fzf_binary, layout=config.picker, runner=runner),
        prompter=prompter or ConsolePrompter(),
        echo=echo,
        config_path=config_path,
    )
