"""Subprocess adapter for the git and gh command-line tools."""

from __future__ import annotations

import logging as py_logging
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from gitpick.errors import ExitCode, GitPickError

logger = py_logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]

_INSTALL_HINTS = {
    "git": "Install git and make sure it is on PATH.",
    "gh": "Install the GitHub CLI (https://cli.github.com) and run `gh auth login`.",
}


@dataclass(frozen=True)
class ToolResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        text = self.stderr.strip() or self.stdout.strip()
        return text or f"exit status {self.returncode}"


class ToolRunner:
    """Runs git/gh with an argv list; nothing is ever routed through a shell."""

    def __init__(
        self,
        *,
        git_binary: str = "git",
        gh_binary: str = "gh",
        cwd: str | Path | None = None,
        runner: Runner = subprocess.run,
    ) -> None:
        self.git_binary = git_binary
        self.gh_binary = gh_binary
        self.cwd = Path(cwd) if cwd is not None else None
        self._runner = runner

    def _argv(self, tool: str, args: Sequence[str]) -> list[str]:
        binary = self.git_binary if tool == "git" else self.gh_binary
        return [binary, *args]

    def _missing(self, tool: str, argv: list[str], exc: OSError) -> GitPickError:
        logger.error("Executable not available tool=%s argv0=%s error=%s", tool, argv[0], exc)
        return GitPickError(
            f"Cannot run '{argv[0]}'",
            code=ExitCode.TOOL_ERROR,
            hint=_INSTALL_HINTS.get(tool, "Check that the tool is installed."),
        )

    def capture(self, tool: str, *args: str, stdin_text: str | None = None) -> ToolResult:
        argv = self._argv(tool, args)
        logger.debug("Running command cwd=%s argv=%s", self.cwd, argv)
        try:
            # git paths and subjects are raw bytes; undecodable ones round-trip as lone surrogates.
            completed = self._runner(
                argv,
                cwd=self.cwd,
                input=stdin_text,
                capture_output=True,
                encoding="utf-8",
                errors="surrogateescape",
                check=False,
            )
        except OSError as exc:
            raise self._missing(tool, argv, exc) from exc
        result = ToolResult(
            argv=tuple(argv),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if not result.ok:
            logger.warning(
                "Command failed returncode=%s argv=%s stderr=%s",
                result.returncode,
                argv,
                result.stderr.strip(),
            )
        return result

    def interactive(self, tool: str, *args: str) -> ToolResult:
        """Run attached to the terminal so pagers, editors and prompts work."""
        argv = self._argv(tool, args)
        logger.debug("Running interactive command cwd=%s argv=%s", self.cwd, argv)
        try:
            completed = self._runner(argv, cwd=self.cwd, check=False)
        except OSError as exc:
            raise self._missing(tool, argv, exc) from exc
        if completed.returncode != 0:
            logger.warning("Interactive command failed returncode=%s argv=%s", completed.returncode, argv)
        return ToolResult(argv=tuple(argv), returncode=completed.returncode)

    def check(self, tool: str, *args: str, context: str = "") -> ToolResult:
        result = self.capture(tool, *args)
        if not result.ok:
            raise tool_failure(result, context=context)
        return result

    def git(self, *args: str) -> ToolResult:
        return self.capture("git", *args)

    def gh(self, *args: str) -> ToolResult:
        return self.capture("gh", *args)

    def inside_work_tree(self) -> bool:
        return self.capture("git", "rev-parse", "--is-inside-work-tree").stdout.strip() == "true"

    def has_head(self) -> bool:
        return self.capture("git", "rev-parse", "--verify", "--quiet", "HEAD").ok

    def current_branch(self) -> str:
        result = self.capture("git", "branch", "--show-current")
        if not result.ok:
            return ""
        return result.stdout.strip()

    def quiet_diff(self, *, cached: bool) -> bool:
        """Return True when the work tree (or index, with cached) has changes."""
        args = ["diff", "--quiet"]
        if cached:
            args.insert(1, "--cached")
        result = self.capture("git", *args)
        if result.returncode == 0:
            return False
        if result.returncode == 1:
            return True
        raise tool_failure(result, context="Could not inspect uncommitted changes")


def tool_failure(result: ToolResult, *, context: str = "") -> GitPickError:
    tool = Path(result.argv[0]).name if result.argv else "tool"
    code = ExitCode.for_tool(tool)
    message = context or f"'{' '.join(result.argv[:3])}' failed with exit status {result.returncode}"
    return GitPickError(message, code=code, hint=result.diagnostic)
