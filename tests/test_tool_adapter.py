from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest

from gitpick.errors import ExitCode, GitPickError
from gitpick.tools.adapter import ToolResult, ToolRunner, tool_failure


def _cp(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_capture_passes_argv_list_without_shell(tmp_path: Path) -> None:
    seen: dict[str, object] = {}

    def runner(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        seen["cmd"] = cmd
        seen.update(kwargs)
        return _cp(0, "ok\n")

    tools = ToolRunner(cwd=tmp_path, runner=runner)
    result = tools.git("add", "--", "dir with space/$(rm -rf).txt")

    assert seen["cmd"] == ["git", "add", "--", "dir with space/$(rm -rf).txt"]
    assert seen["cwd"] == tmp_path
    assert seen["capture_output"] is True
    assert seen["encoding"] == "utf-8"
    assert seen["errors"] == "surrogateescape"
    assert seen["check"] is False
    assert "shell" not in seen
    assert result.ok
    assert result.stdout == "ok\n"


def test_configured_binaries_are_used() -> None:
    calls: list[list[str]] = []

    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        calls.append(cmd)
        return _cp(0)

    tools = ToolRunner(git_binary="/usr/bin/git", gh_binary="/opt/gh", runner=runner)
    tools.git("status")
    tools.gh("repo", "list")

    assert calls == [["/usr/bin/git", "status"], ["/opt/gh", "repo", "list"]]


def test_missing_binary_raises_tool_error_with_install_hint() -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        raise FileNotFoundError(cmd[0])

    with pytest.raises(GitPickError) as exc:
        ToolRunner(runner=runner).gh("pr", "list")

    assert exc.value.code is ExitCode.TOOL_ERROR
    assert "cli.github.com" in exc.value.hint


def test_interactive_inherits_terminal() -> None:
    seen: dict[str, object] = {}

    def runner(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        seen.update(kwargs)
        return subprocess.CompletedProcess(args=cmd, returncode=1)

    result = ToolRunner(runner=runner).interactive("git", "show", "HEAD")

    assert "capture_output" not in seen
    assert not result.ok
    assert result.diagnostic == "exit status 1"


@pytest.mark.parametrize(
    ("returncode", "expected"),
    [(0, False), (1, True)],
)
def test_quiet_diff_maps_exit_status(returncode: int, expected: bool) -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        assert cmd == ["git", "diff", "--cached", "--quiet"]
        return _cp(returncode)

    assert ToolRunner(runner=runner).quiet_diff(cached=True) is expected


def test_quiet_diff_other_status_is_an_error() -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        return _cp(128, stderr="fatal: not a git repository")

    with pytest.raises(GitPickError) as exc:
        ToolRunner(runner=runner).quiet_diff(cached=False)

    assert exc.value.code is ExitCode.GIT_ERROR
    assert exc.value.hint == "fatal: not a git repository"


def test_probe_helpers() -> None:
    responses = {
        "git rev-parse --is-inside-work-tree": _cp(0, "true\n"),
        "git rev-parse --verify --quiet HEAD": _cp(1),
        "git branch --show-current": _cp(0, "main\n"),
    }

    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        return responses[" ".join(cmd)]

    tools = ToolRunner(runner=runner)

    assert tools.inside_work_tree() is True
    assert tools.has_head() is False
    assert tools.current_branch() == "main"


def test_check_raises_with_tool_diagnostic() -> None:
    def runner(cmd: list[str], **_: object) -> subprocess.CompletedProcess:
        return _cp(1, stderr="error: pathspec 'nope' did not match")

    with pytest.raises(GitPickError) as exc:
        ToolRunner(runner=runner).check("git", "switch", "nope", context="Could not switch")

    assert exc.value.message == "Could not switch"
    assert "pathspec 'nope'" in exc.value.hint


def test_tool_failure_code_depends_on_binary() -> None:
    git_failure = tool_failure(ToolResult(argv=("/usr/bin/git", "push"), returncode=1, stderr="rejected"))
    gh_failure = tool_failure(ToolResult(argv=("gh", "repo", "list"), returncode=4, stdout="auth required"))

    assert git_failure.code is ExitCode.GIT_ERROR
    assert git_failure.hint == "rejected"
    assert gh_failure.code is ExitCode.TOOL_ERROR
    assert gh_failure.hint == "auth required"


def test_undecodable_output_round_trips_to_the_next_command() -> None:
    raw_status = b"?? caf\xe9.txt\0"
    calls: list[list[str]] = []

    def runner(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        calls.append(cmd)
        stdout = raw_status.decode(str(kwargs["encoding"]), str(kwargs["errors"]))
        return _cp(0, stdout)

    tools = ToolRunner(runner=runner)
    path = tools.git("status", "--porcelain=v1", "-z").stdout[3:].rstrip("\0")
    tools.git("add", "--", path)

    assert os.fsencode(calls[1][-1]) == b"caf\xe9.txt"
