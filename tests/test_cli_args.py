from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from gitpick import cli
from gitpick.errors import ExitCode, GitPickError


def _cp(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def _factory(harness):
    def build(config, *, config_path=None):
        return harness.session

    return build


def _log_args(tmp_path: Path) -> list[str]:
    return ["--log-file", str(tmp_path / "gitpick.log"), "--config", str(tmp_path / "missing.toml")]


def test_cli_help_includes_public_flags(capsys) -> None:
    code = cli.main(["--help"])

    assert code == 0
    out = capsys.readouterr().out
    assert "--config" in out
    assert "--log-level" in out
    assert "--log-file" in out


def test_invalid_log_level_returns_invalid_args(capsys) -> None:
    code = cli.main(["--log-level", "chatty"])

    assert code == int(ExitCode.INVALID_ARGS)
    assert "--log-level must be one of" in capsys.readouterr().err


def test_help_command_lists_every_command(make_harness, tmp_path, capsys) -> None:
    code = cli.main([*_log_args(tmp_path), "help"], session_factory=_factory(make_harness()))

    assert code == 0
    out = capsys.readouterr().out
    for name in cli.COMMANDS:
        assert f"  {name}" in out
    assert "exit" in out


def test_unknown_command_prints_help_and_exits_two(make_harness, tmp_path, capsys) -> None:
    code = cli.main([*_log_args(tmp_path), "frobnicate"], session_factory=_factory(make_harness()))

    assert code == int(ExitCode.INVALID_ARGS)
    out = capsys.readouterr().out
    assert "Unknown command: frobnicate" in out
    assert "Commands:" in out


def test_extra_arguments_are_rejected(make_harness, tmp_path, capsys) -> None:
    code = cli.main([*_log_args(tmp_path), "branch", "main"], session_factory=_factory(make_harness()))

    assert code == int(ExitCode.INVALID_ARGS)
    assert "Unexpected arguments: main" in capsys.readouterr().err


def test_cancelled_top_level_menu_exits_cleanly(make_harness, tmp_path, capsys) -> None:
    harness = make_harness(picks=[[]])

    code = cli.main(_log_args(tmp_path), session_factory=_factory(harness))

    assert code == 0
    assert "Bye." in capsys.readouterr().out
    assert harness.picker.calls[0].lines[-2:] == ["help\tShow help", "exit\tLeave gitpick"]


def test_top_level_menu_runs_the_chosen_command(make_harness, tmp_path, capsys) -> None:
    harness = make_harness(picks=[["help"]])

    code = cli.main(_log_args(tmp_path), session_factory=_factory(harness))

    assert code == 0
    assert "Usage: gitpick" in capsys.readouterr().out


def test_alias_resolves_before_dispatch(make_harness, tmp_path, capsys) -> None:
    config_path = tmp_path / "aliases.toml"
    config_path.write_text('[aliases]\nb = "branch"\n', encoding="utf-8")
    harness = make_harness({"git rev-parse --is-inside-work-tree": _cp(128, stderr="fatal: not a git repository")})

    code = cli.main(
        ["--log-file", str(tmp_path / "gitpick.log"), "--config", str(config_path), "b"],
        session_factory=_factory(harness),
    )

    assert code == int(ExitCode.NOT_A_REPOSITORY)
    err = capsys.readouterr().err
    assert "Error: Not inside a Git repository." in err
    assert "gitpick init" in err


def test_listing_failure_maps_to_its_exit_code(make_harness, tmp_path, capsys) -> None:
    harness = make_harness(
        {
            "git rev-parse --is-inside-work-tree": _cp(0, "true\n"),
            "git stash list --format=%gd%x09%s": _cp(128, stderr="fatal: bad revision"),
        }
    )

    code = cli.main([*_log_args(tmp_path), "stash"], session_factory=_factory(harness))

    assert code == int(ExitCode.GIT_ERROR)
    assert "fatal: bad revision" in capsys.readouterr().err


def test_session_error_is_reported_to_stderr(tmp_path, capsys) -> None:
    def failing(config, *, config_path=None):
        raise GitPickError("fzf is not installed", code=ExitCode.TOOL_ERROR, hint="Install fzf.")

    code = cli.main([*_log_args(tmp_path), "branch"], session_factory=failing)

    assert code == int(ExitCode.TOOL_ERROR)
    assert "Error: fzf is not installed. Next step: Install fzf." in capsys.readouterr().err


def test_unexpected_exception_points_to_logs(tmp_path, capsys) -> None:
    def broken(config, *, config_path=None):
        raise RuntimeError("boom")

    code = cli.main([*_log_args(tmp_path), "branch"], session_factory=broken)

    assert code == int(ExitCode.RUNTIME_ERROR)
    assert "Inspect logs:" in capsys.readouterr().err
    assert "boom" in (tmp_path / "gitpick.log").read_text(encoding="utf-8")


def test_preview_prints_create_hint_for_sentinel(make_harness, tmp_path, capsys) -> None:
    code = cli.main(
        [*_log_args(tmp_path), "__preview", "branch", "[+] Create new branch"],
        session_factory=_factory(make_harness()),
    )

    assert code == 0
    assert "Create a new branch and switch to it." in capsys.readouterr().out


@pytest.mark.parametrize("args", [["nope", "line"], ["branch"]])
def test_preview_never_fails(make_harness, tmp_path, capsys, args: list[str]) -> None:
    code = cli.main([*_log_args(tmp_path), "__preview", *args], session_factory=_factory(make_harness()))

    assert code == 0
    assert "Preview unavailable." in capsys.readouterr().out


def test_resolve_alias_passes_through_unknown_names() -> None:
    config = cli.AppConfig(aliases={"co": "commit"})

    assert cli.resolve_alias(config, "co") == "commit"
    assert cli.resolve_alias(config, "tag") == "tag"


def test_failed_preview_lookup_keeps_stderr_quiet(make_harness, tmp_path, capsys) -> None:
    harness = make_harness(
        {
            "git log --oneline --graph --decorate --color=always -n 50 feature-x": _cp(
                128, stderr="fatal: bad revision 'feature-x'"
            )
        }
    )

    code = cli.main(
        [*_log_args(tmp_path), "__preview", "branch", "feature-x\tlocal\t2 days ago"],
        session_factory=_factory(harness),
    )

    assert code == 0
    captured = capsys.readouterr()
    assert captured.out == "Preview unavailable: fatal: bad revision 'feature-x'\n"
    assert captured.err == ""
    assert "Command failed" in (tmp_path / "gitpick.log").read_text(encoding="utf-8")
