from __future__ import annotations

import subprocess

from gitpick.flows.guard import stage_interactively, unstage_interactively
from gitpick.flows.model import OutcomeStatus


def _cp(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


_PORCELAIN = " M app.py\0?? new file.txt\0M  staged.py\0 D removed.py\0"


def test_stage_offers_unstaged_paths_and_adds_selection(make_harness) -> None:
    harness = make_harness(
        {
            "git status --porcelain=v1 -z": _cp(0, _PORCELAIN),
            "git add -- app.py new file.txt": _cp(0),
            "git status --short": _cp(0, "M  app.py\nA  new file.txt\n"),
        },
        picks=[["app.py", "new file.txt"]],
    )

    outcome = stage_interactively(harness.session)

    call = harness.picker.calls[0]
    assert call.multi is True
    assert call.lines == [".M\tapp.py", "??\tnew file.txt", ".D\tremoved.py"]
    assert harness.runner.calls[1] == ["git", "add", "--", "app.py", "new file.txt"]
    assert outcome.ok
    assert outcome.message == "Staged 2 path(s)."
    assert "A  new file.txt" in outcome.detail


def test_stage_with_empty_selection_is_a_noop(make_harness) -> None:
    harness = make_harness({"git status --porcelain=v1 -z": _cp(0, _PORCELAIN)}, picks=[[]])

    outcome = stage_interactively(harness.session)

    assert outcome.status is OutcomeStatus.CANCELLED
    assert not any(call[1] == "add" for call in harness.runner.calls)


def test_stage_with_clean_tree_reports_nothing_to_stage(make_harness) -> None:
    harness = make_harness({"git status --porcelain=v1 -z": _cp(0, "M  staged.py\0")})

    outcome = stage_interactively(harness.session)

    assert outcome.status is OutcomeStatus.SKIPPED
    assert harness.picker.calls == []


def test_unstage_resets_selected_paths(make_harness) -> None:
    harness = make_harness(
        {
            "git diff --name-only --cached -z": _cp(0, "staged.py\0other.py\0"),
            "git rev-parse --verify --quiet HEAD": _cp(0, "abc1234\n"),
            "git reset -q HEAD -- staged.py": _cp(0),
            "git status --short": _cp(0, " M staged.py\n"),
        },
        picks=[["staged.py"]],
    )

    outcome = unstage_interactively(harness.session)

    assert outcome.ok
    assert harness.runner.ran("git reset -q HEAD -- staged.py")


def test_unstage_before_first_commit_uses_rm_cached(make_harness) -> None:
    harness = make_harness(
        {
            "git diff --name-only --cached -z": _cp(0, "first.py\0"),
            "git rev-parse --verify --quiet HEAD": _cp(1),
            "git rm -q --cached -- first.py": _cp(0),
            "git status --short": _cp(0, "?? first.py\n"),
        },
        picks=[["first.py"]],
    )

    outcome = unstage_interactively(harness.session)

    assert outcome.ok
    assert harness.runner.ran("git rm -q --cached -- first.py")


def test_unstage_failure_reports_diagnostic(make_harness) -> None:
    harness = make_harness(
        {
            "git diff --name-only --cached -z": _cp(0, "staged.py\0"),
            "git rev-parse --verify --quiet HEAD": _cp(0),
            "git reset -q HEAD -- staged.py": _cp(1, stderr="fatal: index.lock exists"),
        },
        picks=[["staged.py"]],
    )

    outcome = unstage_interactively(harness.session)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.detail == "fatal: index.lock exists"


def test_stage_undecodable_path_reaches_git_add_unchanged(make_harness) -> None:
    path = b"caf\xe9.txt".decode("utf-8", "surrogateescape")
    harness = make_harness(
        {
            "git status --porcelain=v1 -z": _cp(0, f"?? {path}\0"),
            f"git add -- {path}": _cp(0),
            "git status --short": _cp(0, f"A  {path}\n"),
        },
        picks=[["caf"]],
    )

    outcome = stage_interactively(harness.session)

    assert outcome.ok
    assert harness.runner.calls[1] == ["git", "add", "--", path]
