from __future__ import annotations

import subprocess

import pytest

from gitpick.config import AppConfig
from gitpick.entities import branch
from gitpick.flows.engine import run_entity_flow
from gitpick.flows.model import OutcomeStatus


def _cp(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


_LIST = (
    "git for-each-ref --sort=-committerdate --format=%(HEAD)%09%(refname)%09%(committerdate:relative) "
    "refs/heads refs/remotes/origin"
)
_REFS = "*\trefs/heads/main\t1 hour ago\n \trefs/heads/feature-x\t2 days ago\n"


def _responses(refs: str = _REFS, **extra: subprocess.CompletedProcess) -> dict[str, subprocess.CompletedProcess]:
    responses = {
        "git rev-parse --is-inside-work-tree": _cp(0, "true\n"),
        "git branch --show-current": _cp(0, "main\n"),
        _LIST: _cp(0, refs),
    }
    responses.update(extra)
    return responses


@pytest.mark.critical_regression
def test_feature_branch_menu_offers_switch_merge_and_delete(make_harness) -> None:
    harness = make_harness(
        _responses(**{"git switch feature-x": _cp(0)}),
        picks=[["feature-x"], ["Switch to this branch"]],
    )

    outcome = run_entity_flow(harness.session, branch.FLOW)

    listing, menu = harness.picker.calls
    assert listing.lines == ["[+] Create new branch", "* main\tlocal\t1 hour ago", "feature-x\tlocal\t2 days ago"]
    assert "Switch to this branch" in menu.lines
    assert "Merge into 'main'" in menu.lines
    assert "Delete local branch" in menu.lines
    assert outcome.ok
    assert harness.runner.ran("git switch feature-x")


def test_current_branch_menu_excludes_self_merge_and_delete(make_harness) -> None:
    harness = make_harness(_responses(), picks=[["* main"], []])

    run_entity_flow(harness.session, branch.FLOW)

    menu = harness.picker.calls[1].lines
    assert menu == ["Switch to this branch", "Push to origin", "Rename"]


def test_remote_only_branch_offers_remote_delete(make_harness) -> None:
    refs = _REFS + " \trefs/remotes/origin/release\t1 week ago\n"
    harness = make_harness(_responses(refs), picks=[["release"], []])

    run_entity_flow(harness.session, branch.FLOW)

    menu = harness.picker.calls[1].lines
    assert "Delete remote branch (origin)" in menu
    assert "Delete local branch" not in menu
    assert "Rename" not in menu


def test_remote_only_branch_merges_through_remote_ref(make_harness) -> None:
    refs = _REFS + " \trefs/remotes/origin/feature-r\t3 days ago\n"
    harness = make_harness(
        _responses(refs, **{"git merge origin/feature-r": _cp(0, "Fast-forward\n")}),
        picks=[["feature-r"], ["Merge into 'main'"]],
    )

    outcome = run_entity_flow(harness.session, branch.FLOW)

    assert outcome.ok
    assert outcome.message == "Merged 'origin/feature-r' into 'main'."
    assert not harness.runner.ran("git merge feature-r")


def test_local_branch_merges_by_name(make_harness) -> None:
    harness = make_harness(
        _responses(**{"git merge feature-x": _cp(0)}),
        picks=[["feature-x"], ["Merge into 'main'"]],
    )

    assert run_entity_flow(harness.session, branch.FLOW).ok


@pytest.mark.parametrize(("answer", "flag"), [("d", "-d"), ("D", "-D")])
def test_delete_local_uses_single_prompt(make_harness, answer: str, flag: str) -> None:
    harness = make_harness(
        _responses(**{f"git branch {flag} feature-x": _cp(0, "Deleted branch feature-x\n")}),
        answers=[answer],
    )
    candidate = branch.parse_line("feature-x\tlocal\t2 days ago")

    outcome = branch.delete_local(harness.session, candidate)

    assert outcome.ok
    assert len(harness.prompter.prompts) == 1


def test_delete_local_any_other_answer_cancels(make_harness) -> None:
    harness = make_harness(_responses(), answers=["yes"])

    outcome = branch.delete_local(harness.session, branch.parse_line("feature-x\tlocal\t2 days ago"))

    assert outcome.status is OutcomeStatus.CANCELLED
    assert not any(call[1:2] == ["branch"] and "-d" in call for call in harness.runner.calls)


def test_delete_current_branch_is_rejected(make_harness) -> None:
    harness = make_harness(_responses())

    outcome = branch.delete_local(harness.session, branch.parse_line("* main\tlocal\t1 hour ago"))

    assert outcome.status is OutcomeStatus.REJECTED
    assert harness.prompter.prompts == []


def test_push_runs_guard_and_auto_proceeds_when_clean(make_harness) -> None:
    harness = make_harness(
        _responses(
            **{
                "git diff --quiet": _cp(0),
                "git diff --cached --quiet": _cp(0),
                "git push origin feature-x": _cp(0, stderr="To github.com:me/app.git"),
            }
        )
    )

    outcome = branch.push(harness.session, branch.parse_line("feature-x\tlocal\t2 days ago"))

    assert outcome.ok
    assert harness.picker.calls == []


def test_push_cancelled_by_guard_does_not_push(make_harness) -> None:
    harness = make_harness(
        _responses(
            **{
                "git diff --quiet": _cp(1),
                "git diff --cached --quiet": _cp(0),
                "git status --short": _cp(0, " M app.py\n"),
            }
        ),
        picks=[["Cancel"]],
    )

    outcome = branch.push(harness.session, branch.parse_line("feature-x\tlocal\t2 days ago"))

    assert outcome.status is OutcomeStatus.CANCELLED
    assert not harness.runner.ran("git push origin feature-x")


def test_delete_remote_requires_confirmation(make_harness) -> None:
    harness = make_harness(_responses(), answers=["no"])

    outcome = branch.delete_remote(harness.session, branch.parse_line("release\torigin\t1 week ago"))

    assert outcome.status is OutcomeStatus.CANCELLED
    assert not harness.runner.ran("git push origin --delete release")


def test_create_requires_a_name(make_harness) -> None:
    harness = make_harness(_responses(), answers=[""])

    outcome = branch.create(harness.session)

    assert outcome.status is OutcomeStatus.REJECTED
    assert len(harness.runner.calls) == 0


def test_create_with_start_point(make_harness) -> None:
    harness = make_harness(
        _responses(**{"git switch -c topic/new origin/main": _cp(0)}),
        answers=["topic/new", "origin/main"],
    )

    outcome = branch.create(harness.session)

    assert outcome.ok
    assert outcome.message == "Created and switched to 'topic/new'."


def test_bulk_delete_skips_current_and_remote_only(make_harness) -> None:
    refs = _REFS + " \trefs/heads/old\t1 month ago\n \trefs/remotes/origin/release\t1 week ago\n"
    harness = make_harness(
        _responses(
            refs,
            **{
                "git branch -d feature-x": _cp(0),
                "git branch -d old": _cp(1, stderr="error: the branch 'old' is not fully merged"),
            },
        ),
        picks=[["* main", "feature-x", "old", "release"], ["Delete local branches"]],
        answers=["YES"],
    )

    outcome = run_entity_flow(harness.session, branch.FLOW)

    assert outcome.status is OutcomeStatus.FAILED
    assert "4 processed, 1 succeeded, 1 failed, 2 skipped" in outcome.message
    assert "not fully merged" in harness.output


def test_listing_prunes_remote_refs_when_enabled(make_harness) -> None:
    config = AppConfig(preview_enabled=False, prune_remote_branches=True)
    harness = make_harness(_responses(**{"git fetch --prune --quiet origin": _cp(0)}), picks=[[]], config=config)

    run_entity_flow(harness.session, branch.FLOW)

    subcommands = [call[1] for call in harness.runner.calls]
    assert subcommands.index("fetch") < subcommands.index("for-each-ref")


def test_failed_prune_still_lists_branches(make_harness) -> None:
    config = AppConfig(preview_enabled=False, prune_remote_branches=True)
    harness = make_harness(
        _responses(**{"git fetch --prune --quiet origin": _cp(128, stderr="fatal: unable to access")}),
        picks=[[]],
        config=config,
    )

    run_entity_flow(harness.session, branch.FLOW)

    assert "Could not refresh 'origin'" in harness.output
    assert len(harness.picker.calls[0].lines) == 3


def test_listing_does_not_fetch_by_default(make_harness) -> None:
    harness = make_harness(_responses(), picks=[[]])

    run_entity_flow(harness.session, branch.FLOW)

    assert not any(call[1] == "fetch" for call in harness.runner.calls)
