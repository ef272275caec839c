"""Branch listing and actions."""

from __future__ import annotations

import logging as py_logging
from enum import Enum

from gitpick.entities.common import preview_text
from gitpick.flows.guard import GuardAction, GuardDecision, guard
from gitpick.flows.model import BulkAction, Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import BRANCH_FORMAT, BranchRecord, parse_branch_refs, split_fields

logger = py_logging.getLogger(__name__)

CURRENT = "current"
LOCAL = "local"
REMOTE = "remote"


class BranchAction(Enum):
    SWITCH = "switch"
    MERGE = "merge"
    PUSH = "push"
    DELETE_LOCAL = "delete-local"
    DELETE_REMOTE = "delete-remote"
    RENAME = "rename"


def _location(record: BranchRecord, remote: str) -> str:
    if record.local and record.remote:
        return f"local+{remote}"
    if record.local:
        return "local"
    return remote


def to_candidate(record: BranchRecord, remote: str) -> Candidate:
    flags = {flag for flag, on in ((CURRENT, record.current), (LOCAL, record.local), (REMOTE, record.remote)) if on}
    label = f"* {record.name}" if record.current else record.name
    return Candidate.from_fields(
        label,
        _location(record, remote),
        record.updated,
        key=record.name,
        flags=flags,
    )


def parse_line(line: str) -> Candidate:
    marked, location, updated = split_fields(line, expected=3, kind="branch line")
    name = marked[2:] if marked.startswith("* ") else marked
    flags: set[str] = set()
    if marked.startswith("*"):
        flags.add(CURRENT)
    if location.startswith("local"):
        flags.add(LOCAL)
    if location != "local":
        flags.add(REMOTE)
    return Candidate.from_fields(marked, location, updated, key=name, flags=flags)


def _prune_remote(session: Session, remote: str) -> None:
    """Drop refs/remotes entries deleted upstream; offline just keeps the stale view."""
    result = session.tools.git("fetch", "--prune", "--quiet", remote)
    if not result.ok:
        session.echo(f"Could not refresh '{remote}'; remote branches may be out of date.")


def list_branches(session: Session) -> list[Candidate]:
    remote = session.config.default_remote
    if session.config.prune_remote_branches:
        _prune_remote(session, remote)
    result = session.tools.git(
        "for-each-ref",
        "--sort=-committerdate",
        f"--format={BRANCH_FORMAT}",
        "refs/heads",
        f"refs/remotes/{remote}",
    )
    if not result.ok:
        raise tool_failure(result, context="Could not list branches")
    records = parse_branch_refs(result.stdout, remote=remote)
    logger.debug("Discovered %s branches remote=%s", len(records), remote)
    return [to_candidate(record, remote) for record in records]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    current = session.tools.current_branch()
    remote = session.config.default_remote
    is_current = candidate.has(CURRENT) or candidate.primary_key == current

    items = [MenuItem(BranchAction.SWITCH, "Switch to this branch")]
    if current and not is_current:
        items.append(MenuItem(BranchAction.MERGE, f"Merge into '{current}'"))
    if candidate.has(LOCAL):
        items.append(MenuItem(BranchAction.PUSH, f"Push to {remote}"))
    if candidate.has(LOCAL) and not is_current:
        items.append(MenuItem(BranchAction.DELETE_LOCAL, "Delete local branch"))
    if candidate.has(REMOTE):
        items.append(MenuItem(BranchAction.DELETE_REMOTE, f"Delete remote branch ({remote})"))
    if candidate.has(LOCAL):
        items.append(MenuItem(BranchAction.RENAME, "Rename"))
    return items


def switch(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.git("switch", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Switched to '{candidate.primary_key}'.",
        failure=f"Could not switch to '{candidate.primary_key}'.",
    )


def _ref(session: Session, candidate: Candidate) -> str:
    # Remote-only branches have no local name git can resolve.
    if candidate.has(LOCAL):
        return candidate.primary_key
    return f"{session.config.default_remote}/{candidate.primary_key}"


def merge(session: Session, candidate: Candidate) -> Outcome:
    current = session.tools.current_branch()
    if candidate.primary_key == current:
        return Outcome.rejected("A branch cannot be merged into itself.")
    ref = _ref(session, candidate)
    result = session.tools.git("merge", ref)
    return outcome_from(
        result,
        success=f"Merged '{ref}' into '{current}'.",
        failure=f"Merging '{ref}' failed.",
    )


def push(session: Session, candidate: Candidate) -> Outcome:
    if guard(session, GuardAction.PUSH, auto_proceed_if_clean=True) is not GuardDecision.PROCEED:
        return Outcome.cancelled("Push cancelled.")
    remote = session.config.default_remote
    result = session.tools.git("push", remote, candidate.primary_key)
    return outcome_from(
        result,
        success=f"Pushed '{candidate.primary_key}' to {remote}.",
        failure=f"Pushing '{candidate.primary_key}' failed.",
    )


def delete_local(session: Session, candidate: Candidate) -> Outcome:
    name = candidate.primary_key
    if candidate.has(CURRENT) or name == session.tools.current_branch():
        return Outcome.rejected("The current branch cannot be deleted.")
    answer = session.ask(f"Delete '{name}'? (d = only if merged, D = force, anything else cancels): ")
    if answer not in ("d", "D"):
        return Outcome.cancelled("Deletion cancelled.")
    result = session.tools.git("branch", f"-{answer}", name)
    return outcome_from(result, success=f"Deleted local branch '{name}'.", failure=f"Could not delete '{name}'.")


def delete_remote(session: Session, candidate: Candidate) -> Outcome:
    name = candidate.primary_key
    remote = session.config.default_remote
    if not session.confirm(f"Delete '{remote}/{name}'?"):
        return Outcome.cancelled("Deletion cancelled.")
    result = session.tools.git("push", remote, "--delete", name)
    return outcome_from(
        result,
        success=f"Deleted remote branch '{remote}/{name}'.",
        failure=f"Could not delete '{remote}/{name}'.",
    )


def rename(session: Session, candidate: Candidate) -> Outcome:
    new_name = session.ask("New branch name: ")
    if not new_name:
        return Outcome.rejected("A new branch name is required.")
    result = session.tools.git("branch", "-m", candidate.primary_key, new_name)
    return outcome_from(
        result,
        success=f"Renamed '{candidate.primary_key}' to '{new_name}'.",
        failure=f"Could not rename '{candidate.primary_key}'.",
    )


def create(session: Session) -> Outcome:
    name = session.ask("New branch name: ")
    if not name:
        return Outcome.rejected("A branch name is required.")
    base = session.ask("Start point (optional, default: current HEAD): ")
    args = ["switch", "-c", name]
    if base:
        args.append(base)
    result = session.tools.git(*args)
    return outcome_from(result, success=f"Created and switched to '{name}'.", failure=f"Could not create '{name}'.")


def preview(session: Session, candidate: Candidate) -> str:
    ref = _ref(session, candidate)
    return preview_text(session, "git", "log", "--oneline", "--graph", "--decorate", "--color=always", "-n", "50", ref)


def bulk_delete_merged(session: Session, candidate: Candidate) -> Outcome:
    if not candidate.has(LOCAL):
        return Outcome.skipped("No local branch; skipped.")
    if candidate.has(CURRENT):
        return Outcome.skipped("Current branch; skipped.")
    result = session.tools.git("branch", "-d", candidate.primary_key)
    return outcome_from(result, success="Deleted.", failure="Delete failed.")


FLOW = EntityFlow(
    name="branch",
    header="Branches (TAB: multi-select, ENTER: choose action)",
    sentinel_label="Create new branch",
    create_hint="Create a new branch and switch to it.",
    empty_notice="No branches found (a new branch can still be created).",
    lister=list_branches,
    parse=parse_line,
    menu=build_menu,
    handlers={
        BranchAction.SWITCH: switch,
        BranchAction.MERGE: merge,
        BranchAction.PUSH: push,
        BranchAction.DELETE_LOCAL: delete_local,
        BranchAction.DELETE_REMOTE: delete_remote,
        BranchAction.RENAME: rename,
    },
    create=create,
    preview=preview,
    bulk_actions=(
        BulkAction("delete-merged", "Delete local branches (merged only)", bulk_delete_merged, irreversible=True),
    ),
)
