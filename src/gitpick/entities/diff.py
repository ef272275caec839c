"""Working-tree diff menu."""

from __future__ import annotations

from enum import Enum

from gitpick.entities.commit import list_commits
from gitpick.entities.common import show
from gitpick.flows.model import Candidate, MenuFlow, MenuItem, Outcome
from gitpick.flows.selector import select
from gitpick.session import Session
from gitpick.tools.records import join_fields, parse_porcelain_status


class DiffAction(Enum):
    STAGED = "staged"
    UNSTAGED = "unstaged"
    FILE = "file"
    COMMITS = "commits"


def staged(session: Session) -> Outcome:
    return show(session, "git", "diff", "--cached", failure="Could not show the staged diff.")


def unstaged(session: Session) -> Outcome:
    return show(session, "git", "diff", failure="Could not show the unstaged diff.")


def one_file(session: Session) -> Outcome:
    result = session.tools.git("status", "--porcelain=v1", "-z")
    if not result.ok:
        return Outcome.failed("Could not read the working tree status.", result.diagnostic)
    entries = [entry for entry in parse_porcelain_status(result.stdout) if entry.code != "??"]
    if not entries:
        return Outcome.skipped("No tracked file has changes.")

    candidates = [
        Candidate(
            primary_key=entry.path,
            display_fields=(entry.code, entry.path),
            raw_line=join_fields(entry.code.replace(" ", "."), entry.path),
        )
        for entry in entries
    ]
    selection = select(session, candidates, header="Select a file to diff")
    if selection.is_empty:
        return Outcome.cancelled()
    path = selection.items[0].primary_key
    base = "HEAD" if session.tools.has_head() else "--cached"
    return show(session, "git", "diff", base, "--", path, failure=f"Could not diff '{path}'.")


def between_commits(session: Session) -> Outcome:
    commits = list_commits(session)
    if len(commits) < 2:
        return Outcome.skipped("At least two commits are needed for a comparison.")
    first = select(session, commits, header="Select the older commit")
    if first.is_empty:
        return Outcome.cancelled()
    older = first.items[0].primary_key
    remaining = [commit for commit in commits if commit.primary_key != older]
    second = select(session, remaining, header=f"Compare {older} with...")
    if second.is_empty:
        return Outcome.cancelled()
    newer = second.items[0].primary_key
    return show(session, "git", "diff", older, newer, failure=f"Could not compare {older} and {newer}.")


FLOW = MenuFlow(
    name="diff",
    header="Diff (ENTER: choose action)",
    items=(
        MenuItem(DiffAction.STAGED, "Staged changes"),
        MenuItem(DiffAction.UNSTAGED, "Unstaged changes"),
        MenuItem(DiffAction.FILE, "One changed file"),
        MenuItem(DiffAction.COMMITS, "Between two commits"),
    ),
    handlers={
        DiffAction.STAGED: staged,
        DiffAction.UNSTAGED: unstaged,
        DiffAction.FILE: one_file,
        DiffAction.COMMITS: between_commits,
    },
)
