"""Commit history listing, commit creation, amend and compare."""

from __future__ import annotations

import logging as py_logging
from enum import Enum

from gitpick.entities.common import preview_text, show
from gitpick.flows.guard import GuardAction, GuardDecision, guard
from gitpick.flows.model import Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.flows.selector import select
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import COMMIT_FORMAT, CommitRecord, parse_commit_log, split_fields

logger = py_logging.getLogger(__name__)

HEAD = "head"
_HEAD_MARK = "* "


class CommitAction(Enum):
    SHOW = "show"
    AMEND = "amend"
    COMPARE = "compare"


def to_candidate(record: CommitRecord, *, head: bool = False) -> Candidate:
    label = f"{_HEAD_MARK}{record.sha}" if head else record.sha
    return Candidate.from_fields(
        label,
        record.subject,
        record.author,
        record.date,
        key=record.sha,
        flags={HEAD} if head else (),
    )


def parse_line(line: str) -> Candidate:
    label, subject, author, date = split_fields(line, expected=4, kind="commit line")
    head = label.startswith(_HEAD_MARK)
    sha = label[len(_HEAD_MARK) :] if head else label
    return Candidate.from_fields(label, subject, author, date, key=sha, flags={HEAD} if head else ())


def list_commits(session: Session) -> list[Candidate]:
    if not session.tools.has_head():
        return []
    result = session.tools.git(
        "log",
        "-n",
        str(session.config.log_limit),
        f"--format={COMMIT_FORMAT}",
        "--date=short",
    )
    if not result.ok:
        raise tool_failure(result, context="Could not read the commit history")
    records = parse_commit_log(result.stdout)
    logger.debug("Discovered %s commits limit=%s", len(records), session.config.log_limit)
    return [to_candidate(record, head=index == 0) for index, record in enumerate(records)]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    items = [MenuItem(CommitAction.SHOW, "Show commit")]
    if candidate.has(HEAD):
        items.append(MenuItem(CommitAction.AMEND, "Amend (HEAD only)"))
    items.append(MenuItem(CommitAction.COMPARE, "Compare with another commit"))
    return items


def show_commit(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "git", "show", candidate.primary_key, failure=f"Could not show {candidate.primary_key}.")


def amend(session: Session, candidate: Candidate) -> Outcome:
    if not candidate.has(HEAD):
        return Outcome.rejected("Only the HEAD commit can be amended.")
    if guard(session, GuardAction.AMEND, auto_proceed_if_clean=True) is not GuardDecision.PROCEED:
        return Outcome.cancelled("Amend cancelled.")
    message = session.ask("New commit message (empty keeps the current one): ")
    if message:
        result = session.tools.git("commit", "--amend", "-m", message)
    else:
        result = session.tools.git("commit", "--amend", "--no-edit")
    return outcome_from(result, success="Amended the HEAD commit.", failure="Amending failed.")


def compare(session: Session, candidate: Candidate) -> Outcome:
    others = [other for other in list_commits(session) if other.primary_key != candidate.primary_key]
    if not others:
        return Outcome.skipped("No other commit to compare with.")
    selection = select(session, others, header=f"Compare {candidate.primary_key} with...")
    if selection.is_empty:
        return Outcome.cancelled("Comparison cancelled.")
    other = selection.items[0].primary_key
    return show(
        session,
        "git",
        "diff",
        other,
        candidate.primary_key,
        failure=f"Could not compare {other} and {candidate.primary_key}.",
    )


def create(session: Session) -> Outcome:
    if guard(session, GuardAction.COMMIT) is not GuardDecision.PROCEED:
        return Outcome.cancelled("Commit cancelled.")
    message = session.ask("Commit message: ")
    if not message:
        return Outcome.rejected("A commit message is required; nothing was committed.")
    result = session.tools.git("commit", "-m", message)
    return outcome_from(result, success="Committed the staged changes.", failure="Commit failed.")


def preview(session: Session, candidate: Candidate) -> str:
    return preview_text(session, "git", "show", "--stat", "--color=always", candidate.primary_key)


FLOW = EntityFlow(
    name="commit",
    header="Commits (ENTER: choose action)",
    sentinel_label="Commit staged changes",
    create_hint="Commit the staged changes (the uncommitted-changes check runs first).",
    empty_notice="No commits yet (the first commit can still be created).",
    lister=list_commits,
    parse=parse_line,
    menu=build_menu,
    handlers={
        CommitAction.SHOW: show_commit,
        CommitAction.AMEND: amend,
        CommitAction.COMPARE: compare,
    },
    create=create,
    preview=preview,
)
