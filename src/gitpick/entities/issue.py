"""Issue listing and actions (via gh)."""

from __future__ import annotations

import logging as py_logging
from enum import Enum

from gitpick.entities.common import CLOSED, OPEN, parse_ticket_line, preview_text, show, ticket_candidate
from gitpick.flows.model import BulkAction, Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import ISSUE_FIELDS, parse_ticket_json

logger = py_logging.getLogger(__name__)


class IssueAction(Enum):
    VIEW = "view"
    BROWSE = "browse"
    COMMENT = "comment"
    CLOSE = "close"
    REOPEN = "reopen"


def parse_line(line: str) -> Candidate:
    return parse_ticket_line(line, kind="issue line")


def list_issues(session: Session) -> list[Candidate]:
    result = session.tools.gh(
        "issue",
        "list",
        "--state",
        "all",
        "--limit",
        str(session.config.issue_list_limit),
        "--json",
        ISSUE_FIELDS,
    )
    if not result.ok:
        raise tool_failure(result, context="Could not list issues")
    records = parse_ticket_json(result.stdout, kind="issue")
    logger.debug("Discovered %s issues", len(records))
    return [ticket_candidate(record) for record in records]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    items = [
        MenuItem(IssueAction.VIEW, "Show details"),
        MenuItem(IssueAction.BROWSE, "Open in browser"),
        MenuItem(IssueAction.COMMENT, "Add a comment"),
    ]
    if candidate.has(OPEN):
        items.append(MenuItem(IssueAction.CLOSE, "Close"))
    if candidate.has(CLOSED):
        items.append(MenuItem(IssueAction.REOPEN, "Reopen"))
    return items


def view(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "gh", "issue", "view", candidate.primary_key, failure="Could not show the issue.")


def browse(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "gh", "issue", "view", candidate.primary_key, "--web", failure="Could not open the browser.")


def comment(session: Session, candidate: Candidate) -> Outcome:
    body = session.ask(f"Comment on #{candidate.primary_key}: ")
    if not body:
        return Outcome.rejected("A comment body is required; nothing was posted.")
    result = session.tools.gh("issue", "comment", candidate.primary_key, "--body", body)
    return outcome_from(
        result,
        success=f"Commented on #{candidate.primary_key}.",
        failure=f"Could not comment on #{candidate.primary_key}.",
    )


def _close(session: Session, number: str) -> Outcome:
    result = session.tools.gh("issue", "close", number)
    return outcome_from(result, success=f"Closed #{number}.", failure=f"Could not close #{number}.")


def _reopen(session: Session, number: str) -> Outcome:
    result = session.tools.gh("issue", "reopen", number)
    return outcome_from(result, success=f"Reopened #{number}.", failure=f"Could not reopen #{number}.")


def close(session: Session, candidate: Candidate) -> Outcome:
    return _close(session, candidate.primary_key)


def reopen(session: Session, candidate: Candidate) -> Outcome:
    return _reopen(session, candidate.primary_key)


def create(session: Session) -> Outcome:
    result = session.tools.interactive("gh", "issue", "create")
    if result.ok:
        return Outcome.done("Issue created.")
    return Outcome.failed("Creating the issue failed.", result.diagnostic)


def preview(session: Session, candidate: Candidate) -> str:
    return preview_text(session, "gh", "issue", "view", candidate.primary_key, "--comments=false")


def bulk_close(session: Session, candidate: Candidate) -> Outcome:
    if not candidate.has(OPEN):
        return Outcome.skipped("Already closed; skipped.")
    return _close(session, candidate.primary_key)


def bulk_reopen(session: Session, candidate: Candidate) -> Outcome:
    if candidate.has(OPEN):
        return Outcome.skipped("Already open; skipped.")
    return _reopen(session, candidate.primary_key)


FLOW = EntityFlow(
    name="issue",
    header="Issues (TAB: multi-select, ENTER: choose action)",
    sentinel_label="Create new issue",
    create_hint="Create a new issue in this repository.",
    empty_notice="No issues found (a new issue can still be created).",
    lister=list_issues,
    parse=parse_line,
    menu=build_menu,
    handlers={
        IssueAction.VIEW: view,
        IssueAction.BROWSE: browse,
        IssueAction.COMMENT: comment,
        IssueAction.CLOSE: close,
        IssueAction.REOPEN: reopen,
    },
    create=create,
    preview=preview,
    bulk_actions=(
        BulkAction("close", "Close (skip closed)", bulk_close),
        BulkAction("reopen", "Reopen (skip open)", bulk_reopen),
    ),
)
