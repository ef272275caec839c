"""Pull request listing and actions (via gh)."""

from __future__ import annotations

from enum import Enum

from gitpick.entities.common import CLOSED, DRAFT, OPEN, parse_ticket_line, preview_text, show, ticket_candidate
from gitpick.flows.model import Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import PR_FIELDS, parse_ticket_json


class PullRequestAction(Enum):
    VIEW = "view"
    CHECKOUT = "checkout"
    BROWSE = "browse"
    READY = "ready"
    CLOSE = "close"
    MERGE = "merge"
    REOPEN = "reopen"


def parse_line(line: str) -> Candidate:
    return parse_ticket_line(line, kind="pull request line")


def list_pull_requests(session: Session) -> list[Candidate]:
    result = session.tools.gh(
        "pr",
        "list",
        "--state",
        "all",
        "--limit",
        str(session.config.issue_list_limit),
        "--json",
        PR_FIELDS,
    )
    if not result.ok:
        raise tool_failure(result, context="Could not list pull requests")
    return [ticket_candidate(record) for record in parse_ticket_json(result.stdout, kind="pull request")]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    items = [
        MenuItem(PullRequestAction.VIEW, "Show details"),
        MenuItem(PullRequestAction.CHECKOUT, "Check out locally"),
        MenuItem(PullRequestAction.BROWSE, "Open in browser"),
    ]
    if candidate.has(DRAFT):
        items.append(MenuItem(PullRequestAction.READY, "Mark ready for review"))
    if candidate.has(OPEN):
        items.append(MenuItem(PullRequestAction.CLOSE, "Close"))
        items.append(MenuItem(PullRequestAction.MERGE, "Merge"))
    if candidate.has(CLOSED):
        items.append(MenuItem(PullRequestAction.REOPEN, "Reopen"))
    return items


def view(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "gh", "pr", "view", candidate.primary_key, failure="Could not show the pull request.")


def checkout(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.gh("pr", "checkout", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Checked out pull request #{candidate.primary_key}.",
        failure=f"Could not check out #{candidate.primary_key}.",
    )


def browse(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "gh", "pr", "view", candidate.primary_key, "--web", failure="Could not open the browser.")


def ready(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.gh("pr", "ready", candidate.primary_key)
    return outcome_from(
        result,
        success=f"#{candidate.primary_key} is ready for review.",
        failure=f"Could not mark #{candidate.primary_key} ready.",
    )


def close(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.gh("pr", "close", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Closed #{candidate.primary_key}.",
        failure=f"Could not close #{candidate.primary_key}.",
    )


def merge(session: Session, candidate: Candidate) -> Outcome:
    # gh asks for the merge method itself.
    result = session.tools.interactive("gh", "pr", "merge", candidate.primary_key)
    if result.ok:
        return Outcome.done(f"Merged #{candidate.primary_key}.")
    return Outcome.failed(f"Could not merge #{candidate.primary_key}.", result.diagnostic)


def reopen(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.gh("pr", "reopen", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Reopened #{candidate.primary_key}.",
        failure=f"Could not reopen #{candidate.primary_key}.",
    )


def create(session: Session) -> Outcome:
    result = session.tools.interactive("gh", "pr", "create")
    if result.ok:
        return Outcome.done("Pull request created.")
    return Outcome.failed("Creating the pull request failed.", result.diagnostic)


def preview(session: Session, candidate: Candidate) -> str:
    return preview_text(session, "gh", "pr", "view", candidate.primary_key, "--comments=false")


FLOW = EntityFlow(
    name="pr",
    header="Pull requests (ENTER: choose action)",
    sentinel_label="Create new pull request",
    create_hint="Create a new pull request from the current branch.",
    empty_notice="No pull requests found (a new pull request can still be created).",
    lister=list_pull_requests,
    parse=parse_line,
    menu=build_menu,
    handlers={
        PullRequestAction.VIEW: view,
        PullRequestAction.CHECKOUT: checkout,
        PullRequestAction.BROWSE: browse,
        PullRequestAction.READY: ready,
        PullRequestAction.CLOSE: close,
        PullRequestAction.MERGE: merge,
        PullRequestAction.REOPEN: reopen,
    },
    create=create,
    preview=preview,
)
