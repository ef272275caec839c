"""Tag listing and actions."""

from __future__ import annotations

import logging as py_logging
from enum import Enum

from gitpick.entities.common import preview_text, show
from gitpick.flows.model import BulkAction, Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import parse_name_list

logger = py_logging.getLogger(__name__)


class TagAction(Enum):
    SHOW = "show"
    PUSH = "push"
    DELETE_LOCAL = "delete-local"
    DELETE_REMOTE = "delete-remote"


def parse_line(line: str) -> Candidate:
    return Candidate.from_fields(line.strip(), key=line.strip())


def list_tags(session: Session) -> list[Candidate]:
    result = session.tools.git("tag", "--list", "--sort=-v:refname")
    if not result.ok:
        raise tool_failure(result, context="Could not list tags")
    return [parse_line(name) for name in parse_name_list(result.stdout)]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    remote = session.config.default_remote
    return [
        MenuItem(TagAction.SHOW, "Show details"),
        MenuItem(TagAction.PUSH, f"Push to {remote}"),
        MenuItem(TagAction.DELETE_LOCAL, "Delete local tag"),
        MenuItem(TagAction.DELETE_REMOTE, f"Delete remote tag ({remote})"),
    ]


def show_tag(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "git", "show", candidate.primary_key, failure=f"Could not show '{candidate.primary_key}'.")


def push(session: Session, candidate: Candidate) -> Outcome:
    remote = session.config.default_remote
    result = session.tools.git("push", remote, f"refs/tags/{candidate.primary_key}")
    return outcome_from(
        result,
        success=f"Pushed tag '{candidate.primary_key}' to {remote}.",
        failure=f"Pushing tag '{candidate.primary_key}' failed.",
    )


def delete_local(session: Session, candidate: Candidate) -> Outcome:
    if not session.confirm(f"Delete tag '{candidate.primary_key}'?"):
        return Outcome.cancelled("Deletion cancelled.")
    result = session.tools.git("tag", "-d", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Deleted tag '{candidate.primary_key}'.",
        failure=f"Could not delete tag '{candidate.primary_key}'.",
    )


def delete_remote(session: Session, candidate: Candidate) -> Outcome:
    remote = session.config.default_remote
    if not session.confirm(f"Delete tag '{candidate.primary_key}' from {remote}?"):
        return Outcome.cancelled("Deletion cancelled.")
    result = session.tools.git("push", remote, "--delete", f"refs/tags/{candidate.primary_key}")
    return outcome_from(
        result,
        success=f"Deleted tag '{candidate.primary_key}' from {remote}.",
        failure=f"Could not delete tag '{candidate.primary_key}' from {remote}.",
    )


def create(session: Session) -> Outcome:
    name = session.ask("New tag name (e.g. v1.0.0): ")
    if not name:
        return Outcome.rejected("Tag name required; no tag was created.")
    message = session.ask("Annotation message (empty for a lightweight tag): ")
    if message:
        result = session.tools.git("tag", "-a", name, "-m", message)
    else:
        result = session.tools.git("tag", name)
    logger.debug("Tag create name=%s annotated=%s returncode=%s", name, bool(message), result.returncode)
    return outcome_from(result, success=f"Created tag '{name}'.", failure=f"Could not create tag '{name}'.")


def preview(session: Session, candidate: Candidate) -> str:
    return preview_text(session, "git", "show", "--stat", "--color=always", candidate.primary_key)


def bulk_push(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.git("push", session.config.default_remote, f"refs/tags/{candidate.primary_key}")
    return outcome_from(result, success="Pushed.", failure="Push failed.")


def bulk_delete_local(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.git("tag", "-d", candidate.primary_key)
    return outcome_from(result, success="Deleted.", failure="Delete failed.")


FLOW = EntityFlow(
    name="tag",
    header="Tags (TAB: multi-select, ENTER: choose action)",
    sentinel_label="Create new tag",
    create_hint="Create a new tag at the current HEAD.",
    empty_notice="No tags found (a new tag can still be created).",
    lister=list_tags,
    parse=parse_line,
    menu=build_menu,
    handlers={
        TagAction.SHOW: show_tag,
        TagAction.PUSH: push,
        TagAction.DELETE_LOCAL: delete_local,
        TagAction.DELETE_REMOTE: delete_remote,
    },
    create=create,
    preview=preview,
    bulk_actions=(
        BulkAction("push", "Push tags", bulk_push),
        BulkAction("delete-local", "Delete local tags", bulk_delete_local, irreversible=True),
    ),
)
