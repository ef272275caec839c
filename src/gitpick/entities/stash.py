"""Stash listing and actions."""

from __future__ import annotations

from enum import Enum

from gitpick.entities.common import preview_text, show
from gitpick.flows.model import Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import STASH_FORMAT, StashRecord, malformed, parse_stash_list

_NO_CHANGES_MARKER = "No local changes to save"


class StashAction(Enum):
    POP = "pop"
    APPLY = "apply"
    SHOW = "show"
    DROP = "drop"


def to_candidate(record: StashRecord) -> Candidate:
    return Candidate.from_fields(record.ref, record.message, key=record.ref)


def parse_line(line: str) -> Candidate:
    records = parse_stash_list(line)
    if len(records) != 1:
        raise malformed("stash line", line, "expected exactly one stash entry")
    return to_candidate(records[0])


def list_stashes(session: Session) -> list[Candidate]:
    result = session.tools.git("stash", "list", f"--format={STASH_FORMAT}")
    if not result.ok:
        raise tool_failure(result, context="Could not list stashes")
    return [to_candidate(record) for record in parse_stash_list(result.stdout)]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    return [
        MenuItem(StashAction.POP, "Apply and drop (pop)"),
        MenuItem(StashAction.APPLY, "Apply only"),
        MenuItem(StashAction.SHOW, "Show patch"),
        MenuItem(StashAction.DROP, "Drop"),
    ]


def pop(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.git("stash", "pop", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Applied and dropped {candidate.primary_key}.",
        failure=f"Could not pop {candidate.primary_key}.",
    )


def apply(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.git("stash", "apply", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Applied {candidate.primary_key}.",
        failure=f"Could not apply {candidate.primary_key}.",
    )


def show_patch(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "git", "stash", "show", "-p", candidate.primary_key, failure="Could not show the stash.")


def drop(session: Session, candidate: Candidate) -> Outcome:
    if not session.confirm(f"Drop {candidate.primary_key}?"):
        return Outcome.cancelled("Drop cancelled.")
    result = session.tools.git("stash", "drop", candidate.primary_key)
    return outcome_from(
        result,
        success=f"Dropped {candidate.primary_key}.",
        failure=f"Could not drop {candidate.primary_key}.",
    )


def default_message(session: Session) -> str:
    return f"Stash-{session.clock():%Y%m%d-%H%M%S}"


def create(session: Session) -> Outcome:
    message = session.ask("Stash message (optional): ") or default_message(session)
    result = session.tools.git("stash", "push", "-m", message)
    if result.ok and _NO_CHANGES_MARKER in result.stdout:
        return Outcome.skipped("No local changes to stash.")
    return outcome_from(result, success=f"Stashed current changes as '{message}'.", failure="Stashing failed.")


def preview(session: Session, candidate: Candidate) -> str:
    return preview_text(session, "git", "stash", "show", "-p", "--color=always", candidate.primary_key)


FLOW = EntityFlow(
    name="stash",
    header="Stashes (ENTER: choose action)",
    sentinel_label="Stash current changes",
    create_hint="Save the current changes as a new stash entry.",
    empty_notice="No stashes found (current changes can still be stashed).",
    lister=list_stashes,
    parse=parse_line,
    menu=build_menu,
    handlers={
        StashAction.POP: pop,
        StashAction.APPLY: apply,
        StashAction.SHOW: show_patch,
        StashAction.DROP: drop,
    },
    create=create,
    preview=preview,
)
