"""Remote listing and actions."""

from __future__ import annotations

from enum import Enum

from gitpick.entities.common import show
from gitpick.flows.model import Candidate, EntityFlow, MenuItem, Outcome
from gitpick.session import Session
from gitpick.tools.adapter import ToolResult, tool_failure
from gitpick.tools.records import RemoteRecord, parse_remote_list, split_fields


class RemoteAction(Enum):
    SHOW = "show"
    SET_URL = "set-url"
    RENAME = "rename"
    REMOVE = "remove"


def to_candidate(record: RemoteRecord) -> Candidate:
    return Candidate.from_fields(record.name, record.url, key=record.name)


def parse_line(line: str) -> Candidate:
    name, url = split_fields(line, expected=2, kind="remote line")
    return Candidate.from_fields(name, url, key=name)


def list_remotes(session: Session) -> list[Candidate]:
    result = session.tools.git("remote", "-v")
    if not result.ok:
        raise tool_failure(result, context="Could not list remotes")
    return [to_candidate(record) for record in parse_remote_list(result.stdout)]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    return [
        MenuItem(RemoteAction.SHOW, "Show details"),
        MenuItem(RemoteAction.SET_URL, "Change URL"),
        MenuItem(RemoteAction.RENAME, "Rename"),
        MenuItem(RemoteAction.REMOVE, "Remove"),
    ]


def _report(session: Session, result: ToolResult, *, success: str, failure: str) -> Outcome:
    if not result.ok:
        return Outcome.failed(failure, result.diagnostic)
    remotes = session.tools.git("remote", "-v")
    return Outcome.done(success, f"Remotes now:\n{remotes.stdout.rstrip() or '(none)'}")


def show_remote(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "git", "remote", "show", candidate.primary_key, failure="Could not show the remote.")


def set_url(session: Session, candidate: Candidate) -> Outcome:
    url = session.ask(f"New URL for '{candidate.primary_key}': ")
    if not url:
        return Outcome.rejected("A URL is required; nothing was changed.")
    result = session.tools.git("remote", "set-url", candidate.primary_key, url)
    return _report(
        session,
        result,
        success=f"Updated '{candidate.primary_key}' to {url}.",
        failure=f"Could not update '{candidate.primary_key}'.",
    )


def rename(session: Session, candidate: Candidate) -> Outcome:
    new_name = session.ask(f"New name for '{candidate.primary_key}': ")
    if not new_name:
        return Outcome.rejected("A remote name is required; nothing was changed.")
    result = session.tools.git("remote", "rename", candidate.primary_key, new_name)
    return _report(
        session,
        result,
        success=f"Renamed '{candidate.primary_key}' to '{new_name}'.",
        failure=f"Could not rename '{candidate.primary_key}'.",
    )


def remove(session: Session, candidate: Candidate) -> Outcome:
    if not session.confirm(f"Remove remote '{candidate.primary_key}'?"):
        return Outcome.cancelled("Removal cancelled.")
    result = session.tools.git("remote", "remove", candidate.primary_key)
    return _report(
        session,
        result,
        success=f"Removed remote '{candidate.primary_key}'.",
        failure=f"Could not remove '{candidate.primary_key}'.",
    )


def create(session: Session) -> Outcome:
    name = session.ask(f"Remote name (e.g. {session.config.default_remote}): ")
    if not name:
        return Outcome.rejected("A remote name is required; nothing was added.")
    url = session.ask("URL: ")
    if not url:
        return Outcome.rejected("A URL is required; nothing was added.")
    result = session.tools.git("remote", "add", name, url)
    return _report(session, result, success=f"Added remote '{name}' -> {url}.", failure=f"Could not add '{name}'.")


def preview(session: Session, candidate: Candidate) -> str:
    result = session.tools.git("remote", "get-url", "--all", candidate.primary_key)
    if not result.ok:
        raise tool_failure(result)
    return f"{candidate.primary_key}\n{result.stdout}"


FLOW = EntityFlow(
    name="remote",
    header="Remotes (ENTER: choose action)",
    sentinel_label="Add remote",
    create_hint="Add a new remote (name and URL).",
    empty_notice="No remotes configured (a new remote can still be added).",
    lister=list_remotes,
    parse=parse_line,
    menu=build_menu,
    handlers={
        RemoteAction.SHOW: show_remote,
        RemoteAction.SET_URL: set_url,
        RemoteAction.RENAME: rename,
        RemoteAction.REMOVE: remove,
    },
    create=create,
    preview=preview,
)
