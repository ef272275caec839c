"""GitHub repository listing and actions (via gh)."""

from __future__ import annotations

import logging as py_logging
from enum import Enum
from pathlib import PurePosixPath

from gitpick.entities.common import preview_text, show
from gitpick.flows.model import BulkAction, Candidate, EntityFlow, MenuItem, Outcome, outcome_from
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import REPO_FIELDS, RepoRecord, parse_repo_json, split_fields

logger = py_logging.getLogger(__name__)

ARCHIVED = "archived"


class RepoAction(Enum):
    CLONE = "clone"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"
    DELETE = "delete"
    BROWSE = "browse"
    VIEW = "view"


def to_candidate(record: RepoRecord) -> Candidate:
    return Candidate.from_fields(
        record.name_with_owner,
        "true" if record.archived else "false",
        record.visibility,
        record.description,
        key=record.name_with_owner,
        flags={ARCHIVED} if record.archived else (),
    )


def parse_line(line: str) -> Candidate:
    name, archived, visibility, description = split_fields(line, expected=4, kind="repository line")
    return Candidate.from_fields(
        name,
        archived,
        visibility,
        description,
        key=name,
        flags={ARCHIVED} if archived == "true" else (),
    )


def list_repositories(session: Session) -> list[Candidate]:
    session.echo("Fetching repositories...")
    result = session.tools.gh(
        "repo",
        "list",
        "--limit",
        str(session.config.repo_list_limit),
        "--json",
        REPO_FIELDS,
    )
    if not result.ok:
        raise tool_failure(result, context=f"'gh repo list' failed (exit status {result.returncode})")
    records = parse_repo_json(result.stdout)
    logger.debug("Discovered %s repositories", len(records))
    return [to_candidate(record) for record in records]


def build_menu(session: Session, candidate: Candidate) -> list[MenuItem]:
    archive = (
        MenuItem(RepoAction.UNARCHIVE, "Unarchive")
        if candidate.has(ARCHIVED)
        else MenuItem(RepoAction.ARCHIVE, "Archive")
    )
    return [
        MenuItem(RepoAction.CLONE, "Clone"),
        archive,
        MenuItem(RepoAction.DELETE, "Delete"),
        MenuItem(RepoAction.BROWSE, "Open in browser"),
        MenuItem(RepoAction.VIEW, "Show details"),
    ]


def clone(session: Session, candidate: Candidate) -> Outcome:
    default_dir = PurePosixPath(candidate.primary_key).name
    target = session.ask(f"Clone into (default: {default_dir}): ") or default_dir
    result = session.tools.gh("repo", "clone", candidate.primary_key, target)
    return outcome_from(
        result,
        success=f"Cloned '{candidate.primary_key}' into '{target}'.",
        failure=f"Cloning '{candidate.primary_key}' failed.",
    )


def _archive(session: Session, name: str) -> Outcome:
    result = session.tools.gh("repo", "archive", name, "--yes")
    return outcome_from(result, success=f"'{name}': archived.", failure=f"'{name}': archiving failed.")


def _unarchive(session: Session, name: str) -> Outcome:
    result = session.tools.gh("api", "-X", "PATCH", f"repos/{name}", "-F", "archived=false", "--silent")
    return outcome_from(result, success=f"'{name}': unarchived.", failure=f"'{name}': unarchiving failed.")


def archive(session: Session, candidate: Candidate) -> Outcome:
    return _archive(session, candidate.primary_key)


def unarchive(session: Session, candidate: Candidate) -> Outcome:
    return _unarchive(session, candidate.primary_key)


def delete(session: Session, candidate: Candidate) -> Outcome:
    if not session.confirm(f"Delete repository '{candidate.primary_key}'? This cannot be undone."):
        return Outcome.cancelled("Deletion cancelled.")
    result = session.tools.gh("repo", "delete", candidate.primary_key, "--yes")
    return outcome_from(
        result,
        success=f"'{candidate.primary_key}': deleted.",
        failure=f"'{candidate.primary_key}': deletion failed.",
    )


def browse(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "gh", "repo", "view", candidate.primary_key, "--web", failure="Could not open the browser.")


def view(session: Session, candidate: Candidate) -> Outcome:
    return show(session, "gh", "repo", "view", candidate.primary_key, failure="Could not show the repository.")


def create(session: Session) -> Outcome:
    name = session.ask("New repository name: ")
    if not name:
        return Outcome.rejected("A repository name is required; nothing was created.")
    description = session.ask("Description (optional): ")
    default_visibility = session.config.default_visibility
    visibility = session.ask(f"Visibility (public/private/internal, default: {default_visibility}): ")
    visibility = visibility.lower() or default_visibility
    if visibility not in ("public", "private", "internal"):
        return Outcome.rejected(f"Unknown visibility '{visibility}'; nothing was created.")
    result = session.tools.gh("repo", "create", name, "--description", description, f"--{visibility}")
    return outcome_from(result, success=f"Created repository '{name}'.", failure=f"Creating '{name}' failed.")


def preview(session: Session, candidate: Candidate) -> str:
    return preview_text(session, "gh", "repo", "view", candidate.primary_key)


def bulk_archive(session: Session, candidate: Candidate) -> Outcome:
    if candidate.has(ARCHIVED):
        return Outcome.skipped("Already archived; skipped.")
    return _archive(session, candidate.primary_key)


def bulk_unarchive(session: Session, candidate: Candidate) -> Outcome:
    if not candidate.has(ARCHIVED):
        return Outcome.skipped("Not archived; skipped.")
    return _unarchive(session, candidate.primary_key)


def bulk_delete(session: Session, candidate: Candidate) -> Outcome:
    result = session.tools.gh("repo", "delete", candidate.primary_key, "--yes")
    return outcome_from(result, success="Deleted.", failure="Deletion failed.")


FLOW = EntityFlow(
    name="repo",
    header="Repositories (TAB: multi-select, ENTER: choose action)",
    sentinel_label="Create new repository",
    create_hint="Create a new GitHub repository.",
    empty_notice="No repositories found (a new repository can still be created).",
    lister=list_repositories,
    parse=parse_line,
    menu=build_menu,
    handlers={
        RepoAction.CLONE: clone,
        RepoAction.ARCHIVE: archive,
        RepoAction.UNARCHIVE: unarchive,
        RepoAction.DELETE: delete,
        RepoAction.BROWSE: browse,
        RepoAction.VIEW: view,
    },
    create=create,
    preview=preview,
    bulk_actions=(
        BulkAction("archive", "Archive (skip archived)", bulk_archive),
        BulkAction("unarchive", "Unarchive (skip unarchived)", bulk_unarchive),
        BulkAction("delete", "Delete (no per-item confirmation)", bulk_delete, irreversible=True),
    ),
    needs_work_tree=False,
)
