"""Uncommitted-changes guard for commit/push-like actions, plus staging."""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass
from enum import Enum

from gitpick.flows.model import Candidate, Outcome
from gitpick.flows.selector import choose, select
from gitpick.session import Session
from gitpick.tools.records import join_fields, parse_name_list, parse_porcelain_status

logger = py_logging.getLogger(__name__)


class GuardAction(str, Enum):
    COMMIT = "commit"
    AMEND = "amend"
    PUSH = "push"


class GuardDecision(str, Enum):
    PROCEED = "proceed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class GuardState:
    work_tree_dirty: bool
    staged_dirty: bool

    @property
    def clean(self) -> bool:
        return not self.work_tree_dirty and not self.staged_dirty


def read_guard_state(session: Session) -> GuardState:
    """Fresh snapshot; callers must not reuse it across actions."""
    return GuardState(
        work_tree_dirty=session.tools.quiet_diff(cached=False),
        staged_dirty=session.tools.quiet_diff(cached=True),
    )


STAGE_NOW = "Stage changes now"
STAGE_CHANGES = "Stage changes"
CANCEL = "Cancel"


def _proceed_label(action: GuardAction) -> str:
    return f"Continue with {action.value} (staged changes only)"


def guard(session: Session, action: GuardAction, *, auto_proceed_if_clean: bool = False) -> GuardDecision:
    state = read_guard_state(session)
    logger.debug("Guard state action=%s state=%s", action.value, state)

    if state.clean:
        if auto_proceed_if_clean or action is not GuardAction.COMMIT:
            return GuardDecision.PROCEED
        session.echo("Nothing is staged for commit.")
        choice = choose(session, [STAGE_NOW, CANCEL], header="No changes to commit.")
        if choice == STAGE_NOW:
            session.echo(stage_interactively(session).render())
            session.echo(f"Run the {action.value} again to continue.")
        else:
            session.echo(f"{action.value.capitalize()} cancelled.")
        return GuardDecision.CANCELLED

    session.echo("====== Uncommitted changes ======")
    session.echo(session.tools.git("status", "--short").stdout.rstrip())
    session.echo("=================================")

    options: list[str] = []
    if state.work_tree_dirty:
        options.append(STAGE_CHANGES)
    options.append(_proceed_label(action))
    options.append(CANCEL)
    choice = choose(session, options, header="There are uncommitted changes. What now?")

    if choice == STAGE_CHANGES:
        session.echo(stage_interactively(session).render())
        session.echo(f"Run the {action.value} again to continue.")
        return GuardDecision.CANCELLED
    if choice == _proceed_label(action):
        if not state.staged_dirty:
            session.echo(f"Nothing is staged; {action.value} cancelled.")
            return GuardDecision.CANCELLED
        session.echo(f"Continuing {action.value} with the staged changes.")
        return GuardDecision.PROCEED
    session.echo(f"{action.value.capitalize()} cancelled.")
    return GuardDecision.CANCELLED


def stage_interactively(session: Session) -> Outcome:
    status = session.tools.git("status", "--porcelain=v1", "-z")
    if not status.ok:
        return Outcome.failed("Could not read the working tree status.", status.diagnostic)
    entries = [entry for entry in parse_porcelain_status(status.stdout) if entry.unstaged]
    if not entries:
        return Outcome.skipped("Nothing to stage.")

    candidates = [
        Candidate(
            primary_key=entry.path,
            display_fields=(entry.code, entry.path),
            raw_line=join_fields(entry.code.replace(" ", "."), entry.path),
        )
        for entry in entries
    ]
    selection = select(
        session,
        candidates,
        multi=True,
        header="Select paths to stage (TAB: multi-select, ENTER: confirm)",
    )
    if selection.is_empty:
        return Outcome.cancelled("No paths were selected for staging.")

    paths = [item.primary_key for item in selection.items]
    result = session.tools.git("add", "--", *paths)
    if not result.ok:
        return Outcome.failed("Staging failed.", result.diagnostic)
    logger.info("Staged paths count=%s", len(paths))
    summary = session.tools.git("status", "--short")
    return Outcome.done(f"Staged {len(paths)} path(s).", summary.stdout.rstrip())


def unstage_interactively(session: Session) -> Outcome:
    listing = session.tools.git("diff", "--name-only", "--cached", "-z")
    if not listing.ok:
        return Outcome.failed("Could not list staged paths.", listing.diagnostic)
    paths = parse_name_list(listing.stdout)
    if not paths:
        return Outcome.skipped("Nothing is staged.")

    candidates = [Candidate.from_fields(path, key=path) for path in paths]
    selection = select(
        session,
        candidates,
        multi=True,
        header="Select paths to unstage (TAB: multi-select, ENTER: confirm)",
    )
    if selection.is_empty:
        return Outcome.cancelled("No paths were selected for unstaging.")

    chosen = [item.primary_key for item in selection.items]
    if session.tools.has_head():
        result = session.tools.git("reset", "-q", "HEAD", "--", *chosen)
    else:
        result = session.tools.git("rm", "-q", "--cached", "--", *chosen)
    if not result.ok:
        return Outcome.failed("Unstaging failed.", result.diagnostic)
    summary = session.tools.git("status", "--short")
    return Outcome.done(f"Unstaged {len(chosen)} path(s).", summary.stdout.rstrip())
