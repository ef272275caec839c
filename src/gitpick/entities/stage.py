"""Staging area menu."""

from __future__ import annotations

from enum import Enum

from gitpick.entities.common import show
from gitpick.flows.guard import stage_interactively, unstage_interactively
from gitpick.flows.model import MenuFlow, MenuItem, Outcome
from gitpick.session import Session


class StageAction(Enum):
    ADD = "add"
    UNSTAGE = "unstage"
    STATUS = "status"
    STAGED_DIFF = "staged-diff"


def status(session: Session) -> Outcome:
    result = session.tools.git("status", "--short", "--branch")
    if not result.ok:
        return Outcome.failed("Could not read the status.", result.diagnostic)
    return Outcome.done("Current status:", result.stdout.rstrip() or "(clean)")


def staged_diff(session: Session) -> Outcome:
    return show(session, "git", "diff", "--cached", failure="Could not show the staged diff.")


FLOW = MenuFlow(
    name="stage",
    header="Staging (ENTER: choose action)",
    items=(
        MenuItem(StageAction.ADD, "Stage files"),
        MenuItem(StageAction.UNSTAGE, "Unstage files"),
        MenuItem(StageAction.STATUS, "Show status"),
        MenuItem(StageAction.STAGED_DIFF, "Show staged diff"),
    ),
    handlers={
        StageAction.ADD: stage_interactively,
        StageAction.UNSTAGE: unstage_interactively,
        StageAction.STATUS: status,
        StageAction.STAGED_DIFF: staged_diff,
    },
)
