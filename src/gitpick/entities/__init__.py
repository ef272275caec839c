"""Command registry: every entity flow, menu and stand-alone command by name."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from gitpick.flows.engine import run_entity_flow, run_menu_flow
from gitpick.flows.model import EntityFlow, MenuFlow, Outcome
from gitpick.session import Session

from . import branch, commit, diff, issue, pull_request, remote, repo, stage, stash, tag
from .commands import init_repository, show_config


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    target: EntityFlow | MenuFlow | Callable[[Session], Outcome]

    def run(self, session: Session) -> Outcome:
        if isinstance(self.target, EntityFlow):
            return run_entity_flow(session, self.target)
        if isinstance(self.target, MenuFlow):
            return run_menu_flow(session, self.target)
        outcome = self.target(session)
        session.echo(outcome.render())
        return outcome


ENTITY_FLOWS: dict[str, EntityFlow] = {
    flow.name: flow
    for flow in (
        repo.FLOW,
        branch.FLOW,
        tag.FLOW,
        stash.FLOW,
        remote.FLOW,
        pull_request.FLOW,
        issue.FLOW,
        commit.FLOW,
    )
}

COMMANDS: dict[str, Command] = {
    "repo": Command("repo", "GitHub repositories: clone, archive, delete", repo.FLOW),
    "branch": Command("branch", "Branches: switch, merge, push, delete, rename", branch.FLOW),
    "tag": Command("tag", "Tags: show, push, delete", tag.FLOW),
    "stash": Command("stash", "Stashes: pop, apply, show, drop", stash.FLOW),
    "remote": Command("remote", "Remotes: show, change URL, rename, remove", remote.FLOW),
    "pr": Command("pr", "Pull requests: view, checkout, merge, close", pull_request.FLOW),
    "issue": Command("issue", "Issues: view, comment, close, reopen", issue.FLOW),
    "commit": Command("commit", "Commits: commit, amend, show, compare", commit.FLOW),
    "stage": Command("stage", "Stage or unstage files", stage.FLOW),
    "diff": Command("diff", "Show diffs", diff.FLOW),
    "init": Command("init", "Initialise a Git repository here", init_repository),
    "config": Command("config", "Show the effective configuration", show_config),
}

__all__ = ["COMMANDS", "Command", "ENTITY_FLOWS"]
