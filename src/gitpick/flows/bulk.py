"""Sequential, non-transactional execution of one action over many items."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from gitpick.errors import GitPickError
from gitpick.flows.model import BulkAction, Candidate, Outcome, OutcomeStatus
from gitpick.flows.selector import choose
from gitpick.session import Session

logger = py_logging.getLogger(__name__)


@dataclass
class BulkReport:
    action: str
    results: list[tuple[Candidate, Outcome]] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for _, outcome in self.results if outcome.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.DONE)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def total(self) -> int:
        return len(self.results)

    def summary(self) -> str:
        return (
            f"{self.action}: {self.total} processed, {self.succeeded} succeeded, "
            f"{self.failed} failed, {self.skipped} skipped."
        )


def execute_bulk(session: Session, candidates: Sequence[Candidate], action: BulkAction) -> BulkReport:
    """Run the action once per item; a failing item never stops the batch."""
    report = BulkReport(action=action.label)
    count = len(candidates)
    for index, candidate in enumerate(candidates, start=1):
        session.echo(f"--- [{index}/{count}] {candidate.primary_key} ---")
        try:
            outcome = action.run(session, candidate)
        except GitPickError as exc:
            outcome = Outcome.failed(exc.message, exc.hint)
        if outcome.status is OutcomeStatus.FAILED:
            logger.warning("Bulk item failed action=%s key=%s", action.key, candidate.primary_key)
        session.echo(outcome.render())
        report.results.append((candidate, outcome))
    logger.info(
        "Bulk action finished action=%s succeeded=%s failed=%s skipped=%s",
        action.key,
        report.succeeded,
        report.failed,
        report.skipped,
    )
    return report


def run_bulk(session: Session, candidates: Sequence[Candidate], actions: Sequence[BulkAction]) -> Outcome:
    count = len(candidates)
    session.echo(f"{count} items selected:")
    for candidate in candidates:
        session.echo(f"  - {candidate.primary_key}")

    by_label = {action.label: action for action in actions}
    label = choose(session, list(by_label), header=f"Bulk action for {count} items")
    if label is None:
        return Outcome.cancelled("Bulk operation cancelled.")
    action = by_label[label]

    if action.irreversible:
        word = session.config.bulk_confirm_word
        answer = session.ask(
            f"Really run '{action.label}' on all {count} items? This cannot be undone. "
            f"Type {word} to continue: "
        )
        if answer != word:
            return Outcome.cancelled(f"{action.label} aborted; nothing was changed.")

    session.echo("Starting bulk operation...")
    report = execute_bulk(session, candidates, action)
    if report.failed:
        return Outcome.failed(report.summary())
    return Outcome.done(report.summary())
