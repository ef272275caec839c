"""Small helpers shared by the entity plug-ins."""

from __future__ import annotations

from gitpick.flows.model import Candidate, Outcome
from gitpick.session import Session
from gitpick.tools.adapter import tool_failure
from gitpick.tools.records import TicketRecord, malformed, split_fields


def show(session: Session, tool: str, *args: str, failure: str) -> Outcome:
    result = session.tools.interactive(tool, *args)
    if result.ok:
        return Outcome.done("Done.")
    return Outcome.failed(failure, result.diagnostic)


def preview_text(session: Session, tool: str, *args: str) -> str:
    result = session.tools.capture(tool, *args)
    if not result.ok:
        raise tool_failure(result)
    return result.stdout or "(no output)"


OPEN = "open"
CLOSED = "closed"
DRAFT = "draft"


def ticket_candidate(record: TicketRecord) -> Candidate:
    """PR/issue row: `#n<TAB>title<TAB>author<TAB>updated<TAB>state`."""
    state = "DRAFT" if record.draft else record.state
    return Candidate.from_fields(
        f"#{record.number}",
        record.title,
        record.author,
        record.updated,
        state,
        key=str(record.number),
        flags=_ticket_flags(state),
    )


def parse_ticket_line(line: str, *, kind: str) -> Candidate:
    number, title, author, updated, state = split_fields(line, expected=5, kind=kind)
    key = number.lstrip("#")
    if not key.isdigit():
        raise malformed(kind, line, "expected '#<number>' in the first field")
    return Candidate.from_fields(number, title, author, updated, state, key=key, flags=_ticket_flags(state))


def _ticket_flags(state: str) -> set[str]:
    if state == "DRAFT":
        return {OPEN, DRAFT}
    return {state.lower()}
