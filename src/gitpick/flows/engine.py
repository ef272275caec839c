"""Generic list -> select -> dispatch engine shared by every entity flow."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable

from gitpick.errors import ExitCode, GitPickError
from gitpick.flows.bulk import run_bulk
from gitpick.flows.model import (
    SENTINEL_MARK,
    Candidate,
    EntityFlow,
    MenuFlow,
    Outcome,
    Selection,
    sentinel_candidate,
)
from gitpick.flows.selector import choose_action, select
from gitpick.session import Session

logger = py_logging.getLogger(__name__)

CREATE_ALONE_MESSAGE = "Creation must be selected alone; it cannot be combined with other items."


def list_candidates(session: Session, flow: EntityFlow) -> list[Candidate]:
    """Return the sentinel followed by the flow's entities.

    Tool failures propagate as GitPickError; an empty listing is only a notice.
    """
    records = flow.lister(session)
    if not records:
        session.echo(flow.empty_notice)

    sentinel = sentinel_candidate(flow.sentinel_label)
    seen: set[str] = set()
    for record in records:
        if record.raw_line == sentinel.raw_line or record.raw_line.startswith(SENTINEL_MARK):
            raise GitPickError(
                f"{flow.name} entry collides with the creation entry",
                code=ExitCode.PARSE_ERROR,
                hint=f"Offending line: {record.raw_line!r}",
            )
        if record.primary_key in seen:
            raise GitPickError(
                f"Duplicate {flow.name} entry: {record.primary_key}",
                code=ExitCode.PARSE_ERROR,
                hint="The listing must identify every entry uniquely.",
            )
        seen.add(record.primary_key)
    logger.debug("Listed candidates flow=%s count=%s", flow.name, len(records))
    return [sentinel, *records]


def _guarded(flow_name: str, action: object, call: Callable[[], Outcome]) -> Outcome:
    try:
        return call()
    except GitPickError as exc:
        logger.warning("Handler failed flow=%s action=%s error=%s", flow_name, action, exc.message)
        return Outcome.failed(exc.message, exc.hint)


def dispatch(session: Session, flow: EntityFlow, selection: Selection) -> Outcome:
    if selection.is_empty:
        outcome = Outcome.cancelled()
    elif selection.has_sentinel:
        if selection.size > 1:
            outcome = Outcome.rejected(CREATE_ALONE_MESSAGE)
        else:
            outcome = _guarded(flow.name, "create", lambda: flow.create(session))
            session.echo(outcome.render())
            session.echo(f"Hint: run 'gitpick {flow.name}' again to refresh the list.")
            return outcome
    elif selection.size == 1:
        outcome = _dispatch_single(session, flow, selection.items[0])
    elif not flow.bulk_actions:
        outcome = Outcome.rejected(f"{flow.name} actions apply to one item at a time; select a single entry.")
    else:
        outcome = run_bulk(session, list(selection.items), flow.bulk_actions)

    session.echo(outcome.render())
    return outcome


def _dispatch_single(session: Session, flow: EntityFlow, candidate: Candidate) -> Outcome:
    items = flow.menu(session, candidate)
    item = choose_action(session, items, header=f"'{candidate.primary_key}': choose an action")
    if item is None:
        return Outcome.cancelled()
    handler = flow.handlers[item.action]
    logger.debug("Dispatching flow=%s action=%s key=%s", flow.name, item.action, candidate.primary_key)
    return _guarded(flow.name, item.action, lambda: handler(session, candidate))


def run_entity_flow(session: Session, flow: EntityFlow) -> Outcome:
    if flow.needs_work_tree:
        session.require_work_tree()
    candidates = list_candidates(session, flow)
    selection = select(
        session,
        candidates,
        multi=flow.multi,
        header=flow.header,
        preview_entity=flow.name if flow.preview is not None else None,
    )
    return dispatch(session, flow, selection)


def run_menu_flow(session: Session, flow: MenuFlow) -> Outcome:
    if flow.needs_work_tree:
        session.require_work_tree()
    item = choose_action(session, flow.items, header=flow.header)
    if item is None:
        outcome = Outcome.cancelled()
    else:
        handler = flow.handlers[item.action]
        outcome = _guarded(flow.name, item.action, lambda: handler(session))
    session.echo(outcome.render())
    return outcome


def render_preview(session: Session, flow: EntityFlow, raw_line: str) -> str:
    """Preview text for one highlighted line; never raises."""
    if raw_line == sentinel_candidate(flow.sentinel_label).raw_line:
        return flow.create_hint
    if flow.preview is None:
        return raw_line
    try:
        candidate = flow.parse(raw_line)
        return flow.preview(session, candidate)
    except GitPickError as exc:
        logger.debug("Preview failed flow=%s line=%r error=%s", flow.name, raw_line, exc)
        return f"Preview unavailable: {exc.hint or exc.message}"
