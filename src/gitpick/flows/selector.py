"""Selector: turns candidate lists into Selections via the picker."""

from __future__ import annotations

import logging as py_logging
import shlex
import sys
from collections.abc import Sequence

from gitpick.errors import ExitCode, GitPickError
from gitpick.flows.model import Candidate, MenuItem, Selection
from gitpick.session import Session

logger = py_logging.getLogger(__name__)

PREVIEW_COMMAND = "__preview"


def preview_command(entity: str) -> str:
    # fzf substitutes {} with the quoted highlighted line.
    return f"{shlex.join([sys.executable, '-m', 'gitpick', PREVIEW_COMMAND, entity])} {{}}"


def select(
    session: Session,
    candidates: Sequence[Candidate],
    *,
    multi: bool = False,
    header: str = "",
    preview_entity: str | None = None,
) -> Selection:
    by_line = {candidate.raw_line: candidate for candidate in candidates}
    command = None
    if preview_entity and session.config.preview_enabled:
        command = preview_command(preview_entity)

    chosen = session.picker.pick(
        [candidate.raw_line for candidate in candidates],
        multi=multi,
        header=header,
        preview_command=command,
    )
    lines = [line for line in chosen if line.strip()]
    if not multi and len(lines) > 1:
        raise GitPickError(
            "Picker returned several lines for a single selection",
            code=ExitCode.PICKER_ERROR,
            hint="Check custom fzf options (FZF_DEFAULT_OPTS) for --multi.",
        )

    items: list[Candidate] = []
    for line in lines:
        candidate = by_line.get(line)
        if candidate is None:
            raise GitPickError(
                "Picker returned a line that was not offered",
                code=ExitCode.PICKER_ERROR,
                hint=f"Unexpected line: {line!r}",
            )
        items.append(candidate)
    logger.debug("Selection resolved size=%s header=%s", len(items), header)
    return Selection(items=tuple(items))


def choose(session: Session, labels: Sequence[str], *, header: str = "") -> str | None:
    """Single-select over plain labels; None means cancelled."""
    options = [Candidate(primary_key=label, display_fields=(label,), raw_line=label) for label in labels]
    selection = select(session, options, header=header)
    if selection.is_empty:
        return None
    return selection.items[0].primary_key


def choose_action(session: Session, items: Sequence[MenuItem], *, header: str = "") -> MenuItem | None:
    by_label = {item.label: item for item in items}
    label = choose(session, [item.label for item in items], header=header)
    if label is None:
        return None
    return by_label[label]
