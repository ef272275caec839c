"""Stand-alone commands that need neither a listing nor a work tree."""

from __future__ import annotations

import logging as py_logging

from gitpick.config import get_config_path, save_config
from gitpick.flows.model import Outcome, outcome_from
from gitpick.session import Session

logger = py_logging.getLogger(__name__)


def init_repository(session: Session) -> Outcome:
    if session.tools.inside_work_tree():
        if not session.confirm("Already inside a Git repository. Re-initialise it?"):
            return Outcome.cancelled("Initialisation cancelled.")
    result = session.tools.git("init")
    return outcome_from(
        result,
        success=f"Initialised a Git repository in {session.repo_path}.",
        failure="git init failed.",
    )


def describe_config(session: Session) -> list[str]:
    config = session.config
    lines = [f"{name} = {value!r}" for name, value in config.model_dump(exclude={"picker", "aliases"}).items()]
    lines.extend(f"picker.{key} = {value!r}" for key, value in config.picker.items())
    lines.extend(f"aliases.{alias} = {target!r}" for alias, target in sorted(config.aliases.items()))
    return lines


def show_config(session: Session) -> Outcome:
    path = session.config_path or get_config_path()
    notice = f"Configuration file: {path}"
    if not path.exists():
        try:
            written = save_config(session.config, path)
        except OSError as exc:
            logger.warning("Could not write default configuration path=%s error=%s", path, exc)
            notice = f"Configuration file: {path} (missing; could not create it: {exc})"
        else:
            notice = f"Wrote default configuration to {written}"
    return Outcome.done(notice, "\n".join(describe_config(session)))
