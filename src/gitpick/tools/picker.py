"""fzf-backed fuzzy picker."""

from __future__ import annotations

import logging as py_logging
import subprocess
from collections.abc import Callable, Sequence
from typing import Protocol

from gitpick.config import PickerLayout, default_picker_layout
from gitpick.errors import ExitCode, GitPickError

logger = py_logging.getLogger(__name__)

# fzf: 0 selection made, 1 no match, 130 interrupted with ESC/CTRL-C.
_CANCEL_CODES = {1, 130}


class Picker(Protocol):
    def pick(
        self,
        lines: Sequence[str],
        *,
        multi: bool = False,
        header: str = "",
        preview_command: str | None = None,
    ) -> list[str]: ...


def build_fzf_argv(
    binary: str,
    *,
    layout: PickerLayout,
    multi: bool,
    header: str,
    preview_command: str | None,
) -> list[str]:
    argv = [
        binary,
        f"--height={layout.get('height', '50%')}",
        f"--layout={layout.get('layout', 'reverse')}",
        "--delimiter=\t",
    ]
    if layout.get("border"):
        argv.append("--border")
    if multi:
        argv.append("--multi")
    if header:
        argv.append(f"--header={header}")
    if preview_command:
        argv.extend(["--preview", preview_command, "--preview-window=right:55%:wrap"])
    return argv


class FzfPicker:
    def __init__(
        self,
        binary: str = "fzf",
        *,
        layout: PickerLayout | None = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.binary = binary
        self.layout = layout or default_picker_layout()
        self._runner = runner

    def pick(
        self,
        lines: Sequence[str],
        *,
        multi: bool = False,
        header: str = "",
        preview_command: str | None = None,
    ) -> list[str]:
        argv = build_fzf_argv(
            self.binary,
            layout=self.layout,
            multi=multi,
            header=header,
            preview_command=preview_command,
        )
        logger.debug("Opening picker lines=%s multi=%s header=%s", len(lines), multi, header)
        try:
            # fzf draws on /dev/tty; only the chosen lines come back on stdout.
            completed = self._runner(
                argv,
                input="\n".join(lines) + "\n",
                stdout=subprocess.PIPE,
                encoding="utf-8",
                errors="surrogateescape",
                check=False,
            )
        except OSError as exc:
            logger.error("Picker executable not available binary=%s error=%s", self.binary, exc)
            raise GitPickError(
                f"Cannot run '{self.binary}'",
                code=ExitCode.PICKER_ERROR,
                hint="Install fzf (https://github.com/junegunn/fzf) or set GITPICK_FZF.",
            ) from exc

        if completed.returncode in _CANCEL_CODES:
            logger.debug("Picker cancelled returncode=%s", completed.returncode)
            return []
        if completed.returncode != 0:
            raise GitPickError(
                f"Picker failed with exit status {completed.returncode}",
                code=ExitCode.PICKER_ERROR,
                hint=(completed.stderr or "").strip() or "Check the fzf installation.",
            )
        return [line for line in (completed.stdout or "").split("\n") if line.strip()]
