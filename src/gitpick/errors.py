"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    GIT_ERROR = 5
    TOOL_ERROR = 6
    VALIDATION_ERROR = 7
    NOT_A_REPOSITORY = 8
    PARSE_ERROR = 9
    PICKER_ERROR = 10

    @classmethod
    def for_tool(cls, tool: str) -> ExitCode:
        """git failures get their own code; gh and anything else share TOOL_ERROR."""
        return cls.GIT_ERROR if tool == "git" else cls.TOOL_ERROR


@dataclass
class GitPickError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    # Raw stderr of the failing tool, or an install/next-step hint.
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


def user_facing_error(message: str, *, hint: str = "") -> str:
    """Render `Error: ...`; git's multi-line diagnostics continue indented."""
    lines = [line.rstrip() for line in hint.strip().splitlines() if line.strip()]
    if not lines:
        return f"Error: {message}."
    first, rest = lines[0], lines[1:]
    return "\n".join([f"Error: {message}. Next step: {first}", *(f"    {line}" for line in rest)])
