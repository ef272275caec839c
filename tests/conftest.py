from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

from gitpick.config import AppConfig
from gitpick.session import Session, create_session

Response = subprocess.CompletedProcess


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)


class ScriptedRunner:
    """subprocess.run stand-in keyed on the joined argv.

    A list value is consumed one response per call; its last entry repeats.
    """

    def __init__(self, responses: dict[str, Response | list[Response]]) -> None:
        self.responses = {key: list(value) if isinstance(value, list) else value for key, value in responses.items()}
        self.calls: list[list[str]] = []
        self.kwargs: list[dict[str, object]] = []

    def __call__(self, cmd: Sequence[str], **kwargs: object) -> Response:
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        key = " ".join(cmd)
        if key not in self.responses:
            raise AssertionError(f"Unexpected command: {key}")
        response = self.responses[key]
        if isinstance(response, list):
            return response.pop(0) if len(response) > 1 else response[0]
        return response

    def ran(self, command: str) -> bool:
        return any(" ".join(call) == command for call in self.calls)

    def count(self, command: str) -> int:
        return sum(1 for call in self.calls if " ".join(call) == command)


@dataclass
class PickCall:
    lines: list[str]
    multi: bool
    header: str
    preview_command: str | None


class ScriptedPicker:
    """Each scripted step is a list of needles; an empty list cancels.

    A needle resolves to the first offered line equal to it, else the first
    line starting with it, else the first line containing it.
    """

    def __init__(self, *steps: Sequence[str]) -> None:
        self.steps = [list(step) for step in steps]
        self.calls: list[PickCall] = []

    def pick(
        self,
        lines: Sequence[str],
        *,
        multi: bool = False,
        header: str = "",
        preview_command: str | None = None,
    ) -> list[str]:
        self.calls.append(PickCall(list(lines), multi, header, preview_command))
        if not self.steps:
            raise AssertionError(f"Picker opened more often than scripted (header={header!r})")
        return [_resolve(needle, lines) for needle in self.steps.pop(0)]


def _resolve(needle: str, lines: Sequence[str]) -> str:
    for match in (
        lambda line: line == needle,
        lambda line: line.startswith(needle),
        lambda line: needle in line,
    ):
        for line in lines:
            if match(line):
                return line
    raise AssertionError(f"No offered line matches {needle!r}: {list(lines)!r}")


class ScriptedPrompter:
    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        return self.answers.pop(0)


@dataclass
class Harness:
    session: Session
    runner: ScriptedRunner
    picker: ScriptedPicker
    prompter: ScriptedPrompter
    lines: list[str] = field(default_factory=list)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45)


@pytest.fixture
def make_harness(tmp_path: Path) -> Callable[..., Harness]:
    def _make(
        responses: dict[str, Response | list[Response]] | None = None,
        *,
        picks: Sequence[Sequence[str]] = (),
        answers: Sequence[str] = (),
        config: AppConfig | None = None,
    ) -> Harness:
        runner = ScriptedRunner(responses or {})
        picker = ScriptedPicker(*picks)
        prompter = ScriptedPrompter(*answers)
        lines: list[str] = []
        session = create_session(
            config or AppConfig(preview_enabled=False),
            repo_path=tmp_path,
            runner=runner,
            picker=picker,
            prompter=prompter,
            echo=lines.append,
            config_path=tmp_path / "config.toml",
        )
        session.clock = lambda: FIXED_NOW
        return Harness(session, runner, picker, prompter, lines)

    return _make
