"""Value types shared by the interaction-flow engine and the entity plug-ins."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from gitpick.tools.adapter import ToolResult
from gitpick.tools.records import clean_field, join_fields

if TYPE_CHECKING:
    from gitpick.session import Session

SENTINEL_MARK = "[+] "


class OutcomeStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"
    REJECTED = "rejected"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Outcome:
    status: OutcomeStatus
    message: str
    detail: str = ""

    @classmethod
    def done(cls, message: str, detail: str = "") -> Outcome:
        return cls(OutcomeStatus.DONE, message, detail)

    @classmethod
    def failed(cls, message: str, detail: str = "") -> Outcome:
        return cls(OutcomeStatus.FAILED, message, detail)

    @classmethod
    def rejected(cls, message: str) -> Outcome:
        return cls(OutcomeStatus.REJECTED, message)

    @classmethod
    def skipped(cls, message: str) -> Outcome:
        return cls(OutcomeStatus.SKIPPED, message)

    @classmethod
    def cancelled(cls, message: str = "Cancelled.") -> Outcome:
        return cls(OutcomeStatus.CANCELLED, message)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.DONE

    def render(self) -> str:
        if self.detail:
            return f"{self.message}\n{self.detail}"
        return self.message


def outcome_from(result: ToolResult, *, success: str, failure: str) -> Outcome:
    if result.ok:
        return Outcome.done(success, result.stdout.rstrip())
    return Outcome.failed(failure, result.diagnostic)


@dataclass(frozen=True)
class Candidate:
    primary_key: str
    display_fields: tuple[str, ...]
    raw_line: str
    flags: frozenset[str] = frozenset()
    sentinel: bool = False

    @classmethod
    def from_fields(
        cls,
        *fields: str,
        key: str | None = None,
        flags: Iterable[str] = (),
    ) -> Candidate:
        display = tuple(clean_field(value) for value in fields)
        return cls(
            primary_key=key if key is not None else display[0],
            display_fields=display,
            raw_line=join_fields(*fields),
            flags=frozenset(flags),
        )

    def has(self, flag: str) -> bool:
        return flag in self.flags


def sentinel_candidate(label: str) -> Candidate:
    text = label if label.startswith(SENTINEL_MARK) else f"{SENTINEL_MARK}{label}"
    return Candidate(primary_key="", display_fields=(text,), raw_line=text, sentinel=True)


@dataclass(frozen=True)
class Selection:
    items: tuple[Candidate, ...] = ()

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def has_sentinel(self) -> bool:
        return any(item.sentinel for item in self.items)


@dataclass(frozen=True)
class MenuItem:
    action: Enum
    label: str


Handler = Callable[["Session", Candidate], Outcome]
MenuHandler = Callable[["Session"], Outcome]


@dataclass(frozen=True)
class BulkAction:
    key: str
    label: str
    run: Handler
    irreversible: bool = False


@dataclass(frozen=True)
class EntityFlow:
    """list -> select -> dispatch plug-in for one entity type."""

    name: str
    header: str
    sentinel_label: str
    create_hint: str
    empty_notice: str
    lister: Callable[[Session], list[Candidate]]
    parse: Callable[[str], Candidate]
    menu: Callable[[Session, Candidate], list[MenuItem]]
    handlers: Mapping[Enum, Handler]
    create: MenuHandler
    preview: Callable[[Session, Candidate], str] | None = None
    bulk_actions: Sequence[BulkAction] = ()
    needs_work_tree: bool = True

    @property
    def multi(self) -> bool:
        return bool(self.bulk_actions)


@dataclass(frozen=True)
class MenuFlow:
    """Fixed action menu without an entity listing."""

    name: str
    header: str
    items: Sequence[MenuItem]
    handlers: Mapping[Enum, MenuHandler]
    needs_work_tree: bool = True
