"""Parsed-record contracts for every git/gh query the flows rely on."""

from __future__ import annotations

import json
import logging as py_logging
from dataclasses import dataclass

from gitpick.errors import ExitCode, GitPickError

logger = py_logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"

BRANCH_FORMAT = "%(HEAD)%09%(refname)%09%(committerdate:relative)"
STASH_FORMAT = "%gd%x09%s"
COMMIT_FORMAT = "%h%x09%s%x09%an%x09%ad"
REPO_FIELDS = "nameWithOwner,isArchived,visibility,description"
PR_FIELDS = "number,title,author,updatedAt,state,isDraft"
ISSUE_FIELDS = "number,title,author,updatedAt,state"


@dataclass(frozen=True)
class StatusEntry:
    code: str
    path: str
    original_path: str = ""

    @property
    def staged(self) -> bool:
        return self.code[0] not in (" ", "?", "!")

    @property
    def unstaged(self) -> bool:
        return self.code[1] != " "


@dataclass(frozen=True)
class BranchRecord:
    name: str
    current: bool = False
    local: bool = False
    remote: bool = False
    updated: str = ""


@dataclass(frozen=True)
class StashRecord:
    ref: str
    message: str


@dataclass(frozen=True)
class RemoteRecord:
    name: str
    url: str


@dataclass(frozen=True)
class CommitRecord:
    sha: str
    subject: str
    author: str
    date: str


@dataclass(frozen=True)
class RepoRecord:
    name_with_owner: str
    archived: bool
    visibility: str
    description: str


@dataclass(frozen=True)
class TicketRecord:
    """A pull request or an issue row."""

    number: int
    title: str
    author: str
    updated: str
    state: str
    draft: bool = False


def malformed(kind: str, line: str, reason: str) -> GitPickError:
    logger.error("Unexpected %s output reason=%s line=%r", kind, reason, line)
    return GitPickError(
        f"Unexpected {kind} output: {reason}",
        code=ExitCode.PARSE_ERROR,
        hint=f"Offending line: {line!r}",
    )


def clean_field(value: str) -> str:
    """Flatten a value so it can live inside one TAB-separated picker line."""
    return " ".join(value.replace(FIELD_SEPARATOR, " ").split())


def join_fields(*fields: str) -> str:
    return FIELD_SEPARATOR.join(clean_field(field) for field in fields)


def split_fields(line: str, *, expected: int, kind: str) -> list[str]:
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) != expected:
        raise malformed(kind, line, f"expected {expected} fields, got {len(fields)}")
    return fields


def parse_porcelain_status(raw: str) -> list[StatusEntry]:
    """Parse `git status --porcelain=v1 -z`."""
    entries: list[StatusEntry] = []
    chunks = raw.split("\0")
    index = 0
    while index < len(chunks):
        chunk = chunks[index]
        index += 1
        if not chunk:
            continue
        if len(chunk) < 4 or chunk[2] != " ":
            raise malformed("status", chunk, "expected 'XY path'")
        code, path = chunk[:2], chunk[3:]
        original = ""
        if code[0] in ("R", "C") or code[1] in ("R", "C"):
            if index >= len(chunks) or not chunks[index]:
                raise malformed("status", chunk, "rename without original path")
            original = chunks[index]
            index += 1
        entries.append(StatusEntry(code=code, path=path, original_path=original))
    return entries


def parse_name_list(raw: str) -> list[str]:
    """Parse NUL- or newline-separated path/name lists."""
    separator = "\0" if "\0" in raw else "\n"
    return [item for item in (part.strip("\n") for part in raw.split(separator)) if item.strip()]


def parse_branch_refs(raw: str, *, remote: str) -> list[BranchRecord]:
    """Merge local heads and `<remote>/*` refs into one record per branch name."""
    remote_prefix = f"refs/remotes/{remote}/"
    order: list[str] = []
    merged: dict[str, BranchRecord] = {}
    for line in raw.splitlines():
        if not line.strip():
            continue
        head, refname, updated = split_fields(line, expected=3, kind="branch")
        if refname.startswith("refs/heads/"):
            name = refname[len("refs/heads/") :]
            record = BranchRecord(name=name, current=head.strip() == "*", local=True, updated=updated)
        elif refname.startswith(remote_prefix):
            name = refname[len(remote_prefix) :]
            if name == "HEAD":
                continue
            record = BranchRecord(name=name, remote=True, updated=updated)
        else:
            raise malformed("branch", line, f"unexpected ref {refname}")
        if not name:
            raise malformed("branch", line, "empty branch name")
        existing = merged.get(name)
        if existing is None:
            order.append(name)
            merged[name] = record
            continue
        merged[name] = BranchRecord(
            name=name,
            current=existing.current or record.current,
            local=existing.local or record.local,
            remote=existing.remote or record.remote,
            updated=existing.updated or record.updated,
        )
    return [merged[name] for name in order]


def parse_stash_list(raw: str) -> list[StashRecord]:
    records: list[StashRecord] = []
    for line in raw.splitlines():
        if not line.strip():
            continue
        ref, _, message = line.partition(FIELD_SEPARATOR)
        if not ref.startswith("stash@{") or not ref.endswith("}"):
            raise malformed("stash", line, "expected stash@{n}")
        records.append(StashRecord(ref=ref, message=message))
    return records


def parse_remote_list(raw: str) -> list[RemoteRecord]:
    """Parse `git remote -v`, keeping the fetch URL of each remote."""
    urls: dict[str, str] = {}
    for line in raw.splitlines():
        if not line.strip():
            continue
        name, _, rest = line.partition(FIELD_SEPARATOR)
        url, _, kind = rest.rpartition(" ")
        if not name or not url or kind not in ("(fetch)", "(push)"):
            raise malformed("remote", line, "expected 'name<TAB>url (fetch|push)'")
        if kind == "(fetch)" or name not in urls:
            urls[name] = url
    return [RemoteRecord(name=name, url=url) for name, url in urls.items()]


def parse_commit_log(raw: str) -> list[CommitRecord]:
    records: list[CommitRecord] = []
    for line in raw.splitlines():
        if not line.strip():
            continue
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) < 4:
            raise malformed("log", line, f"expected 4 fields, got {len(fields)}")
        # Subjects may carry literal TABs; hash, author and date never do.
        sha, author, date = fields[0], fields[-2], fields[-1]
        subject = FIELD_SEPARATOR.join(fields[1:-2])
        if not sha:
            raise malformed("log", line, "missing commit hash")
        records.append(CommitRecord(sha=sha, subject=subject, author=author, date=date))
    return records


def _load_json_list(raw: str, *, kind: str) -> list[dict[str, object]]:
    try:
        payload = json.loads(raw or "[]")
    except json.JSONDecodeError as exc:
        raise malformed(kind, raw[:80], "not valid JSON") from exc
    if not isinstance(payload, list):
        raise malformed(kind, raw[:80], "expected a JSON list")
    entries: list[dict[str, object]] = []
    for entry in payload:
        if not isinstance(entry, dict):
            raise malformed(kind, repr(entry), "expected a JSON object")
        entries.append(entry)
    return entries


def _require(entry: dict[str, object], key: str, expected: type, *, kind: str) -> object:
    value = entry.get(key)
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise malformed(kind, json.dumps(entry)[:120], f"field '{key}' missing or not {expected.__name__}")
    return value


def _author_login(entry: dict[str, object], *, kind: str) -> str:
    author = entry.get("author")
    if author is None:
        return "ghost"
    if not isinstance(author, dict) or not isinstance(author.get("login"), str):
        raise malformed(kind, json.dumps(entry)[:120], "field 'author.login' missing")
    return str(author["login"])


def parse_repo_json(raw: str) -> list[RepoRecord]:
    records: list[RepoRecord] = []
    for entry in _load_json_list(raw, kind="repository"):
        name = _require(entry, "nameWithOwner", str, kind="repository")
        archived = _require(entry, "isArchived", bool, kind="repository")
        visibility = entry.get("visibility") or "-"
        description = entry.get("description") or "-"
        records.append(
            RepoRecord(
                name_with_owner=str(name),
                archived=bool(archived),
                visibility=str(visibility),
                description=str(description),
            )
        )
    return records


def parse_ticket_json(raw: str, *, kind: str) -> list[TicketRecord]:
    records: list[TicketRecord] = []
    for entry in _load_json_list(raw, kind=kind):
        number = _require(entry, "number", int, kind=kind)
        title = _require(entry, "title", str, kind=kind)
        state = _require(entry, "state", str, kind=kind)
        updated = str(entry.get("updatedAt") or "")
        records.append(
            TicketRecord(
                number=int(number),
                title=str(title),
                author=_author_login(entry, kind=kind),
                updated=updated[:10],
                state=str(state).upper(),
                draft=entry.get("isDraft") is True,
            )
        )
    return records
