"""XDG config loading/saving."""

from __future__ import annotations

import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import TypedDict

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

DEFAULT_CONFIG_PATH = Path("~/.config/gitpick/config.toml").expanduser()
CONFIG_PATH_ENV = "GITPICK_CONFIG"
FZF_BINARY_ENV = "GITPICK_FZF"

DEFAULT_VISIBILITY: Literal["private", "public", "internal"] = "private"
DEFAULT_REPO_LIST_LIMIT = 200
DEFAULT_ISSUE_LIST_LIMIT = 100
DEFAULT_LOG_LIMIT = 200

_VALID_VISIBILITY = {"private", "public", "internal"}
_VALID_PICKER_LAYOUTS = {"default", "reverse", "reverse-list"}
_INT_BOUNDS = {
    "repo_list_limit": (1, 1000),
    "issue_list_limit": (1, 1000),
    "log_limit": (1, 5000),
}
_STRING_FIELDS = (
    "git_binary",
    "gh_binary",
    "fzf_binary",
    "default_remote",
    "confirm_word",
)


class PickerLayout(TypedDict):
    height: str
    layout: str
    border: bool


def default_picker_layout() -> PickerLayout:
    return PickerLayout(height="50%", layout="reverse", border=False)


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    git_binary: str = "git"
    gh_binary: str = "gh"
    fzf_binary: str = "fzf"
    default_remote: str = "origin"
    repo_list_limit: int = Field(default=DEFAULT_REPO_LIST_LIMIT, ge=1, le=1000)
    issue_list_limit: int = Field(default=DEFAULT_ISSUE_LIST_LIMIT, ge=1, le=1000)
    log_limit: int = Field(default=DEFAULT_LOG_LIMIT, ge=1, le=5000)
    confirm_word: str = "yes"
    bulk_confirm_word: str = "YES"
    default_visibility: Literal["private", "public", "internal"] = DEFAULT_VISIBILITY
    preview_enabled: bool = True
    prune_remote_branches: bool = False
    picker: PickerLayout = Field(default_factory=default_picker_layout)
    aliases: dict[str, str] = Field(default_factory=dict)

    @field_validator("git_binary", "gh_binary", "fzf_binary", "default_remote", "confirm_word")
    @classmethod
    def _validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Value must not be blank")
        return value.strip()

    @field_validator("bulk_confirm_word")
    @classmethod
    def _validate_bulk_word(cls, value: str) -> str:
        word = value.strip()
        if not word or word != word.upper() or not any(ch.isalpha() for ch in word):
            raise ValueError(f"Bulk confirmation word must be uppercase: {value}")
        return word

    @model_validator(mode="after")
    def _validate_distinct_words(self) -> AppConfig:
        if self.bulk_confirm_word == self.confirm_word:
            raise ValueError("bulk_confirm_word must differ from confirm_word")
        return self


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        env_path = os.getenv(CONFIG_PATH_ENV, "").strip()
        if env_path:
            return Path(env_path).expanduser()
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    raise TypeError(f"Unsupported TOML scalar type: {type(value)!r}")


def _normalize_picker(value: object) -> PickerLayout:
    layout = default_picker_layout()
    if not isinstance(value, dict):
        return layout
    height = value.get("height")
    if isinstance(height, str) and height.strip():
        layout["height"] = height.strip()
    mode = value.get("layout")
    if isinstance(mode, str) and mode in _VALID_PICKER_LAYOUTS:
        layout["layout"] = mode
    border = value.get("border")
    if isinstance(border, bool):
        layout["border"] = border
    return layout


def _normalize_aliases(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    normalized: dict[str, str] = {}
    for alias, target in value.items():
        if not isinstance(alias, str) or not isinstance(target, str):
            continue
        key = alias.strip()
        command = target.strip()
        if not key or not command or key == command:
            continue
        normalized[key] = command
    return normalized


def _sanitize(raw: dict[str, object]) -> AppConfig:
    cfg = AppConfig()

    for name in _STRING_FIELDS:
        value = raw.get(name)
        if not isinstance(value, str) or not value.strip():
            continue
        if name == "confirm_word" and value.strip() == cfg.bulk_confirm_word:
            continue
        # pydantic's ValidationError is a ValueError; invalid values keep the default.
        with suppress(ValueError):
            setattr(cfg, name, value)

    for name, (low, high) in _INT_BOUNDS.items():
        value = raw.get(name)
        if isinstance(value, int) and not isinstance(value, bool) and low <= value <= high:
            setattr(cfg, name, value)

    bulk_word = raw.get("bulk_confirm_word")
    if isinstance(bulk_word, str) and bulk_word.strip() and bulk_word.strip() != cfg.confirm_word:
        with suppress(ValueError):
            cfg.bulk_confirm_word = bulk_word

    visibility = raw.get("default_visibility")
    if isinstance(visibility, str) and visibility in _VALID_VISIBILITY:
        cfg.default_visibility = cast(Literal["private", "public", "internal"], visibility)

    for name in ("preview_enabled", "prune_remote_branches"):
        flag = raw.get(name)
        if isinstance(flag, bool):
            setattr(cfg, name, flag)

    cfg.picker = _normalize_picker(raw.get("picker", {}))
    cfg.aliases = _normalize_aliases(raw.get("aliases", {}))
    return cfg


def _apply_env(cfg: AppConfig) -> AppConfig:
    fzf_binary = os.getenv(FZF_BINARY_ENV, "").strip()
    if fzf_binary:
        cfg.fzf_binary = fzf_binary
    return cfg


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _apply_env(AppConfig())
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _apply_env(AppConfig())
    if not isinstance(raw, dict):
        return _apply_env(AppConfig())
    return _apply_env(_sanitize(raw))


def save_config(config: AppConfig, path: str | Path | None = None) -> Path:
    resolved = get_config_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        f"git_binary = {_toml_scalar(config.git_binary)}",
        f"gh_binary = {_toml_scalar(config.gh_binary)}",
        f"fzf_binary = {_toml_scalar(config.fzf_binary)}",
        f"default_remote = {_toml_scalar(config.default_remote)}",
        f"repo_list_limit = {_toml_scalar(config.repo_list_limit)}",
        f"issue_list_limit = {_toml_scalar(config.issue_list_limit)}",
        f"log_limit = {_toml_scalar(config.log_limit)}",
        f"confirm_word = {_toml_scalar(config.confirm_word)}",
        f"bulk_confirm_word = {_toml_scalar(config.bulk_confirm_word)}",
        f"default_visibility = {_toml_scalar(config.default_visibility)}",
        f"preview_enabled = {_toml_scalar(config.preview_enabled)}",
        f"prune_remote_branches = {_toml_scalar(config.prune_remote_branches)}",
        "",
        "[picker]",
        f"height = {_toml_scalar(str(config.picker.get('height', '50%')))}",
        f"layout = {_toml_scalar(str(config.picker.get('layout', 'reverse')))}",
        f"border = {_toml_scalar(bool(config.picker.get('border', False)))}",
    ]

    if config.aliases:
        lines.append("")
        lines.append("[aliases]")
        for alias, command in sorted(config.aliases.items()):
            lines.append(f'"{_escape(alias)}" = {_toml_scalar(command)}')

    resolved.write_text("\n".join(lines) + "\n", encoding="utf-8")
    with suppress(OSError):
        resolved.chmod(0o600)
    return resolved
