"""Configuration loader.

Settings live in a small TOML file::

    [vault]
    path = "~/notes"

    [editor]
    undo_depth         = 100
    autocomplete_limit = 10

    [search]
    min_query = 2
    limit     = 50

Every key is optional. The file is looked up at an explicit path, then
``$JOT_CONFIG``, then ``~/.config/jot/config.toml``; when none exists the
defaults apply.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jot.buffer import DEFAULT_AUTOCOMPLETE_LIMIT, DEFAULT_UNDO_DEPTH
from jot.search import DEFAULT_LIMIT, DEFAULT_MIN_QUERY

CONFIG_ENV = "JOT_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/jot/config.toml")
DEFAULT_VAULT_PATH = Path("~/notes")


@dataclass
class VaultConfig:
    path: Path = field(default_factory=DEFAULT_VAULT_PATH.expanduser)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VaultConfig":
        return cls(path=Path(data.get("path", DEFAULT_VAULT_PATH)).expanduser())


@dataclass
class EditorConfig:
    undo_depth: int = DEFAULT_UNDO_DEPTH
    autocomplete_limit: int = DEFAULT_AUTOCOMPLETE_LIMIT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EditorConfig":
        return cls(
            undo_depth=int(data.get("undo_depth", DEFAULT_UNDO_DEPTH)),
            autocomplete_limit=int(data.get("autocomplete_limit", DEFAULT_AUTOCOMPLETE_LIMIT)),
        )


@dataclass
class SearchConfig:
    min_query: int = DEFAULT_MIN_QUERY
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchConfig":
        return cls(
            min_query=int(data.get("min_query", DEFAULT_MIN_QUERY)),
            limit=int(data.get("limit", DEFAULT_LIMIT)),
        )


@dataclass
class Config:
    vault: VaultConfig = field(default_factory=VaultConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    search: SearchConfig = field(default_factory=SearchConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        return cls(
            vault=VaultConfig.from_dict(data.get("vault", {})),
            editor=EditorConfig.from_dict(data.get("editor", {})),
            search=SearchConfig.from_dict(data.get("search", {})),
        )


def config_path(path: Path | str | None = None) -> Path:
    """Where the config file is expected, whether or not it exists."""
    if path is not None:
        return Path(path).expanduser()
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_config(path: Path | str | None = None) -> Config:
    """Read the config file; a missing file yields the defaults.

    Malformed TOML raises :class:`tomllib.TOMLDecodeError`.
    """
    resolved = config_path(path)
    if not resolved.is_file():
        return Config.from_dict({})
    with open(resolved, "rb") as fh:
        data = tomllib.load(fh)
    return Config.from_dict(data)
