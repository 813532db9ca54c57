"""jot: a local markdown note vault with an editing engine."""

from jot.buffer import EditorMode, Position, Selection, SelectionMode, TextBuffer
from jot.config import Config, load_config
from jot.fuzzy import fuzzy_match, rank_titles
from jot.index import VaultIndex
from jot.note import Link, Note
from jot.parser import parse_note, parse_tags, parse_title, parse_wikilinks
from jot.vault import TreeEntry, Vault
from jot.workspace import Workspace

__all__ = [
    "Note",
    "Link",
    "parse_note",
    "parse_title",
    "parse_tags",
    "parse_wikilinks",
    "Vault",
    "TreeEntry",
    "VaultIndex",
    "TextBuffer",
    "EditorMode",
    "SelectionMode",
    "Selection",
    "Position",
    "fuzzy_match",
    "rank_titles",
    "Config",
    "load_config",
    "Workspace",
]
