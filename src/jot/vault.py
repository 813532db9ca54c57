"""Vault: every markdown note under a root directory, plus its file tree."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from jot.note import EPOCH, Note, normalize_target, path_keys
from jot.parser import parse_note

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


def is_note_path(rel: Path | str) -> bool:
    """Whether the walk would pick *rel* up as a note: ``.md``, nothing hidden."""
    rel = Path(rel)
    return rel.suffix == NOTE_SUFFIX and not any(part.startswith(".") for part in rel.parts)


@dataclass
class TreeEntry:
    """One row of the file browser."""

    path: Path  # relative to the vault root
    name: str
    is_dir: bool
    depth: int
    expanded: bool = True


def _walk(root: Path) -> Iterator[tuple[Path, bool, int]]:
    """Yield ``(relative_path, is_dir, depth)`` in browser order.

    Directories come before files at each level, both sorted by name.
    Symlinks are followed; a real directory is only descended into once, so
    link cycles terminate. Hidden entries and non-markdown files are skipped.
    """
    seen: set[str] = set()

    def visit(directory: Path, rel: Path, depth: int) -> Iterator[tuple[Path, bool, int]]:
        real = os.path.realpath(directory)
        if real in seen:
            logger.warning("Skipping %s: directory already visited via another link", directory)
            return
        seen.add(real)
        try:
            entries = list(os.scandir(directory))
        except OSError as exc:
            if depth == 0:
                raise
            logger.warning("Could not list %s: %s", directory, exc)
            return

        dirs: list[str] = []
        files: list[str] = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if entry.is_dir():
                    dirs.append(entry.name)
                elif entry.is_file() and is_note_path(entry.name):
                    files.append(entry.name)
            except OSError:
                continue

        for name in sorted(dirs):
            yield rel / name, True, depth
            yield from visit(directory / name, rel / name, depth + 1)
        for name in sorted(files):
            yield rel / name, False, depth

    yield from visit(root, Path(), 0)


class Vault:
    """Owns all notes, keyed by their path relative to :attr:`root`."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.notes: dict[Path, Note] = {}
        self.tree: list[TreeEntry] = []

    # ------------------------------------------------------------------
    # Load / refresh
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, root: Path | str) -> "Vault":
        """Create *root* if needed and load every note beneath it.

        Failing to create or list the root is the only error that escapes;
        unreadable individual files load as empty notes.
        """
        root = Path(root).expanduser()
        root.mkdir(parents=True, exist_ok=True)
        vault = cls(root)
        vault.load()
        return vault

    def load(self) -> None:
        """(Re-)read every note and rebuild the tree."""
        notes: dict[Path, Note] = {}
        tree: list[TreeEntry] = []
        for rel, is_dir, depth in _walk(self.root):
            tree.append(TreeEntry(path=rel, name=rel.name, is_dir=is_dir, depth=depth))
            if not is_dir:
                notes[rel] = self._read(rel)
        self.notes = notes
        self._replace_tree(tree)
        logger.debug("Loaded %d notes from %s", len(notes), self.root)

    def _read(self, rel: Path) -> Note:
        path = self.root / rel
        try:
            content = path.read_bytes().decode("utf-8")
            modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s, loading it empty: %s", path, exc)
            content, modified = "", EPOCH
        return parse_note(rel, content, modified)

    def rebuild_tree(self) -> None:
        """Re-walk the directory; expansion state survives for paths that remain."""
        self._replace_tree(
            [
                TreeEntry(path=rel, name=rel.name, is_dir=is_dir, depth=depth)
                for rel, is_dir, depth in _walk(self.root)
            ]
        )

    def _replace_tree(self, entries: list[TreeEntry]) -> None:
        expanded = {e.path: e.expanded for e in self.tree if e.is_dir}
        for entry in entries:
            if entry.is_dir:
                entry.expanded = expanded.get(entry.path, True)
        self.tree = entries

    def reload_note(self, path: Path | str) -> Note | None:
        """Re-read one file and swap its note in.

        The index is *not* rebuilt; callers that need fresh backlinks must
        build a new :class:`~jot.index.VaultIndex`. Returns ``None`` (and
        drops the entry) when the file no longer exists, and ``None`` for
        paths the walk never treats as notes (hidden or not ``.md``).
        """
        rel = Path(path)
        if not is_note_path(rel):
            return None
        if not (self.root / rel).is_file():
            if self.notes.pop(rel, None) is not None:
                self.rebuild_tree()
            return None
        known = rel in self.notes
        note = self._read(rel)
        self.notes[rel] = note
        if not known:
            self.rebuild_tree()
        return note

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    def toggle_dir(self, path: Path | str) -> bool | None:
        """Flip a directory's expanded flag; returns the new state."""
        path = Path(path)
        for entry in self.tree:
            if entry.is_dir and entry.path == path:
                entry.expanded = not entry.expanded
                return entry.expanded
        return None

    def visible_entries(self) -> list[TreeEntry]:
        """Tree entries not hidden under a collapsed directory."""
        visible: list[TreeEntry] = []
        collapsed: list[Path] = []
        for entry in self.tree:
            if any(d in entry.path.parents for d in collapsed):
                continue
            visible.append(entry)
            if entry.is_dir and not entry.expanded:
                collapsed.append(entry.path)
        return visible

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_note(self, path: Path | str) -> Note | None:
        return self.notes.get(Path(path))

    def resolve_link(self, target: str) -> Note | None:
        """Note a link target points at: a relative-path match wins over a stem match."""
        wanted = normalize_target(target.strip())
        by_stem: Note | None = None
        for path in sorted(self.notes):
            if normalize_target(path.as_posix()) == wanted:
                return self.notes[path]
            if by_stem is None and path.stem.lower() == wanted:
                by_stem = self.notes[path]
        return by_stem

    def link_exists(self, target: str) -> bool:
        """Whether *target* resolves to any note (case-insensitive)."""
        wanted = normalize_target(target.strip())
        return any(wanted in path_keys(path) for path in self.notes)

    def get_backlinks(self, note_path: Path | str) -> list[Path]:
        """Sources linking to *note_path*, by full scan.

        Matches :meth:`jot.index.VaultIndex.get_backlinks` exactly; kept as a
        cross-check for the index.
        """
        note_path = Path(note_path)
        keys = path_keys(note_path)
        sources = [
            source
            for source, note in self.notes.items()
            if source != note_path
            and any(link.normalized_target in keys for link in note.links)
        ]
        return sorted(sources)
