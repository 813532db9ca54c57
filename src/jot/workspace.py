"""Workspace: wires config, vault, index and editor buffer together.

The core types never sequence I/O on their own. The workspace is the one
place where "write the file, re-parse it, rebuild the index" happens, so a
caller holding a :class:`Workspace` can never query a stale index after a
save.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from jot.backlinks import BacklinksPanel
from jot.buffer import TextBuffer
from jot.config import Config, load_config
from jot.index import VaultIndex
from jot.note import Note
from jot.search import SearchResult, find_notes, search_vault
from jot.vault import NOTE_SUFFIX, Vault, is_note_path

logger = logging.getLogger(__name__)


class Workspace:
    """A vault opened for browsing and editing."""

    def __init__(self, config: Config, vault: Vault) -> None:
        self.config = config
        self.vault = vault
        self.index = VaultIndex.build(vault)
        self.buffer = self._new_buffer()
        self.backlinks_panel = BacklinksPanel()

    @classmethod
    def open(cls, config: Config | None = None) -> "Workspace":
        config = config if config is not None else load_config()
        return cls(config, Vault.open(config.vault.path))

    def _new_buffer(self) -> TextBuffer:
        return TextBuffer(
            vault=self.vault,
            undo_depth=self.config.editor.undo_depth,
            autocomplete_limit=self.config.editor.autocomplete_limit,
        )

    def _rebuild_index(self) -> None:
        self.index = VaultIndex.build(self.vault)
        self.backlinks_panel.show(self.index, self.vault, self.buffer.note_path)

    def _write(self, rel: Path, text: str) -> None:
        path = self.vault.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))

    # ------------------------------------------------------------------
    # Selection and editing
    # ------------------------------------------------------------------

    @property
    def current_note(self) -> Note | None:
        if self.buffer.note_path is None:
            return None
        return self.vault.get_note(self.buffer.note_path)

    def select_note(self, path: Path | str) -> Note | None:
        """Show the note at *path*; the buffer resets when the note changes."""
        note = self.vault.get_note(path)
        if note is None:
            return None
        if note.path != self.buffer.note_path:
            self.buffer.load(note)
        self.backlinks_panel.show(self.index, self.vault, note.path)
        return note

    def enter_edit(self) -> None:
        if self.buffer.note_path is None:
            raise RuntimeError("No note selected; call select_note first.")
        self.buffer.enter_edit_mode()

    def save(self) -> Note | None:
        """Leave edit mode and persist the buffer.

        Writes the file when the text changed, re-parses the note and
        rebuilds the index. Also persists READ-mode block edits (line
        deletes and pastes). Returns the current note.
        """
        path = self.buffer.note_path
        if path is None:
            raise RuntimeError("No note selected; call select_note first.")
        if self.buffer.editing:
            text = self.buffer.exit_edit_mode()
        elif self.buffer.dirty:
            text = self.buffer.text
            self.buffer.dirty = False
        else:
            return self.vault.get_note(path)

        previous = self.vault.get_note(path)
        if previous is not None and previous.content == text:
            return previous

        self._write(path, text)
        note = self.vault.reload_note(path)
        self._rebuild_index()
        if note is not None:
            self.buffer.refresh_links(note)
        logger.info("Saved %s", path)
        return note

    def follow_link(self) -> Note | None:
        """Open the note the read-mode link cursor points at, if it exists."""
        link = self.buffer.current_link()
        if link is None:
            return None
        note = self.vault.resolve_link(link.target)
        if note is not None:
            self.select_note(note.path)
        return note

    # ------------------------------------------------------------------
    # Vault changes
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Re-read the whole vault, keeping the open note when it still exists."""
        current = self.buffer.note_path
        self.vault.load()
        note = self.vault.get_note(current) if current is not None else None
        if current is not None and note is None:
            self.buffer = self._new_buffer()
        elif note is not None and not self.buffer.editing:
            self.buffer.load(note)
        self._rebuild_index()

    def create_note(self, name: str, parent: Path | str = Path()) -> Note:
        """Create ``<parent>/<name>.md`` with a title heading and open it."""
        name = name.strip()
        if not name:
            raise ValueError("Note name must not be empty")
        stem = name[: -len(NOTE_SUFFIX)] if name.endswith(NOTE_SUFFIX) else name
        rel = Path(parent) / f"{stem}{NOTE_SUFFIX}"
        if not is_note_path(rel):
            raise ValueError(f"{rel} is hidden and would not show up in the vault")
        if (self.vault.root / rel).exists():
            raise FileExistsError(f"{rel} already exists")

        self._write(rel, f"# {Path(stem).name}\n\n")
        note = self.vault.reload_note(rel)
        if note is None:
            raise RuntimeError(f"{rel} vanished right after it was written")
        self._rebuild_index()
        logger.info("Created %s", rel)
        self.select_note(rel)
        return note

    def delete_entry(self, path: Path | str) -> None:
        """Delete a note, or a directory with everything in it."""
        rel = Path(path)
        full = self.vault.root / rel
        is_dir = full.is_dir()
        if is_dir and not full.is_symlink():
            shutil.rmtree(full)
        else:
            # a symlinked directory loses only the link, not its target
            full.unlink()
        if is_dir:
            self.vault.load()
        else:
            self.vault.reload_note(rel)

        current = self.buffer.note_path
        if current is not None and (current == rel or rel in current.parents):
            self.buffer = self._new_buffer()
        self._rebuild_index()
        logger.info("Deleted %s", rel)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def backlinks(self, path: Path | str | None = None) -> list[Note]:
        """Notes linking to *path* (default: the open note), via the index."""
        target = Path(path) if path is not None else self.buffer.note_path
        if target is None:
            return []
        return [self.vault.notes[p] for p in self.index.get_backlinks(target) if p in self.vault.notes]

    def notes_with_tag(self, tag: str) -> list[Note]:
        paths = self.index.notes_with_tag(tag)
        return sorted((self.vault.notes[p] for p in paths if p in self.vault.notes), key=lambda n: (n.title, n.path))

    def find(self, query: str) -> list[tuple[Path, str]]:
        return find_notes(self.vault, query)

    def search(self, query: str) -> list[SearchResult]:
        return search_vault(
            self.vault,
            query,
            min_query=self.config.search.min_query,
            limit=self.config.search.limit,
        )
