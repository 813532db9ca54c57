"""Backlinks panel: which notes link *to* the current note."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jot.index import VaultIndex
    from jot.vault import Vault


def backlinks_panel(index: "VaultIndex", vault: "Vault", path: Path) -> list[dict[str, str]]:
    """Return ``{path, title}`` dicts for notes that link to *path*."""
    return [
        {"path": source.as_posix(), "title": vault.notes[source].title}
        for source in index.get_backlinks(path)
        if source in vault.notes
    ]


class BacklinksPanel:
    """Selection state over the backlinks of one note."""

    def __init__(self) -> None:
        self.selected = 0
        self.entries: list[dict[str, str]] = []

    def show(self, index: "VaultIndex", vault: "Vault", path: Path | None) -> None:
        """Load the backlinks of *path* (or nothing) and select the first one."""
        self.entries = [] if path is None else backlinks_panel(index, vault, path)
        self.selected = 0

    def move_down(self) -> None:
        if self.selected < len(self.entries) - 1:
            self.selected += 1

    def move_up(self) -> None:
        if self.selected > 0:
            self.selected -= 1

    def reset(self) -> None:
        self.selected = 0

    def selected_path(self) -> Path | None:
        if 0 <= self.selected < len(self.entries):
            return Path(self.entries[self.selected]["path"])
        return None
