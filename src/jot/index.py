"""VaultIndex: tag and link lookups precomputed from a vault snapshot."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from jot.note import normalize_target

if TYPE_CHECKING:
    from jot.vault import Vault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VaultIndex:
    """Tag and backlink maps keyed by note path.

    The index is a snapshot: it never refers back to the vault and is never
    patched. Build a new one whenever any note's content changes.
    """

    #: tag (lowercase) -> paths of notes carrying it
    tags: dict[str, frozenset[Path]] = field(default_factory=dict)
    #: normalized link target -> paths of notes linking to it
    forward_links: dict[str, frozenset[Path]] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, vault: "Vault") -> "VaultIndex":
        tags: defaultdict[str, set[Path]] = defaultdict(set)
        forward: defaultdict[str, set[Path]] = defaultdict(set)
        for path, note in vault.notes.items():
            for tag in note.tags:
                tags[tag].add(path)
            for link in note.links:
                forward[link.normalized_target].add(path)
        logger.debug(
            "Indexed %d notes: %d tags, %d link targets",
            len(vault.notes),
            len(tags),
            len(forward),
        )
        return cls(
            tags={tag: frozenset(paths) for tag, paths in tags.items()},
            forward_links={target: frozenset(paths) for target, paths in forward.items()},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def notes_with_tag(self, tag: str) -> frozenset[Path]:
        return self.tags.get(tag.lower(), frozenset())

    def get_backlinks(self, note_path: Path | str) -> list[Path]:
        """Paths of notes linking to *note_path*, sorted.

        Links are matched both by the note's relative path (``[[dir/note]]``)
        and by its bare filename (``[[note]]``).
        """
        note_path = Path(note_path)
        full = normalize_target(note_path.as_posix())
        name = full.rsplit("/", 1)[-1]

        sources = set(self.forward_links.get(full, ()))
        if name != full:
            sources |= self.forward_links.get(name, frozenset())
        sources.discard(note_path)
        return sorted(sources)

    def all_tags(self) -> list[str]:
        return sorted(self.tags)

    def tag_counts(self) -> list[tuple[str, int]]:
        """``(tag, note_count)`` pairs, most used first, then by name."""
        return sorted(
            ((tag, len(paths)) for tag, paths in self.tags.items()),
            key=lambda item: (-item[1], item[0]),
        )
