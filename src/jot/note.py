"""Core Note and Link value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def normalize_target(target: str) -> str:
    """Lowercase a link target and strip a trailing ``.md``."""
    target = target.lower()
    return target[: -len(".md")] if target.endswith(".md") else target


def path_keys(path: Path) -> frozenset[str]:
    """Normalized link targets that resolve to the note at *path*.

    ``notes/Foo.md`` answers to both ``notes/foo`` and ``foo``.
    """
    full = normalize_target(Path(path).as_posix())
    return frozenset({full, full.rsplit("/", 1)[-1]})


@dataclass(frozen=True)
class Link:
    """A ``[[target|display]]`` occurrence inside a note."""

    target: str
    display: str | None = None
    #: ``(start, end)`` offsets of the whole ``[[...]]`` token, end exclusive
    span: tuple[int, int] = (0, 0)

    @property
    def normalized_target(self) -> str:
        return normalize_target(self.target)

    @property
    def label(self) -> str:
        return self.display or self.target


@dataclass(frozen=True)
class Note:
    """A single parsed markdown note.

    Notes are values: a reload builds a new ``Note`` and the vault swaps it in.
    """

    path: Path
    title: str
    content: str
    tags: frozenset[str] = frozenset()
    links: tuple[Link, ...] = ()
    modified: datetime = EPOCH
    frontmatter: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def slug(self) -> str:
        """Filename stem; what ``[[links]]`` resolve against."""
        return self.path.stem

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path.as_posix(),
            "slug": self.slug,
            "title": self.title,
            "tags": sorted(self.tags),
            "links": [link.target for link in self.links],
            "modified": self.modified.isoformat(),
            "frontmatter": dict(self.frontmatter),
        }
