"""Note finder, full-text search and find-in-note."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from jot.fuzzy import rank_titles

if TYPE_CHECKING:
    from jot.vault import Vault

DEFAULT_MIN_QUERY = 2
DEFAULT_LIMIT = 50


# ---------------------------------------------------------------------------
# Finder
# ---------------------------------------------------------------------------


def find_notes(vault: "Vault", query: str) -> list[tuple[Path, str]]:
    """``(path, title)`` of every note whose title fuzzy-matches *query*."""
    return rank_titles(query, ((path, note.title) for path, note in vault.notes.items()))


# ---------------------------------------------------------------------------
# Full-text search
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchResult:
    path: Path
    title: str
    line_number: int  # 1-based
    matched_line: str


def search_vault(
    vault: "Vault",
    query: str,
    *,
    min_query: int = DEFAULT_MIN_QUERY,
    limit: int = DEFAULT_LIMIT,
) -> list[SearchResult]:
    """Case-insensitive line search across all notes.

    Queries shorter than *min_query* return nothing. Results are ordered by
    title, then line number, and capped at *limit*.
    """
    if len(query) < min_query:
        return []
    q = query.lower()
    results = [
        SearchResult(path=path, title=note.title, line_number=number, matched_line=line.strip())
        for path, note in vault.notes.items()
        for number, line in enumerate(note.content.split("\n"), start=1)
        if q in line.lower()
    ]
    results.sort(key=lambda r: (r.title, r.line_number, r.path))
    return results[:limit]


# ---------------------------------------------------------------------------
# Find in note
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FindMatch:
    line: int
    col_start: int
    col_end: int


@dataclass
class FindInNote:
    """Occurrences of a query in one buffer, with a current-match cursor."""

    query: str = ""
    case_sensitive: bool = False
    matches: list[FindMatch] = field(default_factory=list)
    current_match: int = 0

    def update_matches(self, lines: Sequence[str]) -> None:
        """Recompute matches (overlapping ones included) over *lines*."""
        self.matches = []
        if self.query:
            flags = 0 if self.case_sensitive else re.IGNORECASE
            pattern = re.compile(f"(?=({re.escape(self.query)}))", flags)
            for number, line in enumerate(lines):
                for m in pattern.finditer(line):
                    start, end = m.span(1)
                    self.matches.append(FindMatch(number, start, end))
        if self.matches:
            self.current_match = min(self.current_match, len(self.matches) - 1)
        else:
            self.current_match = 0

    def toggle_case_sensitivity(self) -> None:
        self.case_sensitive = not self.case_sensitive

    def next_match(self) -> None:
        if self.matches:
            self.current_match = (self.current_match + 1) % len(self.matches)

    def prev_match(self) -> None:
        if self.matches:
            self.current_match = (self.current_match - 1) % len(self.matches)

    def current(self) -> FindMatch | None:
        return self.matches[self.current_match] if self.matches else None

    def jump_to_nearest(self, line: int) -> None:
        """Select the match closest to *line*; the earliest wins a tie."""
        if self.matches:
            self.current_match = min(
                range(len(self.matches)),
                key=lambda i: abs(self.matches[i].line - line),
            )

    def has_match_on_line(self, line: int) -> bool:
        return any(m.line == line for m in self.matches)

    def is_current_match_line(self, line: int) -> bool:
        current = self.current()
        return current is not None and current.line == line
