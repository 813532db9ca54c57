"""Subsequence matching shared by the note finder and link autocomplete."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import TypeVar

K = TypeVar("K", bound=Hashable)


def fuzzy_match(query: str, text: str) -> bool:
    """True when every character of *query* appears in *text*, in order.

    A single greedy left-to-right pass; case handling is up to the caller.
    The empty query matches everything.
    """
    remaining = iter(text)
    return all(ch in remaining for ch in query)


def rank_titles(
    query: str,
    candidates: Iterable[tuple[K, str]],
    limit: int | None = None,
) -> list[tuple[K, str]]:
    """Filter ``(key, title)`` pairs by *query* and order them for display.

    Matching is case-insensitive. Titles starting with the query come first,
    the rest follow alphabetically.
    """
    q = query.lower()
    hits = [(key, title) for key, title in candidates if fuzzy_match(q, title.lower())]
    hits.sort(key=lambda hit: (not hit[1].lower().startswith(q), hit[1].lower(), hit[1], str(hit[0])))
    return hits if limit is None else hits[:limit]
