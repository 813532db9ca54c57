"""Title, tag, WikiLink and YAML-frontmatter parser."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from jot.note import EPOCH, Link, Note

# YAML front-matter block
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*\n", re.DOTALL)

_TAG_PUNCTUATION = frozenset("-_/")


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block or it is not a YAML mapping.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        meta = {}
    if not isinstance(meta, dict):
        meta = {}
    return meta, content[match.end() :]


def parse_title(content: str, path: Path) -> str:
    """First ``# `` heading, else the filename stem, else ``"Untitled"``."""
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped[2:].strip()
    return path.stem or "Untitled"


def _is_tag_char(ch: str) -> bool:
    return ch.isalnum() or ch in _TAG_PUNCTUATION


def parse_tags(content: str) -> set[str]:
    """Return the lowercase ``#tag`` values found in *content*.

    A ``#`` only opens a tag at the start of the text or right after
    whitespace, so headings (``# Title``), ``a#b`` and URL fragments are
    ignored.
    """
    tags: set[str] = set()
    i = 0
    n = len(content)
    while i < n:
        if content[i] == "#" and (i == 0 or content[i - 1].isspace()):
            j = i + 1
            while j < n and _is_tag_char(content[j]):
                j += 1
            if j > i + 1:
                tags.add(content[i + 1 : j].lower())
            i = j
            continue
        i += 1
    return tags


def parse_wikilinks(content: str) -> list[Link]:
    """Return every ``[[target]]`` / ``[[target|alias]]`` in *content*, in order.

    An unterminated ``[[`` is plain text; scanning resumes right after it.
    """
    links: list[Link] = []
    i = 0
    while True:
        start = content.find("[[", i)
        if start == -1:
            break
        close = content.find("]]", start + 2)
        if close == -1:
            i = start + 2
            continue
        inner = content[start + 2 : close]
        target, pipe, display = inner.partition("|")
        target = target.strip()
        end = close + 2
        if target:
            links.append(
                Link(
                    target=target,
                    display=(display.strip() or None) if pipe else None,
                    span=(start, end),
                )
            )
        i = end
    return links


def parse_note(path: Path, content: str, modified: datetime | None = None) -> Note:
    """Build a :class:`Note` from raw text. Never raises."""
    path = Path(path)
    frontmatter, _ = parse_frontmatter(content)
    return Note(
        path=path,
        title=parse_title(content, path),
        content=content,
        tags=frozenset(parse_tags(content)),
        links=tuple(parse_wikilinks(content)),
        modified=modified or EPOCH,
        frontmatter=frontmatter,
    )
