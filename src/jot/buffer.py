"""Text editing engine.

:class:`TextBuffer` holds one note's text as a list of lines and implements
everything the editor pane needs on top of it:

* a READ mode, where a read cursor moves around for link following and line
  (visual) selections, and an EDIT mode with its own cursor;
* character, line and word motions;
* visual (whole-line) and char (range) selections, copy and paste;
* snapshot undo/redo, bounded in depth;
* ``[[`` link autocomplete against the titles of a :class:`~jot.vault.Vault`.

The buffer never writes to disk. :meth:`TextBuffer.exit_edit_mode` hands the
final text back and the caller persists it (see :mod:`jot.workspace`).

Positions count characters, not bytes. Out-of-range positions are clamped to
the buffer, never rejected.
"""

from __future__ import annotations

import enum
from bisect import bisect_right
from collections import deque
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING

from jot.fuzzy import rank_titles

if TYPE_CHECKING:
    from jot.note import Note
    from jot.vault import Vault

DEFAULT_UNDO_DEPTH = 100
DEFAULT_AUTOCOMPLETE_LIMIT = 10

#: Punctuation that ends a word for word-wise motion
WORD_SEPARATORS = frozenset(".,;:!?()[]{}\"'`/\\-_")

_SPACE, _SEPARATOR, _WORD = range(3)


def _char_class(ch: str) -> int:
    if ch.isspace():
        return _SPACE
    if ch in WORD_SEPARATORS:
        return _SEPARATOR
    return _WORD


# ---------------------------------------------------------------------------
# State types
# ---------------------------------------------------------------------------


class EditorMode(enum.Enum):
    READ = "read"
    EDIT = "edit"


class SelectionMode(enum.Enum):
    VISUAL = "visual"  # whole lines, follows the read cursor
    CHAR = "char"  # character range, follows the edit cursor


@dataclass(frozen=True, order=True)
class Position:
    line: int = 0
    col: int = 0


@dataclass(frozen=True)
class Selection:
    anchor: Position
    head: Position
    mode: SelectionMode

    def ordered(self) -> tuple[Position, Position]:
        """``(start, end)`` in document order."""
        if self.anchor <= self.head:
            return self.anchor, self.head
        return self.head, self.anchor

    def line_range(self) -> tuple[int, int]:
        start, end = self.ordered()
        return start.line, end.line


@dataclass
class AutocompleteSession:
    """An in-progress ``[[...`` being typed."""

    #: Position of the first ``[`` of the trigger
    trigger: Position
    query: str = ""
    #: ``(note path, title)`` suggestions, best first
    matches: list[tuple[Path, str]] = field(default_factory=list)
    selected: int = 0

    @property
    def current(self) -> tuple[Path, str] | None:
        return self.matches[self.selected] if self.matches else None


@dataclass(frozen=True)
class VisibleLink:
    target: str
    display: str
    line: int


@dataclass(frozen=True)
class _Snapshot:
    lines: tuple[str, ...]
    cursor: Position
    read_cursor: Position


# ---------------------------------------------------------------------------
# Buffer
# ---------------------------------------------------------------------------


class TextBuffer:
    """Mutable line buffer with cursors, selection, history and autocomplete."""

    def __init__(
        self,
        text: str = "",
        *,
        vault: "Vault | None" = None,
        undo_depth: int = DEFAULT_UNDO_DEPTH,
        autocomplete_limit: int = DEFAULT_AUTOCOMPLETE_LIMIT,
    ) -> None:
        self.mode = EditorMode.READ
        self.cursor = Position()
        self.read_cursor = Position()
        self.selection: Selection | None = None
        self.autocomplete: AutocompleteSession | None = None
        self.clipboard: str | None = None
        self.dirty = False
        self.note_path: Path | None = None
        self.links: list[VisibleLink] = []
        self.selected_link = 0
        #: Source of autocomplete suggestions
        self.vault = vault
        self.autocomplete_limit = autocomplete_limit

        self._lines: list[str] = text.split("\n")
        self._line_starts: list[int] | None = None
        self._undo: deque[_Snapshot] = deque(maxlen=undo_depth)
        self._redo: deque[_Snapshot] = deque(maxlen=undo_depth)

    # ------------------------------------------------------------------
    # Content access
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def editing(self) -> bool:
        return self.mode is EditorMode.EDIT

    def line(self, index: int) -> str:
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return ""

    def __len__(self) -> int:
        return self._starts()[-1] + len(self._lines[-1])

    def _starts(self) -> list[int]:
        if self._line_starts is None:
            starts = [0]
            for line in self._lines[:-1]:
                starts.append(starts[-1] + len(line) + 1)
            self._line_starts = starts
        return self._line_starts

    def clamp(self, pos: Position) -> Position:
        line = min(max(pos.line, 0), len(self._lines) - 1)
        return Position(line, min(max(pos.col, 0), len(self._lines[line])))

    def offset(self, pos: Position) -> int:
        """Character offset of *pos* in :attr:`text`."""
        if pos.line >= len(self._lines):
            return len(self)
        pos = self.clamp(pos)
        return self._starts()[pos.line] + pos.col

    def position(self, offset: int) -> Position:
        """Inverse of :meth:`offset`."""
        offset = min(max(offset, 0), len(self))
        starts = self._starts()
        line = bisect_right(starts, offset) - 1
        return Position(line, offset - starts[line])

    def _set_text(self, text: str) -> None:
        self._lines = text.split("\n")
        self._line_starts = None

    def _changed(self) -> None:
        self._line_starts = None
        self.dirty = True

    # ------------------------------------------------------------------
    # Note lifecycle and modes
    # ------------------------------------------------------------------

    def load(self, note: "Note") -> None:
        """Point the buffer at *note*, dropping all per-note state."""
        self.note_path = note.path
        self._set_text(note.content)
        self.mode = EditorMode.READ
        self.cursor = Position()
        self.read_cursor = Position()
        self.selection = None
        self.autocomplete = None
        self.dirty = False
        self._undo.clear()
        self._redo.clear()
        self.selected_link = 0
        self.refresh_links(note)

    def refresh_links(self, note: "Note") -> None:
        """Rebuild the read-mode link list from a freshly parsed *note*."""
        self.links = [
            VisibleLink(
                target=link.target,
                display=link.label,
                line=note.content.count("\n", 0, link.span[0]),
            )
            for link in note.links
        ]
        self.selected_link = min(self.selected_link, max(len(self.links) - 1, 0))

    def enter_edit_mode(self) -> None:
        if self.editing:
            return
        self.mode = EditorMode.EDIT
        self.cursor = self.clamp(self.read_cursor)
        self.selection = None
        self._push_undo()

    def exit_edit_mode(self) -> str:
        """Leave EDIT mode and return the text to persist.

        Edit-only state (autocomplete, selection, history) is discarded, so
        undo never reaches back across a save.
        """
        self.mode = EditorMode.READ
        self.read_cursor = self.clamp(self.cursor)
        self.autocomplete = None
        self.selection = None
        self._undo.clear()
        self._redo.clear()
        self.dirty = False
        return self.text

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(tuple(self._lines), self.cursor, self.read_cursor)

    def _push_undo(self) -> None:
        self._undo.append(self._snapshot())
        self._redo.clear()

    def _restore(self, snapshot: _Snapshot) -> None:
        self._lines = list(snapshot.lines)
        self.cursor = snapshot.cursor
        self.read_cursor = snapshot.read_cursor
        self.selection = None
        self.autocomplete = None
        self._changed()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo:
            return False
        snapshot = self._undo.pop()
        self._redo.append(self._snapshot())
        self._restore(snapshot)
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        snapshot = self._redo.pop()
        self._undo.append(self._snapshot())
        self._restore(snapshot)
        return True

    # ------------------------------------------------------------------
    # Edits (EDIT mode only)
    # ------------------------------------------------------------------

    def insert_char(self, ch: str) -> None:
        """Type one character. No undo snapshot: undo works per newline/delete."""
        if not self.editing:
            return
        if len(ch) != 1:
            raise ValueError(f"insert_char() takes a single character, got {ch!r}")
        if ch == "\n":
            self.insert_newline()
            return
        pos = self.clamp(self.cursor)
        line = self._lines[pos.line]
        self._lines[pos.line] = line[: pos.col] + ch + line[pos.col :]
        self.cursor = Position(pos.line, pos.col + 1)
        self._changed()
        self._check_autocomplete()

    def insert_newline(self) -> None:
        if not self.editing:
            return
        self._push_undo()
        pos = self.clamp(self.cursor)
        line = self._lines[pos.line]
        self._lines[pos.line : pos.line + 1] = [line[: pos.col], line[pos.col :]]
        self.cursor = Position(pos.line + 1, 0)
        self.autocomplete = None
        self._changed()

    def delete_char(self) -> None:
        """Backspace."""
        if not self.editing:
            return
        pos = self.clamp(self.cursor)
        if pos.col > 0:
            self._push_undo()
            line = self._lines[pos.line]
            self._lines[pos.line] = line[: pos.col - 1] + line[pos.col :]
            self.cursor = Position(pos.line, pos.col - 1)
            self._changed()
            self._check_autocomplete()
        elif pos.line > 0:
            self._push_undo()
            previous = self._lines[pos.line - 1]
            self._lines[pos.line - 1 : pos.line + 1] = [previous + self._lines[pos.line]]
            self.cursor = Position(pos.line - 1, len(previous))
            self.autocomplete = None
            self._changed()

    def delete_forward(self) -> None:
        """Delete key."""
        if not self.editing:
            return
        pos = self.clamp(self.cursor)
        line = self._lines[pos.line]
        if pos.col < len(line):
            self._push_undo()
            self._lines[pos.line] = line[: pos.col] + line[pos.col + 1 :]
        elif pos.line < len(self._lines) - 1:
            self._push_undo()
            self._lines[pos.line : pos.line + 2] = [line + self._lines[pos.line + 1]]
        else:
            return
        self.cursor = pos
        self._changed()
        self._check_autocomplete()

    def paste(self, text: str | None = None) -> None:
        """Insert *text* (default: the clipboard) at the edit cursor."""
        text = self.clipboard if text is None else text
        if not self.editing or not text:
            return
        self._push_undo()
        at = self.offset(self.cursor)
        current = self.text
        self._set_text(current[:at] + text + current[at:])
        self.cursor = self.position(at + len(text))
        self.autocomplete = None
        self._changed()

    def paste_below(self, text: str | None = None) -> None:
        """Line-wise paste under the read cursor's line."""
        text = self.clipboard if text is None else text
        if not text:
            return
        self._push_undo()
        block = text[:-1] if text.endswith("\n") else text
        at = self.clamp(self.read_cursor).line + 1
        self._lines[at:at] = block.split("\n")
        self.read_cursor = Position(at, 0)
        self._changed()

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def _active(self) -> Position:
        return self.clamp(self.cursor if self.editing else self.read_cursor)

    def _move_to(self, pos: Position) -> None:
        if self.editing:
            self.cursor = pos
            if self.autocomplete is not None:
                self._check_autocomplete(allow_open=False)
        else:
            self.read_cursor = pos
        self.update_selection_head()

    def move_left(self) -> None:
        pos = self._active()
        if pos.col > 0:
            pos = Position(pos.line, pos.col - 1)
        elif pos.line > 0:
            pos = Position(pos.line - 1, len(self._lines[pos.line - 1]))
        self._move_to(pos)

    def move_right(self) -> None:
        pos = self._active()
        if pos.col < len(self._lines[pos.line]):
            pos = Position(pos.line, pos.col + 1)
        elif pos.line < len(self._lines) - 1:
            pos = Position(pos.line + 1, 0)
        self._move_to(pos)

    def move_up(self) -> None:
        pos = self._active()
        if pos.line > 0:
            pos = self.clamp(Position(pos.line - 1, pos.col))
        self._move_to(pos)

    def move_down(self) -> None:
        pos = self._active()
        if pos.line < len(self._lines) - 1:
            pos = self.clamp(Position(pos.line + 1, pos.col))
        self._move_to(pos)

    def move_line_start(self) -> None:
        self._move_to(Position(self._active().line, 0))

    def move_line_end(self) -> None:
        line = self._active().line
        self._move_to(Position(line, len(self._lines[line])))

    def move_word_left(self) -> None:
        text = self.text
        at = self.offset(self._active())
        if at == 0:
            return
        at -= 1
        while at > 0 and text[at].isspace():
            at -= 1
        kind = _char_class(text[at])
        while at > 0 and _char_class(text[at - 1]) == kind:
            at -= 1
        self._move_to(self.position(at))

    def move_word_right(self) -> None:
        text = self.text
        at = self.offset(self._active())
        if at >= len(text):
            return
        kind = _char_class(text[at])
        if kind != _SPACE:
            while at < len(text) and _char_class(text[at]) == kind:
                at += 1
        while at < len(text) and text[at].isspace():
            at += 1
        self._move_to(self.position(at))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def start_visual_selection(self) -> None:
        pos = self.clamp(self.read_cursor)
        self.selection = Selection(pos, pos, SelectionMode.VISUAL)

    def start_char_selection(self) -> None:
        if self.selection is None:
            pos = self.clamp(self.cursor)
            self.selection = Selection(pos, pos, SelectionMode.CHAR)

    def update_selection_head(self) -> None:
        if self.selection is None:
            return
        if self.selection.mode is SelectionMode.VISUAL:
            head = self.read_cursor
        else:
            head = self.cursor
        self.selection = replace(self.selection, head=head)

    def clear_selection(self) -> None:
        self.selection = None

    def is_line_selected(self, line: int) -> bool:
        sel = self.selection
        if sel is None or sel.mode is not SelectionMode.VISUAL:
            return False
        start, end = sel.line_range()
        return start <= line <= end

    def is_char_selected(self, line: int, col: int) -> bool:
        sel = self.selection
        if sel is None or sel.mode is not SelectionMode.CHAR:
            return False
        start, end = sel.ordered()
        return start <= Position(line, col) < end

    def _selected_span(self, sel: Selection) -> tuple[int, int]:
        """Character span ``[start, end)`` covered by *sel*."""
        if sel.mode is SelectionMode.VISUAL:
            first, last = sel.line_range()
            last = min(last, len(self._lines) - 1)
            start = self.offset(Position(first, 0))
            if last + 1 < len(self._lines):
                return start, self.offset(Position(last + 1, 0))
            return start, len(self)
        start, end = sel.ordered()
        return self.offset(start), self.offset(end)

    def selected_text(self) -> str | None:
        if self.selection is None:
            return None
        start, end = self._selected_span(self.selection)
        return self.text[start:end] or None

    def copy_selection(self) -> str | None:
        text = self.selected_text()
        if text is not None:
            self.clipboard = text
        return text

    def delete_selection(self) -> str | None:
        """Remove the selected lines or characters; returns what was removed."""
        sel = self.selection
        self.selection = None
        if sel is None:
            return None

        if sel.mode is SelectionMode.VISUAL:
            first, last = sel.line_range()
            first = min(first, len(self._lines) - 1)
            removed = self.text[slice(*self._selected_span(sel))]
            self._push_undo()
            del self._lines[first : last + 1]
            if not self._lines:
                self._lines = [""]
            self._line_starts = None
            self.read_cursor = Position(min(first, len(self._lines) - 1), 0)
            self.cursor = self.clamp(self.cursor)
        else:
            start, end = self._selected_span(sel)
            if start >= end:
                return None
            current = self.text
            removed = current[start:end]
            self._push_undo()
            self._set_text(current[:start] + current[end:])
            self.cursor = self.position(start)

        self.autocomplete = None
        self._changed()
        return removed

    # ------------------------------------------------------------------
    # Read-mode link navigation
    # ------------------------------------------------------------------

    def next_link(self) -> None:
        if self.links:
            self.selected_link = (self.selected_link + 1) % len(self.links)

    def prev_link(self) -> None:
        if self.links:
            self.selected_link = (self.selected_link - 1) % len(self.links)

    def current_link(self) -> VisibleLink | None:
        if 0 <= self.selected_link < len(self.links):
            return self.links[self.selected_link]
        return None

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    def _check_autocomplete(self, *, allow_open: bool = True) -> None:
        pos = self.clamp(self.cursor)
        line = self._lines[pos.line]

        if allow_open and pos.col >= 2 and line[pos.col - 2 : pos.col] == "[[":
            self.autocomplete = AutocompleteSession(trigger=Position(pos.line, pos.col - 2))
            self.update_autocomplete_matches()
            return

        session = self.autocomplete
        if session is None:
            return
        trigger = session.trigger
        if (
            pos.line != trigger.line
            or pos.col < trigger.col + 2
            or line[trigger.col : trigger.col + 2] != "[["
        ):
            self.autocomplete = None
            return
        query = line[trigger.col + 2 : pos.col]
        if "]]" in query:
            self.autocomplete = None
            return
        if query != session.query:
            session.query = query
            self.update_autocomplete_matches()

    def update_autocomplete_matches(self, vault: "Vault | None" = None) -> None:
        """Re-rank suggestions for the current query against note titles."""
        session = self.autocomplete
        if session is None:
            return
        vault = vault if vault is not None else self.vault
        candidates = [] if vault is None else [(path, note.title) for path, note in vault.notes.items()]
        session.matches = rank_titles(session.query, candidates, limit=self.autocomplete_limit)
        session.selected = 0

    def autocomplete_next(self) -> None:
        session = self.autocomplete
        if session is not None and session.matches:
            session.selected = (session.selected + 1) % len(session.matches)

    def autocomplete_prev(self) -> None:
        session = self.autocomplete
        if session is not None and session.matches:
            session.selected = (session.selected - 1) % len(session.matches)

    def autocomplete_cancel(self) -> None:
        self.autocomplete = None

    def autocomplete_accept(self) -> bool:
        """Replace ``[[query`` with ``[[<stem>]]`` for the selected suggestion."""
        session = self.autocomplete
        self.autocomplete = None
        if not self.editing or session is None or session.current is None:
            return False

        path, _title = session.current
        completion = f"[[{Path(path).stem}]]"
        trigger = session.trigger
        pos = self.clamp(self.cursor)
        self._push_undo()
        line = self._lines[trigger.line]
        self._lines[trigger.line] = line[: trigger.col] + completion + line[pos.col :]
        self.cursor = Position(trigger.line, trigger.col + len(completion))
        self._changed()
        return True
