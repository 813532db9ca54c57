"""Unit tests for jot.search."""

from pathlib import Path

import pytest

from jot.search import FindInNote, FindMatch, find_notes, search_vault
from jot.vault import Vault

# ---------------------------------------------------------------------------
# find_notes
# ---------------------------------------------------------------------------


class TestFindNotes:
    def test_fuzzy_title_match(self, vault: Vault):
        assert find_notes(vault, "gm") == [(Path("projects/gamma.md"), "Gamma")]

    def test_prefix_first(self, vault: Vault):
        assert [t for _, t in find_notes(vault, "a")] == ["Alpha", "Beta", "Gamma"]
        assert [t for _, t in find_notes(vault, "b")] == ["Beta"]

    def test_empty_query_lists_everything(self, vault: Vault):
        assert len(find_notes(vault, "")) == len(vault.notes)


# ---------------------------------------------------------------------------
# search_vault
# ---------------------------------------------------------------------------


class TestSearchVault:
    def test_line_matches(self, vault: Vault):
        results = search_vault(vault, "links")
        assert [(r.title, r.line_number, r.matched_line) for r in results] == [
            ("Beta", 2, "Links back to [[Alpha]]. #second"),
        ]

    def test_case_insensitive(self, vault: Vault):
        assert search_vault(vault, "LINKS") == search_vault(vault, "links")

    def test_ordered_by_title_then_line(self, vault: Vault):
        results = search_vault(vault, "# ")
        keys = [(r.title, r.line_number) for r in results]
        assert keys == sorted(keys)
        assert [r.title for r in results] == ["Alpha", "Beta", "Gamma"]

    def test_line_numbers_count_newlines_only(self, tmp_path: Path):
        (tmp_path / "odd.md").write_bytes("a\rb\x0cc\u2028d\nneedle here\n".encode("utf-8"))
        results = search_vault(Vault.open(tmp_path), "needle")
        assert [(r.line_number, r.matched_line) for r in results] == [(2, "needle here")]

    def test_short_query_returns_nothing(self, vault: Vault):
        assert search_vault(vault, "a") == []
        assert search_vault(vault, "a", min_query=1) != []

    def test_limit(self, vault: Vault):
        assert len(search_vault(vault, "# ", limit=2)) == 2

    def test_no_results(self, vault: Vault):
        assert search_vault(vault, "nothing like this") == []


# ---------------------------------------------------------------------------
# FindInNote
# ---------------------------------------------------------------------------


@pytest.fixture()
def lines() -> list[str]:
    return ["Foo bar foo", "nothing", "FOO", "aaa"]


class TestFindInNote:
    def test_case_insensitive_by_default(self, lines):
        find = FindInNote(query="foo")
        find.update_matches(lines)
        assert find.matches == [FindMatch(0, 0, 3), FindMatch(0, 8, 11), FindMatch(2, 0, 3)]

    def test_case_sensitive(self, lines):
        find = FindInNote(query="foo")
        find.toggle_case_sensitivity()
        find.update_matches(lines)
        assert find.matches == [FindMatch(0, 8, 11)]

    def test_overlapping_matches(self, lines):
        find = FindInNote(query="aa")
        find.update_matches(lines)
        assert find.matches == [FindMatch(3, 0, 2), FindMatch(3, 1, 3)]

    def test_regex_characters_are_literal(self):
        find = FindInNote(query="a.c")
        find.update_matches(["abc", "a.c"])
        assert find.matches == [FindMatch(1, 0, 3)]

    def test_empty_query(self, lines):
        find = FindInNote()
        find.update_matches(lines)
        assert find.matches == []
        assert find.current() is None

    def test_next_prev_wrap(self, lines):
        find = FindInNote(query="foo")
        find.update_matches(lines)
        find.prev_match()
        assert find.current() == FindMatch(2, 0, 3)
        find.next_match()
        assert find.current() == FindMatch(0, 0, 3)

    def test_current_match_is_clamped(self, lines):
        find = FindInNote(query="foo", current_match=2)
        find.update_matches(lines)
        find.query = "bar"
        find.update_matches(lines)
        assert find.current_match == 0

    def test_jump_to_nearest(self, lines):
        find = FindInNote(query="foo")
        find.update_matches(lines)
        find.jump_to_nearest(3)
        assert find.current() == FindMatch(2, 0, 3)
        find.jump_to_nearest(1)
        assert find.current() == FindMatch(0, 0, 3)

    def test_line_queries(self, lines):
        find = FindInNote(query="foo")
        find.update_matches(lines)
        assert find.has_match_on_line(2)
        assert not find.has_match_on_line(1)
        assert find.is_current_match_line(0)
        assert not find.is_current_match_line(2)
