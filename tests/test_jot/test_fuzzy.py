"""Unit tests for jot.fuzzy."""

from pathlib import Path

from jot.fuzzy import fuzzy_match, rank_titles

# ---------------------------------------------------------------------------
# fuzzy_match
# ---------------------------------------------------------------------------


class TestFuzzyMatch:
    def test_empty_query_matches_everything(self):
        for text in ("", "a", "anything at all"):
            assert fuzzy_match("", text)

    def test_subsequence(self):
        assert fuzzy_match("wld", "world")

    def test_order_matters(self):
        assert not fuzzy_match("dw", "world")

    def test_substring_implies_match(self):
        text = "the quick brown fox"
        for start in range(len(text)):
            for end in range(start, len(text) + 1):
                assert fuzzy_match(text[start:end], text)

    def test_repeated_characters_need_repeats(self):
        assert fuzzy_match("oo", "foo")
        assert not fuzzy_match("ooo", "foo")

    def test_case_is_callers_business(self):
        assert not fuzzy_match("W", "world")

    def test_query_longer_than_text(self):
        assert not fuzzy_match("abc", "ab")


# ---------------------------------------------------------------------------
# rank_titles
# ---------------------------------------------------------------------------


class TestRankTitles:
    CANDIDATES = [
        (Path("b.md"), "Brown Owl"),
        (Path("w.md"), "World"),
        (Path("n.md"), "New World Order"),
        (Path("x.md"), "Unrelated"),
    ]

    def test_prefix_matches_first(self):
        assert [t for _, t in rank_titles("wo", self.CANDIDATES)] == ["World", "Brown Owl", "New World Order"]

    def test_case_insensitive(self):
        assert rank_titles("WORLD", self.CANDIDATES) == rank_titles("world", self.CANDIDATES)

    def test_limit(self):
        assert len(rank_titles("", self.CANDIDATES, limit=2)) == 2

    def test_empty_query_is_alphabetical(self):
        titles = [t for _, t in rank_titles("", self.CANDIDATES)]
        assert titles == sorted(titles, key=str.lower)

    def test_no_match_is_empty(self):
        assert rank_titles("zzz", self.CANDIDATES) == []

    def test_keys_are_kept(self):
        assert rank_titles("unr", self.CANDIDATES) == [(Path("x.md"), "Unrelated")]
