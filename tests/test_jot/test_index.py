"""Unit tests for jot.index.VaultIndex."""

from pathlib import Path

import pytest

from jot.index import VaultIndex
from jot.vault import Vault


@pytest.fixture()
def index(vault: Vault) -> VaultIndex:
    return VaultIndex.build(vault)


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class TestVaultIndexTags:
    def test_notes_with_tag(self, index: VaultIndex):
        assert index.notes_with_tag("first") == frozenset({Path("alpha.md"), Path("projects/gamma.md")})

    def test_tag_lookup_is_case_insensitive(self, index: VaultIndex):
        assert index.notes_with_tag("SECOND") == index.notes_with_tag("second")

    def test_unknown_tag(self, index: VaultIndex):
        assert index.notes_with_tag("nope") == frozenset()

    def test_all_tags_sorted(self, index: VaultIndex):
        assert index.all_tags() == ["first", "second"]

    def test_tag_counts(self, vault_dir: Path, note_writer):
        note_writer(vault_dir, "delta.md", "#second #zeta")
        index = VaultIndex.build(Vault.open(vault_dir))
        assert index.tag_counts() == [("second", 3), ("first", 2), ("zeta", 1)]


# ---------------------------------------------------------------------------
# Backlinks
# ---------------------------------------------------------------------------


class TestVaultIndexBacklinks:
    def test_stem_link(self, index: VaultIndex):
        assert index.get_backlinks("alpha.md") == [Path("beta.md")]

    def test_path_qualified_link(self, index: VaultIndex):
        assert index.get_backlinks("projects/gamma.md") == [Path("alpha.md")]

    def test_note_without_backlinks(self, tmp_path: Path):
        (tmp_path / "a.md").write_text("no links", encoding="utf-8")
        (tmp_path / "b.md").write_text("[[a]]", encoding="utf-8")
        index = VaultIndex.build(Vault.open(tmp_path))
        assert index.get_backlinks("a.md") == [Path("b.md")]
        assert index.get_backlinks("b.md") == []

    def test_stem_and_path_links_are_deduplicated(self, tmp_path: Path):
        (tmp_path / "dir").mkdir()
        (tmp_path / "dir" / "target.md").write_text("", encoding="utf-8")
        (tmp_path / "src.md").write_text("[[target]] [[dir/target]] [[Target.md]]", encoding="utf-8")
        index = VaultIndex.build(Vault.open(tmp_path))
        assert index.get_backlinks("dir/target.md") == [Path("src.md")]

    def test_backlinks_sorted(self, tmp_path: Path):
        for name in ("c", "a", "b"):
            (tmp_path / f"{name}.md").write_text("[[hub]]", encoding="utf-8")
        (tmp_path / "hub.md").write_text("", encoding="utf-8")
        index = VaultIndex.build(Vault.open(tmp_path))
        assert index.get_backlinks("hub.md") == [Path("a.md"), Path("b.md"), Path("c.md")]

    def test_self_reference_excluded(self, tmp_path: Path):
        (tmp_path / "me.md").write_text("[[me]]", encoding="utf-8")
        index = VaultIndex.build(Vault.open(tmp_path))
        assert index.get_backlinks("me.md") == []

    def test_symmetry_with_forward_links(self, vault: Vault, index: VaultIndex):
        for source, note in vault.notes.items():
            for link in note.links:
                target = vault.resolve_link(link.target)
                if target is not None and target.path != source:
                    assert source in index.get_backlinks(target.path)


# ---------------------------------------------------------------------------
# Snapshot semantics
# ---------------------------------------------------------------------------


class TestVaultIndexSnapshot:
    def test_index_is_frozen(self, index: VaultIndex):
        with pytest.raises(AttributeError):
            index.tags = {}

    def test_empty_vault(self, tmp_path: Path):
        index = VaultIndex.build(Vault.open(tmp_path))
        assert index.all_tags() == []
        assert index.get_backlinks("anything.md") == []
