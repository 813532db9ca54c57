"""Shared fixtures for the jot test-suite."""

import textwrap
from pathlib import Path

import pytest

from jot.vault import Vault


def write_note(directory: Path, rel: str, content: str) -> Path:
    path = directory / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture()
def vault_dir(tmp_path: Path) -> Path:
    """Small vault: three linked notes, a sub-folder and some noise."""
    root = tmp_path / "vault"
    write_note(root, "alpha.md", """\
        # Alpha
        See [[beta]] and [[projects/gamma|Gamma]]. #first
    """)
    write_note(root, "beta.md", """\
        # Beta
        Links back to [[Alpha]]. #second
    """)
    write_note(root, "projects/gamma.md", """\
        # Gamma
        Standalone note. #first #second
        Mentions [[missing]].
    """)
    write_note(root, "projects/readme.txt", "not a note\n")
    write_note(root, ".hidden/secret.md", "# Secret\n")
    (root / "empty-dir").mkdir()
    return root


@pytest.fixture()
def vault(vault_dir: Path) -> Vault:
    return Vault.open(vault_dir)


@pytest.fixture()
def note_writer():
    """``note_writer(root, "dir/name.md", text)`` writes a dedented note."""
    return write_note
