"""Tests for the vault walker."""

import os
from pathlib import Path

import pytest

from smart_search.indexer.models import SourceDocument
from smart_search.indexer.walker import (
    is_markdown_file,
    relative_vault_path,
    source_document,
    walk_vault,
)


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    (tmp_path / "Projects" / "alpha").mkdir(parents=True)
    (tmp_path / ".obsidian").mkdir()
    (tmp_path / "Inbox.md").write_text("# Inbox\n")
    (tmp_path / "Projects" / "Plan.md").write_text("plan")
    (tmp_path / "Projects" / "alpha" / "Notes.md").write_text("notes")
    (tmp_path / "Projects" / "diagram.png").write_bytes(b"\x89PNG")
    (tmp_path / ".obsidian" / "workspace.md").write_text("hidden")
    (tmp_path / ".hidden.md").write_text("hidden")
    return tmp_path


class TestWalkVault:
    def test_discovers_visible_markdown_files(self, vault: Path):
        paths = [doc.path for doc in walk_vault(vault)]
        assert paths == ["Inbox.md", "Projects/Plan.md", "Projects/alpha/Notes.md"]

    def test_yields_source_documents(self, vault: Path):
        doc = next(d for d in walk_vault(vault) if d.path == "Projects/Plan.md")
        assert isinstance(doc, SourceDocument)
        assert doc.filename == "Plan"
        assert doc.mtime > 0
        assert doc.read_text() == "plan"

    def test_missing_root_yields_nothing(self, tmp_path: Path):
        assert list(walk_vault(tmp_path / "missing")) == []

    def test_skips_directories_named_like_markdown(self, tmp_path: Path):
        (tmp_path / "odd.md").mkdir()
        assert list(walk_vault(tmp_path)) == []


class TestIsMarkdownFile:
    def test_accepts_markdown(self, vault: Path):
        assert is_markdown_file(vault, vault / "Inbox.md")

    def test_rejects_other_suffixes(self, vault: Path):
        assert not is_markdown_file(vault, vault / "Projects" / "diagram.png")

    def test_rejects_hidden_paths(self, vault: Path):
        assert not is_markdown_file(vault, vault / ".obsidian" / "workspace.md")
        assert not is_markdown_file(vault, vault / ".hidden.md")

    def test_rejects_files_outside_vault(self, vault: Path, tmp_path_factory):
        outside = tmp_path_factory.mktemp("elsewhere") / "note.md"
        assert not is_markdown_file(vault, outside)


class TestSourceDocument:
    def test_relative_path_uses_forward_slashes(self, vault: Path):
        file_path = vault / "Projects" / "alpha" / "Notes.md"
        assert relative_vault_path(vault, file_path) == "Projects/alpha/Notes.md"

    def test_reads_text_on_demand(self, vault: Path):
        file_path = vault / "Inbox.md"
        doc = source_document(vault, file_path)
        file_path.write_text("# Changed\n")
        assert doc.read_text() == "# Changed\n"

    def test_reading_refreshes_mtime(self, vault: Path):
        file_path = vault / "Inbox.md"
        os.utime(file_path, (1000, 1000))
        doc = source_document(vault, file_path)

        file_path.write_text("# Changed\n")
        os.utime(file_path, (2000, 2000))

        assert doc.mtime == 1000
        doc.read_text()
        assert doc.mtime == 2000

    def test_inline_text_wins(self):
        doc = SourceDocument(path="a.md", filename="a", mtime=1.0, text="inline")
        assert doc.read_text() == "inline"

    def test_without_source_raises(self):
        doc = SourceDocument(path="a.md", filename="a", mtime=1.0)
        with pytest.raises(ValueError, match="No content source"):
            doc.read_text()
