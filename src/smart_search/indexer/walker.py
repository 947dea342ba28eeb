"""File walker for discovering markdown documents in a vault."""

from collections.abc import Iterator
from pathlib import Path

from smart_search.indexer.models import SourceDocument

MARKDOWN_SUFFIX = ".md"


def relative_vault_path(vault_root: Path, file_path: Path) -> str:
    """Vault-relative path with forward slashes, used as the index key."""
    return file_path.relative_to(vault_root).as_posix()


def source_document(vault_root: Path, file_path: Path) -> SourceDocument:
    """Build a SourceDocument for one file; the text is read on demand."""
    return SourceDocument(
        path=relative_vault_path(vault_root, file_path),
        filename=file_path.stem,
        mtime=file_path.stat().st_mtime,
        file_path=file_path,
    )


def is_markdown_file(vault_root: Path, file_path: Path) -> bool:
    """Check for a visible .md file inside the vault."""
    if file_path.suffix.lower() != MARKDOWN_SUFFIX:
        return False
    try:
        relative_parts = file_path.relative_to(vault_root).parts
    except ValueError:
        return False
    # Skip hidden files and directories such as .obsidian/ and .trash/
    return not any(part.startswith(".") for part in relative_parts)


def walk_vault(vault_root: Path) -> Iterator[SourceDocument]:
    """
    Walk the vault and yield a SourceDocument for each markdown file.

    Files are yielded in sorted path order so rebuilds are deterministic.
    """
    if not vault_root.exists():
        return

    for file_path in sorted(vault_root.rglob(f"*{MARKDOWN_SUFFIX}")):
        if not file_path.is_file():
            continue
        if not is_markdown_file(vault_root, file_path):
            continue
        yield source_document(vault_root, file_path)
