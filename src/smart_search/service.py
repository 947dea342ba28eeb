"""Search service tying the vault, the index and change notifications together."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from smart_search.config import Config
from smart_search.indexer import (
    CancellationToken,
    DocumentIndex,
    IndexingError,
    NltkAnalyzer,
    RebuildOutcome,
    RebuildResult,
    TextAnalyzer,
    walk_vault,
)
from smart_search.indexer.index import ProgressCallback
from smart_search.indexer.ranker import MAX_RESULTS
from smart_search.indexer.snippets import match_reason
from smart_search.indexer.walker import is_markdown_file, relative_vault_path, source_document

logger = logging.getLogger(__name__)


@dataclass
class SearchHit:
    """A search result prepared for display."""

    path: str
    filename: str
    match: str
    score: float
    reason: str


class SmartSearch:
    """
    Keeps a DocumentIndex in step with a vault on disk.

    Change notifications (create, modify, delete, rename) are applied
    incrementally. Full rebuilds run one at a time and can be cancelled.
    """

    def __init__(self, config: Config, analyzer: TextAnalyzer | None = None):
        """
        Initialize the service.

        Args:
            config: Configuration instance with vault root and exclusions.
            analyzer: Text analyzer; defaults to an NltkAnalyzer built from config.
        """
        self.config = config
        self.vault_root = config.vault_root
        if analyzer is None:
            analyzer = NltkAnalyzer(depth=config.nlp_depth, cache_size=config.cache_size)
        self.index = DocumentIndex(analyzer, exclude_wikilinks=config.exclude_wikilinks)
        self.index.set_exclusion_rules(config.excluded_folders, config.excluded_tags)
        self._cancel_token: CancellationToken | None = None
        self._token_lock = threading.Lock()

    # Exclusions

    def set_exclusions(self, excluded_folders: list[str], excluded_tags: list[str]) -> None:
        """Replace exclusion rules. Takes effect for future indexing only."""
        self.config.excluded_folders = list(excluded_folders)
        self.config.excluded_tags = list(excluded_tags)
        self.index.set_exclusion_rules(excluded_folders, excluded_tags)

    # Full rebuild

    @property
    def is_rebuilding(self) -> bool:
        return self.index.is_rebuilding

    def rebuild(self, on_progress: ProgressCallback | None = None) -> RebuildResult:
        """
        Rebuild the index from every markdown file in the vault.

        Current exclusion settings are applied before the rebuild starts.
        """
        # Check and publish under one lock: one token per running rebuild
        with self._token_lock:
            if self._cancel_token is not None or self.index.is_rebuilding:
                logger.warning("Indexing is already in progress")
                return RebuildResult(outcome=RebuildOutcome.REJECTED)
            token = CancellationToken()
            self._cancel_token = token

        try:
            self.index.set_exclusion_rules(
                self.config.excluded_folders, self.config.excluded_tags
            )
            logger.info("Building index for %s", self.vault_root)
            result = self.index.build_full_index(
                walk_vault(self.vault_root),
                on_progress=on_progress,
                cancel_token=token,
            )
        finally:
            with self._token_lock:
                if self._cancel_token is token:
                    self._cancel_token = None

        if result.outcome == RebuildOutcome.CANCELLED:
            logger.info("Indexing cancelled")
        elif result.outcome == RebuildOutcome.COMPLETED:
            logger.info("Indexing complete: %d documents searchable", len(self.index))
        return result

    def cancel_rebuild(self) -> bool:
        """Request cancellation of the running rebuild. Returns False if none runs."""
        with self._token_lock:
            token = self._cancel_token
        if token is None:
            return False
        token.cancel()
        logger.info("Cancellation requested for running rebuild")
        return True

    # Incremental sync

    def sync(self) -> tuple[int, int, int]:
        """
        Reconcile the index with the vault.

        New files are indexed, files with a changed mtime re-indexed and
        indexed paths that no longer exist removed.

        Returns:
            Tuple of (added, updated, deleted) counts.
        """
        added = 0
        updated = 0
        deleted = 0
        seen_paths: set[str] = set()

        for source in walk_vault(self.vault_root):
            seen_paths.add(source.path)
            existing = self.index.get_document(source.path)
            if existing is not None and existing.last_modified == source.mtime:
                continue

            try:
                text = source.read_text()
                indexed = self.index.index_document(
                    source.path, source.filename, source.mtime, text
                )
            except (IndexingError, OSError, UnicodeDecodeError):
                logger.exception("Error syncing document %s", source.path)
                continue

            if indexed:
                if existing is None:
                    added += 1
                else:
                    updated += 1
            elif existing is not None:
                deleted += 1

        for path in self.index.paths():
            if path not in seen_paths and self.index.remove_document(path):
                deleted += 1

        return added, updated, deleted

    # Change notifications

    def _vault_file(self, file_path: Path) -> Path | None:
        if not file_path.is_absolute():
            file_path = self.vault_root / file_path
        if not is_markdown_file(self.vault_root, file_path):
            return None
        return file_path

    def _index_file(self, file_path: Path, force: bool) -> bool:
        try:
            source = source_document(self.vault_root, file_path)
            text = source.read_text()
            if force:
                return self.index.index_document(
                    source.path, source.filename, source.mtime, text
                )
            return self.index.update_document(
                source.path, source.filename, source.mtime, text
            )
        except (IndexingError, OSError, UnicodeDecodeError):
            logger.exception("Error indexing document %s", file_path)
            return False

    def on_created(self, file_path: Path) -> None:
        """Handle a new file in the vault."""
        resolved = self._vault_file(file_path)
        if resolved is None:
            return
        logger.info("New file created: %s", resolved)
        self._index_file(resolved, force=True)

    def on_modified(self, file_path: Path) -> None:
        """Handle a modified file in the vault."""
        resolved = self._vault_file(file_path)
        if resolved is None:
            return
        path = relative_vault_path(self.vault_root, resolved)
        logger.info("File modified: %s", path)

        was_excluded = not self.index.is_indexed(path)
        self._index_file(resolved, force=False)
        if was_excluded and self.index.is_indexed(path):
            logger.info(
                'File "%s" is now included in search (exclusion criteria no longer met)',
                resolved.stem,
            )

    def on_deleted(self, file_path: Path) -> None:
        """Handle a deleted file in the vault."""
        resolved = self._vault_file(file_path)
        if resolved is None:
            return
        path = relative_vault_path(self.vault_root, resolved)
        logger.info("File deleted: %s", path)
        self.index.remove_document(path)

    def on_renamed(self, old_path: Path, new_path: Path) -> None:
        """Handle a renamed or moved file: remove the old path, index the new one."""
        old_file = self._vault_file(old_path)
        was_excluded = True
        if old_file is not None:
            old_key = relative_vault_path(self.vault_root, old_file)
            was_excluded = not self.index.is_indexed(old_key)
            self.index.remove_document(old_key)

        resolved = self._vault_file(new_path)
        if resolved is None:
            return
        logger.info("File renamed/moved from %s to %s", old_path, resolved)
        new_key = relative_vault_path(self.vault_root, resolved)
        self._index_file(resolved, force=True)
        if was_excluded and self.index.is_indexed(new_key):
            logger.info(
                'File "%s" is now included in search (moved out of excluded folder)',
                resolved.stem,
            )

    # Search

    def search(self, query: str, limit: int = MAX_RESULTS) -> list[SearchHit]:
        """
        Search the index.

        Failures degrade to an empty result list and are logged.
        """
        try:
            ranked = self.index.rank(query)
        except Exception:
            logger.exception("Search failed for query %r", query)
            return []

        return [
            SearchHit(
                path=result.document.path,
                filename=result.document.filename,
                match=result.match_pass.value,
                score=result.score,
                reason=match_reason(result.document, query),
            )
            for result in ranked[: max(limit, 0)]
        ]

    def status(self) -> dict:
        """Summary of the index state."""
        return {
            "vault_root": str(self.vault_root),
            "documents": len(self.index),
            "rebuilding": self.is_rebuilding,
            "excluded_folders": self.index.excluded_folders,
            "excluded_tags": self.index.excluded_tags,
        }
