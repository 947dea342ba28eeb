"""In-memory document index with incremental updates."""

import logging
import threading
from collections.abc import Callable, Iterable

from smart_search.indexer.analyzer import TextAnalyzer
from smart_search.indexer.models import (
    IndexedDocument,
    RankedDocument,
    RebuildOutcome,
    RebuildResult,
    SourceDocument,
)
from smart_search.indexer.parser import (
    extract_tags,
    flatten_tables,
    parse_frontmatter,
    parse_structure,
    strip_wikilinks,
)
from smart_search.indexer.ranker import Ranker

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class IndexingError(Exception):
    """Raised when a single document cannot be indexed."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to index {path}: {cause}")
        self.path = path
        self.cause = cause


class CancellationToken:
    """Cooperative cancellation flag for a running rebuild."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class DocumentIndex:
    """
    Mapping from document path to IndexedDocument.

    Records are built outside the lock and swapped in whole, so readers never
    observe a partially written record.

    Thread Safety:
        Mutations and snapshots are protected by a lock. Only one full rebuild
        may run at a time; a second request is rejected, not queued.
    """

    def __init__(self, analyzer: TextAnalyzer, exclude_wikilinks: bool = False):
        """
        Initialize the index.

        Args:
            analyzer: Text analyzer used for documents and queries
            exclude_wikilinks: Drop [[wikilink]] spans before analysis
        """
        self.analyzer = analyzer
        self.exclude_wikilinks = exclude_wikilinks
        self.ranker = Ranker(analyzer)
        self._documents: dict[str, IndexedDocument] = {}
        self._excluded_folders: list[str] = []
        self._excluded_tags: list[str] = []
        self._lock = threading.Lock()
        self._rebuild_lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    # Exclusion rules

    def set_exclusion_rules(
        self, excluded_folders: Iterable[str], excluded_tags: Iterable[str]
    ) -> None:
        """Replace the active folder-prefix and tag exclusion rules."""
        folders = [f.strip().strip("/") for f in excluded_folders if f.strip().strip("/")]
        tags = [t.strip().lstrip("#") for t in excluded_tags if t.strip().lstrip("#")]
        with self._lock:
            self._excluded_folders = folders
            self._excluded_tags = tags
        logger.debug("Exclusion rules set: folders=%s tags=%s", folders, tags)

    @property
    def excluded_folders(self) -> list[str]:
        with self._lock:
            return list(self._excluded_folders)

    @property
    def excluded_tags(self) -> list[str]:
        with self._lock:
            return list(self._excluded_tags)

    def is_excluded(self, path: str, tags: Iterable[str]) -> bool:
        """Check a path and its tags against the exclusion rules."""
        with self._lock:
            folders = self._excluded_folders
            excluded_tags = self._excluded_tags

        lower_path = path.lower()
        if any(lower_path.startswith(folder.lower() + "/") for folder in folders):
            return True

        lower_tags = {tag.lower() for tag in tags}
        return any("#" + tag.lower() in lower_tags for tag in excluded_tags)

    # Mutations

    def index_document(
        self, path: str, filename: str, mod_time: float, raw_text: str
    ) -> bool:
        """
        Index or re-index a single document.

        Args:
            path: Vault-relative path, the index key
            filename: Display name used for title matching
            mod_time: Modification timestamp of raw_text
            raw_text: Current document text

        A record built from an older mod_time than the stored one is dropped,
        so the newest text wins regardless of which write finishes last.

        Returns:
            True if the document is now indexed, False if it was excluded.

        Raises:
            IndexingError: If parsing or analysis fails for this document.
        """
        tags = extract_tags(raw_text)
        if self.is_excluded(path, tags):
            if self.remove_document(path):
                logger.info("Removed excluded document %s", path)
            else:
                logger.debug("Skipping excluded document %s", path)
            return False

        try:
            structure = parse_structure(raw_text)
            text = strip_wikilinks(raw_text) if self.exclude_wikilinks else raw_text
            analysis = self.analyzer.analyze(text)
            record = IndexedDocument(
                path=path,
                filename=filename,
                last_modified=mod_time,
                analysis=analysis,
                tags=tags,
                frontmatter=parse_frontmatter(raw_text),
                table_cells=flatten_tables(structure.tables),
                structure=structure,
            )
        except Exception as e:
            raise IndexingError(path, e) from e

        with self._lock:
            existing = self._documents.get(path)
            # mtimes only grow per path; a slower writer must not undo a newer one
            if existing is not None and existing.last_modified > mod_time:
                logger.debug(
                    "Discarding stale record for %s (%s older than %s)",
                    path,
                    mod_time,
                    existing.last_modified,
                )
            else:
                self._documents[path] = record
        return True

    def update_document(
        self, path: str, filename: str, mod_time: float, raw_text: str
    ) -> bool:
        """
        Re-index a document unless the stored record has the same mod_time.

        Returns:
            True if the document was (re)indexed, False if skipped or excluded.
        """
        with self._lock:
            existing = self._documents.get(path)
        if existing is not None and existing.last_modified == mod_time:
            logger.debug("Document %s hasn't changed, skipping update", path)
            return False
        return self.index_document(path, filename, mod_time, raw_text)

    def remove_document(self, path: str) -> bool:
        """Remove a document. Returns True if it was present."""
        with self._lock:
            removed = self._documents.pop(path, None) is not None
        if removed:
            logger.debug("Removed %s from index", path)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()

    # Queries

    def is_indexed(self, path: str) -> bool:
        with self._lock:
            return path in self._documents

    def get_document(self, path: str) -> IndexedDocument | None:
        with self._lock:
            return self._documents.get(path)

    def paths(self) -> list[str]:
        with self._lock:
            return list(self._documents)

    def snapshot(self) -> list[IndexedDocument]:
        """Return the current records in index order."""
        with self._lock:
            return list(self._documents.values())

    def rank(self, query: str) -> list[RankedDocument]:
        """Rank indexed documents for a query, with pass and score."""
        return self.ranker.rank(self.snapshot(), query)

    def search(self, query: str) -> list[IndexedDocument]:
        """Return at most 50 documents matching the query, best first."""
        return [result.document for result in self.rank(query)]

    # Full rebuild

    @property
    def is_rebuilding(self) -> bool:
        return self._rebuild_lock.locked()

    def build_full_index(
        self,
        documents: Iterable[SourceDocument],
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> RebuildResult:
        """
        Index a whole document collection, one document at a time.

        A failing document is logged and skipped. Cancellation is checked
        before and after each document; documents already indexed stay in
        the index.

        Args:
            documents: Documents to index
            on_progress: Called with the processed fraction after each document
            cancel_token: Token checked between documents

        Returns:
            RebuildResult with outcome COMPLETED, CANCELLED or REJECTED.
        """
        if not self._rebuild_lock.acquire(blocking=False):
            logger.warning("Rebuild already in progress, rejecting request")
            return RebuildResult(outcome=RebuildOutcome.REJECTED)

        try:
            return self._build(list(documents), on_progress, cancel_token)
        finally:
            self._rebuild_lock.release()

    def _build(
        self,
        documents: list[SourceDocument],
        on_progress: ProgressCallback | None,
        cancel_token: CancellationToken | None,
    ) -> RebuildResult:
        total = len(documents)
        result = RebuildResult(outcome=RebuildOutcome.COMPLETED, total=total)
        logger.info("Starting to index %d documents", total)

        def cancelled() -> bool:
            return cancel_token is not None and cancel_token.cancelled

        stopped = False
        for processed, source in enumerate(documents, start=1):
            if cancelled():
                stopped = True
                break

            try:
                text = source.read_text()
                indexed = self.index_document(
                    source.path, source.filename, source.mtime, text
                )
            except Exception:
                logger.exception("Error indexing document %s", source.path)
                result.failed += 1
                result.failed_paths.append(source.path)
            else:
                if indexed:
                    result.indexed += 1
                else:
                    result.excluded += 1

            if on_progress is not None:
                on_progress(processed / total)

            if cancelled():
                stopped = True
                break

        if stopped:
            result.outcome = RebuildOutcome.CANCELLED
            logger.info(
                "Indexing cancelled after %d of %d documents",
                result.indexed + result.excluded + result.failed,
                total,
            )
        else:
            logger.info(
                "Indexed %d documents (%d excluded, %d failed)",
                result.indexed,
                result.excluded,
                result.failed,
            )
        return result
