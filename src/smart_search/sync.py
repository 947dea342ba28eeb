"""Periodic reconciliation of the search index with the vault on disk.

Notes created or edited outside the MCP surface become searchable on the next
pass; notes deleted, moved away or newly matching an exclusion rule drop out of
the index. Passes are skipped while a full rebuild is walking the vault.
"""

import logging
import threading

from smart_search.service import SmartSearch

logger = logging.getLogger(__name__)


class SyncManager:
    """Runs ``SmartSearch.sync()`` on a daemon thread every ``interval`` seconds.

    A pass that finds a rebuild in progress is skipped; the rebuild reads the
    same files and the next pass picks up anything it missed.
    """

    def __init__(self, service: SmartSearch, interval: int):
        """
        Args:
            service: Search service whose index is kept in step with the vault.
            interval: Seconds between passes. Must be > 0.
        """
        if interval <= 0:
            raise ValueError(f"Sync interval must be positive, got {interval}")

        self._service = service
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.warning("Vault sync already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sync_loop,
            name="smart-search-sync",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Watching %s for changes every %ds",
            self._service.vault_root,
            self._interval,
        )

    def stop(self) -> None:
        """Stop the sync thread, waiting up to one interval for the current pass."""
        if not self.is_running:
            return

        self._stop_event.set()
        self._thread.join(timeout=self._interval + 1)
        if self._thread.is_alive():
            logger.warning("Vault sync thread did not stop cleanly")
        else:
            logger.info("Vault sync stopped")
        self._thread = None

    def run_once(self) -> tuple[int, int, int] | None:
        """
        Run a single reconciliation pass.

        Returns:
            (added, updated, removed) counts, or None when the pass was skipped
            because a rebuild is running.
        """
        if self._service.is_rebuilding:
            logger.debug("Rebuild in progress, skipping vault sync pass")
            return None

        added, updated, removed = self._service.sync()
        if added or updated or removed:
            logger.info(
                "Vault sync: %d new, %d changed, %d removed (deleted or excluded)",
                added,
                updated,
                removed,
            )
        else:
            logger.debug("Vault sync: index already up to date")
        return added, updated, removed

    def _sync_loop(self) -> None:
        # Wait first so a stop right after start returns immediately
        while not self._stop_event.wait(timeout=self._interval):
            try:
                self.run_once()
            except Exception:
                logger.exception("Vault sync pass failed")
