"""Main entry point for the smart-search MCP server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from smart_search.config import Config
from smart_search.indexer import RebuildOutcome, TextAnalyzer
from smart_search.indexer.analyzer import ensure_tagger
from smart_search.service import SmartSearch
from smart_search.sync import SyncManager
from smart_search.tools import register_tools

logger = logging.getLogger(__name__)


def create_server(
    config: Config, analyzer: TextAnalyzer | None = None
) -> tuple[FastMCP, SmartSearch]:
    """Create and configure the MCP server with all components.

    Args:
        config: Configuration instance with all settings.
        analyzer: Optional analyzer; defaults to the NLTK analyzer.
    """
    mcp = FastMCP(
        name="smart-search",
        instructions=(
            "smart-search finds notes in a markdown vault. Use the search tool "
            "with a few words; results list title matches first, then exact "
            "text matches, related-title matches and keyword relevance."
        ),
    )

    if analyzer is None:
        ensure_tagger()

    service = SmartSearch(config, analyzer=analyzer)

    logger.info("Performing initial index of %s...", config.vault_root)
    result = service.rebuild()
    if result.outcome == RebuildOutcome.COMPLETED:
        logger.info("Initial index complete: %d documents indexed", result.indexed)
    if result.failed:
        logger.warning("%d documents could not be indexed", result.failed)

    logger.info("Registering tools...")
    register_tools(mcp, service)

    logger.info("Server configured successfully")
    return mcp, service


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="smart-search - MCP server for markdown vaults")
    parser.add_argument(
        "--no-sync",
        action="store_true",
        help="Disable periodic background sync with the vault",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    sync_enabled = not args.no_sync and config.sync_interval > 0

    # Print startup banner
    logger.info("=" * 50)
    logger.info("smart-search starting...")
    logger.info("  VAULT:      %s", config.vault_root)
    logger.info("  PORT:       %s", config.port)
    logger.info("  NLP DEPTH:  %s", config.nlp_depth)
    logger.info("  EXCLUDED:   folders=%s tags=%s", config.excluded_folders, config.excluded_tags)
    logger.info("  SYNC:       %s", f"{config.sync_interval}s" if sync_enabled else "disabled")
    logger.info("=" * 50)

    sync_manager: SyncManager | None = None
    try:
        mcp, service = create_server(config)
        if sync_enabled:
            sync_manager = SyncManager(service, config.sync_interval)
            sync_manager.start()
        logger.info("Starting MCP server on port %s...", config.port)
        mcp.run(transport="sse", host="0.0.0.0", port=config.port)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)
    finally:
        if sync_manager is not None:
            sync_manager.stop()


if __name__ == "__main__":
    main()
