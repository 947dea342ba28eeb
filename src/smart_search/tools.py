"""MCP tools for the smart-search server.

This module defines the tools exposed by the MCP server:
- search: Ranked search across the vault
- reindex: Rebuild the index from the vault
- cancel_reindex: Cancel a running rebuild
- index_status: Report index size and rebuild state
"""

from dataclasses import asdict

from fastmcp import FastMCP

from smart_search.indexer.ranker import MAX_RESULTS
from smart_search.service import SmartSearch


def register_tools(mcp: FastMCP, service: SmartSearch) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        service: Search service backing the tools
    """

    @mcp.tool()
    def search(query: str, limit: int = MAX_RESULTS) -> list[dict]:
        """Search the vault for notes matching a free-text query.

        Results are ordered by match type, then relevance:
        - title: the note title contains the query
        - content: the note text contains the query as a word
        - semantic-title: the title contains a synonym or related mood word
        - relevance: weighted keyword score over title, headings, text and tables

        Args:
            query: Free-text query (at least 2 characters)
            limit: Maximum number of results to return (default and maximum: 50)

        Returns:
            List of results with path, filename, match, score and reason.
        """
        hits = service.search(query, limit=min(limit, MAX_RESULTS))
        return [
            {**asdict(hit), "score": round(hit.score, 2)}
            for hit in hits
        ]

    @mcp.tool()
    def reindex() -> dict:
        """Rebuild the search index from every note in the vault.

        Returns:
            Outcome (completed, cancelled or rejected) with document counts.
        """
        result = service.rebuild()
        return {
            "outcome": result.outcome.value,
            "total": result.total,
            "indexed": result.indexed,
            "excluded": result.excluded,
            "failed": result.failed,
            "failed_paths": result.failed_paths,
        }

    @mcp.tool()
    def cancel_reindex() -> dict:
        """Cancel a running rebuild. Already indexed notes stay searchable."""
        return {"cancelled": service.cancel_rebuild()}

    @mcp.tool()
    def index_status() -> dict:
        """Report the number of indexed notes, rebuild state and exclusions."""
        return service.status()
