"""Example MCP server searching a local vault over stdio.

This example shows how to build the smart-search server for a vault passed
on the command line, with an extra tool that explains a single match.
Run with: uv run python examples/example_server.py ~/notes
"""

import logging
import sys
from pathlib import Path

from smart_search.config import Config
from smart_search.indexer.snippets import match_reason
from smart_search.main import create_server

logging.basicConfig(level=logging.INFO)

vault = Path(sys.argv[1] if len(sys.argv) > 1 else ".").expanduser().resolve()
mcp, service = create_server(Config(vault_root=vault, excluded_folders=["Templates"]))


# Example: Add a tool that explains why one note matches a query
@mcp.tool()
def explain_match(path: str, query: str) -> str:
    """Explain why a note matches a query.

    Args:
        path: Vault-relative path of the note
        query: Free-text query

    Returns:
        The match reason, or an error if the note is not indexed
    """
    document = service.index.get_document(path)
    if document is None:
        return f"Error: {path} is not indexed"
    return match_reason(document, query)


if __name__ == "__main__":
    print(f"Starting smart-search example server for {vault}...")
    print("\nAvailable tools:")
    print("  - search, reindex, cancel_reindex, index_status")
    print("  - explain_match")
    print("\nPress Ctrl+C to stop")

    mcp.run()
