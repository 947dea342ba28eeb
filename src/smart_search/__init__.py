"""
smart-search - ranked search for markdown vaults.

Keeps an in-memory index of a vault of markdown notes in step with the
filesystem and answers free-text queries with a ranked list of notes.

Stack:
- Python + FastMCP (tool surface over SSE)
- NLTK (tokenization, part-of-speech tagging)
- In-memory index (rebuilt on start, never persisted)
- Markdown (source of truth)
"""

__version__ = "0.1.0"
