"""
Indexer module for smart-search.

This module keeps an in-memory index of vault documents in step with the
filesystem and ranks documents against free-text queries.
"""

from smart_search.indexer.analyzer import NltkAnalyzer, TextAnalyzer
from smart_search.indexer.index import CancellationToken, DocumentIndex, IndexingError
from smart_search.indexer.models import (
    DocumentStructure,
    IndexedDocument,
    MatchPass,
    QueryAnalysis,
    RankedDocument,
    RebuildOutcome,
    RebuildResult,
    SourceDocument,
    Table,
    TextAnalysis,
)
from smart_search.indexer.parser import parse_frontmatter, parse_structure
from smart_search.indexer.ranker import Ranker
from smart_search.indexer.synonyms import related_terms
from smart_search.indexer.walker import walk_vault

__all__ = [
    "CancellationToken",
    "DocumentIndex",
    "DocumentStructure",
    "IndexedDocument",
    "IndexingError",
    "MatchPass",
    "NltkAnalyzer",
    "QueryAnalysis",
    "RankedDocument",
    "Ranker",
    "RebuildOutcome",
    "RebuildResult",
    "SourceDocument",
    "Table",
    "TextAnalysis",
    "TextAnalyzer",
    "parse_frontmatter",
    "parse_structure",
    "related_terms",
    "walk_vault",
]
