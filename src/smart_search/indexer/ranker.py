"""Four-pass relevance ranking over indexed documents.

Each pass receives the documents that earlier passes did not match and returns
its own matches plus the remaining candidates:

1. Exact title match
2. Exact content match
3. Semantic title match (synonym and emotion tables)
4. Weighted relevance score over query keywords and related terms

A document appears at most once, in the earliest pass that matches it.
"""

import logging
import math
import re
from collections.abc import Sequence
from functools import lru_cache

from smart_search.indexer.analyzer import TextAnalyzer
from smart_search.indexer.models import (
    IndexedDocument,
    MatchPass,
    QueryAnalysis,
    RankedDocument,
)
from smart_search.indexer.synonyms import related_terms

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 50
MAX_RELEVANCE_CANDIDATES = 100

EXACT_TITLE_SCORE = 100.0
TITLE_WORD_SCORE = 90.0
CONTENT_MATCH_WEIGHT = 70.0
SEMANTIC_TITLE_SCORE = 50.0

# Per-term contributions for the relevance pass
FILENAME_TERM_SCORE = 2.0
HEADER_TERM_SCORE = 3.0
CONTENT_WORD_SCORE = 1.0
CONTENT_SUBSTRING_SCORE = 0.5
TABLE_CELL_SCORE = 2.0
TABLE_SCAN_THRESHOLD = 2.0

# Content length cap for the log normalization denominator
MAX_NORMALIZATION_LENGTH = 5000

PassResult = tuple[list[RankedDocument], list[IndexedDocument]]


@lru_cache(maxsize=4096)
def _word_pattern(term: str) -> re.Pattern[str]:
    return re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)", re.IGNORECASE)


def find_whole_word(text: str, term: str) -> re.Match[str] | None:
    """Find ``term`` bounded by non-word characters or string edges."""
    return _word_pattern(term).search(text)


def has_whole_word(text: str, term: str) -> bool:
    return find_whole_word(text, term) is not None


def match_titles(candidates: Sequence[IndexedDocument], query: str) -> PassResult:
    """Pass 1: filename equals the query or contains it as a whole word."""
    matched: list[RankedDocument] = []
    remaining: list[IndexedDocument] = []
    for document in candidates:
        title = document.filename.lower()
        if title == query:
            matched.append(RankedDocument(document, MatchPass.TITLE, EXACT_TITLE_SCORE))
        elif has_whole_word(title, query):
            matched.append(RankedDocument(document, MatchPass.TITLE, TITLE_WORD_SCORE))
        else:
            remaining.append(document)
    return matched, remaining


def match_content(candidates: Sequence[IndexedDocument], query: str) -> PassResult:
    """Pass 2: the query appears as a whole word in the document tokens."""
    matched: list[RankedDocument] = []
    remaining: list[IndexedDocument] = []
    for document in candidates:
        if has_whole_word(document.content, query):
            matched.append(
                RankedDocument(document, MatchPass.CONTENT, CONTENT_MATCH_WEIGHT)
            )
        else:
            remaining.append(document)
    matched.sort(key=lambda result: result.score, reverse=True)
    return matched, remaining


def match_semantic_titles(
    candidates: Sequence[IndexedDocument], related: Sequence[str]
) -> PassResult:
    """Pass 3: filename contains a related term as a whole word."""
    if not related:
        return [], list(candidates)

    matched: list[RankedDocument] = []
    remaining: list[IndexedDocument] = []
    for document in candidates:
        title = document.filename.lower()
        if any(has_whole_word(title, term) for term in related):
            matched.append(
                RankedDocument(document, MatchPass.SEMANTIC_TITLE, SEMANTIC_TITLE_SCORE)
            )
        else:
            remaining.append(document)
    return matched, remaining


def build_search_terms(analysis: QueryAnalysis, related: Sequence[str]) -> list[str]:
    """
    Combine query keywords with related terms for the relevance pass.

    Terms are lower-cased, empty terms dropped and duplicates removed in
    first-seen order.
    """
    terms: list[str] = []
    terms.extend(analysis.keywords)
    terms.extend(analysis.related_terms)
    terms.extend(related)
    for keyword in analysis.keywords:
        terms.extend(related_terms(keyword))

    lowered = (term.strip().lower() for term in terms)
    return list(dict.fromkeys(term for term in lowered if term))


def score_document(document: IndexedDocument, terms: Sequence[str]) -> float:
    """
    Compute the length-normalized relevance score of a document.

    For each term the first satisfied tier wins: filename, then headers. Failing
    both, content matches accumulate and table cells are consulted when the
    content contribution is still low.
    """
    content = document.content
    if not any(term in content for term in terms):
        return 0.0

    filename = document.filename.lower()
    headers = [header.lower() for header in document.structure.headers]

    raw_score = 0.0
    for term in terms:
        if has_whole_word(filename, term):
            raw_score += FILENAME_TERM_SCORE
            continue

        if any(has_whole_word(header, term) for header in headers):
            raw_score += HEADER_TERM_SCORE
            continue

        contribution = 0.0
        if has_whole_word(content, term):
            contribution += CONTENT_WORD_SCORE
        elif term in content:
            contribution += CONTENT_SUBSTRING_SCORE

        if contribution < TABLE_SCAN_THRESHOLD:
            for cell in document.table_cells:
                if has_whole_word(cell, term):
                    contribution += TABLE_CELL_SCORE
                    break

        raw_score += contribution

    return raw_score / math.log(min(len(content), MAX_NORMALIZATION_LENGTH) + 1)


def match_relevance(
    candidates: Sequence[IndexedDocument], terms: Sequence[str]
) -> PassResult:
    """Pass 4: keep documents with a positive score, best first."""
    if not terms:
        return [], list(candidates)

    matched: list[RankedDocument] = []
    remaining: list[IndexedDocument] = []
    for position, document in enumerate(candidates):
        score = score_document(document, terms)
        if score > 0:
            matched.append(RankedDocument(document, MatchPass.RELEVANCE, score))
            if len(matched) >= MAX_RELEVANCE_CANDIDATES:
                remaining.extend(candidates[position + 1 :])
                break
        else:
            remaining.append(document)

    matched.sort(key=lambda result: result.score, reverse=True)
    return matched, remaining


class Ranker:
    """Runs the four ranking passes against a snapshot of the index."""

    def __init__(self, analyzer: TextAnalyzer):
        self.analyzer = analyzer

    def rank(
        self, documents: Sequence[IndexedDocument], query: str
    ) -> list[RankedDocument]:
        """
        Rank documents for a free-text query.

        Args:
            documents: Index snapshot in iteration order
            query: Raw query text

        Returns:
            At most MAX_RESULTS ranked documents; empty for queries shorter
            than MIN_QUERY_LENGTH.
        """
        lower_query = query.strip().lower()
        if len(lower_query) < MIN_QUERY_LENGTH:
            return []

        query_analysis = self.analyzer.analyze_query(query)
        related = related_terms(lower_query)

        title_matches, remaining = match_titles(documents, lower_query)
        content_matches, remaining = match_content(remaining, lower_query)
        semantic_matches, remaining = match_semantic_titles(remaining, related)

        terms = build_search_terms(query_analysis, related)
        relevance_matches, _ = match_relevance(remaining, terms)

        logger.debug(
            "Query %r: %d title, %d content, %d semantic, %d relevance matches",
            query,
            len(title_matches),
            len(content_matches),
            len(semantic_matches),
            len(relevance_matches),
        )

        results = title_matches + content_matches + semantic_matches + relevance_matches
        return results[:MAX_RESULTS]
