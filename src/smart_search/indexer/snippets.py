"""Human-readable match reasons and highlighted snippets for search results."""

import re
from collections.abc import Sequence

from smart_search.indexer.models import IndexedDocument
from smart_search.indexer.ranker import find_whole_word, has_whole_word
from smart_search.indexer.synonyms import EMOTION_CLUSTERS

SNIPPET_MAX_CHARS = 150
SNIPPET_CHARS_BEFORE = 60
SNIPPET_CHARS_AFTER = 90
SNIPPET_ELLIPSIS = "..."
HIGHLIGHT_MARK = "**"

SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")

DEFAULT_REASON = "Matched in document content"


def query_emotion_terms(query: str) -> list[str]:
    """Emotion clusters (key and members) whose words appear in the query."""
    lower_query = query.strip().lower()
    terms: list[str] = []
    for emotion, members in EMOTION_CLUSTERS.items():
        words = [emotion, *members]
        if any(has_whole_word(lower_query, word) for word in words):
            terms.extend(words)
    return list(dict.fromkeys(terms))


def highlight_keywords(text: str, terms: Sequence[str]) -> str:
    """Wrap whole-word occurrences of any term in ``**`` markers."""
    unique = sorted({t for t in terms if t}, key=len, reverse=True)
    if not unique:
        return text
    pattern = re.compile(
        r"(?<!\w)(" + "|".join(re.escape(t) for t in unique) + r")(?!\w)",
        re.IGNORECASE,
    )
    return pattern.sub(lambda m: f"{HIGHLIGHT_MARK}{m.group(1)}{HIGHLIGHT_MARK}", text)


def _count_terms(sentence: str, terms: Sequence[str]) -> int:
    return sum(1 for term in terms if has_whole_word(sentence, term))


def find_relevant_snippet(text: str, terms: Sequence[str]) -> str | None:
    """
    Find the sentence that best matches the terms and highlight it.

    The sentence with the most matching terms wins, ties going to the earliest.
    Sentences longer than SNIPPET_MAX_CHARS are cut to a window around the
    earliest match.

    Returns:
        The highlighted snippet, or None if no sentence contains a term.
    """
    sentences = [s.strip() for s in SENTENCE_SPLIT_PATTERN.split(text) if s.strip()]
    matching = [s for s in sentences if _count_terms(s, terms)]
    if not matching:
        return None

    best = max(matching, key=lambda s: _count_terms(s, terms))

    if len(best) > SNIPPET_MAX_CHARS:
        matches = [find_whole_word(best, term) for term in terms]
        positions = [match.start() for match in matches if match]
        if positions:
            first = min(positions)
            start = max(0, first - SNIPPET_CHARS_BEFORE)
            end = min(len(best), first + SNIPPET_CHARS_AFTER)
            snippet = highlight_keywords(best[start:end], terms)
            prefix = SNIPPET_ELLIPSIS if start > 0 else ""
            suffix = SNIPPET_ELLIPSIS if end < len(best) else ""
            return f"{prefix}{snippet}{suffix}"

    return highlight_keywords(best, terms)


def match_reason(document: IndexedDocument, query: str) -> str:
    """Explain why a document matched a query."""
    lower_query = query.strip().lower()
    text = " ".join(document.analysis.tokens)

    related = query_emotion_terms(query)
    if related:
        context = f'Related to "{query}" via: {", ".join(related)}'
        snippet = find_relevant_snippet(text, [lower_query, *related])
        if snippet:
            return f"{context}\nContext: {snippet}"
        return context

    return find_relevant_snippet(text, [lower_query]) or DEFAULT_REASON
