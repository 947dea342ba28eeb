"""Shared fixtures for smart-search tests."""

import re

import pytest

from smart_search.indexer.models import QueryAnalysis, TextAnalysis

WORD_PATTERN = re.compile(r"\w+(?:[-']\w+)*")
STOPWORDS = {"a", "an", "and", "for", "in", "of", "on", "the", "to", "we", "is"}

ENV_VARS = (
    "SMART_SEARCH_VAULT",
    "SMART_SEARCH_PORT",
    "SMART_SEARCH_CONFIG",
    "SMART_SEARCH_EXCLUDED_FOLDERS",
    "SMART_SEARCH_EXCLUDED_TAGS",
    "SMART_SEARCH_EXCLUDE_WIKILINKS",
    "SMART_SEARCH_NLP_DEPTH",
    "SMART_SEARCH_SYNC_INTERVAL",
    "SMART_SEARCH_CACHE_SIZE",
)


class CountingAnalyzer:
    """Deterministic analyzer that records how often it is called.

    Tokens are the words of the text; query keywords are its non-stopwords.
    """

    def __init__(self, fail_on: str | None = None):
        self.fail_on = fail_on
        self.analyze_calls: list[str] = []
        self.query_calls: list[str] = []

    def analyze(self, text: str) -> TextAnalysis:
        self.analyze_calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("analyzer exploded")
        return TextAnalysis(tokens=WORD_PATTERN.findall(text))

    def analyze_query(self, text: str) -> QueryAnalysis:
        self.query_calls.append(text)
        words = [w.lower() for w in WORD_PATTERN.findall(text)]
        keywords = [w for w in words if w not in STOPWORDS]
        return QueryAnalysis(keywords=list(dict.fromkeys(keywords)))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from SMART_SEARCH_* variables set in the shell."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def analyzer() -> CountingAnalyzer:
    return CountingAnalyzer()


@pytest.fixture
def failing_analyzer() -> CountingAnalyzer:
    """Analyzer that raises for any text containing EXPLODE."""
    return CountingAnalyzer(fail_on="EXPLODE")
