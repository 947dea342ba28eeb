"""Text analysis for documents and queries.

The index only depends on the ``TextAnalyzer`` protocol. ``NltkAnalyzer`` is the
shipped implementation: NLTK tokenization, part-of-speech tagging and regexp
chunking, with results cached by exact text in a bounded LRU mapping.
"""

import logging
import threading
from collections import OrderedDict
from typing import Protocol

import nltk
from nltk.tokenize import RegexpTokenizer

from smart_search.indexer.models import QueryAnalysis, TextAnalysis
from smart_search.indexer.synonyms import synonyms_for

logger = logging.getLogger(__name__)

TAGGER_RESOURCE = "averaged_perceptron_tagger_eng"

NLP_DEPTHS = ("basic", "medium", "deep")

POSITIVE_WORDS = {"good", "great", "excellent", "amazing", "wonderful"}
NEGATIVE_WORDS = {"bad", "terrible", "awful", "horrible", "poor"}

QUESTION_TAGS = {"WDT", "WP", "WP$", "WRB"}
PHRASE_DETERMINERS = {"a", "the"}

# Noun+ (Preposition Noun+)?
NOUN_PHRASE_GRAMMAR = "NP: {<NN.*>+(<IN><NN.*>+)?}"
# Verb (a|the)? Noun+ ; the determiner word is checked after chunking
VERB_PHRASE_GRAMMAR = "VP: {<VB.*><DT>?<NN.*>+}"

DEFAULT_CACHE_SIZE = 2048


class TextAnalyzer(Protocol):
    """Contract the index relies on. Must be deterministic for equal input."""

    def analyze(self, text: str) -> TextAnalysis: ...

    def analyze_query(self, text: str) -> QueryAnalysis: ...


def tagger_available() -> bool:
    """Check whether the NLTK part-of-speech tagger data is installed."""
    try:
        nltk.data.find(f"taggers/{TAGGER_RESOURCE}/")
    except LookupError:
        return False
    return True


def ensure_tagger(download: bool = True) -> bool:
    """Make sure the tagger data is present, downloading it if allowed."""
    if tagger_available():
        return True
    if not download:
        return False
    logger.info("Downloading NLTK resource %s", TAGGER_RESOURCE)
    if not nltk.download(TAGGER_RESOURCE, quiet=True):
        logger.warning("Could not download NLTK resource %s", TAGGER_RESOURCE)
        return False
    return tagger_available()


def _words(tagged: list[tuple[str, str]], prefix: str) -> list[str]:
    return [word for word, tag in tagged if tag.startswith(prefix)]


def _dedupe_lower(words: list[str]) -> list[str]:
    return list(dict.fromkeys(word.lower() for word in words if word))


class NltkAnalyzer:
    """
    Analyzer backed by NLTK.

    Thread Safety:
        The cache is guarded by a lock; analysis itself runs outside it.
    """

    def __init__(self, depth: str = "deep", cache_size: int = DEFAULT_CACHE_SIZE):
        """
        Initialize the analyzer.

        Args:
            depth: Topic extraction depth (basic, medium or deep)
            cache_size: Maximum number of cached document analyses
        """
        if depth not in NLP_DEPTHS:
            raise ValueError(f"NLP depth must be one of {NLP_DEPTHS}, got {depth!r}")
        if cache_size <= 0:
            raise ValueError(f"Cache size must be positive, got {cache_size}")

        self.depth = depth
        self.cache_size = cache_size
        self._cache: OrderedDict[str, TextAnalysis] = OrderedDict()
        self._cache_lock = threading.Lock()
        self._tokenizer = RegexpTokenizer(r"\w+(?:[-']\w+)*")
        self._noun_phrases = nltk.RegexpParser(NOUN_PHRASE_GRAMMAR)
        self._verb_phrases = nltk.RegexpParser(VERB_PHRASE_GRAMMAR)

    # Document analysis

    def analyze(self, text: str) -> TextAnalysis:
        """Analyze document text, returning a cached result when available."""
        with self._cache_lock:
            cached = self._cache.get(text)
            if cached is not None:
                self._cache.move_to_end(text)
                return cached

        tokens = self._tokenizer.tokenize(text)
        tagged = nltk.pos_tag(tokens) if tokens else []

        result = TextAnalysis(
            tokens=tokens,
            entities=set(self._entities(tagged)),
            topics=set(self._topics(tagged)),
            sentiment=self._sentiment(tokens),
        )

        with self._cache_lock:
            self._cache[text] = result
            self._cache.move_to_end(text)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)

        return result

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    @property
    def cached_count(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    def _entities(self, tagged: list[tuple[str, str]]) -> list[str]:
        """Runs of proper nouns."""
        entities: list[str] = []
        run: list[str] = []
        for word, tag in tagged:
            if tag in ("NNP", "NNPS"):
                run.append(word)
                continue
            if run:
                entities.append(" ".join(run))
                run = []
        if run:
            entities.append(" ".join(run))
        return entities

    def _topics(self, tagged: list[tuple[str, str]]) -> list[str]:
        topics = _words(tagged, "NN")
        if self.depth in ("medium", "deep"):
            topics += _words(tagged, "VB")
        if self.depth == "deep":
            topics += _words(tagged, "JJ")
            topics += self._chunks(self._noun_phrases, tagged, "NP")
        return topics

    def _sentiment(self, tokens: list[str]) -> int:
        words = {token.lower() for token in tokens}
        positive = bool(words & POSITIVE_WORDS)
        negative = bool(words & NEGATIVE_WORDS)
        if positive and not negative:
            return 1
        if negative and not positive:
            return -1
        return 0

    # Query analysis

    def analyze_query(self, text: str) -> QueryAnalysis:
        """Analyze a search query into intent, keywords and related terms."""
        tokens = self._tokenizer.tokenize(text)
        tagged = nltk.pos_tag(tokens) if tokens else []

        nouns = _words(tagged, "NN")
        verbs = _words(tagged, "VB")
        adjectives = _words(tagged, "JJ")
        adverbs = _words(tagged, "RB")

        phrases = self._chunks(self._verb_phrases, tagged, "VP", check_determiners=True)

        keywords = _dedupe_lower(phrases + nouns + verbs + adjectives)

        related: list[str] = []
        for term in _dedupe_lower(nouns + verbs + adjectives + adverbs):
            related.append(term)
            related.extend(synonyms_for(term))

        return QueryAnalysis(
            intent=self._intent(text, tagged),
            keywords=keywords,
            entities=set(self._entities(tagged)),
            related_terms=list(dict.fromkeys(related)),
        )

    def _intent(self, text: str, tagged: list[tuple[str, str]]) -> str:
        if text.strip().endswith("?"):
            return "question"
        if tagged and tagged[0][1] in QUESTION_TAGS:
            return "question"
        if tagged and tagged[0][1] == "VB":
            return "command"
        return "statement"

    def _chunks(
        self,
        parser: nltk.RegexpParser,
        tagged: list[tuple[str, str]],
        label: str,
        check_determiners: bool = False,
    ) -> list[str]:
        if not tagged:
            return []
        phrases: list[str] = []
        for subtree in parser.parse(tagged).subtrees(lambda t: t.label() == label):
            leaves = subtree.leaves()
            if check_determiners and any(
                tag == "DT" and word.lower() not in PHRASE_DETERMINERS
                for word, tag in leaves
            ):
                continue
            phrases.append(" ".join(word for word, _ in leaves))
        return phrases
