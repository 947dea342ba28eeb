"""Data models for the indexer."""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path


@dataclass
class Table:
    """A markdown table: header cells plus data rows."""

    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class DocumentStructure:
    """Markdown structure extracted from a document, in document order."""

    headers: list[str] = field(default_factory=list)
    lists: list[str] = field(default_factory=list)
    tables: list[Table] = field(default_factory=list)


@dataclass
class TextAnalysis:
    """Output of the text analyzer for a document."""

    tokens: list[str] = field(default_factory=list)
    entities: set[str] = field(default_factory=set)
    topics: set[str] = field(default_factory=set)
    sentiment: int = 0  # -1, 0 or 1


@dataclass
class QueryAnalysis:
    """Output of the text analyzer for a search query."""

    intent: str = "statement"  # question, command, statement
    keywords: list[str] = field(default_factory=list)
    entities: set[str] = field(default_factory=set)
    related_terms: list[str] = field(default_factory=list)


@dataclass
class IndexedDocument:
    """Represents a document in the index."""

    path: str  # Vault-relative, index key
    filename: str  # Display name, used for title matching
    last_modified: float
    analysis: TextAnalysis
    tags: list[str] = field(default_factory=list)
    frontmatter: dict[str, str] = field(default_factory=dict)
    table_cells: list[str] = field(default_factory=list)
    structure: DocumentStructure = field(default_factory=DocumentStructure)

    @cached_property
    def content(self) -> str:
        """Lower-cased token text used for content matching."""
        return " ".join(self.analysis.tokens).lower()


@dataclass
class SourceDocument:
    """A document as supplied by the document source."""

    path: str
    filename: str
    mtime: float
    file_path: Path | None = None
    text: str | None = None

    def read_text(self) -> str:
        """
        Return the current raw text of the document.

        For files, ``mtime`` is refreshed just before reading so it never
        describes newer text than the text returned.
        """
        if self.text is not None:
            return self.text
        if self.file_path is None:
            raise ValueError(f"No content source for {self.path}")
        self.mtime = self.file_path.stat().st_mtime
        return self.file_path.read_text(encoding="utf-8")


class MatchPass(Enum):
    """Ranking pass that produced a search result."""

    TITLE = "title"
    CONTENT = "content"
    SEMANTIC_TITLE = "semantic-title"
    RELEVANCE = "relevance"


@dataclass
class RankedDocument:
    """A search result with ranking information."""

    document: IndexedDocument
    match_pass: MatchPass
    score: float


class RebuildOutcome(Enum):
    """Terminal state of a full index rebuild."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"  # Another rebuild was already running


@dataclass
class RebuildResult:
    """Summary of a full index rebuild."""

    outcome: RebuildOutcome
    total: int = 0
    indexed: int = 0
    excluded: int = 0
    failed: int = 0
    failed_paths: list[str] = field(default_factory=list)
