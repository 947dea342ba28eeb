"""Parsers for markdown structure, frontmatter and tags."""

import re

from smart_search.indexer.models import DocumentStructure, Table

HEADER_PATTERN = re.compile(r"^#{1,6}[ \t]+(.+)$", re.MULTILINE)
LIST_ITEM_PATTERN = re.compile(r"^[-*+][ \t]+(.+)$", re.MULTILINE)

# Header row, separator row, then one or more data rows
TABLE_PATTERN = re.compile(
    r"\|(.+)\|\n\|[-|\s]+\|\n((?:\|.+\|\n?)+)",
    re.MULTILINE,
)

TAG_PATTERN = re.compile(r"#[\w/-]+")
WIKILINK_PATTERN = re.compile(r"\[\[[^\]]*\]\]")

FRONTMATTER_DELIMITER = "---"


def _split_cells(row: str) -> list[str]:
    """Split a pipe-delimited row into trimmed, non-empty cells."""
    return [cell.strip() for cell in row.split("|") if cell.strip()]


def parse_tables(content: str) -> list[Table]:
    """Extract every well-formed table, in document order."""
    tables: list[Table] = []
    for match in TABLE_PATTERN.finditer(content):
        headers = _split_cells(match.group(1))
        rows = [
            _split_cells(row)
            for row in match.group(2).split("\n")
            if row.strip()
        ]
        tables.append(Table(headers=headers, rows=rows))
    return tables


def parse_structure(content: str) -> DocumentStructure:
    """
    Extract headers, list items and tables from markdown content.

    Malformed markup never raises; it simply does not match.

    Args:
        content: The full markdown content

    Returns:
        DocumentStructure with every element in document order.
    """
    content = content.replace("\r\n", "\n")
    return DocumentStructure(
        headers=[m.group(1).strip() for m in HEADER_PATTERN.finditer(content)],
        lists=[m.group(1).strip() for m in LIST_ITEM_PATTERN.finditer(content)],
        tables=parse_tables(content),
    )


def flatten_tables(tables: list[Table]) -> list[str]:
    """Flatten header and row cells of all tables into one list."""
    cells: list[str] = []
    for table in tables:
        cells.extend(table.headers)
        for row in table.rows:
            cells.extend(row)
    return cells


def render_table(table: Table) -> str:
    """Serialize a table back to pipe-delimited markdown."""
    lines = [
        "| " + " | ".join(table.headers) + " |",
        "| " + " | ".join("---" for _ in table.headers) + " |",
    ]
    for row in table.rows:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines) + "\n"


def parse_frontmatter(content: str) -> dict[str, str]:
    """
    Parse a leading ``---`` delimited block of ``key: value`` lines.

    Each line is split on its first colon. Lines without a colon are ignored.
    An absent or unterminated block yields an empty mapping.
    """
    lines = content.replace("\r\n", "\n").split("\n")
    if not lines or lines[0] != FRONTMATTER_DELIMITER:
        return {}

    try:
        end = lines.index(FRONTMATTER_DELIMITER, 1)
    except ValueError:
        return {}

    frontmatter: dict[str, str] = {}
    for line in lines[1:end]:
        key, sep, value = line.partition(":")
        if sep and key.strip():
            frontmatter[key.strip()] = value.strip()
    return frontmatter


def extract_tags(content: str) -> list[str]:
    """Extract ``#tag`` occurrences, lower-cased, duplicates kept."""
    return [match.group(0).lower() for match in TAG_PATTERN.finditer(content)]


def strip_wikilinks(content: str) -> str:
    """Remove ``[[wikilink]]`` spans from content."""
    return WIKILINK_PATTERN.sub("", content)
