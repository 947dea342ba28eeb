"""Tests for the markdown structure, frontmatter and tag parsers."""

from smart_search.indexer.models import Table
from smart_search.indexer.parser import (
    extract_tags,
    flatten_tables,
    parse_frontmatter,
    parse_structure,
    render_table,
    strip_wikilinks,
)

TABLE_DOC = """# Budget

| Quarter | Amount |
|---------|--------|
| Q1 | 100 |
| Q2 | 250 |

Some text between.

| Owner | Team |
| --- | --- |
| alice | infra |
"""


class TestParseStructure:
    def test_extracts_headers_in_order(self):
        content = "# One\ntext\n## Two  \n###### Six\n####### Seven"
        structure = parse_structure(content)
        assert structure.headers == ["One", "Two", "Six"]

    def test_header_requires_whitespace(self):
        structure = parse_structure("#tag at line start\n#\n")
        assert structure.headers == []

    def test_extracts_list_items(self):
        content = "- first\n* second\n+ third\n-not a list\n  - indented"
        structure = parse_structure(content)
        assert structure.lists == ["first", "second", "third"]

    def test_extracts_multiple_tables(self):
        structure = parse_structure(TABLE_DOC)
        assert len(structure.tables) == 2

        first, second = structure.tables
        assert first.headers == ["Quarter", "Amount"]
        assert first.rows == [["Q1", "100"], ["Q2", "250"]]
        assert second.headers == ["Owner", "Team"]
        assert second.rows == [["alice", "infra"]]

    def test_drops_empty_cells(self):
        content = "| a | | b |\n|---|---|---|\n| 1 |  | 2 |\n"
        table = parse_structure(content).tables[0]
        assert table.headers == ["a", "b"]
        assert table.rows == [["1", "2"]]

    def test_table_without_separator_is_skipped(self):
        content = "| a | b |\n| 1 | 2 |\n"
        assert parse_structure(content).tables == []

    def test_table_without_rows_is_skipped(self):
        content = "| a | b |\n|---|---|\n\nplain text"
        assert parse_structure(content).tables == []

    def test_handles_crlf_line_endings(self):
        content = "# Title\r\n- item\r\n| a |\r\n|---|\r\n| 1 |\r\n"
        structure = parse_structure(content)
        assert structure.headers == ["Title"]
        assert structure.lists == ["item"]
        assert structure.tables[0].rows == [["1"]]

    def test_empty_content(self):
        structure = parse_structure("")
        assert structure.headers == []
        assert structure.lists == []
        assert structure.tables == []


class TestTables:
    def test_flatten_tables(self):
        tables = [
            Table(headers=["h1", "h2"], rows=[["a", "b"], ["c", "d"]]),
            Table(headers=["x"], rows=[["y"]]),
        ]
        assert flatten_tables(tables) == ["h1", "h2", "a", "b", "c", "d", "x", "y"]

    def test_render_then_parse_preserves_table(self):
        table = Table(
            headers=["Name", "Role", "Since"],
            rows=[["Ada", "Engineer", "2019"], ["Grace", "Admiral", "1943"]],
        )
        reparsed = parse_structure(render_table(table)).tables
        assert reparsed == [table]


class TestParseFrontmatter:
    def test_parses_key_values(self):
        content = "---\ntitle: My Note\nstatus: draft\n---\n# Body"
        assert parse_frontmatter(content) == {"title": "My Note", "status": "draft"}

    def test_splits_on_first_colon_only(self):
        content = "---\nurl: https://example.com:8080/x\n---\n"
        assert parse_frontmatter(content) == {"url": "https://example.com:8080/x"}

    def test_keeps_empty_values(self):
        content = "---\ntags:\n---\n"
        assert parse_frontmatter(content) == {"tags": ""}

    def test_ignores_lines_without_colon(self):
        content = "---\njust text\n: no key\nkey: value\n---\n"
        assert parse_frontmatter(content) == {"key": "value"}

    def test_missing_frontmatter(self):
        assert parse_frontmatter("# No frontmatter\nkey: value") == {}

    def test_unterminated_frontmatter(self):
        assert parse_frontmatter("---\nkey: value\nno closing line") == {}

    def test_must_start_at_first_line(self):
        assert parse_frontmatter("\n---\nkey: value\n---\n") == {}

    def test_delimiter_must_be_exactly_three_dashes(self):
        assert parse_frontmatter("----\nkey: value\n----\n") == {}


class TestExtractTags:
    def test_extracts_lowercased_tags(self):
        content = "Notes #Work and #project/Alpha plus #to-do"
        assert extract_tags(content) == ["#work", "#project/alpha", "#to-do"]

    def test_keeps_duplicates(self):
        assert extract_tags("#a #A #a") == ["#a", "#a", "#a"]

    def test_headings_are_not_tags(self):
        assert extract_tags("# Heading\n## Sub") == []


class TestStripWikilinks:
    def test_removes_wikilinks(self):
        assert strip_wikilinks("See [[Other Note]] and [[x|alias]].") == "See  and ."

    def test_leaves_plain_text(self):
        assert strip_wikilinks("no links [here]") == "no links [here]"
