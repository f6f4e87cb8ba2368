"""Unit tests for sidecar.parser."""

import textwrap

from sidecar.parser import (
    frontmatter_tags,
    parse_frontmatter,
    parse_metadata,
    parse_tags,
    render_note,
    strip_wikilink,
)

# ---------------------------------------------------------------------------
# parse_frontmatter
# ---------------------------------------------------------------------------


class TestParseFrontmatter:
    def test_no_frontmatter_returns_empty_dict(self):
        meta, body = parse_frontmatter("Just some text.")
        assert meta == {}
        assert body == "Just some text."

    def test_basic_frontmatter(self):
        raw = textwrap.dedent("""\
            ---
            source: https://example.com/article
            tags: [a, b]
            ---
            Body here.
        """)
        meta, body = parse_frontmatter(raw)
        assert meta["source"] == "https://example.com/article"
        assert meta["tags"] == ["a", "b"]
        assert "Body here." in body

    def test_frontmatter_not_at_start_is_ignored(self):
        meta, _ = parse_frontmatter("Intro\n---\nsource: https://x.com\n---\nMore text.")
        assert meta == {}

    def test_empty_frontmatter_block(self):
        meta, body = parse_frontmatter("---\n---\nBody.")
        assert meta == {}
        assert body == "Body."

    def test_invalid_yaml_returns_empty_dict(self):
        meta, body = parse_frontmatter("---\nsource: [unclosed\n---\nBody.")
        assert meta == {}
        assert "Body." in body

    def test_non_mapping_yaml_returns_empty_dict(self):
        meta, _ = parse_frontmatter("---\n- just\n- a list\n---\nBody.")
        assert meta == {}

    def test_frontmatter_only_file(self):
        meta, body = parse_frontmatter("---\nurl: https://x.com\n---")
        assert meta == {"url": "https://x.com"}
        assert body == ""


# ---------------------------------------------------------------------------
# parse_tags / frontmatter_tags
# ---------------------------------------------------------------------------


class TestTags:
    def test_inline_tags(self):
        assert parse_tags("Post tagged #python and #open-source.") == ["python", "open-source"]

    def test_deduplication(self):
        assert parse_tags("#python code in #python style") == ["python"]

    def test_url_fragment_not_matched(self):
        assert "section" not in parse_tags("Visit https://example.com/page#section for info.")

    def test_code_span_excluded(self):
        assert "include" not in parse_tags("Use `#include` in C code.")

    def test_frontmatter_tags_list(self):
        assert frontmatter_tags({"tags": ["todo", "#misc"]}) == ["#todo", "#misc"]

    def test_frontmatter_tags_comma_string(self):
        assert frontmatter_tags({"tags": "todo, reading"}) == ["#todo", "#reading"]

    def test_frontmatter_tags_ignores_junk(self):
        assert frontmatter_tags({"tags": [1, None, " ", "ok"]}) == ["#ok"]
        assert frontmatter_tags({"tags": 5}) == []
        assert frontmatter_tags({}) == []


# ---------------------------------------------------------------------------
# parse_metadata
# ---------------------------------------------------------------------------


class TestParseMetadata:
    def test_full_note(self):
        meta = parse_metadata(
            textwrap.dedent("""\
                ---
                source: https://example.com
                tags: [setup]
                ---
                Also tagged #tutorial here.

                ```
                #not-a-tag inside code
                ```
            """)
        )
        assert meta.frontmatter == {"source": "https://example.com", "tags": ["setup"]}
        assert meta.tags == ["#tutorial"]

    def test_no_frontmatter(self):
        meta = parse_metadata("# Heading\nJust text.\n")
        assert meta.frontmatter == {}
        assert meta.tags == []


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_strip_wikilink(self):
        assert strip_wikilink("[[Some Channel]]") == "Some Channel"
        assert strip_wikilink("  Plain  ") == "Plain"

    def test_render_note_round_trips_frontmatter(self):
        text = render_note({"source": "https://example.com", "tags": ["a"]}, "Body.\n")
        meta, body = parse_frontmatter(text)
        assert meta == {"source": "https://example.com", "tags": ["a"]}
        assert body == "Body.\n"

    def test_render_note_without_frontmatter(self):
        assert render_note({}, "Body") == "Body"
