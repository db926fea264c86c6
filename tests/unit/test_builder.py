"""Unit tests for the entry builder."""

import pytest

from conftest import PYRAX_URL, pyrax_record
from page2atom.core.builder import EntryBuilder, create_builder, resolve_link
from page2atom.core.extractor import PatternExtractor
from page2atom.models import FeedSpec


class TestResolveLink:
    """Tests for resolve_link."""

    @pytest.mark.parametrize(
        "fragment, expected",
        [
            ("#frag", "https://h.example/a/b#frag"),
            ("/x/y", "https://h.example/x/y"),
            ("https://other/z", "https://other/z"),
            ("", "https://h.example/a/b"),
        ],
    )
    def test_resolution_rules(self, fragment, expected):
        """Test anchor, root-relative, absolute and empty links."""
        assert resolve_link("https://h.example/a/b", fragment) == expected

    def test_anchor_keeps_query(self):
        """Test that anchors are appended to the full source URL."""
        assert resolve_link("http://h.example/p?q=1", "#top") == "http://h.example/p?q=1#top"

    def test_root_relative_drops_path_and_credentials(self):
        """Test that root-relative links use only scheme and host."""
        assert resolve_link("https://user:pw@h.example:8443/a/b?c", "/x") == "https://h.example:8443/x"

    def test_relative_path_is_unchanged(self):
        """Test that other links are used as captured."""
        assert resolve_link("https://h.example/a/b", "x/y.html") == "x/y.html"


class TestEntryBuilder:
    """Tests for EntryBuilder."""

    def _match(self, spec: FeedSpec, text: str):
        return PatternExtractor().extract(text, spec)[0]

    def test_build_with_all_groups(self, now):
        """Test title, link and summary mapping."""
        spec = FeedSpec.model_validate(pyrax_record(**{"page.pattern": ""}))
        match = self._match(spec, '<h3><a href="#v1"></a> Version 1 </h3> <p>notes</p> <h3>')

        entry = EntryBuilder().build(match, spec, now)

        assert entry.id == f"{PYRAX_URL}#v1"
        assert entry.link == entry.id
        assert entry.title == "Version 1"
        assert entry.summary == "<p>notes</p>"
        assert entry.updated == now

    def test_no_url_group_uses_source_url(self, now):
        """Test that a feed without url group links entries to the source URL."""
        spec = FeedSpec.model_validate(
            pyrax_record(**{
                "page.pattern": "",
                "entry.pattern": "<h3>(.*?)</h3>",
                "entry.title.group": "1",
                "entry.url.group": "",
                "entry.content.group": "",
            })
        )

        entry = EntryBuilder().build(self._match(spec, "<h3>Only</h3>"), spec, now)

        assert entry.id == PYRAX_URL
        assert entry.summary is None

    def test_empty_content_is_empty_summary(self, now):
        """Test that an empty content capture is kept as an empty summary."""
        spec = FeedSpec.model_validate(pyrax_record(**{"page.pattern": ""}))
        match = self._match(spec, '<h3><a href="/r/1"></a>One</h3>   <h3>')

        entry = EntryBuilder().build(match, spec, now)

        assert entry.id == "https://github.com/r/1"
        assert entry.summary == ""

    def test_summary_html_is_verbatim(self, now):
        """Test that captured markup is neither escaped nor sanitized."""
        spec = FeedSpec.model_validate(pyrax_record(**{"page.pattern": ""}))
        html = '<script>alert("x")</script><b>bold &amp; more</b>'
        match = self._match(spec, f'<h3><a href="#a"></a>A</h3>{html}<h3>')

        assert EntryBuilder().build(match, spec, now).summary == html

    def test_build_all_keeps_order(self, pyrax_spec, now):
        """Test that entries keep match order."""
        spec = pyrax_spec
        text = '<article <h3><a href="#1"></a>1</h3><h3><a href="#2"></a>2</h3><h3></article>'
        matches = PatternExtractor().extract(text, spec)

        entries = create_builder().build_all(matches, spec, now)

        assert [entry.title for entry in entries] == ["1", "2"]
