"""Tests for placeholder rendering of CriticMarkup documents.

Covers the block/inline split: regions are hidden behind placeholders while
markdown is block-parsed, then restored as styled spans.
"""

from __future__ import annotations

import re

import pytest
from selectolax.lexbor import LexborHTMLParser

from markaround.critic.plugin import MAX_RENDER_DEPTH
from markaround.critic.render import CriticRenderer, placeholder_pattern
from markaround.sample import SAMPLE


def _spans(html: str, selector: str) -> list[dict[str, str | None]]:
    """Attributes of every node matching ``selector``."""
    tree = LexborHTMLParser(html)
    return [dict(node.attributes) for node in tree.css(selector)]


class TestPlainDocuments:
    """Documents without annotations go straight to the block renderer."""

    @pytest.mark.parametrize(
        "source",
        ["", "Plain text.", "# Title\n\nSome **bold** text with {braces}.\n"],
    )
    def test_matches_block_renderer(
        self, renderer: CriticRenderer, source: str
    ) -> None:
        """render() equals a direct block render."""
        assert renderer.render(source) == renderer.render_block(source)


class TestRegionMarkup:
    """HTML produced for each kind."""

    def test_addition_in_paragraph(self, renderer: CriticRenderer) -> None:
        """An inline addition becomes a span with markup and offset."""
        html = renderer.render("a {++b++} c")
        assert html.startswith('<p>a <span class="critic-addition" ')
        assert 'data-markup="{++b++}" data-offset="2">b<span' in html
        assert '<button class="critic-accept" title="Accept addition">' in html
        assert '<button class="critic-reject" title="Reject addition">' in html
        assert html.endswith("</span> c</p>\n")

    def test_markup_attribute_is_escaped(self, renderer: CriticRenderer) -> None:
        """Delimiter characters are HTML-escaped in data-markup."""
        html = renderer.render("The word {~~colour~>color~~} changed.")
        assert 'data-markup="{~~colour~&gt;color~~}"' in html
        (attrs,) = _spans(html, "span.critic-substitution")
        assert attrs["data-markup"] == "{~~colour~>color~~}"

    def test_substitution_parts(self, renderer: CriticRenderer) -> None:
        """Old text is deletion-styled, new text addition-styled."""
        html = renderer.render("{~~colour~>color~~}")
        tree = LexborHTMLParser(html)
        outer = tree.css_first("span.critic-substitution")
        assert outer is not None
        assert outer.css_first("span.critic-deletion").text() == "colour"
        assert outer.css_first("span.critic-addition").text() == "color"

    def test_comment_is_marker_without_body(self, renderer: CriticRenderer) -> None:
        """Comments render as a marker carrying the text as an attribute."""
        html = renderer.render('x{>>check "this" & that<<}')
        (attrs,) = _spans(html, "span.critic-comment-marker")
        assert attrs["data-comment-text"] == 'check "this" & that'
        assert 'title="Remove comment"' in html
        tree = LexborHTMLParser(html)
        marker = tree.css_first("span.critic-comment-marker")
        assert "check" not in (marker.text() or "")

    def test_highlight_body_renders_markdown(self, renderer: CriticRenderer) -> None:
        """Region bodies go through the inline renderer."""
        html = renderer.render("{==**bold** claim==}")
        assert "<strong>bold</strong> claim" in html

    def test_user_html_is_escaped(self, renderer: CriticRenderer) -> None:
        """Raw HTML inside a region is escaped, not passed through."""
        html = renderer.render("{++<script>alert(1)</script>++}")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_no_placeholders_left(self, renderer: CriticRenderer) -> None:
        """Every placeholder is replaced in the final HTML."""
        html = renderer.render(SAMPLE)
        assert re.search(r"CRITICMARKER[0-9a-f]{32}N\d+ENDCRITIC", html) is None

    def test_placeholder_lookalike_text_is_literal(
        self, renderer: CriticRenderer
    ) -> None:
        """Text shaped like a placeholder is shown as typed, not replaced."""
        source = "CRITICMARKER0ENDCRITIC and {++x++}"
        html = renderer.render(source)
        assert html.count("critic-addition") == 1
        assert html.count("data-offset=") == 1
        assert html.startswith("<p>CRITICMARKER0ENDCRITIC and ")

    def test_placeholders_are_per_render(self) -> None:
        """Patterns from different nonces do not match each other."""
        first = placeholder_pattern("aa")
        assert first.fullmatch("CRITICMARKERaaN3ENDCRITIC") is not None
        assert first.fullmatch("CRITICMARKERbbN3ENDCRITIC") is None


class TestBlockBoundaries:
    """Regions containing block syntax."""

    def test_heading_deletion_renders_in_h2(self, renderer: CriticRenderer) -> None:
        """A deleted heading alone on its line stays a heading."""
        html = renderer.render("{--## Title--}\n\nBody text.\n")
        tree = LexborHTMLParser(html)
        h2 = tree.css_first("h2")
        assert h2 is not None
        deletion = h2.css_first("span.critic-deletion")
        assert deletion is not None
        assert deletion.attributes["data-markup"] == "{--## Title--}"
        assert 'data-offset="0">Title<span class="critic-controls">' in html
        assert h2.text().startswith("Title")

    def test_heading_with_surrounding_newlines(
        self, renderer: CriticRenderer
    ) -> None:
        """Boundary newlines inside the region are ignored for the heading check."""
        html = renderer.render("{++\n### Added section\n++}\n")
        tree = LexborHTMLParser(html)
        h3 = tree.css_first("h3")
        assert h3 is not None
        assert h3.css_first("span.critic-addition") is not None
        assert h3.text().startswith("Added section")

    def test_heading_not_at_line_start(self, renderer: CriticRenderer) -> None:
        """A region mid-line is never lifted into a heading."""
        html = renderer.render("text {--## Title--}\n")
        assert "<h2>" not in html

    def test_comment_heading_not_lifted(self, renderer: CriticRenderer) -> None:
        """Only additions, deletions and highlights carry headings."""
        html = renderer.render("{>>## note<<}\n")
        assert "<h2>" not in html

    def test_multiline_region_not_split(self, renderer: CriticRenderer) -> None:
        """A region spanning paragraphs stays one span."""
        source = "{--\nFirst line {++with addition++}.\n--}\n\nAfter.\n"
        html = renderer.render(source)
        assert len(_spans(html, "span.critic-deletion")) == 1
        assert "<p>After.</p>" in html

    def test_nested_region_rendered_by_inline_layer(
        self, renderer: CriticRenderer
    ) -> None:
        """Nested annotations inside a region body are styled as well."""
        html = renderer.render("{--outer {++inner++} text--}")
        tree = LexborHTMLParser(html)
        outer = tree.css_first("span.critic-deletion")
        assert outer is not None
        inner = outer.css_first("span.critic-addition")
        assert inner is not None
        assert inner.attributes["data-markup"] == "{++inner++}"

    def test_offsets_are_source_offsets(self, renderer: CriticRenderer) -> None:
        """data-offset of top-level regions indexes into the source."""
        source = "# H\n\npara {++one++} and {--two--}\n"
        html = renderer.render(source)
        offsets = [
            int(a["data-offset"] or -1)
            for a in _spans(html, "span[data-offset]")
        ]
        assert offsets == [source.index("{++"), source.index("{--")]


class TestSample:
    """The bundled sample exercises every kind."""

    def test_all_kinds_present(self, renderer: CriticRenderer) -> None:
        """Each CSS class appears in the sample render."""
        html = renderer.render(SAMPLE)
        for css_class in (
            "critic-addition",
            "critic-deletion",
            "critic-substitution",
            "critic-comment-marker",
            "critic-highlight",
        ):
            assert css_class in html


class TestPathologicalInput:
    """Rendering never fails on malformed or extreme markup."""

    def test_many_unclosed_openers(self, renderer: CriticRenderer) -> None:
        """Stray openers render as text."""
        source = "{++ " * 40
        html = renderer.render(source)
        assert "critic-" not in html
        assert html.count("{++") == 40

    def test_deep_nesting_renders(self, renderer: CriticRenderer) -> None:
        """Deep nesting renders; levels past the limit stay literal."""
        depth = MAX_RENDER_DEPTH + 200
        source = "{++" * depth + "x" + "++}" * depth
        html = renderer.render(source)
        tree = LexborHTMLParser(html)
        assert len(tree.css("span.critic-addition")) == MAX_RENDER_DEPTH + 1
        assert "{++" in html
