"""Tests for the nesting-aware CriticMarkup scanner."""

from __future__ import annotations

import pytest

from markaround.critic.scanner import (
    Region,
    find_close,
    find_top_level_separator,
    region_from_markup,
    scan,
)
from markaround.critic.syntax import Kind, detect_opener, wrap


class TestDetectOpener:
    """Tests for opener detection."""

    @pytest.mark.parametrize(
        ("text", "kind"),
        [
            ("{++", Kind.ADDITION),
            ("{--", Kind.DELETION),
            ("{~~", Kind.SUBSTITUTION),
            ("{>>", Kind.COMMENT),
            ("{==", Kind.HIGHLIGHT),
        ],
    )
    def test_each_opener(self, text: str, kind: Kind) -> None:
        """Every opener maps to its kind."""
        delimiter = detect_opener(text, 0)
        assert delimiter is not None
        assert delimiter.kind == kind

    def test_not_an_opener(self) -> None:
        """Braces without a known pair are not openers."""
        assert detect_opener("{+-", 0) is None
        assert detect_opener("{", 0) is None
        assert detect_opener("x{++", 0) is None

    def test_wrap(self) -> None:
        """wrap puts content between the kind's delimiters."""
        assert wrap(Kind.COMMENT, "hi") == "{>>hi<<}"


class TestScan:
    """Tests for scan()."""

    def test_plain_text_has_no_regions(self) -> None:
        """Text without delimiters yields nothing."""
        assert scan("Just some {text} with braces.") == []

    def test_empty_string(self) -> None:
        """Empty input yields nothing."""
        assert scan("") == []

    @pytest.mark.parametrize(
        ("markup", "kind", "content"),
        [
            ("{++added++}", Kind.ADDITION, "added"),
            ("{--removed--}", Kind.DELETION, "removed"),
            ("{~~old~>new~~}", Kind.SUBSTITUTION, "old~>new"),
            ("{>>a note<<}", Kind.COMMENT, "a note"),
            ("{==marked==}", Kind.HIGHLIGHT, "marked"),
        ],
    )
    def test_single_region_spans_markup(
        self, markup: str, kind: Kind, content: str
    ) -> None:
        """A lone annotation is one region covering the whole string."""
        regions = scan(markup)
        assert regions == [
            Region(kind=kind, start=0, end=len(markup), full_markup=markup)
        ]
        assert regions[0].content == content

    def test_empty_content(self) -> None:
        """Opener immediately followed by closer is a six-character region."""
        regions = scan("{++++}")
        assert len(regions) == 1
        assert regions[0].end - regions[0].start == 6
        assert regions[0].content == ""

    def test_unclosed_opener_is_literal(self) -> None:
        """An opener with no closer is ordinary text."""
        assert scan("start {++never closed") == []

    def test_mismatched_closer_is_literal(self) -> None:
        """A closer of another kind does not close the region."""
        assert scan("{++text--}") == []

    def test_regions_sorted_and_non_overlapping(self) -> None:
        """Several regions come back in order with correct offsets."""
        source = "x {++a++} y {--b--} z"
        regions = scan(source)
        assert [r.kind for r in regions] == [Kind.ADDITION, Kind.DELETION]
        assert [(r.start, r.end) for r in regions] == [(2, 9), (12, 19)]
        for region in regions:
            assert source[region.start : region.end] == region.full_markup

    def test_adjacent_regions(self) -> None:
        """Back-to-back regions are both found."""
        regions = scan("{==claim==}{>>source?<<}")
        assert [r.kind for r in regions] == [Kind.HIGHLIGHT, Kind.COMMENT]

    def test_nested_region_reported_as_outer_only(self) -> None:
        """The outer deletion wraps the nested addition intact."""
        source = "{--outer {++inner++} text--}"
        regions = scan(source)
        assert len(regions) == 1
        assert regions[0].kind == Kind.DELETION
        assert regions[0].end == len(source)
        assert regions[0].content == "outer {++inner++} text"

    def test_inner_closer_not_taken_for_outer(self) -> None:
        """Same-kind nesting matches the outer closer, not the inner one."""
        source = "{--a {--b--} c--} tail"
        regions = scan(source)
        assert len(regions) == 1
        assert regions[0].full_markup == "{--a {--b--} c--}"

    def test_unclosed_inner_opener_is_text(self) -> None:
        """An inner opener without its closer does not swallow the outer closer."""
        regions = scan("{--a {++b--}")
        assert len(regions) == 1
        assert regions[0].content == "a {++b"

    def test_region_spanning_lines(self) -> None:
        """Regions may contain newlines and block syntax."""
        source = "before\n{--\n## Heading\n\npara\n--}\nafter"
        regions = scan(source)
        assert len(regions) == 1
        assert regions[0].content == "\n## Heading\n\npara\n"


class TestFindClose:
    """Tests for find_close()."""

    def test_returns_end_offset(self) -> None:
        """Offset returned is just past the closer."""
        assert find_close("{++ab++}", 3, "++}") == 8

    def test_unclosed_returns_minus_one(self) -> None:
        """No closer means -1."""
        assert find_close("{++ab", 3, "++}") == -1

    def test_unclosed_inner_opener_with_outer_closer(self) -> None:
        """A stray inner opener does not hide the outer closer."""
        assert find_close("{--a {++b c--}", 3, "--}") == 14

    def test_stray_openers_searched_once(self) -> None:
        """Each unclosed opener is searched once, however many enclose it."""
        source = "{++ " * 40
        cache: dict[tuple[int, str], int] = {}
        assert find_close(source, 3, "++}", cache) == -1
        assert len(cache) == 40
        assert set(cache.values()) == {-1}

    def test_cache_reused_between_calls(self) -> None:
        """A cached result is returned without searching again."""
        cache = {(3, "++}"): 99}
        assert find_close("{++ab++}", 3, "++}", cache) == 99

    def test_deep_nesting_has_no_depth_limit(self) -> None:
        """Nesting far beyond the interpreter recursion limit still closes."""
        depth = 5000
        source = "{++" * depth + "x" + "++}" * depth
        assert find_close(source, 3, "++}") == len(source)


class TestSeparator:
    """Tests for substitution separator lookup."""

    def test_simple_separator(self) -> None:
        """The separator offset inside plain content."""
        assert find_top_level_separator("old~>new") == 3

    def test_missing_separator(self) -> None:
        """No separator gives -1."""
        assert find_top_level_separator("just old") == -1

    def test_skips_nested_separator(self) -> None:
        """A ~> inside a nested substitution is not the top-level one."""
        content = "a {~~x~>y~~} b~>c"
        assert find_top_level_separator(content) == content.index("b~>") + 1

    def test_separator_only_nested(self) -> None:
        """Content whose only ~> is nested has no top-level separator."""
        assert find_top_level_separator("{++a~>b++}") == -1

    def test_old_and_new_text(self) -> None:
        """Region splits substitution content at the first top-level ~>."""
        region = scan("{~~a~>b~>c~~}")[0]
        assert region.old_text == "a"
        assert region.new_text == "b~>c"

    def test_old_and_new_text_without_separator(self) -> None:
        """Without a separator, all content is old text."""
        region = scan("{~~only old~~}")[0]
        assert region.old_text == "only old"
        assert region.new_text == ""


class TestRegionFromMarkup:
    """Tests for region_from_markup()."""

    def test_valid_markup(self) -> None:
        """Literal markup becomes a region at the given offset."""
        region = region_from_markup("{==x==}", offset=4)
        assert region is not None
        assert region.kind == Kind.HIGHLIGHT
        assert (region.start, region.end) == (4, 11)

    @pytest.mark.parametrize("markup", ["plain", "{++x--}", "{++", "{++x"])
    def test_invalid_markup(self, markup: str) -> None:
        """Strings that are not a single annotation give None."""
        assert region_from_markup(markup) is None

    def test_with_heading_prefix_returns_copy(self) -> None:
        """Regions are immutable; the prefix lands on a copy."""
        region = scan("{--## T--}")[0]
        prefixed = region.with_heading_prefix("## ")
        assert region.heading_prefix is None
        assert prefixed.heading_prefix == "## "
        assert prefixed.full_markup == region.full_markup


class TestPathologicalInput:
    """Inputs that must not hang or crash the scanner."""

    @pytest.mark.parametrize("source", ["{++ " * 40, "{++{--" * 40, "{~~{>>" * 40])
    def test_many_unclosed_openers(self, source: str) -> None:
        """Unclosed openers are literal text and scanning stays fast."""
        assert scan(source) == []

    def test_unclosed_openers_before_a_region(self) -> None:
        """A real region after many stray openers is still found."""
        source = "{++ " * 40 + "{==ok==}"
        (region,) = scan(source)
        assert region.full_markup == "{==ok==}"

    def test_deep_valid_nesting(self) -> None:
        """A thousand nested additions form a single top-level region."""
        source = "{++" * 1000 + "x" + "++}" * 1000
        (region,) = scan(source)
        assert (region.start, region.end) == (0, len(source))

    def test_deep_nesting_inside_substitution(self) -> None:
        """The separator search steps over deeply nested regions."""
        inner = "{++" * 1000 + "a~>b" + "++}" * 1000
        (region,) = scan("{~~" + inner + "~>new~~}")
        assert region.old_text == inner
        assert region.new_text == "new"
