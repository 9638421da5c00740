"""Tests for the bounded inside-markup check."""

from __future__ import annotations

import pytest

from markaround.critic.detector import (
    LOOKBACK_WINDOW,
    is_inside_markup,
    open_kind_at,
)
from markaround.critic.syntax import Kind


class TestOpenKindAt:
    """Tests for open_kind_at()."""

    @pytest.mark.parametrize(
        ("document", "kind"),
        [
            ("text {++typing", Kind.ADDITION),
            ("text {--typing", Kind.DELETION),
            ("text {~~old~>new", Kind.SUBSTITUTION),
            ("text {>>typing", Kind.COMMENT),
        ],
    )
    def test_unclosed_opener(self, document: str, kind: Kind) -> None:
        """An opener with no later closer reports its kind."""
        assert open_kind_at(document, len(document)) == kind

    def test_closed_region_is_outside(self) -> None:
        """After a closed region the position is outside."""
        document = "a {++b++} c"
        assert open_kind_at(document, len(document)) is None

    def test_inside_closed_region(self) -> None:
        """Before the closer, the opener is still unclosed in the look-back."""
        document = "a{++X++}b"
        assert is_inside_markup(document, 5)

    def test_highlight_not_checked(self) -> None:
        """Highlights do not count as open markup."""
        assert not is_inside_markup("x {==still open", 15)

    def test_position_limits_lookback(self) -> None:
        """Only text before the position is considered."""
        document = "plain {++later"
        assert not is_inside_markup(document, 3)


class TestLookbackWindow:
    """The look-back is bounded; openers beyond it are not seen."""

    def test_default_window(self) -> None:
        """The documented window is 500 characters."""
        assert LOOKBACK_WINDOW == 500

    def test_opener_inside_window(self) -> None:
        """An opener exactly at the window edge is found."""
        document = "{++" + "a" * 497
        assert is_inside_markup(document, 500)

    def test_opener_beyond_window_is_missed(self) -> None:
        """An opener more than 500 characters back is not seen (known limit)."""
        document = "{++" + "a" * 600
        assert not is_inside_markup(document, len(document))

    def test_custom_window(self) -> None:
        """The window is tunable."""
        document = "{++" + "a" * 20
        assert not is_inside_markup(document, len(document), window=10)
        assert is_inside_markup(document, len(document), window=30)
