"""Nesting-aware scanner for CriticMarkup regions.

Lazy regular expressions mismatch delimiters as soon as annotations nest:
``{--outer {++inner++} text--}`` would end at the first ``--}``-looking
sequence after *any* opener. The scanner here walks the buffer instead, and
whenever it meets an inner opener it finds that opener's closer first and
jumps past it, so an inner closer is never taken for the outer one.

Only top-level regions are reported. Nested regions stay inside the
``content`` of their parent and surface once the parent is resolved (see
``resolver.resolve_all``) or when the inline renderer re-applies the grammar.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from markaround.critic.syntax import (
    DELIMITER_WIDTH,
    SEPARATOR,
    Kind,
    detect_opener,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Region:
    """One located annotation.

    Attributes:
        kind: Annotation kind.
        start: Offset of the opening ``{`` in the scanned source.
        end: Offset just past the closing ``}`` (half-open).
        full_markup: ``source[start:end]``, delimiters included.
        heading_prefix: Block heading marker (e.g. ``"## "``) lifted out of
            the content during placeholder rendering; ``None`` otherwise.
    """

    kind: Kind
    start: int
    end: int
    full_markup: str
    heading_prefix: str | None = None

    @property
    def content(self) -> str:
        """Markup with the opener and closer stripped."""
        return self.full_markup[DELIMITER_WIDTH:-DELIMITER_WIDTH]

    @property
    def old_text(self) -> str:
        """Substitution text before the top-level ``~>`` (whole content if none)."""
        content = self.content
        sep = find_top_level_separator(content)
        return content if sep == -1 else content[:sep]

    @property
    def new_text(self) -> str:
        """Substitution text after the top-level ``~>`` (empty if none)."""
        content = self.content
        sep = find_top_level_separator(content)
        return "" if sep == -1 else content[sep + len(SEPARATOR) :]

    def with_heading_prefix(self, prefix: str) -> Region:
        """Return a copy carrying ``prefix`` as its heading marker."""
        return replace(self, heading_prefix=prefix)


@dataclass(slots=True)
class _Search:
    """A pending closer search: opener end, closer, current position."""

    start: int
    closer: str
    pos: int


def find_close(
    source: str,
    start: int,
    closer: str,
    cache: dict[tuple[int, str], int] | None = None,
) -> int:
    """Find the end offset of ``closer`` matching an opener ending at ``start``.

    Nested regions met on the way are skipped as a whole. An inner opener
    that never closes is ordinary text.

    Pending searches live on an explicit stack, so nesting depth is not
    limited by the interpreter's recursion limit. Every ``(start, closer)``
    result is remembered in ``cache``: a nested opener already known to be
    unclosed is stepped over without searching to the end of the buffer
    again, which keeps the worst case quadratic. Pass the same dict to
    repeated calls on one ``source`` to share that work.

    Args:
        source: Buffer to search.
        start: Offset just after the opener.
        closer: The three-character closer to look for.
        cache: Results of earlier searches in ``source``.

    Returns:
        Offset just past the matching closer, or -1 if the opener is unclosed.
    """
    if cache is None:
        cache = {}
    if (start, closer) in cache:
        return cache[start, closer]

    limit = len(source) - DELIMITER_WIDTH
    stack = [_Search(start, closer, start)]
    result = -1
    while stack:
        search = stack[-1]
        i = search.pos
        if i > limit:
            result = -1
        elif source.startswith(search.closer, i):
            result = i + DELIMITER_WIDTH
        else:
            nested = detect_opener(source, i)
            if nested is None:
                search.pos = i + 1
                continue
            inner = i + DELIMITER_WIDTH
            if (inner, nested.closer) not in cache:
                stack.append(_Search(inner, nested.closer, inner))
                continue
            nested_end = cache[inner, nested.closer]
            search.pos = nested_end if nested_end != -1 else i + 1
            continue

        cache[search.start, search.closer] = result
        stack.pop()
        if stack:
            # The parent is still positioned on the nested opener.
            parent = stack[-1]
            parent.pos = result if result != -1 else parent.pos + 1
    return result


def scan(source: str) -> list[Region]:
    """Return the top-level annotation regions of ``source`` in order."""
    regions: list[Region] = []
    cache: dict[tuple[int, str], int] = {}
    i = 0
    length = len(source)
    while i < length:
        delimiter = detect_opener(source, i)
        if delimiter is not None:
            end = find_close(source, i + DELIMITER_WIDTH, delimiter.closer, cache)
            if end != -1:
                regions.append(
                    Region(
                        kind=delimiter.kind,
                        start=i,
                        end=end,
                        full_markup=source[i:end],
                    )
                )
                i = end
                continue
        i += 1
    logger.debug("Scanned %d chars, %d top-level regions", length, len(regions))
    return regions


def find_top_level_separator(content: str) -> int:
    """Offset of the first ``~>`` in ``content`` outside nested regions, or -1."""
    cache: dict[tuple[int, str], int] = {}
    i = 0
    while i < len(content) - 1:
        if content.startswith(SEPARATOR, i):
            return i
        nested = detect_opener(content, i)
        if nested is not None:
            end = find_close(content, i + DELIMITER_WIDTH, nested.closer, cache)
            if end != -1:
                i = end
                continue
        i += 1
    return -1


def region_from_markup(markup: str, offset: int = 0) -> Region | None:
    """Build a region from a literal markup string, or ``None`` if it is not one.

    The string must start with an opener and end with that opener's closer.
    """
    delimiter = detect_opener(markup, 0)
    if delimiter is None or len(markup) < 2 * DELIMITER_WIDTH:
        return None
    if not markup.endswith(delimiter.closer):
        return None
    return Region(
        kind=delimiter.kind,
        start=offset,
        end=offset + len(markup),
        full_markup=markup,
    )
