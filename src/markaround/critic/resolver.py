"""Accept/reject rules for CriticMarkup regions.

| kind         | accept            | reject             |
|--------------|-------------------|--------------------|
| addition     | content           | ""                 |
| deletion     | ""                | content            |
| substitution | new text          | old text           |
| comment      | ""                | ""                 |
| highlight    | content           | content            |

Resolving a region strips exactly one nesting level. Whole-document
resolution therefore repeats scan + resolve until a scan finds nothing.
"""

from __future__ import annotations

import logging

from markaround.critic.scanner import Region, region_from_markup, scan
from markaround.critic.syntax import Kind

logger = logging.getLogger(__name__)


def accept(region: Region) -> str:
    """Replacement text when the region's change is accepted."""
    match region.kind:
        case Kind.ADDITION | Kind.HIGHLIGHT:
            return region.content
        case Kind.SUBSTITUTION:
            return region.new_text
        case Kind.DELETION | Kind.COMMENT:
            return ""


def reject(region: Region) -> str:
    """Replacement text when the region's change is rejected."""
    match region.kind:
        case Kind.DELETION | Kind.HIGHLIGHT:
            return region.content
        case Kind.SUBSTITUTION:
            return region.old_text
        case Kind.ADDITION | Kind.COMMENT:
            return ""


def resolve(region: Region, *, accepted: bool) -> str:
    """Dispatch to ``accept`` or ``reject``."""
    return accept(region) if accepted else reject(region)


def accept_markup(markup: str) -> str:
    """Accept a literal markup string; non-markup is returned unchanged."""
    region = region_from_markup(markup)
    return markup if region is None else accept(region)


def reject_markup(markup: str) -> str:
    """Reject a literal markup string; non-markup is returned unchanged."""
    region = region_from_markup(markup)
    return markup if region is None else reject(region)


def resolve_all(source: str, *, accepted: bool) -> str:
    """Resolve every region in ``source``, nested ones included.

    Each pass scans the whole current text and replaces its top-level
    regions right to left, so earlier offsets stay valid while later ones
    are substituted. Resolving a region can expose regions that were nested
    inside it; passes repeat until a scan comes back empty.

    Args:
        source: Document text.
        accepted: True for Accept-All, False for Reject-All.

    Returns:
        The document with no annotation syntax left.
    """
    passes = 0
    while regions := scan(source):
        passes += 1
        for region in reversed(regions):
            replacement = resolve(region, accepted=accepted)
            source = source[: region.start] + replacement + source[region.end :]
    logger.debug(
        "%s-all finished after %d pass(es)", "accept" if accepted else "reject", passes
    )
    return source


def accept_all(source: str) -> str:
    """Accept every change in ``source``."""
    return resolve_all(source, accepted=True)


def reject_all(source: str) -> str:
    """Reject every change in ``source``."""
    return resolve_all(source, accepted=False)


def resolve_at(source: str, markup: str, offset: int, *, accepted: bool) -> str:
    """Resolve the single region a UI control refers to.

    The control carries the region's literal markup and the offset it had
    when rendered. If the markup is still at that offset it is replaced
    there; otherwise the first literal occurrence anywhere is used. When the
    markup appears more than once and the offset is stale, that may not be
    the occurrence the user clicked. If the markup is gone, ``source`` is
    returned unchanged.
    """
    replacement = accept_markup(markup) if accepted else reject_markup(markup)

    if offset >= 0 and source[offset : offset + len(markup)] == markup:
        index = offset
    else:
        index = source.find(markup)
        if index == -1:
            logger.debug("Markup %r no longer in document, nothing resolved", markup)
            return source
        logger.debug(
            "Offset %d stale for %r, using first match at %d", offset, markup, index
        )

    return source[:index] + replacement + source[index + len(markup) :]


def count_regions(source: str) -> int:
    """Number of top-level regions (the suggestion count shown to reviewers)."""
    return len(scan(source))
