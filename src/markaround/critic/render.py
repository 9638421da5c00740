"""Placeholder rendering of CriticMarkup documents.

Regions can span block boundaries (``{--## Heading--}``, multi-paragraph
deletions) which an inline rule alone cannot handle. Before block parsing,
each top-level region is swapped for an opaque placeholder; after the single
block render, each placeholder is swapped for the region's styled HTML.

Placeholder format: ``CRITICMARKER{nonce}N{index}ENDCRITIC``. Letters and
digits only, so the block parser passes it through as plain paragraph text.
The nonce is fresh per render and absent from the source, so text that only
looks like a placeholder is never replaced.
"""

from __future__ import annotations

import logging
import re
import uuid
from functools import lru_cache
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt

from markaround.critic.plugin import critic_plugin, render_region_html
from markaround.critic.scanner import Region, scan
from markaround.critic.syntax import Kind

if TYPE_CHECKING:
    from markaround.config import MarkdownConfig

logger = logging.getLogger(__name__)

PLACEHOLDER_TEMPLATE = "CRITICMARKER{nonce}N{index}ENDCRITIC"

_HEADING_PREFIX = re.compile(r"^(#{1,6}\s+)")

# Kinds whose body is shown in place and may therefore carry a heading.
_HEADING_KINDS = frozenset((Kind.ADDITION, Kind.DELETION, Kind.HIGHLIGHT))


def build_markdown(*, linkify: bool = True, typographer: bool = True) -> MarkdownIt:
    """Create the block/inline markdown renderer with the annotation plugin.

    Raw HTML in the source is disabled so user text is always escaped.
    """
    md = MarkdownIt(
        "js-default",
        {"html": False, "linkify": linkify, "typographer": typographer},
    )
    md.use(critic_plugin)
    return md


def _new_nonce(source: str) -> str:
    """Random hex token that does not occur in ``source``."""
    while True:
        nonce = uuid.uuid4().hex
        if nonce not in source:
            return nonce


def placeholder_pattern(nonce: str) -> re.Pattern[str]:
    """Pattern matching the placeholders of one render."""
    return re.compile(PLACEHOLDER_TEMPLATE.format(nonce=nonce, index=r"(\d+)"))


def _heading_prefix(source: str, region: Region) -> str | None:
    """Heading marker to lift out of ``region``, if it qualifies.

    The region must start a line, be an addition/deletion/highlight, and
    have single-line content (ignoring surrounding newlines) that begins
    with ``#`` x1-6 plus whitespace.
    """
    if region.kind not in _HEADING_KINDS:
        return None
    if region.start != 0 and source[region.start - 1] != "\n":
        return None
    trimmed = region.content.strip("\n")
    if "\n" in trimmed:
        return None
    match = _HEADING_PREFIX.match(trimmed)
    return match.group(1) if match else None


class CriticRenderer:
    """Render a CriticMarkup document to HTML.

    Wraps a ``MarkdownIt`` instance (the block and inline renderer). The
    instance must have ``critic_plugin`` registered so nested annotations in
    region bodies are styled by the inline layer.
    """

    def __init__(self, md: MarkdownIt | None = None) -> None:
        self.md = md if md is not None else build_markdown()

    def render_block(self, text: str) -> str:
        """Full block-level render."""
        return self.md.render(text)

    def render_inline(self, text: str) -> str:
        """Inline-only render (no paragraph wrapping)."""
        return self.md.renderInline(text)

    def render_region(self, region: Region) -> str:
        """Styled HTML for a single region."""
        return render_region_html(region, self.render_inline)

    def render(self, source: str) -> str:
        """Render ``source`` to HTML with styled, resolvable annotations.

        The block renderer runs exactly once per call. ``source`` is not
        modified.
        """
        regions = scan(source)
        if not regions:
            return self.render_block(source)

        nonce = _new_nonce(source)
        parts: list[str] = []
        placed: list[Region] = []
        last_end = 0
        for index, region in enumerate(regions):
            parts.append(source[last_end : region.start])
            prefix = _heading_prefix(source, region)
            if prefix is not None:
                region = region.with_heading_prefix(prefix)
                parts.append(prefix)
            parts.append(PLACEHOLDER_TEMPLATE.format(nonce=nonce, index=index))
            placed.append(region)
            last_end = region.end
        parts.append(source[last_end:])

        html = self.render_block("".join(parts))

        def substitute(match: re.Match[str]) -> str:
            index = int(match.group(1))
            if index >= len(placed):
                return match.group(0)
            return self.render_region(placed[index])

        html, restored = placeholder_pattern(nonce).subn(substitute, html)
        if restored < len(placed):
            logger.debug(
                "Block renderer dropped %d of %d placeholders",
                len(placed) - restored,
                len(placed),
            )
        return html


@lru_cache(maxsize=1)
def get_renderer() -> CriticRenderer:
    """Process-wide renderer built from the markdown settings.

    Call ``get_renderer.cache_clear()`` after changing settings in tests.
    """
    from markaround.config import get_settings

    return renderer_from_config(get_settings().markdown)


def renderer_from_config(config: MarkdownConfig) -> CriticRenderer:
    """Build a renderer honouring ``MarkdownConfig`` options."""
    return CriticRenderer(
        build_markdown(linkify=config.linkify, typographer=config.typographer)
    )


def render_document(source: str) -> str:
    """Render ``source`` with the process-wide renderer."""
    return get_renderer().render(source)
