"""markdown-it-py plugin applying the CriticMarkup grammar at the inline layer.

Registered on the renderer's ``MarkdownIt`` instance so that annotation
syntax inside a single block (and inside the content of an outer region
being rendered inline) becomes styled spans. Closers are matched with the
same nesting-aware ``find_close`` as the block-level scanner.

The region HTML builder lives here too; the placeholder renderer uses it for
top-level regions so both paths produce identical markup.
"""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

from markaround.critic.scanner import Region, find_close
from markaround.critic.syntax import DELIMITER_WIDTH, Kind, detect_opener

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from markdown_it import MarkdownIt
    from markdown_it.renderer import RendererHTML
    from markdown_it.rules_inline import StateInline
    from markdown_it.token import Token
    from markdown_it.utils import EnvType, OptionsDict

TOKEN_PREFIX = "critic_"

# Region bodies are rendered by re-entering the inline renderer, one level per
# nested region. Deeper regions are left as literal text.
MAX_RENDER_DEPTH = 32

_DEPTH_KEY = "critic_depth"
_CACHE_KEY = "critic_close_cache"

_CONTROL_TITLES: dict[Kind, tuple[str, str]] = {
    Kind.ADDITION: ("Accept addition", "Reject addition"),
    Kind.DELETION: ("Accept deletion", "Reject deletion"),
    Kind.SUBSTITUTION: ("Accept change", "Reject change"),
    Kind.COMMENT: ("Remove comment", "Remove comment"),
    Kind.HIGHLIGHT: ("Accept highlight", "Reject highlight"),
}


def _controls(kind: Kind) -> str:
    accept_title, reject_title = _CONTROL_TITLES[kind]
    return (
        '<span class="critic-controls">'
        f'<button class="critic-accept" title="{accept_title}">&#10003;</button>'
        f'<button class="critic-reject" title="{reject_title}">&#10005;</button>'
        "</span>"
    )


def display_content(region: Region) -> str:
    """Region content as shown in the preview.

    When a heading marker was lifted out for the block renderer, the marker
    is dropped here so the heading text is not shown twice.
    """
    if region.heading_prefix:
        return region.content.strip("\n")[len(region.heading_prefix) :]
    return region.content


def render_region_html(region: Region, render_inline: Callable[[str], str]) -> str:
    """Build the styled, resolvable HTML for one region.

    Args:
        region: The region to render. ``start`` becomes ``data-offset``.
        render_inline: Inline markdown renderer used for displayed bodies;
            it re-applies the annotation grammar to nested regions.

    Returns:
        An HTML fragment carrying ``data-markup`` (escaped literal markup),
        ``data-offset`` and accept/reject controls.
    """
    attrs = (
        f'data-markup="{escape(region.full_markup)}" data-offset="{region.start}"'
    )
    controls = _controls(region.kind)

    match region.kind:
        case Kind.SUBSTITUTION:
            return (
                f'<span class="critic-substitution" {attrs}>'
                f'<span class="critic-deletion">{render_inline(region.old_text)}</span>'
                f'<span class="critic-addition">{render_inline(region.new_text)}</span>'
                f"{controls}</span>"
            )
        case Kind.COMMENT:
            return (
                f'<span class="critic-comment-marker" {attrs} '
                f'data-comment-text="{escape(region.content)}">{controls}</span>'
            )
        case _:
            body = render_inline(display_content(region))
            return f'<span class="critic-{region.kind}" {attrs}>{body}{controls}</span>'


def critic_plugin(md: MarkdownIt) -> None:
    """Register the CriticMarkup inline rule and its render rules on ``md``."""

    def critic_rule(state: StateInline, silent: bool) -> bool:
        if state.env.get(_DEPTH_KEY, 0) >= MAX_RENDER_DEPTH:
            return False
        delimiter = detect_opener(state.src, state.pos)
        if delimiter is None:
            return False
        # One closer cache per inline run, shared by every opener in it.
        caches = state.env.setdefault(_CACHE_KEY, {})
        cache = caches.setdefault((state.src, state.posMax), {})
        end = find_close(
            state.src[: state.posMax],
            state.pos + DELIMITER_WIDTH,
            delimiter.closer,
            cache,
        )
        if end == -1:
            return False
        if not silent:
            markup = state.src[state.pos : end]
            token = state.push(TOKEN_PREFIX + delimiter.kind, "", 0)
            token.markup = markup
            token.meta = {"offset": state.pos}
        state.pos = end
        return True

    def render_critic(
        self: RendererHTML,
        tokens: Sequence[Token],
        idx: int,
        options: OptionsDict,
        env: EnvType,
    ) -> str:
        token = tokens[idx]
        offset = token.meta["offset"]
        region = Region(
            kind=Kind(token.type.removeprefix(TOKEN_PREFIX)),
            start=offset,
            end=offset + len(token.markup),
            full_markup=token.markup,
        )
        depth = env.get(_DEPTH_KEY, 0) + 1

        def render_body(text: str) -> str:
            return md.renderInline(text, {_DEPTH_KEY: depth})

        return render_region_html(region, render_body)

    md.inline.ruler.before("emphasis", "critic", critic_rule)
    for kind in Kind:
        md.add_render_rule(TOKEN_PREFIX + kind, render_critic)
