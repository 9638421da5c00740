"""Comment cards for the review sidebar.

Comment regions render as zero-width markers carrying their text in
``data-comment-text``. The sidebar lists one card per marker in document
order; this module pulls that data back out of rendered HTML.
"""

from __future__ import annotations

from dataclasses import dataclass

from selectolax.lexbor import LexborHTMLParser

COMMENT_MARKER_SELECTOR = ".critic-comment-marker"


@dataclass(frozen=True, slots=True)
class CommentCard:
    """Sidebar entry for one comment marker."""

    comment_id: str
    text: str
    markup: str
    offset: int


def extract_comments(html: str) -> list[CommentCard]:
    """Return a card per comment marker in ``html``, in document order.

    Card ids are ``comment-0``, ``comment-1``, ... matching marker order.
    Markers missing an integer ``data-offset`` get offset -1, which makes a
    later resolve fall back to searching for the markup.
    """
    if not html:
        return []
    tree = LexborHTMLParser(html)
    cards: list[CommentCard] = []
    for index, node in enumerate(tree.css(COMMENT_MARKER_SELECTOR)):
        attrs = node.attributes
        raw_offset = attrs.get("data-offset") or ""
        cards.append(
            CommentCard(
                comment_id=f"comment-{index}",
                text=attrs.get("data-comment-text") or "",
                markup=attrs.get("data-markup") or "",
                offset=int(raw_offset) if raw_offset.isdigit() else -1,
            )
        )
    return cards
