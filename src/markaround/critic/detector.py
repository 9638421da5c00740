"""Bounded look-back check for an unclosed annotation opener.

Used by suggestion mode to avoid wrapping edits that land inside annotation
text the reviewer is already writing. This is a heuristic, not a parse: it
only sees the last ``window`` characters before the position, and delimiter
characters typed as ordinary text can fool it.
"""

from __future__ import annotations

from markaround.critic.syntax import DELIMITERS, Kind

LOOKBACK_WINDOW = 500

# Highlights are left out: typing inside {==...==} should still be tracked.
_OPENABLE = (Kind.ADDITION, Kind.DELETION, Kind.SUBSTITUTION, Kind.COMMENT)


def open_kind_at(
    document: str, position: int, window: int = LOOKBACK_WINDOW
) -> Kind | None:
    """Return the kind of an unclosed opener before ``position``, if any.

    Args:
        document: Full document text.
        position: Offset being edited.
        window: Maximum number of characters to look back.

    Returns:
        The first openable kind (addition, deletion, substitution, comment)
        whose last opener in the window has no later closer, else None.
    """
    chunk = document[max(0, position - window) : position]
    for kind in _OPENABLE:
        delimiter = DELIMITERS[kind]
        last_open = chunk.rfind(delimiter.opener)
        if last_open != -1 and last_open > chunk.rfind(delimiter.closer):
            return kind
    return None


def is_inside_markup(
    document: str, position: int, window: int = LOOKBACK_WINDOW
) -> bool:
    """True if ``position`` sits after an unclosed opener within ``window``."""
    return open_kind_at(document, position, window) is not None
