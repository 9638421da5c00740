"""CriticMarkup delimiter table.

The five annotation kinds and their fixed three-character delimiters:

    {++addition++}
    {--deletion--}
    {~~old~>new~~}
    {>>comment<<}
    {==highlight==}

Every opener starts with ``{`` and every closer ends with ``}``, which is what
lets the scanner test only positions holding ``{``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Kind(StrEnum):
    """Annotation kind. Values double as CSS class suffixes."""

    ADDITION = "addition"
    DELETION = "deletion"
    SUBSTITUTION = "substitution"
    COMMENT = "comment"
    HIGHLIGHT = "highlight"


@dataclass(frozen=True, slots=True)
class Delimiter:
    """Opener/closer pair for one annotation kind."""

    kind: Kind
    opener: str
    closer: str


DELIMITER_WIDTH = 3
SEPARATOR = "~>"

DELIMITERS: dict[Kind, Delimiter] = {
    Kind.ADDITION: Delimiter(Kind.ADDITION, "{++", "++}"),
    Kind.DELETION: Delimiter(Kind.DELETION, "{--", "--}"),
    Kind.SUBSTITUTION: Delimiter(Kind.SUBSTITUTION, "{~~", "~~}"),
    Kind.COMMENT: Delimiter(Kind.COMMENT, "{>>", "<<}"),
    Kind.HIGHLIGHT: Delimiter(Kind.HIGHLIGHT, "{==", "==}"),
}

_BY_OPENER: dict[str, Delimiter] = {d.opener: d for d in DELIMITERS.values()}


def detect_opener(source: str, pos: int) -> Delimiter | None:
    """Return the delimiter whose opener starts at ``source[pos]``, if any."""
    if source[pos : pos + 1] != "{":
        return None
    return _BY_OPENER.get(source[pos : pos + DELIMITER_WIDTH])


def wrap(kind: Kind, content: str) -> str:
    """Wrap ``content`` in the delimiters for ``kind``."""
    delimiter = DELIMITERS[kind]
    return f"{delimiter.opener}{content}{delimiter.closer}"
