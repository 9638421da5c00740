"""Suggestion mode: rewrite raw edits into CriticMarkup.

A host editor hands every user edit to ``SuggestionMode.intercept`` before
committing it. The result is either the same ``Edit`` (pass through) or a
replacement edit tagged ``processed`` whose text is annotation markup:

- replace selection  ->  ``{~~old~>new~~}``, caret after the markup
- insert             ->  ``{++new++}``, caret before the ``++}`` closer
- delete selection   ->  ``{--old--}``, caret after the markup (nothing is
  removed from the document, only marked)
- backspace / delete with no selection  ->  the character before / after
  the caret is wrapped as a deletion

Because the caret is left inside a fresh addition, the next keystroke lands
inside an unclosed ``{++`` and passes through, so consecutive typing grows one
addition instead of producing one per keystroke.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from markaround.critic.detector import LOOKBACK_WINDOW, is_inside_markup
from markaround.critic.syntax import DELIMITER_WIDTH, SEPARATOR, Kind, wrap

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class DeleteDirection(StrEnum):
    """Direction of a deletion reported without a selection."""

    BACKWARD = "backward"
    FORWARD = "forward"


@dataclass(frozen=True, slots=True)
class Edit:
    """A change against a document snapshot.

    Attributes:
        start: Start of the replaced range.
        end: End of the replaced range (half-open).
        text: Inserted text.
        direction: Set for a collapsed deletion (Backspace/Delete with no
            selection); the deleted character is derived from the document.
        cursor: Caret position after applying; defaults to after ``text``.
        processed: True for edits produced by suggestion mode itself.
    """

    start: int
    end: int
    text: str = ""
    direction: DeleteDirection | None = None
    cursor: int | None = None
    processed: bool = False


INSERT_INPUT_TYPES = frozenset(("insertText", "insertFromPaste", "insertFromDrop"))
_DELETE_INPUT_TYPES = {
    "deleteContentBackward": DeleteDirection.BACKWARD,
    "deleteContentForward": DeleteDirection.FORWARD,
}


def edit_from_input(
    selection_start: int, selection_end: int, text: str, input_type: str
) -> Edit | None:
    """Translate a browser ``beforeinput`` event into an ``Edit``.

    Args:
        selection_start: Textarea selection start before the input.
        selection_end: Textarea selection end before the input.
        text: Inserted data (empty for deletions).
        input_type: The event's ``inputType``.

    Returns:
        The proposed edit, or None for input types suggestion mode leaves to
        the browser (line breaks, history, formatting).
    """
    start, end = sorted((selection_start, selection_end))
    if input_type in INSERT_INPUT_TYPES:
        return Edit(start=start, end=end, text=text)
    direction = _DELETE_INPUT_TYPES.get(input_type)
    if direction is None:
        return None
    if start == end:
        return Edit(start=start, end=end, direction=direction)
    return Edit(start=start, end=end)


def effective_range(document: str, edit: Edit) -> tuple[int, int]:
    """The range an edit really replaces.

    A collapsed deletion covers one character before (backward) or after
    (forward) the caret, clamped to the document. Other edits cover
    ``start:end``.
    """
    if edit.start == edit.end and not edit.text and edit.direction is not None:
        if edit.direction is DeleteDirection.BACKWARD:
            return max(edit.start - 1, 0), edit.start
        return edit.start, min(edit.start + 1, len(document))
    return edit.start, edit.end


def apply_edit(document: str, edit: Edit) -> tuple[str, int]:
    """Apply ``edit`` to ``document``.

    Returns:
        The new document and the caret position.
    """
    start, end = effective_range(document, edit)
    updated = document[:start] + edit.text + document[end:]
    cursor = edit.cursor if edit.cursor is not None else start + len(edit.text)
    return updated, cursor


def comment_edit(
    document: str, selection_start: int, selection_end: int, comment_text: str
) -> Edit | None:
    """Edit inserting ``{>>comment<<}`` right after a non-empty selection.

    The selected text itself is not wrapped. Returns None when the selection
    is empty.
    """
    if selection_start == selection_end:
        return None
    at = min(max(selection_start, selection_end), len(document))
    markup = wrap(Kind.COMMENT, comment_text)
    return Edit(start=at, end=at, text=markup, cursor=at + len(markup), processed=True)


class SuggestionMode:
    """Edit interceptor holding the suggestion-mode flag and re-emission guard.

    One instance per editor. ``active`` is toggled by the host; the guard is
    held while a rewritten edit is being committed so the editor's own change
    notification for that edit is not intercepted again.
    """

    def __init__(
        self, *, active: bool = False, lookback: int = LOOKBACK_WINDOW
    ) -> None:
        self.active = active
        self.lookback = lookback
        self._applying = False

    @property
    def applying(self) -> bool:
        """True while a self-produced edit is being committed."""
        return self._applying

    @contextmanager
    def reemitting(self) -> Iterator[None]:
        """Hold the re-emission guard; always released, even on error."""
        self._applying = True
        try:
            yield
        finally:
            self._applying = False

    def intercept(self, document: str, edit: Edit) -> Edit:
        """Rewrite ``edit`` into annotation syntax, or return it unchanged.

        Args:
            document: Document snapshot the edit applies to.
            edit: The proposed user edit.

        Returns:
            ``edit`` itself for pass-through, otherwise a new processed edit.
        """
        if not self.active or self._applying or edit.processed:
            return edit

        start, end = effective_range(document, edit)
        deleted = document[start:end]
        inserted = edit.text
        if not deleted and not inserted:
            return edit

        if is_inside_markup(document, edit.start, self.lookback):
            logger.debug("Edit at %d inside open markup, passing through", edit.start)
            return edit

        if deleted and inserted:
            markup = wrap(Kind.SUBSTITUTION, f"{deleted}{SEPARATOR}{inserted}")
            cursor = start + len(markup)
        elif inserted:
            markup = wrap(Kind.ADDITION, inserted)
            cursor = start + DELIMITER_WIDTH + len(inserted)
        else:
            markup = wrap(Kind.DELETION, deleted)
            cursor = start + len(markup)

        return Edit(start=start, end=end, text=markup, cursor=cursor, processed=True)

    def commit(self, document: str, edit: Edit) -> tuple[str, int]:
        """Apply ``edit`` with the re-emission guard held."""
        with self.reemitting():
            return apply_edit(document, edit)
