"""Review session: one document, its rendered view, and the editing loop.

The session owns the document string. Everything else (HTML, comment cards,
suggestion count, caret) is derived from it and recomputed after a change.

Typing does not re-render synchronously: each change (re)arms one debounce
timer and only the newest survives. Accept/reject run to completion on the
string first and then render immediately, so a render never sees a
half-resolved document.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from markaround.autosave import DEFAULT_FILE_NAME, AutosaveManager
from markaround.critic.comments import CommentCard, extract_comments
from markaround.critic.render import CriticRenderer, get_renderer
from markaround.critic.resolver import (
    count_regions,
    resolve_all,
    resolve_at,
)
from markaround.critic.suggestion import (
    Edit,
    SuggestionMode,
    apply_edit,
    comment_edit,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from markaround.autosave import AutosaveRecord
    from markaround.config import Settings

logger = logging.getLogger(__name__)


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


@dataclass
class Document:
    """The text under review and the name it was loaded as."""

    source: str = ""
    file_name: str = DEFAULT_FILE_NAME


class ReviewSession:
    """Host-side state for one open document.

    Attributes:
        debounce_seconds: Delay between the last change and its render.
        html: Most recent render.
        comments: Comment cards from the most recent render.
        suggestion_count: Top-level regions at the most recent render.
        cursor: Caret position after the last edit handled here.
    """

    def __init__(
        self,
        document: Document | None = None,
        *,
        renderer: CriticRenderer | None = None,
        suggestions: SuggestionMode | None = None,
        autosave: AutosaveManager | None = None,
        on_render: Callable[[ReviewSession], None] | None = None,
        debounce_seconds: float = 0.15,
    ) -> None:
        self.document = document if document is not None else Document()
        self.renderer = renderer if renderer is not None else get_renderer()
        self.suggestions = suggestions if suggestions is not None else SuggestionMode()
        self.autosave = autosave
        self.on_render = on_render
        self.debounce_seconds = debounce_seconds
        self.html = ""
        self.comments: list[CommentCard] = []
        self.suggestion_count = 0
        self.cursor = 0
        self._pending_render: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        on_render: Callable[[ReviewSession], None] | None = None,
    ) -> ReviewSession:
        """Build a session wired to the configured renderer and autosave."""
        autosave = (
            AutosaveManager.from_config(settings.autosave)
            if settings.autosave.enabled
            else None
        )
        return cls(
            Document(file_name=settings.app.default_file_name),
            suggestions=SuggestionMode(lookback=settings.editor.lookback_window),
            autosave=autosave,
            on_render=on_render,
            debounce_seconds=settings.editor.render_debounce_seconds,
        )

    @property
    def source(self) -> str:
        return self.document.source

    # --- Loading ---

    def load(
        self,
        text: str,
        file_name: str | None = None,
        *,
        restore: Callable[[AutosaveRecord], bool] | None = None,
    ) -> bool:
        """Open ``text`` as the document, offering any newer autosave.

        Periodic autosave starts only inside a running event loop; outside
        one (CLI, synchronous tests) the restore check still runs.

        Args:
            text: Loaded document text.
            file_name: Name to save under; defaults to ``document.md``.
            restore: Asked whether to use a differing autosaved snapshot.

        Returns:
            True if the autosaved snapshot replaced ``text``.
        """
        self.document = Document(text, file_name or DEFAULT_FILE_NAME)
        self.cursor = 0
        restored = False
        if self.autosave is not None:
            saved = self.autosave.check(self.document.file_name)
            if saved is not None and saved.source != text and restore is not None:
                if restore(saved):
                    self.document.source = saved.source
                    restored = True
                    logger.info(
                        "Restored autosave of %s from %s",
                        self.document.file_name,
                        saved.timestamp.isoformat(),
                    )
            if _loop_running():
                self.autosave.start(
                    self.document.file_name, lambda: self.document.source
                )
            else:
                logger.debug("No running event loop, periodic autosave not started")
        self.render_now()
        return restored

    def close(self) -> None:
        """Cancel pending work and stop autosaving."""
        self._cancel_pending_render()
        if self.autosave is not None:
            self.autosave.stop()

    def mark_downloaded(self) -> None:
        """The user saved the file themselves; the autosave is obsolete."""
        if self.autosave is not None:
            self.autosave.clear(self.document.file_name)

    # --- Rendering ---

    @property
    def render_pending(self) -> bool:
        return self._pending_render is not None and not self._pending_render.done()

    def _cancel_pending_render(self) -> None:
        task = self._pending_render
        self._pending_render = None
        if task is not None and not task.done():
            task.cancel()

    def _schedule_render(self) -> None:
        """Cancel any scheduled render and arm a new one.

        Outside a running event loop there is no timer to arm, so the render
        happens straight away.
        """
        self._cancel_pending_render()
        if not _loop_running():
            self.render_now()
            return

        async def debounced_render() -> None:
            await asyncio.sleep(self.debounce_seconds)
            self._pending_render = None
            self.render_now()

        self._pending_render = asyncio.create_task(debounced_render())

    def render_now(self) -> str:
        """Render the current document immediately and publish the result."""
        self._cancel_pending_render()
        source = self.document.source
        self.html = self.renderer.render(source)
        self.comments = extract_comments(self.html)
        self.suggestion_count = count_regions(source)
        if self.on_render is not None:
            self.on_render(self)
        return self.html

    # --- Document changes ---

    def _mark_dirty(self) -> None:
        if self.autosave is not None:
            self.autosave.mark_dirty()

    def on_document_changed(self, source: str) -> None:
        """Editor notification: the text is now ``source``."""
        self.document.source = source
        self._mark_dirty()
        self._schedule_render()

    def _replace_and_render(self, source: str) -> None:
        self.document.source = source
        self._mark_dirty()
        self.render_now()

    def accept_all(self) -> None:
        """Accept every change, nested ones included."""
        self._replace_and_render(resolve_all(self.document.source, accepted=True))

    def reject_all(self) -> None:
        """Reject every change, nested ones included."""
        self._replace_and_render(resolve_all(self.document.source, accepted=False))

    def resolve(self, markup: str, offset: int, *, accepted: bool) -> None:
        """Accept or reject the region a preview control points at."""
        self._replace_and_render(
            resolve_at(self.document.source, markup, offset, accepted=accepted)
        )

    def resolve_comment(self, comment_id: str) -> bool:
        """Remove the comment behind a sidebar card. False if the id is unknown."""
        for card in self.comments:
            if card.comment_id == comment_id:
                self.resolve(card.markup, card.offset, accepted=True)
                return True
        return False

    # --- Suggestion mode ---

    @property
    def suggestion_mode(self) -> bool:
        return self.suggestions.active

    def set_suggestion_mode(self, enabled: bool) -> None:
        self.suggestions.active = enabled

    def handle_edit(self, edit: Edit) -> Edit:
        """Run a user edit through suggestion mode and apply the outcome.

        Returns:
            The edit that was applied (``edit`` itself on pass-through).
        """
        final = self.suggestions.intercept(self.document.source, edit)
        if final.processed:
            source, self.cursor = self.suggestions.commit(self.document.source, final)
        else:
            source, self.cursor = apply_edit(self.document.source, final)
        self.on_document_changed(source)
        return final

    def add_comment(self, selection_start: int, selection_end: int, text: str) -> bool:
        """Attach ``{>>text<<}`` after the selection. False if nothing is selected."""
        edit = comment_edit(self.document.source, selection_start, selection_end, text)
        if edit is None:
            return False
        source, self.cursor = self.suggestions.commit(self.document.source, edit)
        self._replace_and_render(source)
        return True
