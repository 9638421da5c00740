"""Review editor page.

Route: /

Left: the markdown source in a textarea. Right: the rendered preview with
accept/reject controls on every annotation, and a comment sidebar.

While suggestion mode is on, a ``beforeinput`` listener cancels the
browser's own edit and forwards it to Python; Python answers with the edit
to apply (rewritten into annotation syntax or passed through), which the
page applies with ``execCommand('insertText')`` so native undo still works.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from nicegui import ui

from markaround.config import get_settings
from markaround.critic.suggestion import apply_edit, edit_from_input, effective_range
from markaround.sample import SAMPLE, SAMPLE_FILE_NAME
from markaround.session import ReviewSession

if TYPE_CHECKING:
    from markaround.autosave import AutosaveRecord

logger = logging.getLogger(__name__)

_CSS_FILE = Path(__file__).parent.parent / "static" / "critic.css"


def _parse_resolve_args(args: Any) -> tuple[str, int, bool] | None:
    """Validate a ``critic_resolve`` payload from the preview."""
    if not isinstance(args, dict):
        return None
    markup = args.get("markup")
    offset = args.get("offset")
    accept = args.get("accept")
    if not isinstance(markup, str) or not markup:
        return None
    if not isinstance(offset, int) or isinstance(offset, bool):
        offset = -1
    return markup, offset, bool(accept)


def _parse_edit_args(args: Any) -> tuple[str, int, int, str, str] | None:
    """Validate a ``suggest_edit`` payload from the textarea."""
    if not isinstance(args, dict):
        return None
    value = args.get("value")
    start = args.get("start")
    end = args.get("end")
    text = args.get("text") or ""
    input_type = args.get("inputType")
    if not isinstance(value, str) or not isinstance(text, str):
        return None
    if not isinstance(start, int) or not isinstance(end, int):
        return None
    if not isinstance(input_type, str):
        return None
    if not 0 <= min(start, end) <= max(start, end) <= len(value):
        return None
    return value, start, end, text, input_type


async def _confirm_restore(record: AutosaveRecord) -> bool:
    """Ask whether to restore an autosaved snapshot."""
    when = record.timestamp.astimezone().strftime("%Y-%m-%d %H:%M")
    with ui.dialog() as dialog, ui.card():
        ui.label(f"Autosaved version from {when} found. Restore it?")
        with ui.row():
            ui.button("Restore", on_click=lambda: dialog.submit(True))
            ui.button("Discard", on_click=lambda: dialog.submit(False)).props("flat")
    answer = await dialog
    return bool(answer)


@ui.page("/")
async def editor_page() -> None:
    """Markaround editor: source, preview, comments."""
    settings = get_settings()
    ui.add_css(_CSS_FILE)

    def on_render(session: ReviewSession) -> None:
        preview.set_content(session.html)
        count = session.suggestion_count
        count_label.set_text(
            f"{count} suggestion{'s' if count != 1 else ''}" if count else ""
        )
        accept_all_btn.set_enabled(count > 0)
        reject_all_btn.set_enabled(count > 0)
        comment_sidebar.refresh()

    session = ReviewSession.from_settings(settings, on_render=on_render)

    def sync_editor() -> None:
        if editor.value != session.source:
            editor.set_value(session.source)

    async def load(text: str, file_name: str) -> None:
        answer = False
        if session.autosave is not None:
            saved = session.autosave.check(file_name)
            if saved is not None and saved.source != text:
                answer = await _confirm_restore(saved)
        session.load(text, file_name, restore=lambda _record: answer)
        file_label.set_text(session.document.file_name)
        sync_editor()

    def accept_all() -> None:
        session.accept_all()
        sync_editor()

    def reject_all() -> None:
        session.reject_all()
        sync_editor()

    def toggle_suggestions(enabled: bool) -> None:
        session.set_suggestion_mode(enabled)
        ui.run_javascript(f"window.markaround.suggest = {json.dumps(enabled)};")

    async def add_comment() -> None:
        selection = await ui.run_javascript(
            f"const ta = getHtmlElement({editor.id}).querySelector('textarea');"
            "return [ta.selectionStart, ta.selectionEnd];"
        )
        if not selection or selection[0] == selection[1]:
            ui.notify("Select some text to comment on", type="warning")
            return
        text = comment_input.value or ""
        if not text:
            ui.notify("Enter comment text first", type="warning")
            return
        if session.add_comment(int(selection[0]), int(selection[1]), text):
            comment_input.set_value("")
            sync_editor()

    def download() -> None:
        ui.download.content(session.source, session.document.file_name)
        session.mark_downloaded()

    # --- Toolbar ---
    with ui.row().classes("w-full items-center gap-2"):
        file_label = ui.label(session.document.file_name).classes("font-bold")
        ui.button("New", on_click=lambda: load("", settings.app.default_file_name))
        ui.button("Load sample", on_click=lambda: load(SAMPLE, SAMPLE_FILE_NAME))
        accept_all_btn = ui.button("Accept all", on_click=accept_all)
        reject_all_btn = ui.button("Reject all", on_click=reject_all)
        ui.switch(
            "Suggest", on_change=lambda e: toggle_suggestions(bool(e.value))
        ).props('data-testid="suggestion-toggle"')
        comment_input = ui.input(placeholder="Comment text").props("dense")
        ui.button("Comment", on_click=add_comment)
        ui.button("Download", on_click=download)
        count_label = ui.label("").classes("text-caption text-grey")

    # --- Editor | preview | sidebar ---
    with ui.row().classes("w-full no-wrap gap-4"):
        editor = (
            ui.textarea(
                on_change=lambda e: (
                    None
                    if e.value == session.source
                    else session.on_document_changed(e.value or "")
                )
            )
            .classes("w-1/3 suggestion-editor")
            .props('outlined autogrow data-testid="editor"')
        )
        preview = ui.html("", sanitize=False).classes("w-1/2").props(
            'data-testid="preview"'
        )

        @ui.refreshable
        def comment_sidebar() -> None:
            with ui.column().classes("w-1/6"):
                for card in session.comments:
                    with ui.element("div").classes("comment-card"):
                        ui.label(card.text)
                        ui.button(
                            "Remove",
                            on_click=lambda _e, cid=card.comment_id: remove_comment(
                                cid
                            ),
                        ).props("flat dense size=sm")

        def remove_comment(comment_id: str) -> None:
            if session.resolve_comment(comment_id):
                sync_editor()

        comment_sidebar()

    # --- Browser events ---
    def on_resolve(e: Any) -> None:
        parsed = _parse_resolve_args(e.args)
        if parsed is None:
            return
        markup, offset, accepted = parsed
        session.resolve(markup, offset, accepted=accepted)
        sync_editor()

    def on_suggest_edit(e: Any) -> None:
        parsed = _parse_edit_args(e.args)
        if parsed is None:
            return
        value, start, end, text, input_type = parsed
        edit = edit_from_input(start, end, text, input_type)
        if edit is None:
            return
        final = session.suggestions.intercept(value, edit)
        replace_start, replace_end = effective_range(value, final)
        _, cursor = apply_edit(value, final)
        ui.run_javascript(
            f"window.markaroundApply({replace_start}, {replace_end}, "
            f"{json.dumps(final.text)}, {cursor});"
        )

    ui.on("critic_resolve", on_resolve)
    ui.on("suggest_edit", on_suggest_edit)

    await ui.context.client.connected()

    # fmt: off
    await ui.run_javascript(
        "window.markaround = {suggest: false, applying: false};"
        f"const ta = getHtmlElement({editor.id}).querySelector('textarea');"
        "const INSERT = ['insertText', 'insertFromPaste', 'insertFromDrop'];"
        "const DELETE = ['deleteContentBackward', 'deleteContentForward'];"
        "ta.addEventListener('beforeinput', function (e) {"
        "  if (!window.markaround.suggest || window.markaround.applying) return;"
        "  const type = e.inputType;"
        "  if (INSERT.indexOf(type) < 0 && DELETE.indexOf(type) < 0) return;"
        "  e.preventDefault();"
        "  let data = e.data || '';"
        "  if (!data && e.dataTransfer) data = e.dataTransfer.getData('text/plain');"
        "  emitEvent('suggest_edit', {value: ta.value, start: ta.selectionStart,"
        "    end: ta.selectionEnd, text: data, inputType: type});"
        "});"
        "window.markaroundApply = function (start, end, text, cursor) {"
        "  window.markaround.applying = true;"
        "  try {"
        "    ta.focus();"
        "    ta.setSelectionRange(start, end);"
        "    if (text) document.execCommand('insertText', false, text);"
        "    else if (start !== end) document.execCommand('delete');"
        "    ta.setSelectionRange(cursor, cursor);"
        "  } finally {"
        "    window.markaround.applying = false;"
        "  }"
        "};"
        f"getHtmlElement({preview.id}).addEventListener('click', function (e) {{"
        "  const accept = e.target.closest('.critic-accept');"
        "  const reject = e.target.closest('.critic-reject');"
        "  if (!accept && !reject) return;"
        "  e.preventDefault();"
        "  const el = (accept || reject).closest('[data-markup]');"
        "  if (!el) return;"
        "  emitEvent('critic_resolve', {markup: el.getAttribute('data-markup'),"
        "    offset: parseInt(el.getAttribute('data-offset'), 10),"
        "    accept: !!accept});"
        "});"
    )
    # fmt: on

    await load("", settings.app.default_file_name)
