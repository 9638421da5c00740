"""CriticMarkup annotation engine.

Scanning, accept/reject resolution, HTML rendering and suggestion-mode edit
rewriting for the five tracked-change annotations.
"""

from markaround.critic.comments import CommentCard, extract_comments
from markaround.critic.detector import LOOKBACK_WINDOW, is_inside_markup, open_kind_at
from markaround.critic.render import CriticRenderer, get_renderer, render_document
from markaround.critic.resolver import (
    accept,
    accept_all,
    accept_markup,
    count_regions,
    reject,
    reject_all,
    reject_markup,
    resolve_all,
    resolve_at,
)
from markaround.critic.scanner import (
    Region,
    find_close,
    find_top_level_separator,
    scan,
)
from markaround.critic.suggestion import (
    DeleteDirection,
    Edit,
    SuggestionMode,
    apply_edit,
    comment_edit,
    edit_from_input,
    effective_range,
)
from markaround.critic.syntax import DELIMITERS, Kind

__all__ = [
    "DELIMITERS",
    "LOOKBACK_WINDOW",
    "CommentCard",
    "CriticRenderer",
    "DeleteDirection",
    "Edit",
    "Kind",
    "Region",
    "SuggestionMode",
    "accept",
    "accept_all",
    "accept_markup",
    "apply_edit",
    "comment_edit",
    "count_regions",
    "edit_from_input",
    "effective_range",
    "extract_comments",
    "find_close",
    "find_top_level_separator",
    "get_renderer",
    "is_inside_markup",
    "open_kind_at",
    "reject",
    "reject_all",
    "reject_markup",
    "render_document",
    "resolve_all",
    "resolve_at",
    "scan",
]
