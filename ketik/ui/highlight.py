"""Turn session display state into highlighted rich text."""

from __future__ import annotations

import html
from typing import Dict, List, Sequence, Tuple

from ketik.core.session import CharStatus
from ketik.ui.colors import TypingColors

CHAR_CORRECT = "char-correct"
CHAR_WRONG = "char-wrong"
CHAR_CURRENT = "char-current"
CHAR_DEFAULT = "char-default"
SPACE_ERROR = "space-error"

STYLES: Dict[str, str] = {
    CHAR_CORRECT: f"color:{TypingColors.CORRECT};",
    CHAR_WRONG: f"color:{TypingColors.WRONG}; background:{TypingColors.WRONG_BG};",
    CHAR_CURRENT: (
        f"color:{TypingColors.CURRENT}; background:{TypingColors.CURRENT_BG}; "
        "text-decoration:underline;"
    ),
    CHAR_DEFAULT: f"color:{TypingColors.DEFAULT};",
    SPACE_ERROR: f"color:{TypingColors.SPACE_ERROR}; background:{TypingColors.WRONG_BG};",
}


def char_class(text: str, index: int, cursor: int, statuses: Sequence[CharStatus]) -> str:
    """CSS class for the character at *index*.

    Typed characters without a recorded status (e.g. past the end of the
    buffer) count as wrong.
    """
    if index < cursor:
        status = statuses[index] if index < len(statuses) else CharStatus.WRONG
        if status is CharStatus.CORRECT:
            return CHAR_CORRECT
        if text[index] == " " and status is CharStatus.WRONG:
            return SPACE_ERROR
        return CHAR_WRONG
    if index == cursor:
        return CHAR_CURRENT
    return CHAR_DEFAULT


def segments(text: str, statuses: Sequence[CharStatus], cursor: int) -> List[Tuple[str, str]]:
    """Group *text* into (css class, visible text) runs.

    A wrongly typed space is shown as ``_`` so the mistake stays visible.
    """
    runs: List[Tuple[str, str]] = []
    for i, ch in enumerate(text):
        cls = char_class(text, i, cursor, statuses)
        shown = "_" if cls == SPACE_ERROR else ch
        if runs and runs[-1][0] == cls:
            runs[-1] = (cls, runs[-1][1] + shown)
        else:
            runs.append((cls, shown))
    return runs


def render_html(text: str, statuses: Sequence[CharStatus], cursor: int) -> str:
    return "".join(
        f'<span class="{cls}" style="{STYLES[cls]}">{html.escape(chunk)}</span>'
        for cls, chunk in segments(text, statuses, cursor)
    )
