"""Frame rendering for the terminal quick-open picker."""

from __future__ import annotations

import unicodedata

from ..highlight import sanitize_terminal_text
from .session import QuickOpenSession

HEADER_ROWS = 2
FOOTER_ROWS = 1
NAME_COLUMN_MIN = 12
NAME_COLUMN_MAX = 48

SELECTED_STYLE = "\033[7m"
MARK_STYLE = "\033[1;33m"
DIM_STYLE = "\033[38;5;244m"
TITLE_STYLE = "\033[1m"
RESET = "\033[0m"
SPINNER_FRAMES = "|/-\\"


def _display_width(text: str) -> int:
    return sum(2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1 for ch in text)


def _fit(text: str, width: int) -> str:
    """Clip or pad ``text`` to exactly ``width`` display cells."""
    if width <= 0:
        return ""
    out: list[str] = []
    used = 0
    for ch in text:
        cell = 2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1
        if used + cell > width:
            break
        out.append(ch)
        used += cell
    return "".join(out) + " " * (width - used)


def list_rows_for_height(height: int) -> int:
    return max(1, height - HEADER_ROWS - FOOTER_ROWS)


def name_column_width(total_width: int) -> int:
    return max(NAME_COLUMN_MIN, min(NAME_COLUMN_MAX, total_width // 3))


def render_frame(
    session: QuickOpenSession,
    width: int,
    height: int,
    *,
    no_color: bool = False,
    spinner_frame: int = 0,
    status_message: str = "",
) -> str:
    """Build a full picker screen as one string of CRLF-separated rows."""
    selected_style, mark_style, dim_style, title_style, reset = (
        ("", "", "", "", "") if no_color else (SELECTED_STYLE, MARK_STYLE, DIM_STYLE, TITLE_STYLE, RESET)
    )
    width = max(20, width)
    rows = list_rows_for_height(height)
    name_width = name_column_width(width)
    location_width = max(1, width - name_width - 3)
    session.scroll_to_selection(rows)

    title = f"Quick Open: {session.repository.name}"
    hint = "Type to filter filenames. TAB marks, ENTER opens, ESC cancels."
    lines = [
        f"{title_style}{_fit(title + '  ' + hint, width)}{reset}",
        f"{dim_style}  {_fit('Filename', name_width)} {_fit('Location', location_width)}{reset}",
    ]

    visible = session.visible_indices()
    window = visible[session.list_start : session.list_start + rows]
    for offset, entry_idx in enumerate(window):
        entry = session.entries[entry_idx]
        row_idx = session.list_start + offset
        marker = "*" if session.is_marked(entry_idx) else " "
        name = sanitize_terminal_text(entry.name)
        location = sanitize_terminal_text(entry.location)
        body = f"{marker} {_fit(name, name_width)} {_fit(location, location_width)}"
        if row_idx == session.selected:
            lines.append(f"{selected_style}{body}{reset}")
        elif marker == "*":
            lines.append(f"{mark_style}{body}{reset}")
        else:
            lines.append(body)
    while len(lines) < HEADER_ROWS + rows:
        lines.append("")

    counter = f"[{len(visible)}/{len(session.entries)}]"
    if session.is_scanning:
        counter += f" {SPINNER_FRAMES[spinner_frame % len(SPINNER_FRAMES)]}"
    prompt = f"> {sanitize_terminal_text(session.query)}"
    if status_message:
        prompt += f"  {status_message}"
    gap = max(1, width - _display_width(prompt) - _display_width(counter))
    lines.append(_fit(f"{prompt}{' ' * gap}{counter}", width))
    return "\r\n".join(lines)


__all__ = [
    "HEADER_ROWS",
    "FOOTER_ROWS",
    "list_rows_for_height",
    "name_column_width",
    "render_frame",
]
