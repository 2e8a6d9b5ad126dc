"""Interactive event loop for the terminal quick-open picker.

The loop is the cooperative scheduler for the incremental filter: while a
scan is in progress, key reads poll without blocking and one filter tick runs
between them, so typing is never held up by a large index.
"""

from __future__ import annotations

import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from ..input import read_key
from .rendering import list_rows_for_height, render_frame
from .session import QuickOpenSession

log = structlog.get_logger(__name__)


class PickerAction(Enum):
    CONTINUE = "continue"
    ACCEPT = "accept"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PickerTiming:
    """Timing constants controlling picker loop behavior."""

    idle_key_timeout_ms: int = 250
    spinner_frame_seconds: float = 0.12


def handle_picker_key(session: QuickOpenSession, key: str, page_rows: int) -> tuple[PickerAction, bool]:
    """Apply one key to ``session``; returns ``(action, needs_redraw)``."""
    if key in {"ESC", "CTRL_C"}:
        return PickerAction.CANCEL, False
    if key == "ENTER":
        if session.chosen_paths():
            return PickerAction.ACCEPT, False
        return PickerAction.CONTINUE, False
    if key in {"UP", "CTRL_P"}:
        return PickerAction.CONTINUE, session.move_selection(-1)
    if key in {"DOWN", "CTRL_N"}:
        return PickerAction.CONTINUE, session.move_selection(1)
    if key == "PAGE_UP":
        return PickerAction.CONTINUE, session.move_selection(-max(1, page_rows))
    if key == "PAGE_DOWN":
        return PickerAction.CONTINUE, session.move_selection(max(1, page_rows))
    if key in {"HOME", "END"}:
        return PickerAction.CONTINUE, session.select_edge(last=key == "END")
    if key == "TAB":
        session.toggle_mark()
        session.move_selection(1)
        return PickerAction.CONTINUE, True
    if key == "BACKSPACE":
        if not session.query:
            return PickerAction.CONTINUE, False
        session.backspace()
        return PickerAction.CONTINUE, True
    if key == "CTRL_U":
        if not session.query:
            return PickerAction.CONTINUE, False
        session.clear_query()
        return PickerAction.CONTINUE, True
    if len(key) == 1 and key.isprintable():
        session.append_text(key)
        return PickerAction.CONTINUE, True
    return PickerAction.CONTINUE, False


def run_quick_open(
    session: QuickOpenSession,
    terminal,
    stdin_fd: int,
    *,
    timing: PickerTiming | None = None,
    no_color: bool = False,
    key_reader: Callable[..., str] = read_key,
    terminal_size: Callable[[], tuple[int, int]] | None = None,
) -> list[str]:
    """Run the picker until the user accepts or cancels.

    Returns the absolute paths to open, or an empty list on cancel.
    """
    loop_timing = timing or PickerTiming()

    def current_size() -> tuple[int, int]:
        if terminal_size is not None:
            return terminal_size()
        term = shutil.get_terminal_size((80, 24))
        return term.columns, term.lines

    dirty = True
    spinner_frame = 0
    with terminal.raw_mode():
        while True:
            columns, lines = current_size()
            if session.is_scanning:
                next_frame = int(time.monotonic() / loop_timing.spinner_frame_seconds)
                if next_frame != spinner_frame:
                    spinner_frame = next_frame
                    dirty = True
            if dirty:
                terminal.write_frame(
                    render_frame(
                        session,
                        columns,
                        lines,
                        no_color=no_color,
                        spinner_frame=spinner_frame,
                    )
                )
                dirty = False

            timeout_ms = 0 if session.is_scanning else loop_timing.idle_key_timeout_ms
            key = key_reader(stdin_fd, timeout_ms=timeout_ms)
            if key == "":
                if session.is_scanning:
                    session.tick()
                    dirty = True
                continue

            action, redraw = handle_picker_key(session, key, list_rows_for_height(lines))
            if action is PickerAction.CANCEL:
                log.debug("quick_open.cancelled", query=session.query)
                return []
            if action is PickerAction.ACCEPT:
                chosen = session.chosen_paths()
                log.info("quick_open.accepted", query=session.query, count=len(chosen))
                return chosen
            dirty = dirty or redraw
            # Keep the scan moving under continuous input.
            if session.is_scanning:
                session.tick()
                dirty = True


__all__ = [
    "PickerAction",
    "PickerTiming",
    "handle_picker_key",
    "run_quick_open",
]
