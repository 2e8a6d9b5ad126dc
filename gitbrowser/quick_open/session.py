"""Quick-open session state: query text, selection, marks, and the filter.

A session owns the flat index of one repository for as long as the picker
is open. The index is built once when the session starts and thrown away
with it; the next quick-open builds a fresh one from the current tree.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable

import structlog

from ..repository import RepositoryIndex
from .filtering import DEFAULT_TICK_BUDGET_SECONDS, IncrementalFilter
from .flatten import FlatEntry, build_flat_index

log = structlog.get_logger(__name__)


class QuickOpenSession:
    """Picker-side model driving an ``IncrementalFilter`` over one index."""

    def __init__(
        self,
        repository: RepositoryIndex,
        exclude_pattern: re.Pattern[str] | None = None,
        budget_seconds: float = DEFAULT_TICK_BUDGET_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.repository = repository
        started = time.perf_counter()
        self.entries: list[FlatEntry] = build_flat_index(
            repository.tree,
            repository.root_location,
            exclude_pattern,
        )
        log.debug(
            "quick_open.index_built",
            root=repository.root_location,
            entries=len(self.entries),
            elapsed_ms=round((time.perf_counter() - started) * 1e3, 1),
        )
        self.filter = IncrementalFilter(
            self.entries,
            budget_seconds,
            clock=clock,
            on_done=self._select_first_visible,
        )
        self.query = ""
        self.selected = 0
        self.list_start = 0
        self.marked: set[int] = set()
        self._visible_cache: list[int] | None = None

    @property
    def is_scanning(self) -> bool:
        return self.filter.is_scanning

    def set_query(self, query: str) -> None:
        if query == self.query:
            return
        self.query = query
        self.filter.on_query_change(query)

    def append_text(self, text: str) -> None:
        self.set_query(self.query + text)

    def backspace(self) -> None:
        if self.query:
            self.set_query(self.query[:-1])

    def clear_query(self) -> None:
        self.set_query("")

    def tick(self, now: float | None = None) -> bool:
        """Run one filter tick; returns True while the scan continues."""
        changed_before = self.filter.changed_since_reset
        scanning = self.filter.tick(now)
        if self.filter.changed_since_reset != changed_before:
            self._visible_cache = None
        self._clamp_selection()
        return scanning

    def visible_indices(self) -> list[int]:
        """Entry indices currently flagged visible, in index order."""
        if self._visible_cache is None:
            self._visible_cache = self.filter.visible_indices()
        return self._visible_cache

    def visible_entries(self) -> list[FlatEntry]:
        return [self.entries[idx] for idx in self.visible_indices()]

    def _select_first_visible(self) -> None:
        self._visible_cache = None
        self.selected = 0
        self.list_start = 0

    def _clamp_selection(self) -> None:
        count = len(self.visible_indices())
        self.selected = max(0, min(self.selected, max(0, count - 1)))

    def move_selection(self, delta: int) -> bool:
        """Move the selected row by ``delta``; returns whether it moved."""
        count = len(self.visible_indices())
        if count == 0:
            return False
        target = max(0, min(count - 1, self.selected + delta))
        if target == self.selected:
            return False
        self.selected = target
        return True

    def select_edge(self, last: bool) -> bool:
        count = len(self.visible_indices())
        if count == 0:
            return False
        target = count - 1 if last else 0
        moved = target != self.selected
        self.selected = target
        return moved

    def selected_entry(self) -> FlatEntry | None:
        visible = self.visible_indices()
        if not visible or self.selected >= len(visible):
            return None
        return self.entries[visible[self.selected]]

    def toggle_mark(self) -> bool:
        """Toggle the mark on the selected entry; returns the new mark state."""
        visible = self.visible_indices()
        if not visible or self.selected >= len(visible):
            return False
        entry_idx = visible[self.selected]
        if entry_idx in self.marked:
            self.marked.discard(entry_idx)
            return False
        self.marked.add(entry_idx)
        return True

    def is_marked(self, entry_idx: int) -> bool:
        return entry_idx in self.marked

    def chosen_paths(self) -> list[str]:
        """Absolute paths to open: visible marked entries, else the selection."""
        marked = [self.entries[idx].path for idx in sorted(self.marked) if self.entries[idx].visible]
        if marked:
            return marked
        entry = self.selected_entry()
        return [entry.path] if entry is not None else []

    def scroll_to_selection(self, rows: int) -> None:
        """Keep ``list_start`` so the selected row is inside a ``rows`` window."""
        rows = max(1, rows)
        if self.selected < self.list_start:
            self.list_start = self.selected
        elif self.selected >= self.list_start + rows:
            self.list_start = self.selected - rows + 1
        count = len(self.visible_indices())
        self.list_start = max(0, min(self.list_start, max(0, count - rows)))


__all__ = ["QuickOpenSession"]
