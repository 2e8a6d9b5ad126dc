"""Time-budgeted, resumable substring filter over the quick-open index.

The filter never scans the whole index in one call. Each ``tick`` updates
visibility flags for as many entries as fit in the budget, then returns so
the event loop can read keys and redraw. A query change restarts the pass
from the first entry; flags not yet revisited may be stale until then.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

import structlog

from .flatten import FlatEntry

DEFAULT_TICK_BUDGET_SECONDS = 0.050

log = structlog.get_logger(__name__)


class FilterPhase(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    DONE = "done"


@dataclass
class FilterState:
    """Query, scan position, per-tick budget, and phase of one filter."""

    query: str = ""
    cursor: int = 0
    budget_seconds: float = DEFAULT_TICK_BUDGET_SECONDS
    phase: FilterPhase = FilterPhase.IDLE


class IncrementalFilter:
    """Maintain ``FlatEntry.visible`` against a live substring query."""

    def __init__(
        self,
        entries: Sequence[FlatEntry],
        budget_seconds: float = DEFAULT_TICK_BUDGET_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_done: Callable[[], None] | None = None,
    ) -> None:
        self.entries = entries
        self.state = FilterState(budget_seconds=max(0.0, budget_seconds))
        self._clock = clock
        self._on_done = on_done
        self.changed_since_reset = 0

    @property
    def phase(self) -> FilterPhase:
        return self.state.phase

    @property
    def is_scanning(self) -> bool:
        return self.state.phase is FilterPhase.SCANNING

    @property
    def query(self) -> str:
        return self.state.query

    def on_query_change(self, query: str) -> None:
        """Store ``query`` and restart the scan from the first entry."""
        self.state.query = query
        self.state.cursor = 0
        self.state.phase = FilterPhase.SCANNING
        self.changed_since_reset = 0

    def tick(self, now: float | None = None, budget: float | None = None) -> bool:
        """Process entries until ``budget`` seconds pass since ``now``.

        At least one entry is processed per call. Returns True while the scan
        still has entries left.
        """
        state = self.state
        if state.phase is not FilterPhase.SCANNING:
            return False

        started = self._clock() if now is None else now
        limit = state.budget_seconds if budget is None else max(0.0, budget)
        query = state.query
        entries = self.entries
        total = len(entries)
        processed = 0

        while state.cursor < total:
            entry = entries[state.cursor]
            visible = not query or query in entry.name
            if visible != entry.visible:
                entry.visible = visible
                self.changed_since_reset += 1
            state.cursor += 1
            processed += 1
            if self._clock() - started > limit:
                break

        if state.cursor < total:
            return True

        state.phase = FilterPhase.DONE
        log.debug(
            "quick_open.filter_done",
            query=query,
            entries=total,
            changed=self.changed_since_reset,
            last_tick=processed,
        )
        if self._on_done is not None:
            self._on_done()
        return False

    def run_to_completion(self) -> None:
        """Drive ticks until the current pass is finished."""
        while self.tick():
            pass

    def first_visible_index(self) -> int | None:
        for idx, entry in enumerate(self.entries):
            if entry.visible:
                return idx
        return None

    def visible_indices(self) -> list[int]:
        return [idx for idx, entry in enumerate(self.entries) if entry.visible]


__all__ = [
    "DEFAULT_TICK_BUDGET_SECONDS",
    "FilterPhase",
    "FilterState",
    "IncrementalFilter",
]
