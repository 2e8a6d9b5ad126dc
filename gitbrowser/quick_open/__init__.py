"""Quick-open: flat file index, incremental filter, and terminal picker.

The flat index is built from a repository tree once per picker session and
filtered by a budgeted state machine driven from the picker's event loop.
"""

from __future__ import annotations

from .filtering import DEFAULT_TICK_BUDGET_SECONDS, FilterPhase, FilterState, IncrementalFilter
from .flatten import FlatEntry, build_flat_index, flatten_tree, sort_entries
from .picker import PickerAction, PickerTiming, handle_picker_key, run_quick_open
from .rendering import render_frame
from .session import QuickOpenSession

__all__ = [
    "FlatEntry",
    "flatten_tree",
    "sort_entries",
    "build_flat_index",
    "DEFAULT_TICK_BUDGET_SECONDS",
    "FilterPhase",
    "FilterState",
    "IncrementalFilter",
    "QuickOpenSession",
    "PickerAction",
    "PickerTiming",
    "handle_picker_key",
    "run_quick_open",
    "render_frame",
]
