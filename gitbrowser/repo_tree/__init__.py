"""Repository tree model built from tracked-file listings.

Defines the arena-backed ``PathTree``, the listing tokenizers that feed it,
and the text rendering used by the tree view.
"""

from __future__ import annotations

from .build import PathTree
from .rendering import format_tree_row, render_tree_lines
from .tokenize import MAX_LINE_LENGTH, MAX_SEGMENT_LENGTH, iter_lines, iter_segments
from .types import ROOT, NodeKind, PathConflict, TreeNode, TreeVisit

__all__ = [
    "ROOT",
    "NodeKind",
    "TreeNode",
    "TreeVisit",
    "PathConflict",
    "PathTree",
    "MAX_LINE_LENGTH",
    "MAX_SEGMENT_LENGTH",
    "iter_lines",
    "iter_segments",
    "format_tree_row",
    "render_tree_lines",
]
