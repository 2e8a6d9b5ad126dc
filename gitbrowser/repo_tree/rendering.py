"""Text rows for the repository tree view."""

from __future__ import annotations

import os

from .build import PathTree
from .types import TreeVisit

DIR_COLOR = "\033[1;34m"
FILE_COLOR = "\033[38;5;252m"
MARKER_COLOR = "\033[38;5;244m"
RESET = "\033[0m"


def _is_hidden_by(visit: TreeVisit, collapsed: set[str], separator: str) -> bool:
    """Return whether ``visit`` lies inside any collapsed directory."""
    parent = visit.parent_path
    for directory in collapsed:
        if parent == directory or parent.startswith(directory + separator):
            return True
    return False


def format_tree_row(visit: TreeVisit, expanded: bool = True, no_color: bool = False) -> str:
    """Render one traversal row with indentation and a directory marker."""
    dir_color, file_color, marker_color, reset = (
        ("", "", "", "") if no_color else (DIR_COLOR, FILE_COLOR, MARKER_COLOR, RESET)
    )
    indent = "  " * (visit.depth + 1)
    if visit.node.is_dir:
        marker = "▾ " if expanded else "▸ "
        return f"{indent}{marker_color}{marker}{reset}{dir_color}{visit.node.name}/{reset}"
    return f"{indent}  {file_color}{visit.node.name}{reset}"


def render_tree_lines(
    tree: PathTree,
    root_location: str,
    *,
    collapsed: set[str] | None = None,
    max_depth: int | None = None,
    show_paths: bool = False,
    no_color: bool = False,
) -> list[str]:
    """Render a repository tree as display lines, directories grouped first.

    ``collapsed`` holds relative directory paths whose subtrees are skipped.
    ``show_paths`` appends the absolute location of every file row.
    """
    collapsed_dirs = collapsed or set()
    header_color, reset = ("", "") if no_color else (DIR_COLOR, RESET)
    name = os.path.basename(root_location.rstrip(os.sep)) or root_location
    lines = [f"{header_color}{name}/{reset}"]

    for visit in tree.traverse_grouped():
        if max_depth is not None and visit.depth >= max_depth:
            continue
        if collapsed_dirs and _is_hidden_by(visit, collapsed_dirs, tree.separator):
            continue
        relative = tree.path_to_root(visit.handle)
        expanded = relative not in collapsed_dirs
        if max_depth is not None and visit.depth + 1 >= max_depth:
            expanded = False
        row = format_tree_row(visit, expanded=expanded, no_color=no_color)
        if show_paths and not visit.node.is_dir:
            row += f"  {os.path.join(root_location, *relative.split(tree.separator))}"
        lines.append(row)
    return lines


__all__ = ["format_tree_row", "render_tree_lines"]
