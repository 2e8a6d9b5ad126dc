"""Flatten a repository tree into the sorted quick-open file index."""

from __future__ import annotations

import locale
import os
import re
from dataclasses import dataclass

from ..repo_tree import ROOT, NodeKind, PathTree


@dataclass(slots=True)
class FlatEntry:
    """One quick-open row; only ``visible`` changes after construction."""

    name: str
    location: str
    visible: bool = True

    @property
    def path(self) -> str:
        return os.path.join(self.location, self.name)


def flatten_tree(
    tree: PathTree,
    base_location: str,
    exclude_pattern: re.Pattern[str] | None = None,
    start: int = ROOT,
) -> list[FlatEntry]:
    """Collect every file below ``start`` with its absolute directory.

    Files whose bare name matches ``exclude_pattern`` are left out of the
    result altogether rather than hidden.
    """
    entries: list[FlatEntry] = []
    start_relative = tree.path_to_root(start)
    start_location = (
        os.path.join(base_location, *start_relative.split(tree.separator)) if start_relative else base_location
    )

    def walk(handle: int, location: str) -> None:
        for child in tree.node(handle).children:
            node = tree.node(child)
            if node.kind is NodeKind.DIRECTORY:
                walk(child, os.path.join(location, node.name))
                continue
            if exclude_pattern is not None and exclude_pattern.search(node.name):
                continue
            entries.append(FlatEntry(name=node.name, location=location))

    if tree.node(start).kind is NodeKind.FILE:
        node = tree.node(start)
        if exclude_pattern is None or not exclude_pattern.search(node.name):
            entries.append(FlatEntry(name=node.name, location=os.path.dirname(start_location)))
        return entries

    walk(start, start_location)
    return entries


def _collation_key(entry: FlatEntry) -> tuple[str, str]:
    return locale.strxfrm(entry.location), locale.strxfrm(entry.name)


def sort_entries(entries: list[FlatEntry]) -> list[FlatEntry]:
    """Return entries ordered by location, then name, using locale collation."""
    return sorted(entries, key=_collation_key)


def build_flat_index(
    tree: PathTree,
    base_location: str,
    exclude_pattern: re.Pattern[str] | None = None,
) -> list[FlatEntry]:
    """Flatten and sort ``tree`` in one step for a quick-open session."""
    return sort_entries(flatten_tree(tree, base_location, exclude_pattern))


__all__ = [
    "FlatEntry",
    "flatten_tree",
    "sort_entries",
    "build_flat_index",
]
