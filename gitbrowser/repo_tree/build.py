"""Repository tree construction from tracked-file path listings.

``PathTree`` owns an arena of ``TreeNode`` slots addressed by integer handle.
Children stay sorted by name on insert; directories are grouped ahead of
files only at traversal time, so the stored order is plain code-point order.

A name used both as a file and as a directory prefix resolves to the
directory. The dropped file paths are kept on ``PathTree.conflicts``.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator

import structlog

from .tokenize import iter_lines, iter_segments
from .types import ROOT, NodeKind, PathConflict, TreeNode, TreeVisit

log = structlog.get_logger(__name__)


def _join(parent: str, name: str, separator: str) -> str:
    return f"{parent}{separator}{name}" if parent else name


class PathTree:
    """Ordered n-ary tree of directories and files for one repository."""

    def __init__(self, separator: str = "/") -> None:
        self.separator = separator
        self._nodes: list[TreeNode] = [TreeNode(name="", kind=NodeKind.DIRECTORY)]
        self.conflicts: list[PathConflict] = []
        self._conflict_keys: set[PathConflict] = set()

    @classmethod
    def build(cls, paths: Iterable[str], separator: str = "/") -> PathTree:
        """Fold relative ``paths`` into a fresh tree, in input order."""
        tree = cls(separator=separator)
        for path in paths:
            tree._insert_path(path)
        return tree

    @classmethod
    def from_listing(cls, text: str, separator: str = "/") -> PathTree:
        """Build a tree from newline-delimited listing text."""
        return cls.build(iter_lines(text), separator=separator)

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> TreeNode:
        return self._nodes[ROOT]

    def node(self, handle: int) -> TreeNode:
        return self._nodes[handle]

    def children(self, handle: int = ROOT) -> list[TreeNode]:
        return [self._nodes[child] for child in self._nodes[handle].children]

    def is_empty(self) -> bool:
        return not self._nodes[ROOT].children

    def file_count(self) -> int:
        return sum(1 for node in self._nodes if node.kind is NodeKind.FILE)

    def find(self, relative_path: str) -> int | None:
        """Return the handle for ``relative_path``, or ``None`` when absent."""
        handle = ROOT
        for segment in iter_segments(relative_path, self.separator):
            child = self._find_child(handle, segment)
            if child is None:
                return None
            handle = child
        return handle

    def _child_slot(self, handle: int, name: str) -> tuple[int, int | None]:
        """Return ``(insert_position, existing_child)`` for ``name`` under ``handle``."""
        children = self._nodes[handle].children
        pos = bisect_left(children, name, key=lambda child: self._nodes[child].name)
        if pos < len(children) and self._nodes[children[pos]].name == name:
            return pos, children[pos]
        return pos, None

    def _find_child(self, handle: int, name: str) -> int | None:
        return self._child_slot(handle, name)[1]

    def _find_or_insert(self, handle: int, name: str, kind: NodeKind) -> int:
        pos, existing = self._child_slot(handle, name)
        if existing is not None:
            return existing
        self._nodes.append(TreeNode(name=name, kind=kind, parent=handle))
        child = len(self._nodes) - 1
        self._nodes[handle].children.insert(pos, child)
        return child

    def _insert_path(self, path: str) -> None:
        segments = list(iter_segments(path, self.separator))
        if not segments:
            return

        handle = ROOT
        last = len(segments) - 1
        for idx, segment in enumerate(segments):
            if idx < last:
                handle = self._find_or_insert(handle, segment, NodeKind.DIRECTORY)
                node = self._nodes[handle]
                if node.kind is NodeKind.FILE:
                    # Directory wins: the file recorded under this name is dropped.
                    self._record_conflict(self.path_to_root(handle), segment)
                    node.kind = NodeKind.DIRECTORY
                continue

            child = self._find_or_insert(handle, segment, NodeKind.FILE)
            if self._nodes[child].kind is NodeKind.DIRECTORY:
                self._record_conflict(self.separator.join(segments), segment)

    def _record_conflict(self, path: str, name: str) -> None:
        conflict = PathConflict(path=path, name=name)
        if conflict in self._conflict_keys:
            return
        self._conflict_keys.add(conflict)
        self.conflicts.append(conflict)
        log.warning("tree.path_conflict", path=path, name=name, kept="directory")

    def path_to_root(self, handle: int, separator: str | None = None) -> str:
        """Join segment names from the root down to ``handle``."""
        sep = self.separator if separator is None else separator
        names: list[str] = []
        current: int | None = handle
        while current is not None and current != ROOT:
            node = self._nodes[current]
            names.append(node.name)
            current = node.parent
        names.reverse()
        return sep.join(names)

    def traverse_grouped(self, start: int = ROOT) -> Iterator[TreeVisit]:
        """Depth-first walk below ``start`` yielding directories before files.

        Each directory is followed immediately by its own subtree; files of a
        level come after every directory of that level.
        """
        return self._walk_grouped(start, 0, self.path_to_root(start))

    def _walk_grouped(self, handle: int, depth: int, path: str) -> Iterator[TreeVisit]:
        children = self._nodes[handle].children
        for child in children:
            node = self._nodes[child]
            if node.kind is not NodeKind.DIRECTORY:
                continue
            yield TreeVisit(node=node, handle=child, depth=depth, parent_path=path)
            yield from self._walk_grouped(child, depth + 1, _join(path, node.name, self.separator))
        for child in children:
            node = self._nodes[child]
            if node.kind is NodeKind.FILE:
                yield TreeVisit(node=node, handle=child, depth=depth, parent_path=path)


__all__ = ["PathTree"]
