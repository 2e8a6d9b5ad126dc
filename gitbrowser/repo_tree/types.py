"""Node datatypes for the arena-backed repository tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

ROOT = 0


class NodeKind(Enum):
    DIRECTORY = "directory"
    FILE = "file"


@dataclass
class TreeNode:
    """One arena slot: a named directory or file plus its links by handle."""

    name: str
    kind: NodeKind
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


@dataclass(frozen=True)
class TreeVisit:
    """One row of a grouped depth-first traversal."""

    node: TreeNode
    handle: int
    depth: int
    parent_path: str


@dataclass(frozen=True)
class PathConflict:
    """A listed file dropped because its name is also used as a directory."""

    path: str
    name: str


__all__ = [
    "ROOT",
    "NodeKind",
    "TreeNode",
    "TreeVisit",
    "PathConflict",
]
