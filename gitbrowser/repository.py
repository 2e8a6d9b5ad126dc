"""Registered git repositories, their tracked-file trees, and persistence.

Each ``RepositoryIndex`` pairs an absolute root with a ``PathTree`` rebuilt
wholesale from ``git ls-files`` on every scan. Lister failures leave an empty
tree and an error string on the index; the repository stays registered so a
later rescan can recover.
"""

from __future__ import annotations

import os
import subprocess
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

import structlog

from . import config
from .repo_tree import PathTree

GIT_LS_FILES_TIMEOUT_SECONDS = 30.0

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ListingResult:
    """Raw newline-delimited listing text, or an error when listing failed."""

    text: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


Lister = Callable[[str], ListingResult]


def list_tracked_files(root: str, timeout_seconds: float = GIT_LS_FILES_TIMEOUT_SECONDS) -> ListingResult:
    """Run ``git ls-files`` in ``root`` and return its stdout.

    Spawn failures, timeouts, and nonzero exits come back as an empty
    listing with ``error`` set; this function never raises.
    """
    try:
        proc = subprocess.run(
            ["git", "ls-files"],
            cwd=root,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        log.warning("repository.list_failed", root=root, error=str(exc))
        return ListingResult("", error=str(exc) or exc.__class__.__name__)
    if proc.returncode != 0:
        detail = (proc.stderr or "").strip() or f"git ls-files exited with status {proc.returncode}"
        log.warning("repository.list_failed", root=root, returncode=proc.returncode, error=detail)
        return ListingResult("", error=detail)
    return ListingResult(proc.stdout)


def is_repository_root(path: Path) -> bool:
    return (path / ".git").is_dir()


def find_repository_root(path: Path) -> Path | None:
    """Walk upward from ``path`` to the nearest directory holding ``.git/``."""
    try:
        current = path.resolve()
    except OSError:
        current = path.absolute()
    if not current.is_dir():
        current = current.parent
    for candidate in (current, *current.parents):
        if is_repository_root(candidate):
            return candidate
    return None


def normalize_root(path: str | os.PathLike[str]) -> str:
    return os.path.realpath(os.fspath(path))


class RepositoryIndex:
    """One registered repository and the tree of its tracked files."""

    def __init__(self, root_location: str) -> None:
        self.root_location = normalize_root(root_location)
        self.tree = PathTree()
        self.scanned = False
        self.file_count = 0
        self.elapsed_ms = 0.0
        self.error: str | None = None

    def __repr__(self) -> str:
        return f"RepositoryIndex({self.root_location!r}, files={self.file_count})"

    @property
    def name(self) -> str:
        return os.path.basename(self.root_location) or self.root_location

    def scan(self, lister: Lister = list_tracked_files) -> None:
        """Replace the tree with a fresh build from ``lister`` output."""
        started = time.perf_counter()
        result = lister(self.root_location)
        self.tree = PathTree.from_listing(result.text) if result.ok else PathTree()
        self.error = result.error
        self.file_count = self.tree.file_count()
        self.elapsed_ms = (time.perf_counter() - started) * 1e3
        self.scanned = True
        log.info(
            "repository.scanned",
            root=self.root_location,
            files=self.file_count,
            elapsed_ms=round(self.elapsed_ms, 1),
            conflicts=len(self.tree.conflicts),
            error=self.error,
        )

    def ensure_scanned(self, lister: Lister = list_tracked_files) -> None:
        if not self.scanned:
            self.scan(lister)

    def status_message(self) -> str:
        """Describe the last scan the way the status line shows it."""
        if not self.scanned:
            return f'Repository "{self.name}" has not been scanned.'
        if self.error is not None:
            return f'Failed to list repository "{self.name}": {self.error}'
        return f'Built repository "{self.name}", {self.file_count} files added in {self.elapsed_ms:.1f} ms.'

    def contains(self, path: str | os.PathLike[str]) -> bool:
        target = normalize_root(path)
        return target == self.root_location or target.startswith(self.root_location.rstrip(os.sep) + os.sep)

    def location_of(self, handle: int) -> str:
        """Absolute filesystem location of the tree node ``handle``."""
        relative = self.tree.path_to_root(handle)
        if not relative:
            return self.root_location
        return os.path.join(self.root_location, *relative.split(self.tree.separator))


class RepositoryRegistry:
    """Ordered set of repositories keyed by normalized root location."""

    def __init__(self, lister: Lister = list_tracked_files) -> None:
        self._lister = lister
        self._repositories: list[RepositoryIndex] = []

    def __iter__(self) -> Iterator[RepositoryIndex]:
        return iter(list(self._repositories))

    def __len__(self) -> int:
        return len(self._repositories)

    def roots(self) -> list[str]:
        return [repo.root_location for repo in self._repositories]

    def get(self, root: str | os.PathLike[str]) -> RepositoryIndex | None:
        target = normalize_root(root)
        for repo in self._repositories:
            if repo.root_location == target:
                return repo
        return None

    def _index_of(self, root: str | os.PathLike[str]) -> int | None:
        target = normalize_root(root)
        for idx, repo in enumerate(self._repositories):
            if repo.root_location == target:
                return idx
        return None

    def register(self, root: str | os.PathLike[str], scan: bool = True) -> RepositoryIndex:
        """Register ``root`` without checking for ``.git``; reuse when known."""
        existing = self.get(root)
        if existing is not None:
            return existing
        repo = RepositoryIndex(os.fspath(root))
        self._repositories.append(repo)
        if scan:
            repo.scan(self._lister)
        return repo

    def add(self, path: str | os.PathLike[str], scan: bool = True) -> RepositoryIndex | None:
        """Register a repository root; ``None`` if it has no ``.git`` directory.

        Adding an already registered root returns the existing index.
        """
        root = Path(normalize_root(path))
        if not is_repository_root(root):
            log.info("repository.not_a_repository", path=str(root))
            return None
        return self.register(root, scan=scan)

    def add_from_document(self, document: str | os.PathLike[str], scan: bool = True) -> RepositoryIndex | None:
        """Register the repository enclosing ``document``, if there is one."""
        root = find_repository_root(Path(document))
        if root is None:
            return None
        return self.register(root, scan=scan)

    def remove(self, root: str | os.PathLike[str]) -> bool:
        idx = self._index_of(root)
        if idx is None:
            return False
        del self._repositories[idx]
        return True

    def remove_all(self) -> int:
        count = len(self._repositories)
        self._repositories.clear()
        return count

    def move_up(self, root: str | os.PathLike[str]) -> bool:
        idx = self._index_of(root)
        if idx is None or idx == 0:
            return False
        repos = self._repositories
        repos[idx - 1], repos[idx] = repos[idx], repos[idx - 1]
        return True

    def move_down(self, root: str | os.PathLike[str]) -> bool:
        idx = self._index_of(root)
        if idx is None or idx >= len(self._repositories) - 1:
            return False
        repos = self._repositories
        repos[idx + 1], repos[idx] = repos[idx], repos[idx + 1]
        return True

    def find_by_path(self, path: str | os.PathLike[str]) -> RepositoryIndex | None:
        """Return the first registered repository that contains ``path``."""
        for repo in self._repositories:
            if repo.contains(path):
                return repo
        return None

    def rescan(self, root: str | os.PathLike[str]) -> RepositoryIndex | None:
        repo = self.get(root)
        if repo is None:
            return None
        repo.scan(self._lister)
        return repo

    def ensure_scanned(self, repo: RepositoryIndex) -> RepositoryIndex:
        repo.ensure_scanned(self._lister)
        return repo

    def load(self, roots: list[str], scan: bool = True) -> list[RepositoryIndex]:
        """Register persisted ``roots`` in order, rebuilding each tree."""
        return [self.register(root, scan=scan) for root in roots]

    @classmethod
    def from_config(cls, lister: Lister = list_tracked_files, scan: bool = True) -> RepositoryRegistry:
        registry = cls(lister=lister)
        registry.load(config.load_repository_roots(), scan=scan)
        return registry

    def save(self) -> None:
        config.save_repository_roots(self.roots())


__all__ = [
    "GIT_LS_FILES_TIMEOUT_SECONDS",
    "ListingResult",
    "Lister",
    "list_tracked_files",
    "is_repository_root",
    "find_repository_root",
    "normalize_root",
    "RepositoryIndex",
    "RepositoryRegistry",
]
