"""Tests for flattening a repository tree into the quick-open index.

Covers hide-pattern exclusion, absolute locations, and index ordering.
"""

from __future__ import annotations

import os
import re
import unittest
from unittest import mock

from gitbrowser.quick_open import FlatEntry, build_flat_index, flatten_tree, sort_entries
from gitbrowser.repo_tree import PathTree


class FlattenTreeTests(unittest.TestCase):
    def test_entries_carry_absolute_locations(self) -> None:
        tree = PathTree.build(["a/b.txt", "a/sub/c.txt", "d.txt"])
        entries = flatten_tree(tree, "/repo")
        self.assertEqual(
            sorted((entry.location, entry.name) for entry in entries),
            [("/repo", "d.txt"), ("/repo/a", "b.txt"), ("/repo/a/sub", "c.txt")],
        )
        self.assertTrue(all(entry.visible for entry in entries))
        self.assertEqual(entries[0].path, os.path.join(entries[0].location, entries[0].name))

    def test_hide_pattern_excludes_matching_names(self) -> None:
        tree = PathTree.build(["a/b.txt", "a/c.tmp", "d.txt"])
        entries = build_flat_index(tree, "/repo", re.compile(r"\.tmp$"))
        self.assertEqual(
            [(entry.name, entry.location) for entry in entries],
            [("d.txt", "/repo"), ("b.txt", "/repo/a")],
        )

    def test_hidden_file_in_subdirectory_has_no_entry(self) -> None:
        tree = PathTree.build(["x/y.tmp", "x/z.txt"])
        entries = flatten_tree(tree, "/repo", re.compile(r"\.tmp$"))
        self.assertEqual([entry.name for entry in entries], ["z.txt"])

    def test_hide_pattern_matches_bare_name_only(self) -> None:
        tree = PathTree.build(["build/out.txt", "keep.txt"])
        entries = flatten_tree(tree, "/repo", re.compile(r"^build"))
        self.assertEqual(sorted(entry.name for entry in entries), ["keep.txt", "out.txt"])

    def test_directories_are_not_entries(self) -> None:
        tree = PathTree.build(["x/y/z.py"])
        self.assertEqual([entry.name for entry in flatten_tree(tree, "/r")], ["z.py"])

    def test_empty_tree_gives_empty_index(self) -> None:
        self.assertEqual(build_flat_index(PathTree(), "/repo"), [])

    def test_flatten_from_subdirectory_start(self) -> None:
        tree = PathTree.build(["a/b.txt", "a/sub/c.txt", "d.txt"])
        start = tree.find("a")
        assert start is not None
        entries = flatten_tree(tree, "/repo", start=start)
        self.assertEqual(
            sorted((entry.location, entry.name) for entry in entries),
            [("/repo/a", "b.txt"), ("/repo/a/sub", "c.txt")],
        )

    def test_flatten_from_file_start(self) -> None:
        tree = PathTree.build(["a/b.txt"])
        start = tree.find("a/b.txt")
        assert start is not None
        entries = flatten_tree(tree, "/repo", start=start)
        self.assertEqual([(entry.location, entry.name) for entry in entries], [("/repo/a", "b.txt")])


class SortEntriesTests(unittest.TestCase):
    def test_orders_by_location_then_name(self) -> None:
        entries = [
            FlatEntry(name="z.py", location="/repo/src"),
            FlatEntry(name="b.md", location="/repo"),
            FlatEntry(name="a.py", location="/repo/src"),
            FlatEntry(name="a.md", location="/repo"),
        ]
        ordered = sort_entries(entries)
        self.assertEqual(
            [entry.path for entry in ordered],
            ["/repo/a.md", "/repo/b.md", "/repo/src/a.py", "/repo/src/z.py"],
        )

    def test_sort_uses_locale_collation_keys(self) -> None:
        entries = [FlatEntry(name="B.txt", location="/r"), FlatEntry(name="a.txt", location="/r")]
        with mock.patch("gitbrowser.quick_open.flatten.locale.strxfrm", side_effect=str.casefold) as strxfrm:
            ordered = sort_entries(entries)
        self.assertEqual([entry.name for entry in ordered], ["a.txt", "B.txt"])
        strxfrm.assert_any_call("B.txt")

    def test_sorting_is_idempotent(self) -> None:
        tree = PathTree.build(["m/n.txt", "a.txt", "m/a.txt", "z/q.txt"])
        once = build_flat_index(tree, "/repo")
        twice = sort_entries(once)
        self.assertEqual([entry.path for entry in once], [entry.path for entry in twice])


if __name__ == "__main__":
    unittest.main()
