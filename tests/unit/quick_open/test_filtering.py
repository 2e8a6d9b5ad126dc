"""Tests for the time-budgeted incremental filter.

A fake clock stands in for ``time.monotonic`` so tick boundaries are exact.
"""

from __future__ import annotations

import unittest

from gitbrowser.quick_open import FilterPhase, FlatEntry, IncrementalFilter


class FakeClock:
    def __init__(self, step: float) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def _entries(*names: str) -> list[FlatEntry]:
    return [FlatEntry(name=name, location="/repo") for name in names]


class IncrementalFilterTests(unittest.TestCase):
    def test_starts_idle_with_everything_visible(self) -> None:
        flt = IncrementalFilter(_entries("a.py", "b.md"))
        self.assertIs(flt.phase, FilterPhase.IDLE)
        self.assertFalse(flt.tick())
        self.assertEqual(flt.visible_indices(), [0, 1])

    def test_zero_budget_still_advances_one_entry_per_tick(self) -> None:
        entries = _entries("a.py", "b.md", "c.py")
        flt = IncrementalFilter(entries, budget_seconds=0.0, clock=FakeClock(step=1.0))
        flt.on_query_change("py")

        self.assertTrue(flt.tick())
        self.assertEqual(flt.state.cursor, 1)
        self.assertTrue(flt.tick())
        self.assertEqual(flt.state.cursor, 2)
        self.assertFalse(entries[1].visible)
        self.assertFalse(flt.tick())
        self.assertIs(flt.phase, FilterPhase.DONE)
        self.assertEqual(flt.visible_indices(), [0, 2])

    def test_frozen_clock_finishes_in_one_tick(self) -> None:
        entries = _entries("alpha", "beta", "gamma")
        flt = IncrementalFilter(entries, budget_seconds=0.05, clock=FakeClock(step=0.0))
        flt.on_query_change("a")
        self.assertFalse(flt.tick())
        self.assertEqual(flt.visible_indices(), [0, 1, 2])
        flt.on_query_change("mm")
        self.assertFalse(flt.tick())
        self.assertEqual(flt.visible_indices(), [2])

    def test_query_change_restarts_from_first_entry(self) -> None:
        entries = _entries("one.txt", "two.txt", "three.txt", "four.txt")
        flt = IncrementalFilter(entries, budget_seconds=0.0, clock=FakeClock(step=1.0))
        flt.on_query_change("t")
        flt.tick()
        flt.tick()
        self.assertEqual(flt.state.cursor, 2)

        flt.on_query_change("f")
        self.assertEqual(flt.state.cursor, 0)
        self.assertIs(flt.phase, FilterPhase.SCANNING)
        flt.run_to_completion()
        self.assertEqual(flt.visible_indices(), [3])

    def test_eventual_visibility_matches_last_query(self) -> None:
        names = [f"file{idx}.{'py' if idx % 3 == 0 else 'txt'}" for idx in range(50)]
        entries = _entries(*names)
        flt = IncrementalFilter(entries, budget_seconds=0.0, clock=FakeClock(step=1.0))
        for query in ("f", "fi", "py", "1", ".py"):
            flt.on_query_change(query)
            for _ in range(7):
                flt.tick()
        flt.run_to_completion()
        self.assertEqual(
            [entry.name for entry in entries if entry.visible],
            [name for name in names if ".py" in name],
        )

    def test_empty_query_makes_everything_visible(self) -> None:
        entries = _entries("a", "b")
        flt = IncrementalFilter(entries, clock=FakeClock(step=0.0))
        flt.on_query_change("zzz")
        flt.run_to_completion()
        self.assertEqual(flt.visible_indices(), [])
        self.assertIsNone(flt.first_visible_index())
        flt.on_query_change("")
        flt.run_to_completion()
        self.assertEqual(flt.first_visible_index(), 0)

    def test_match_is_case_sensitive_substring_of_name(self) -> None:
        entries = [FlatEntry(name="Readme.md", location="/repo/docs")]
        flt = IncrementalFilter(entries, clock=FakeClock(step=0.0))
        for query, expected in (("readme", False), ("Read", True), ("docs", False)):
            flt.on_query_change(query)
            flt.run_to_completion()
            self.assertEqual(entries[0].visible, expected, query)

    def test_on_done_fires_once_per_completed_pass(self) -> None:
        calls: list[str] = []
        flt = IncrementalFilter(
            _entries("a", "b"),
            budget_seconds=0.0,
            clock=FakeClock(step=1.0),
            on_done=lambda: calls.append("done"),
        )
        flt.on_query_change("a")
        flt.tick()
        self.assertEqual(calls, [])
        flt.tick()
        self.assertEqual(calls, ["done"])
        self.assertFalse(flt.tick())
        self.assertEqual(calls, ["done"])

    def test_empty_index_finishes_immediately(self) -> None:
        calls: list[str] = []
        flt = IncrementalFilter([], on_done=lambda: calls.append("done"))
        flt.on_query_change("x")
        self.assertFalse(flt.tick())
        self.assertIs(flt.phase, FilterPhase.DONE)
        self.assertEqual(calls, ["done"])

    def test_explicit_start_time_and_budget_override(self) -> None:
        entries = _entries("a", "b", "c", "d")
        clock = FakeClock(step=1.0)
        flt = IncrementalFilter(entries, budget_seconds=0.0, clock=clock)
        flt.on_query_change("x")
        self.assertTrue(flt.tick(now=0.0, budget=2.5))
        self.assertEqual(flt.state.cursor, 3)

    def test_single_letter_query_over_nested_locations(self) -> None:
        entries = [
            FlatEntry(name="b.txt", location="root/a"),
            FlatEntry(name="c.txt", location="root/a"),
            FlatEntry(name="d.txt", location="root"),
        ]
        flt = IncrementalFilter(entries, clock=FakeClock(step=0.0))
        flt.on_query_change("c")
        flt.run_to_completion()
        self.assertEqual([entry.name for entry in entries if entry.visible], ["c.txt"])

    def test_changed_counter_tracks_flag_flips(self) -> None:
        flt = IncrementalFilter(_entries("a", "b", "c"), clock=FakeClock(step=0.0))
        flt.on_query_change("b")
        flt.run_to_completion()
        self.assertEqual(flt.changed_since_reset, 2)
        flt.on_query_change("b")
        flt.run_to_completion()
        self.assertEqual(flt.changed_since_reset, 0)


if __name__ == "__main__":
    unittest.main()
