"""CLI subcommand behavior tests.

Drives ``gitbrowser.cli.main`` with an injected registry whose lister never
shells out to git, and a config path inside a temporary directory.
"""

from __future__ import annotations

import io
import json
import locale
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from gitbrowser import cli
from gitbrowser.repository import ListingResult, RepositoryRegistry

LISTINGS = {
    "one": "a.txt\nsrc/b.py\nsrc/notes.tmp\n",
    "two": "README.md\n",
}


def _lister(root: str) -> ListingResult:
    return ListingResult(LISTINGS.get(os.path.basename(root), ""))


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.base = Path(os.path.realpath(tmp.name))
        for name in LISTINGS:
            (self.base / name / ".git").mkdir(parents=True)
        (self.base / "plain").mkdir()
        self.config_path = self.base / "config" / "config.json"
        patcher = mock.patch("gitbrowser.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        locale_patcher = mock.patch("gitbrowser.cli.locale.setlocale")
        self.setlocale = locale_patcher.start()
        self.addCleanup(locale_patcher.stop)
        self.registry = RepositoryRegistry(lister=_lister)

    def root(self, name: str) -> str:
        return str(self.base / name)

    def run_cli(self, *argv: str) -> tuple[str, str]:
        with mock.patch("sys.stdout", new_callable=io.StringIO) as out, mock.patch(
            "sys.stderr", new_callable=io.StringIO
        ) as err:
            cli.main(list(argv), registry=self.registry)
        return out.getvalue(), err.getvalue()

    def saved_roots(self) -> list[str]:
        return json.loads(self.config_path.read_text(encoding="utf-8"))["repositories"]


class RegistryCommandTests(CliTestCase):
    def test_add_reports_status_and_persists_root(self) -> None:
        _out, err = self.run_cli("add", self.root("one"))
        self.assertRegex(err, r'Built repository "one", 3 files added in \d+\.\d ms\.')
        self.assertEqual(self.saved_roots(), [self.root("one")])

    def test_add_rejects_directory_without_git(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("add", self.root("plain"))
        self.assertIn("Not a git repository", str(ctx.exception.code))
        self.assertFalse(self.config_path.exists())

    def test_add_from_document(self) -> None:
        doc = self.base / "two" / "README.md"
        doc.write_text("hi\n", encoding="utf-8")
        self.run_cli("add", "--from-document", str(doc))
        self.assertEqual(self.registry.roots(), [self.root("two")])

    def test_list_move_and_remove(self) -> None:
        self.run_cli("add", self.root("one"))
        self.run_cli("add", self.root("two"))
        out, _err = self.run_cli("list")
        self.assertEqual(out.splitlines(), [self.root("one"), self.root("two")])

        self.run_cli("move-up", self.root("two"))
        self.assertEqual(self.saved_roots(), [self.root("two"), self.root("one")])

        out, _err = self.run_cli("list", "--scan")
        self.assertEqual(out.splitlines(), [f"{self.root('two')}\t1", f"{self.root('one')}\t3"])

        self.run_cli("remove", self.root("two"))
        self.assertEqual(self.saved_roots(), [self.root("one")])

        _out, err = self.run_cli("remove-all")
        self.assertIn("Removed 1 repositories.", err)
        self.assertEqual(self.saved_roots(), [])

    def test_unknown_repository_commands_exit(self) -> None:
        for argv in (("remove", self.root("one")), ("move-down", self.root("one")), ("rescan", self.root("one"))):
            with self.assertRaises(SystemExit):
                self.run_cli(*argv)

    def test_rescan_all_reports_each_repository(self) -> None:
        self.run_cli("add", self.root("one"))
        self.run_cli("add", self.root("two"))
        _out, err = self.run_cli("rescan")
        self.assertIn('Built repository "one"', err)
        self.assertIn('Built repository "two"', err)


class TreeAndQuickOpenCommandTests(CliTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.registry.add(self.root("one"), scan=False)

    def test_tree_prints_grouped_rows(self) -> None:
        out, _err = self.run_cli("tree", self.root("one"))
        self.assertEqual(
            out.splitlines(),
            ["one/", "  ▾ src/", "      b.py", "      notes.tmp", "    a.txt"],
        )

    def test_tree_accepts_path_inside_repository(self) -> None:
        out, _err = self.run_cli("tree", str(self.base / "one" / "src"), "--collapse", "src")
        self.assertEqual(out.splitlines(), ["one/", "  ▸ src/", "    a.txt"])

    def test_quick_open_query_prints_matches(self) -> None:
        out, _err = self.run_cli("quick-open", self.root("one"), "--query", "b")
        self.assertEqual(out.splitlines(), [os.path.join(self.root("one"), "src", "b.py")])

    def test_quick_open_honors_hide_pattern(self) -> None:
        self.run_cli("prefs", "--hide-re", r"\.tmp$")
        out, _err = self.run_cli("quick-open", self.root("one"), "--query", "")
        self.assertEqual(
            out.splitlines(),
            [os.path.join(self.root("one"), "a.txt"), os.path.join(self.root("one"), "src", "b.py")],
        )

    def test_quick_open_outside_known_repository(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("quick-open", self.root("plain"), "--query", "x")
        self.assertEqual(ctx.exception.code, cli.NOT_IN_REPOSITORY_MESSAGE)

    def test_quick_open_without_terminal_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("quick-open", self.root("one"))
        self.assertIn("needs a terminal", str(ctx.exception.code))


class PrefsAndOpenCommandTests(CliTestCase):
    def test_prefs_show_defaults_and_store_changes(self) -> None:
        out, _err = self.run_cli("prefs")
        self.assertEqual(out.splitlines(), ["quick_open_hide_re=", "quick_open_filter_max_time=50"])

        out, _err = self.run_cli("prefs", "--hide-re", r"~$", "--filter-max-time", "200")
        self.assertEqual(out.splitlines(), ["quick_open_hide_re=~$", "quick_open_filter_max_time=200"])

    def test_prefs_rejects_invalid_regex(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("prefs", "--hide-re", "(")
        self.assertIn("Invalid regular expression", str(ctx.exception.code))

    def test_prefs_rejects_out_of_range_budget(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("prefs", "--filter-max-time", "5")
        self.assertEqual(ctx.exception.code, 2)

    def test_open_prints_files_with_banners(self) -> None:
        first = self.base / "first.txt"
        second = self.base / "second.txt"
        first.write_text("alpha\n", encoding="utf-8")
        second.write_text("beta", encoding="utf-8")
        out, _err = self.run_cli("open", str(first), str(second))
        self.assertEqual(
            out,
            f"==> {first} <==\nalpha\n\n==> {second} <==\nbeta\n",
        )

    def test_open_missing_file_exits(self) -> None:
        with self.assertRaises(SystemExit):
            self.run_cli("open", str(self.base / "missing.txt"))


class LocaleCollationTests(CliTestCase):
    def test_main_adopts_user_collation_before_running(self) -> None:
        self.run_cli("prefs")
        self.setlocale.assert_called_once_with(locale.LC_COLLATE, "")

    def test_unsupported_locale_is_logged_not_raised(self) -> None:
        self.setlocale.side_effect = locale.Error("unsupported locale setting")
        out, err = self.run_cli("prefs")
        self.assertIn("quick_open_filter_max_time=50", out)
        self.assertIn("locale.collation_unavailable", err)


if __name__ == "__main__":
    unittest.main()
