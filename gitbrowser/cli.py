"""Command-line front door for gitbrowser.

Parses subcommands, loads the registered repositories from config, and
dispatches to registry edits, the tree view, the quick-open picker, or the
file opener. Status lines go to stderr; tree rows and file text to stdout.
"""

from __future__ import annotations

import argparse
import locale
import os
import sys
from pathlib import Path

import structlog

from . import config
from .highlight import DEFAULT_STYLE
from .logging_setup import configure_logging
from .opener import open_paths
from .quick_open import QuickOpenSession, run_quick_open
from .repo_tree import render_tree_lines
from .repository import RepositoryIndex, RepositoryRegistry

NOT_IN_REPOSITORY_MESSAGE = "Current document is not part of a known repository. Use add to add a repository."

log = structlog.get_logger(__name__)


def _status(message: str) -> None:
    sys.stderr.write(message + "\n")


def _use_locale_collation() -> None:
    """Sort quick-open entries by the user's collation rules, not code point."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        log.warning("locale.collation_unavailable", error=str(exc))


def _filter_max_time_ms(value: str) -> int:
    """argparse type for the filter budget in milliseconds."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if not config.FILTER_MAX_TIME_MIN_MS <= parsed <= config.FILTER_MAX_TIME_MAX_MS:
        raise argparse.ArgumentTypeError(
            f"value must be between {config.FILTER_MAX_TIME_MIN_MS} and {config.FILTER_MAX_TIME_MAX_MS}"
        )
    return parsed


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitbrowser",
        description="Browse the tracked files of git repositories and quick-open them by name.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug).")
    parser.add_argument("-q", "--quiet", action="store_true", help="Silence log output.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for printed files.")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Register a repository by its root directory.")
    add.add_argument("path", nargs="?", default=None, help="Repository root (containing .git/).")
    add.add_argument("--from-document", metavar="FILE", help="Register the repository enclosing FILE.")

    remove = sub.add_parser("remove", help="Forget one repository.")
    remove.add_argument("root")

    sub.add_parser("remove-all", help="Forget every registered repository.")

    move_up = sub.add_parser("move-up", help="Move a repository up in the list.")
    move_up.add_argument("root")
    move_down = sub.add_parser("move-down", help="Move a repository down in the list.")
    move_down.add_argument("root")

    listing = sub.add_parser("list", help="List registered repositories.")
    listing.add_argument("--scan", action="store_true", help="Scan each repository and show file counts.")

    rescan = sub.add_parser("rescan", help="Rebuild repository trees from git.")
    rescan.add_argument("root", nargs="?", default=None, help="Repository to rescan (default: all).")

    tree = sub.add_parser("tree", help="Print a repository's tracked files as a tree.")
    tree.add_argument("root", nargs="?", default=None, help="Repository root or any path inside it.")
    tree.add_argument("--max-depth", type=_non_negative_int, default=None)
    tree.add_argument("--collapse", action="append", default=[], metavar="DIR", help="Relative directory to fold.")
    tree.add_argument("--paths", action="store_true", help="Append absolute locations to file rows.")

    quick = sub.add_parser("quick-open", help="Filter a repository's files by name and open the chosen ones.")
    quick.add_argument("root", nargs="?", default=None, help="Repository root or any path inside it.")
    quick.add_argument("--from-document", metavar="FILE", help="Use the repository enclosing FILE.")
    quick.add_argument("--query", default=None, help="Print matches for QUERY instead of running the picker.")
    quick.add_argument("--editor", action="store_true", help="Open chosen files in $VISUAL/$EDITOR.")
    quick.add_argument("--print-paths", action="store_true", help="Print chosen paths instead of opening them.")

    open_cmd = sub.add_parser("open", help="Open files in $EDITOR or print them highlighted.")
    open_cmd.add_argument("paths", nargs="+")
    open_cmd.add_argument("--editor", action="store_true", help="Open in $VISUAL/$EDITOR.")

    prefs = sub.add_parser("prefs", help="Show or change quick-open preferences.")
    prefs.add_argument("--hide-re", default=None, metavar="RE", help="Hide files whose name matches RE ('' clears).")
    prefs.add_argument(
        "--filter-max-time",
        type=_filter_max_time_ms,
        default=None,
        metavar="MS",
        help="Filter time budget per update, in milliseconds.",
    )
    return parser


def _resolve_repository(
    registry: RepositoryRegistry,
    root: str | None,
    from_document: str | None = None,
) -> RepositoryIndex:
    if from_document is not None:
        repo = registry.find_by_path(os.path.abspath(from_document))
    elif root is not None:
        repo = registry.get(root) or registry.find_by_path(os.path.abspath(root))
    else:
        repo = registry.find_by_path(os.getcwd())
    if repo is None:
        raise SystemExit(NOT_IN_REPOSITORY_MESSAGE)
    registry.ensure_scanned(repo)
    if repo.error is not None:
        _status(repo.status_message())
    return repo


def _cmd_add(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    if args.from_document is not None:
        repo = registry.add_from_document(args.from_document)
        if repo is None:
            raise SystemExit(f"No git repository encloses {args.from_document}")
    else:
        target = args.path or os.getcwd()
        if not Path(target).is_dir():
            raise SystemExit(f"Path not found: {target}")
        repo = registry.add(target)
        if repo is None:
            raise SystemExit(f"Not a git repository (no .git directory): {target}")
    registry.save()
    _status(repo.status_message())


def _cmd_remove(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    if not registry.remove(args.root):
        raise SystemExit(f"Unknown repository: {args.root}")
    registry.save()


def _cmd_remove_all(registry: RepositoryRegistry, _args: argparse.Namespace) -> None:
    count = registry.remove_all()
    registry.save()
    _status(f"Removed {count} repositories.")


def _cmd_move(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    if registry.get(args.root) is None:
        raise SystemExit(f"Unknown repository: {args.root}")
    moved = registry.move_up(args.root) if args.command == "move-up" else registry.move_down(args.root)
    if moved:
        registry.save()


def _cmd_list(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    for repo in registry:
        if args.scan:
            registry.ensure_scanned(repo)
            sys.stdout.write(f"{repo.root_location}\t{repo.file_count}\n")
            if repo.error is not None:
                _status(repo.status_message())
        else:
            sys.stdout.write(f"{repo.root_location}\n")


def _cmd_rescan(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    if args.root is None:
        targets = list(registry)
    else:
        repo = registry.get(args.root)
        if repo is None:
            raise SystemExit(f"Unknown repository: {args.root}")
        targets = [repo]
    for repo in targets:
        registry.rescan(repo.root_location)
        _status(repo.status_message())


def _cmd_tree(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    repo = _resolve_repository(registry, args.root)
    lines = render_tree_lines(
        repo.tree,
        repo.root_location,
        collapsed={part.strip("/") for part in args.collapse if part.strip("/")},
        max_depth=args.max_depth,
        show_paths=args.paths,
        no_color=args.no_color or not sys.stdout.isatty(),
    )
    sys.stdout.write("\n".join(lines) + "\n")


def _open_chosen(paths: list[str], args: argparse.Namespace) -> None:
    if getattr(args, "print_paths", False):
        for path in paths:
            sys.stdout.write(path + "\n")
        return
    for message in open_paths(
        paths,
        sys.stdout,
        use_editor=args.editor,
        style=args.style,
        no_color=args.no_color or not sys.stdout.isatty(),
    ):
        _status(message)


def _cmd_quick_open(registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    repo = _resolve_repository(registry, args.root, args.from_document)
    session = QuickOpenSession(
        repo,
        exclude_pattern=config.compile_hide_pattern(config.load_hide_pattern_source()),
        budget_seconds=config.load_filter_max_time_ms() / 1000.0,
    )

    if args.query is not None:
        session.set_query(args.query)
        session.filter.run_to_completion()
        for entry in session.visible_entries():
            sys.stdout.write(entry.path + "\n")
        return

    if not (sys.stdout.isatty() and sys.stdin.isatty()):
        raise SystemExit("quick-open needs a terminal; pass --query for non-interactive use.")

    from .terminal import TerminalController

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    chosen = run_quick_open(session, terminal, stdin_fd, no_color=args.no_color)
    _open_chosen(chosen, args)


def _cmd_open(_registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    missing = [path for path in args.paths if not Path(path).is_file()]
    if missing:
        raise SystemExit(f"Path not found: {missing[0]}")
    _open_chosen([os.path.abspath(path) for path in args.paths], args)


def _cmd_prefs(_registry: RepositoryRegistry, args: argparse.Namespace) -> None:
    if args.hide_re is not None:
        if args.hide_re and config.compile_hide_pattern(args.hide_re) is None:
            raise SystemExit(f"Invalid regular expression: {args.hide_re}")
        config.save_hide_pattern_source(args.hide_re)
    if args.filter_max_time is not None:
        config.save_filter_max_time_ms(args.filter_max_time)
    sys.stdout.write(f"{config.HIDE_PATTERN_KEY}={config.load_hide_pattern_source()}\n")
    sys.stdout.write(f"{config.FILTER_MAX_TIME_KEY}={config.load_filter_max_time_ms()}\n")


_COMMANDS = {
    "add": _cmd_add,
    "remove": _cmd_remove,
    "remove-all": _cmd_remove_all,
    "move-up": _cmd_move,
    "move-down": _cmd_move,
    "list": _cmd_list,
    "rescan": _cmd_rescan,
    "tree": _cmd_tree,
    "quick-open": _cmd_quick_open,
    "open": _cmd_open,
    "prefs": _cmd_prefs,
}


def main(argv: list[str] | None = None, registry: RepositoryRegistry | None = None) -> None:
    """Parse CLI arguments and run one gitbrowser command.

    ``registry`` is primarily for tests; when omitted the registered roots are
    loaded from config without scanning, and each command scans what it uses.
    """
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)
    _use_locale_collation()
    if registry is None:
        registry = RepositoryRegistry.from_config(scan=False)
    _COMMANDS[args.command](registry, args)


if __name__ == "__main__":
    main()
