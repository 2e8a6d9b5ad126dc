"""Open files chosen in the tree view or quick-open picker.

Files go to ``$EDITOR`` when one is configured, otherwise they are printed
with syntax highlighting. Failures come back as message strings for the
status line instead of being raised.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path
from typing import TextIO

import structlog

from .highlight import DEFAULT_STYLE, render_file

log = structlog.get_logger(__name__)


def resolve_editor_command(editor: str | None = None) -> list[str]:
    """Split the explicit editor, else ``$VISUAL``/``$EDITOR``, into argv."""
    raw = editor if editor is not None else (os.environ.get("VISUAL") or os.environ.get("EDITOR") or "")
    try:
        return shlex.split(raw.strip())
    except ValueError:
        return []


def launch_editor(targets: list[Path], editor: list[str]) -> str | None:
    """Run ``editor`` on every target at once; return an error message on failure."""
    if not editor:
        return "Cannot open: no editor configured."
    try:
        proc = subprocess.run([*editor, *(str(target) for target in targets)], check=False)
    except OSError as exc:
        log.warning("open.editor_failed", editor=editor[0], error=str(exc))
        return f"Failed to launch editor: {exc}"
    if proc.returncode != 0:
        return f"Editor exited with status {proc.returncode}."
    return None


def print_files(
    targets: list[Path],
    out: TextIO,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> list[str]:
    """Print each target, separated by a name banner; return error messages."""
    errors: list[str] = []
    for idx, target in enumerate(targets):
        try:
            rendered = render_file(target, style=style, no_color=no_color)
        except OSError as exc:
            errors.append(f"Cannot open {target}: {exc.strerror or exc}")
            continue
        if len(targets) > 1:
            if idx > 0:
                out.write("\n")
            out.write(f"==> {target} <==\n")
        out.write(rendered)
        if rendered and not rendered.endswith("\n"):
            out.write("\n")
    return errors


def open_paths(
    paths: list[str],
    out: TextIO,
    *,
    editor: str | None = None,
    use_editor: bool = False,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> list[str]:
    """Open ``paths`` in the editor or on ``out``; return status messages."""
    targets = [Path(path) for path in paths]
    if not targets:
        return []
    log.info("open.files", count=len(targets), editor=use_editor)
    if use_editor:
        error = launch_editor(targets, resolve_editor_command(editor))
        return [error] if error else []
    return print_files(targets, out, style=style, no_color=no_color)


__all__ = [
    "resolve_editor_command",
    "launch_editor",
    "print_files",
    "open_paths",
]
