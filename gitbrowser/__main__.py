"""Module entrypoint for ``python -m gitbrowser``.

All argument parsing and command dispatch happen in ``gitbrowser.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
