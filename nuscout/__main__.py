"""Entry point for ``python -m nuscout``."""

from __future__ import annotations

import sys


def _print_startup_error(exc: BaseException) -> None:
    """Explain on stderr why the CLI could not be loaded.

    Usually a missing third-party dependency; the interpreter and package
    versions are included because that is the first thing a bug report needs.
    """
    try:
        from nuscout.__version__ import __version__ as version
    except ImportError:
        version = "<unknown>"

    sys.stderr.write(
        f"nuscout could not start.\n"
        f"Python version : {sys.version}\n"
        f"nuscout version: {version}\n\n"
        f"ImportError: {exc}\n"
    )


def main() -> int:
    try:
        from nuscout.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
