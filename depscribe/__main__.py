"""
Executable module for depscribe.

Running:
    python -m depscribe

is equivalent to:
    depscribe
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report why the CLI could not be imported."""
    from depscribe.__version__ import __version__

    sys.stderr.write("depscribe CLI could not be started.\n")
    sys.stderr.write(f"Python version   : {sys.version}\n")
    sys.stderr.write(f"depscribe version: {__version__}\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """Entrypoint for ``python -m depscribe``.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from depscribe.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
