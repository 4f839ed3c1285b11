"""
Command-line interface for depscribe.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from depscribe.config import load_config
from depscribe.__version__ import __version__
from depscribe.context import DepScribeContext
from depscribe.commands.extract import extract
from depscribe.exceptions import ConfigError, DepScribeError
from depscribe.utils.console import print_error, print_warning, reconfigure_console
from depscribe.utils.logger import get_logger, level_for_verbosity, setup_logging

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="DEPSCRIBE_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="DEPSCRIBE_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depscribe",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """depscribe: extract and classify dependencies from manifests.

    \b
    Available commands:
      depscribe extract            Extract dependency records

    \b
    Examples:
      depscribe extract package.json
      depscribe extract --ecosystem upm Packages/manifest.json
      depscribe -v extract --format json packages/*/package.json

    Use ``depscribe COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for the console and log formatter
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    depscribe_ctx = DepScribeContext()
    depscribe_ctx.config_path = config or loaded_config.source_path
    depscribe_ctx.color = color
    depscribe_ctx.verbose = verbose
    depscribe_ctx.config = loaded_config
    ctx.obj = depscribe_ctx

    logger.debug("depscribe v%s", __version__)
    logger.debug("Config path: %s", depscribe_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


cli.add_command(extract)


def main() -> int:
    """Main entry point for the depscribe CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except DepScribeError as exc:
        print_error(str(exc))
        logger.debug(
            "DepScribeError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
