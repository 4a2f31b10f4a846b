"""CLI entry point for linban."""

import sys

import click

from . import commands, utils
from .api import LinearAPIError
from .ui.tui.app import BoardStartupError


def main():
    verbose = False
    if "--verbose" in sys.argv or "-v" in sys.argv:
        verbose = True

    if "-h" in sys.argv:
        sys.argv.remove("-h")
        sys.argv.append("--help")

    args = []
    for arg in sys.argv:
        if arg.startswith("-"):
            continue
        args.append(arg)
    if len(args) == 1:
        sys.argv.append("board")

    try:
        # pylint: disable=no-value-for-parameter
        commands.cli()
    except KeyboardInterrupt:
        click.secho("Operation cancelled by user", fg="yellow")
        sys.exit(1)
    except (BoardStartupError, LinearAPIError) as e:
        click.secho(f"Error: {e}", fg="red")
        if verbose:
            if isinstance(e, LinearAPIError):
                utils.log(e.details(), "DEBUG")
            raise e
        sys.exit(1)
    except Exception as e:
        click.secho(f"Error: {e}", fg="red")
        if verbose:
            utils.log("Verbose mode enabled. Full error details:")
            raise e
        sys.exit(1)


if __name__ == "__main__":
    main()
