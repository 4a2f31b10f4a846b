"""Common utilities and helpers for linban CLI commands."""

import asyncio
import pathlib

import click

from .. import config, utils
from ..api import LinearService


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--api-key",
    envvar="LINEAR_API_KEY",
    help="Linear API key (or pass::entry / passage::entry)",
)
@click.option("--timeout", type=float, help="Seconds before a remote call is abandoned")
@click.option(
    "-c",
    "--config-file",
    default=config.defaults.CONFIG_FILE,
    help="Config file to use",
)
@click.pass_context
def cli(ctx, verbose, api_key, timeout, config_file):
    """Kanban board and relationship graph for Linear"""

    flag_config = {
        "api_key": api_key,
        "request_timeout": timeout,
        "verbose": verbose or None,
    }
    wconfig = config.make_config(flag_config, pathlib.Path(config_file))
    utils.log(
        f"Using config file {config_file}", verbose=wconfig["verbose"], verbose_only=True
    )
    ctx.obj = wconfig


def make_service(wconfig: dict) -> LinearService:
    return LinearService.from_config(wconfig)


def run(coroutine):
    """Run a coroutine to completion from a synchronous command."""
    return asyncio.run(coroutine)
