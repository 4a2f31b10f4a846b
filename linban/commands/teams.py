"""Teams command for linban."""

import click

from .. import utils
from .common import cli, make_service, run


@cli.command("teams")
@click.pass_obj
def teams(wconfig):
    """List the teams the API key can see."""
    service = make_service(wconfig)
    found = run(service.get_teams())
    if not found:
        utils.log("No teams found", "WARNING")
        return
    width = max(len(team.key) for team in found)
    for team in sorted(found, key=lambda t: t.key):
        click.echo(f"{utils.colorize('cyan', team.key.ljust(width))}  {team.name}")
