"""Board command for linban."""

import click

from ..ui.tui.app import BoardOptions, run_board
from .common import cli


def _date(value):
    return value.strftime("%Y-%m-%d") if value else None


@cli.command("board")
@click.option("--team", "-t", help="Team key or name to open the board on")
@click.option("--assignee", "-a", help="Only show issues assigned to this user id, or 'me'")
@click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Only issues created on or after this date (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Only issues created on or before this date (YYYY-MM-DD)",
)
@click.pass_obj
def board(wconfig, team, assignee, start_date, end_date):
    """
    Open the interactive kanban board

    Example: linban board --team ENG --assignee me
    Example: linban board --start-date 2024-01-01 --end-date 2024-03-31
    """
    if start_date and end_date and start_date > end_date:
        raise click.BadParameter("start date is after end date", param_hint="--start-date")

    options = BoardOptions(
        team_name=team or wconfig.get("default_team"),
        assignee_id=assignee,
        start_date=_date(start_date),
        end_date=_date(end_date),
        issue_limit=wconfig["issue_limit"],
    )
    run_board(wconfig, options)
