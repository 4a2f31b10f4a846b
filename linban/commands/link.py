"""Relation commands for linban, usable without opening the board."""

import sys

import click

from .. import utils
from ..board import state as board_state
from ..board.refresher import DataRefresher
from ..board.relations import RelationPipeline
from ..board.state import BoardState
from ..models import Issue, RelationType
from .common import cli, make_service, run

SECTIONS = (
    (RelationType.PARENT, "Parent"),
    (RelationType.CHILD, "Children"),
    (RelationType.BLOCKED_BY, "Blocked By"),
    (RelationType.BLOCKS, "Blocking"),
    (RelationType.RELATED, "Related To"),
    (RelationType.DUPLICATE, "Duplicates"),
)


@cli.group("link")
def link():
    """Show and edit issue relationships"""


async def _find(service, identifier: str) -> Issue:
    issue = await service.find_issue_by_identifier(identifier)
    if issue is None:
        raise click.ClickException(f"Could not find issue {identifier}")
    return issue


def _mutate(wconfig: dict, identifier: str, operation: str, *args) -> None:
    """Run one relation operation through the pipeline and report the outcome."""
    service = make_service(wconfig)
    state = BoardState()
    pipeline = RelationPipeline(service, state, DataRefresher(service, state))
    state.subscribe(
        board_state.NOTICE, lambda notice: utils.log(notice.message, "SUCCESS")
    )

    async def go():
        issue = await _find(service, identifier)
        return await getattr(pipeline, operation)(issue.id, *args)

    if not run(go()):
        utils.log(state.error or "Operation failed", "ERROR", file=sys.stderr)
        sys.exit(1)


@link.command("show")
@click.argument("issue")
@click.pass_obj
def show(wconfig, issue):
    """Print the relationships of ISSUE"""
    service = make_service(wconfig)
    found = run(_find(service, issue))
    edges = run(service.get_issue_relations(found.id))

    click.secho(f"{found.identifier}: {found.title}", bold=True)
    if not edges:
        click.echo("No relationships found.")
        return
    for kind, title in SECTIONS:
        matching = [edge for edge in edges if edge.type == kind]
        if not matching:
            continue
        click.echo(f"{title}:")
        for edge in matching:
            relation_id = f"  [{edge.relation_id}]" if edge.relation_id else ""
            click.echo(
                f"  {utils.colorize('cyan', edge.target.identifier)} "
                f"{edge.target.title}{relation_id}"
            )


@link.command("parent")
@click.argument("issue")
@click.argument("parent")
@click.pass_obj
def parent(wconfig, issue, parent):
    """Make PARENT the parent of ISSUE"""
    _mutate(wconfig, issue, "set_parent", parent.upper())


@link.command("unparent")
@click.argument("issue")
@click.pass_obj
def unparent(wconfig, issue):
    """Detach ISSUE from its parent"""
    _mutate(wconfig, issue, "remove_parent")


@link.command("blocks")
@click.argument("issue")
@click.argument("blocked")
@click.pass_obj
def blocks(wconfig, issue, blocked):
    """Record that ISSUE blocks BLOCKED"""
    _mutate(wconfig, issue, "add_blocking", blocked.upper())


@link.command("related")
@click.argument("issue")
@click.argument("other")
@click.pass_obj
def related(wconfig, issue, other):
    """Mark ISSUE and OTHER as related"""
    _mutate(wconfig, issue, "add_related", other.upper())


@link.command("delete")
@click.argument("issue")
@click.argument("relation_id")
@click.pass_obj
def delete(wconfig, issue, relation_id):
    """Delete the relation RELATION_ID of ISSUE (ids are listed by `link show`)"""
    _mutate(wconfig, issue, "delete_relation", relation_id)
