"""Traversal commands for kg-accessor CLI."""

import click
import json
from typing import Iterable
from rich.console import Console
from rich.table import Table

from kg_accessor.graph.exceptions import GraphError
from kg_accessor.graph.factory import get_graph_client, get_registry, get_session
from kg_accessor.traversal.entity import Entity
from kg_accessor.utils.logging import get_logger

console = Console()
logger = get_logger(__name__)

FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default="text",
    help="Output format"
)


def _print_entities(entities: Iterable[Entity], output_format: str, title: str) -> None:
    entities = list(entities)

    if output_format == "json":
        click.echo(json.dumps([e.to_dict() for e in entities], indent=2, default=str))
        return

    if not entities:
        console.print(f"[yellow]{title}: no nodes found[/yellow]")
        return

    columns = []
    for entity in entities:
        for name in entity.values:
            if name not in columns:
                columns.append(name)

    table = Table(title=title)
    table.add_column("Kind", style="bold")
    table.add_column("Id")
    for name in columns:
        table.add_column(name)
    for entity in entities:
        row = [entity.kind, str(entity.id)]
        row.extend(
            "" if entity.values.get(name) is None else str(entity.values[name])
            for name in columns
        )
        table.add_row(*row)
    console.print(table)


@click.command()
@click.argument("kind")
@click.argument("node_id")
@click.argument("relation")
@FORMAT_OPTION
@click.pass_context
def traverse(ctx: click.Context, kind: str, node_id: str, relation: str, output_format: str) -> None:
    """Resolve RELATION of the KIND node NODE_ID."""
    settings = ctx.obj["settings"]

    try:
        registry = get_registry(settings)
        with get_graph_client(settings) as client:
            session = get_session(settings, registry, client)
            entities = session.related(session.ref(kind, node_id), relation)
    except (GraphError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    logger.info(f"{kind}:{node_id} -[{relation}]-> {len(entities)} nodes")
    _print_entities(entities, output_format.lower(), f"{kind} '{node_id}' {relation}")


@click.command()
@click.argument("kind")
@click.argument("node_id")
@FORMAT_OPTION
@click.pass_context
def show(ctx: click.Context, kind: str, node_id: str, output_format: str) -> None:
    """Fetch the KIND node NODE_ID and show its fields."""
    settings = ctx.obj["settings"]

    try:
        registry = get_registry(settings)
        with get_graph_client(settings) as client:
            session = get_session(settings, registry, client)
            entity = session.fetch(kind, node_id)
    except (GraphError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    if entity is None:
        console.print(f"[yellow]No {kind} node with id '{node_id}'[/yellow]")
        ctx.exit(1)

    _print_entities([entity], output_format.lower(), f"{kind} '{node_id}'")
