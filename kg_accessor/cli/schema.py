"""Schema inspection commands for kg-accessor CLI."""

import click
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.table import Table

from kg_accessor.codegen.stubs import StubGenerator
from kg_accessor.graph.exceptions import SchemaError
from kg_accessor.graph.factory import get_registry
from kg_accessor.utils.logging import get_logger

console = Console()
logger = get_logger(__name__)


def _load_registry(ctx: click.Context):
    settings = ctx.obj["settings"]
    try:
        return get_registry(settings)
    except (SchemaError, FileNotFoundError) as e:
        console.print(f"[red]Schema error: {e}[/red]")
        ctx.exit(1)


@click.group()
def schema() -> None:
    """Inspect and validate the entity schema."""
    pass


@schema.command("show")
@click.argument("kind_name", required=False)
@click.pass_context
def show_schema(ctx: click.Context, kind_name: Optional[str] = None) -> None:
    """Show registered kinds, or the fields and relations of one kind."""
    registry = _load_registry(ctx)

    if kind_name is None:
        table = Table(title=f"Entity kinds ({len(registry)})")
        table.add_column("Kind", style="bold")
        table.add_column("Fields", justify="right")
        table.add_column("Relations", justify="right")
        for kind in registry.kinds():
            table.add_row(kind.name, str(len(kind.fields)), str(len(kind.relations)))
        console.print(table)
        return

    if kind_name not in registry:
        console.print(f"[red]Unknown entity kind: '{kind_name}'[/red]")
        ctx.exit(1)

    kind = registry.lookup(kind_name)
    console.print(f"[bold]{kind.name}[/bold]")

    fields = Table(title="Fields")
    fields.add_column("Name")
    fields.add_column("Type")
    for spec in kind.fields.values():
        fields.add_row(spec.name, spec.type.value)
    console.print(fields)

    relations = Table(title="Relations")
    relations.add_column("Name")
    relations.add_column("Label")
    relations.add_column("Targets")
    relations.add_column("Cardinality")
    relations.add_column("Required")
    for spec in kind.relations.values():
        relations.add_row(
            spec.name,
            spec.wire_label,
            ", ".join(spec.targets),
            spec.cardinality.value,
            "yes" if spec.required else "no",
        )
    console.print(relations)


@schema.command("validate")
@click.pass_context
def validate_schema(ctx: click.Context) -> None:
    """Load the schema and check that every relation target is registered."""
    registry = _load_registry(ctx)
    relation_count = sum(len(kind.relations) for kind in registry.kinds())
    console.print(
        f"[green]✓ Schema is valid:[/green] {len(registry)} kinds, {relation_count} relations"
    )


@schema.command("stubs")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the stubs to this file instead of stdout"
)
@click.pass_context
def generate_stubs(ctx: click.Context, output: Optional[Path] = None) -> None:
    """Generate typed Protocol stubs for the schema."""
    registry = _load_registry(ctx)
    generator = StubGenerator(registry)

    if output is None:
        click.echo(generator.render(), nl=False)
        return

    generator.write(output)
    console.print(f"[green]✓ Stubs written to {output}[/green]")
