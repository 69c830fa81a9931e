"""Main CLI entry point for kg-accessor."""

import click
from typing import Optional
from rich.console import Console

from kg_accessor import __version__
from kg_accessor.config.settings import get_settings
from kg_accessor.utils.logging import setup_logging, get_logger
from kg_accessor.cli.schema import schema
from kg_accessor.cli.traverse import show, traverse


console = Console()
logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="kg-accessor")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Set the logging level"
)
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(dir_okay=False),
    help="Path to the YAML schema file (default from config)"
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str] = None, schema_path: Optional[str] = None) -> None:
    """
    KG Accessor - typed relationship traversal over a property graph.

    Entity kinds and relations are declared in a YAML schema; every relation
    is resolved with a single one-hop query.
    """
    ctx.ensure_object(dict)

    config_overrides = {}
    if log_level:
        config_overrides["app"] = {"log_level": log_level}
    if schema_path:
        config_overrides["registry"] = {"schema_path": schema_path}

    try:
        settings = get_settings(config_overrides)
        ctx.obj["settings"] = settings

        setup_logging(settings.app, Console(stderr=True))

        logger.debug(f"Loaded configuration: Neo4j URI={settings.neo4j.uri}")
        logger.debug(f"Schema file: {settings.registry.schema_path}")

    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        ctx.exit(1)


@cli.command()
def version() -> None:
    """Display version information."""
    console.print(f"[bold green]kg-accessor[/bold green] version [bold]{__version__}[/bold]")


cli.add_command(schema)
cli.add_command(traverse)
cli.add_command(show)


def main() -> None:
    """Entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        console.print(f"[red]Error: {e}[/red]")
        exit(1)


if __name__ == "__main__":
    main()
