"""CLI main entry point for Korean transit search."""

import asyncio
import logging
import sys

import click
from pydantic import ValidationError
from rich.console import Console

from .. import __version__
from ..core import (
    ProviderClient,
    SearchContext,
    TransitAggregator,
    TransitSearchError,
    TransitSettings,
)
from .formatters import format_stops_json, format_stops_table, render

console = Console()
error_console = Console(stderr=True)

OUTPUT_FORMATS = click.Choice(["table", "json", "text"])


def _aggregator(ctx: click.Context) -> TransitAggregator:
    return TransitAggregator(ProviderClient(ctx.obj["settings"]))


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--service-key",
    envvar="KR_TRANSIT_SERVICE_KEY",
    help="Public data portal service key",
)
@click.option("--timeout", "-t", type=float, help="Request timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context, service_key: str | None, timeout: float | None, verbose: bool
) -> None:
    """Korean Transit Search - Find Seoul bus stops and subway stations."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    try:
        settings = TransitSettings.from_env(service_key=service_key, timeout=timeout)
    except ValidationError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)
    ctx.obj = {"settings": settings, "verbose": verbose}


@cli.command()
@click.argument("term")
@click.option("--bus-only", is_flag=True, help="Search the bus registry only")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=OUTPUT_FORMATS,
    default="table",
    help="Output format",
)
@click.pass_context
def search(ctx: click.Context, term: str, bus_only: bool, output_format: str) -> None:
    """Search bus stops and subway stations by name.

    Examples:
        kr-transit search "강남"
        kr-transit search "서울역" --format json
        kr-transit search "시청" --bus-only
    """
    aggregator = _aggregator(ctx)
    context = SearchContext.by_name(term)

    try:
        with console.status(f"[bold green]Searching stops named {term}..."):
            if bus_only:
                result = asyncio.run(aggregator.search_bus_by_name(term))
                stops = result
            else:
                result = asyncio.run(aggregator.search_by_name(term))
                stops = result.stops
    except TransitSearchError as e:
        error_console.print(f"[red]Search failed:[/red] {e}")
        sys.exit(1)

    if not bus_only:
        for outcome in result.outcomes:
            if outcome.failed:
                error_console.print(
                    f"[yellow]{outcome.provider.value} provider unavailable:[/yellow] {outcome.error}"
                )

    _output(stops, result, context, output_format, title=f'Stops matching "{term}"')


@cli.command()
@click.argument("tm_x", type=float)
@click.argument("tm_y", type=float)
@click.option(
    "--radius", "-r", type=float, default=500, help="Search radius in meters"
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=OUTPUT_FORMATS,
    default="table",
    help="Output format",
)
@click.pass_context
def nearby(
    ctx: click.Context, tm_x: float, tm_y: float, radius: float, output_format: str
) -> None:
    """Find bus stops around a TM coordinate.

    Examples:
        kr-transit nearby 200000 450000
        kr-transit nearby 198000 451000 --radius 300 --format json
    """
    aggregator = _aggregator(ctx)
    context = SearchContext.by_location(tm_x, tm_y, radius)

    try:
        with console.status("[bold green]Searching nearby bus stops..."):
            stops = asyncio.run(aggregator.search_by_location(tm_x, tm_y, radius))
    except TransitSearchError as e:
        error_console.print(f"[red]Search failed:[/red] {e}")
        sys.exit(1)

    _output(stops, stops, context, output_format, title="Nearby bus stops")


def _output(stops, result, context, output_format: str, title: str) -> None:
    if output_format == "json":
        click.echo(format_stops_json(stops))
    elif output_format == "text":
        click.echo(render(result, context))
    else:
        format_stops_table(stops, title=title)


@cli.command()
@click.option(
    "--profile",
    type=click.Choice(["dual", "single"]),
    help="Name-search tool profile (dual: bus + subway, single: bus only)",
)
@click.pass_context
def serve(ctx: click.Context, profile: str | None) -> None:
    """Run the MCP server over stdio."""
    from ..mcp.server import main as serve_main

    settings = ctx.obj["settings"]
    if profile:
        settings = settings.model_copy(update={"tool_profile": profile})
    log_level = logging.DEBUG if ctx.obj["verbose"] else logging.INFO
    asyncio.run(serve_main(settings, log_level=log_level))


@cli.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("show")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show current configuration."""
    console.print("[bold]Current Configuration:[/bold]")
    for key, value in ctx.obj["settings"].masked().items():
        console.print(f"• {key}: {value}")


if __name__ == "__main__":
    cli()
