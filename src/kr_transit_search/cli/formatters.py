"""Output formatters for transit stop results."""

import json

from rich.console import Console
from rich.table import Table

from ..core.models import SearchContext, StopKind, TransitStop, UnifiedResult

console = Console()

KIND_TAGS = {
    StopKind.BUS: "🚌 [Bus]",
    StopKind.SUBWAY: "🚇 [Subway]",
}


def render(result: UnifiedResult | list[TransitStop], context: SearchContext) -> str:
    """Render stops as the plain-text payload returned to tool callers.

    Empty provider fields are printed empty, never replaced with placeholders.
    """
    if isinstance(result, UnifiedResult):
        stops = result.stops
        failed = [o for o in result.outcomes if o.failed]
    else:
        stops = list(result)
        failed = []

    text = _render_header(context, len(stops))
    if stops:
        text += "\n\n" + "\n\n".join(render_stop(stop) for stop in stops)

    if failed:
        text += "\n\n"
        for outcome in failed:
            text += f"⚠️  {outcome.provider.value.capitalize()} provider unavailable"
            if outcome.error:
                text += f": {outcome.error}"
            text += "\n"
        text = text.rstrip("\n")

    return text


def _render_header(context: SearchContext, count: int) -> str:
    if context.mode == "location":
        where = f"around X={_number(context.x)}, Y={_number(context.y)} (radius {_number(context.radius)}m)"
    else:
        where = f'for "{context.term or ""}"'

    if count == 0:
        return f"No transit stops found {where} (0 results)."
    noun = "stop" if count == 1 else "stops"
    return f"Found {count} transit {noun} {where}:"


def render_stop(stop: TransitStop) -> str:
    """Render one stop as an indented text block."""
    lines = [
        f"{KIND_TAGS[stop.kind]} {stop.name} ({stop.auxiliary})",
        f"   Location: X={stop.coordinate.x}, Y={stop.coordinate.y}",
        f"   Station ID: {stop.id}",
    ]
    if not stop.geodetic.is_empty():
        lines.append(f"   GRS80: {stop.geodetic.x}, {stop.geodetic.y}")
    return "\n".join(lines)


def format_stops_json(stops: list[TransitStop]) -> str:
    """Format stops as JSON."""
    return json.dumps(
        [stop.model_dump(mode="json") for stop in stops], ensure_ascii=False, indent=2
    )


def format_stops_table(stops: list[TransitStop], title: str = "Transit Stops") -> None:
    """Display stops as a rich table."""
    if not stops:
        console.print("No transit stops found.")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("ARS / Line", style="yellow")
    table.add_column("X", style="blue")
    table.add_column("Y", style="blue")
    table.add_column("Station ID", style="magenta")

    for stop in stops:
        table.add_row(
            stop.kind.value,
            stop.name,
            stop.auxiliary,
            stop.coordinate.x,
            stop.coordinate.y,
            stop.id,
        )

    console.print(table)


def _number(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
