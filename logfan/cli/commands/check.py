"""``logfan check`` — validate a routes file and show the level table.

Decodes the level configuration without opening any backend, so it is
safe to run against production routes.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from logfan.config import LogfanSettings, load_routes
from logfan.models.routing import InvalidConfigurationError, build_routing_plan

console = Console()


def check_cmd(
    routes: Path = typer.Option(
        None,
        "--routes",
        "-r",
        help="Path to the routes file (defaults to LOGFAN_ROUTES_PATH).",
    ),
) -> None:
    """Validate the level configuration and list the sinks of every level."""
    routes_path = routes or LogfanSettings().routes_path

    try:
        plan = build_routing_plan(load_routes(routes_path))
    except InvalidConfigurationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1)

    if not plan.routes:
        console.print(f"[dim]No levels configured in {routes_path}.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Level", style="cyan", min_width=10)
    table.add_column("#", justify="right", width=3)
    table.add_column("Sink", min_width=8)
    table.add_column("Target")

    for level, route in plan.routes.items():
        for position, descriptor in enumerate(route.descriptors, start=1):
            table.add_row(
                level if position == 1 else "",
                str(position),
                descriptor.kind.value,
                descriptor.target or "[dim]-[/dim]",
            )

    console.print(
        Panel(
            table,
            title=f"[bold]Routes[/bold] {routes_path}",
            subtitle=f"[green]{len(plan.routes)} level(s) OK[/green]",
            border_style="green",
        )
    )
