"""Main Typer application — imports and registers all CLI commands.

Entry point: ``logfan`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from logfan.cli.commands.check import check_cmd
from logfan.cli.commands.emit import emit_cmd
from logfan.config import settings

app = typer.Typer(
    name="logfan",
    help="logfan: route log messages to every sink configured for their level.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="check", help="Validate a routes file and show its levels.")(check_cmd)
app.command(name="emit", help="Emit one message through the configured routes.")(emit_cmd)


def configure_logging(level: str) -> None:
    """Send logfan's own diagnostics to stderr through Rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    configure_logging("DEBUG" if verbose else settings.log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
