"""``logfan emit`` — send one message through the configured routes.

Builds the dispatcher from the routes file and ``LOGFAN_*`` settings,
emits a single message, and waits for every sink of the level.  Sinks
still running after a failure are drained before the backends are closed.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from pathlib import Path
from typing import Any

import typer
from pymongo import AsyncMongoClient
from rich.console import Console

from logfan.config import LogfanSettings, load_routes
from logfan.models.routing import InvalidConfigurationError
from logfan.routing.dispatcher import LevelDispatcher
from logfan.routing.resolver import SinkBackends
from logfan.routing.sinks import SinkDeliveryError
from logfan.routing.sinks.fluentd import create_fluent_sender

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def build_backends(settings: LogfanSettings) -> SinkBackends:
    """Open the shared backend handles described by *settings*."""
    database: Any = None
    if settings.mongo_uri:
        database = AsyncMongoClient(settings.mongo_uri)[settings.mongo_database]
    return SinkBackends(
        database=database,
        sender_factory=functools.partial(create_fluent_sender, timeout=settings.fluentd_timeout),
        service_id=settings.fluentd_service_id,
    )


async def _close_database(database: Any) -> None:
    client = getattr(database, "client", None)
    if client is not None:
        await client.close()


async def _emit(config: dict[str, Any], backends: SinkBackends, level: str, message: str, args: list[str]) -> None:
    try:
        dispatcher = LevelDispatcher.from_config(config, backends)
        if not dispatcher.sinks_for(level):
            logger.info("No sinks configured for level %s", level)
        try:
            await dispatcher.emit(level, message, args)
        finally:
            await dispatcher.aclose()
    finally:
        await _close_database(backends.database)


def emit_cmd(
    level: str = typer.Argument(..., help="Level to route the message by."),
    message: str = typer.Argument(..., help="Message template (printf-style)."),
    args: list[str] = typer.Argument(None, help="Values interpolated into the template."),
    routes: Path = typer.Option(
        None,
        "--routes",
        "-r",
        help="Path to the routes file (defaults to LOGFAN_ROUTES_PATH).",
    ),
) -> None:
    """Emit MESSAGE at LEVEL to every configured sink."""
    settings = LogfanSettings()
    routes_path = routes or settings.routes_path

    try:
        config = load_routes(routes_path)
        asyncio.run(_emit(config, build_backends(settings), level, message, args or []))
    except InvalidConfigurationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1)
    except SinkDeliveryError as exc:
        console.print(f"[red]Delivery failed[/red] ({exc.sink_name}): {exc}")
        raise typer.Exit(code=1)
