"""Sink resolution — turns a level configuration into concrete sinks.

Resolution runs in two steps:

1. ``build_routing_plan`` decodes the raw configuration into descriptors,
   rejecting any malformed level or descriptor.
2. Each descriptor is instantiated against the explicit ``SinkBackends``
   (shared MongoDB database, fluentd sender factory).

Both steps run before anything is returned, so a configuration error never
leaves a partially built routing table behind.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from logfan.models.routing import (
    InvalidConfigurationError,
    RoutingPlan,
    SinkDescriptor,
    SinkKind,
    build_routing_plan,
)
from logfan.routing.sinks import BaseSink
from logfan.routing.sinks.console import StderrSink, StdoutSink
from logfan.routing.sinks.fluentd import FluentdSink, SenderFactory, create_fluent_sender
from logfan.routing.sinks.mongodb import MongoSink

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_ID = "logfan"


class SinkBackends(BaseModel):
    """Shared backend handles the persistent and remote sinks are built over.

    Attributes
    ----------
    database:
        Async MongoDB database handle used by every ``mongodb:`` sink.
        ``None`` makes ``mongodb:`` descriptors invalid.
    sender_factory:
        ``(service_id, host, port) -> CollectorSender``; called once per
        ``fluentd:`` descriptor.
    service_id:
        Tag passed to the sender factory.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    database: Any = None
    sender_factory: SenderFactory = create_fluent_sender
    service_id: str = DEFAULT_SERVICE_ID


def build_sink(descriptor: SinkDescriptor, level: str, backends: SinkBackends) -> BaseSink:
    """Instantiate the sink named by *descriptor* for *level*."""
    if descriptor.kind is SinkKind.STDOUT:
        return StdoutSink(level)

    if descriptor.kind is SinkKind.STDERR:
        return StderrSink(level)

    if descriptor.kind is SinkKind.MONGODB:
        if backends.database is None:
            raise InvalidConfigurationError(
                f"Cannot set logger: {descriptor.raw!r} for {level!r} needs a MongoDB "
                "database but none is configured",
                level=level,
                value=descriptor.raw,
            )
        return MongoSink(level, descriptor.collection, backends.database)

    sender = backends.sender_factory(backends.service_id, descriptor.host, descriptor.port)
    return FluentdSink(level, descriptor.host, descriptor.port, sender)


def resolve_plan(plan: RoutingPlan, backends: SinkBackends) -> dict[str, tuple[BaseSink, ...]]:
    """Build the sinks for every level in *plan*, preserving descriptor order."""
    resolved: dict[str, tuple[BaseSink, ...]] = {}
    for level, route in plan.routes.items():
        resolved[level] = tuple(
            build_sink(descriptor, level, backends) for descriptor in route.descriptors
        )
        logger.debug(
            "Resolved level %s -> %s",
            level,
            ", ".join(sink.sink_name for sink in resolved[level]),
        )
    return resolved


def resolve_routes(
    config: Mapping[str, Any] | None, backends: SinkBackends | None = None
) -> dict[str, tuple[BaseSink, ...]]:
    """Decode *config* and build its sinks.

    Raises
    ------
    InvalidConfigurationError
        On any malformed level value or descriptor, or a missing backend.
    """
    plan = build_routing_plan(config)
    return resolve_plan(plan, backends or SinkBackends())
