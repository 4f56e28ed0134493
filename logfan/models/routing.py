"""Routing models — per-level sink configuration decoded into descriptors.

The raw configuration maps a level name to a descriptor string, an ordered
list of descriptor strings, or a falsy value.  It is decoded exactly once
into a ``RoutingPlan``; anything that is not one of those shapes is
rejected with ``InvalidConfigurationError``.

Descriptor forms::

    stdout
    stderr
    mongodb:<collection>
    fluentd:<host>:<port>
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

MONGODB_PREFIX = "mongodb:"
FLUENTD_PREFIX = "fluentd:"


class InvalidConfigurationError(ValueError):
    """Raised when the level configuration cannot be turned into sinks.

    Always fatal: no dispatcher is produced when this is raised.
    """

    def __init__(self, message: str, *, level: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.level = level
        self.value = value


def _describe(value: Any) -> str:
    """Render a config value the way it would appear in a JSON file."""
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


class SinkKind(str, Enum):
    """The closed set of sink backends a descriptor can name."""

    STDOUT = "stdout"
    STDERR = "stderr"
    MONGODB = "mongodb"
    FLUENTD = "fluentd"


class SinkDescriptor(BaseModel):
    """A parsed descriptor string."""

    model_config = ConfigDict(frozen=True)

    kind: SinkKind
    raw: str
    collection: str = ""  # mongodb only
    host: str = ""  # fluentd only
    port: int = 0  # fluentd only

    @property
    def target(self) -> str:
        """Human-readable backend target, empty for console sinks."""
        if self.kind is SinkKind.MONGODB:
            return self.collection
        if self.kind is SinkKind.FLUENTD:
            return f"{self.host}:{self.port}"
        return ""


class LevelRoute(BaseModel):
    """The ordered descriptors configured for one level."""

    model_config = ConfigDict(frozen=True)

    level: str
    descriptors: tuple[SinkDescriptor, ...]


class RoutingPlan(BaseModel):
    """The decoded configuration: level -> route, configured levels only."""

    model_config = ConfigDict(frozen=True)

    routes: dict[str, LevelRoute] = {}

    @property
    def levels(self) -> list[str]:
        return list(self.routes)

    def route_for(self, level: str) -> LevelRoute | None:
        return self.routes.get(level)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _invalid_descriptor(descriptor: Any, level: str) -> InvalidConfigurationError:
    return InvalidConfigurationError(
        f"Cannot set logger: {_describe(descriptor)} is not valid option for {_describe(level)}",
        level=level,
        value=descriptor,
    )


def parse_descriptor(descriptor: Any, level: str) -> SinkDescriptor:
    """Parse one descriptor string configured for *level*.

    Raises
    ------
    InvalidConfigurationError
        If the descriptor is not a string or names no known backend, or if
        its parameters are empty or malformed.
    """
    if not isinstance(descriptor, str):
        raise _invalid_descriptor(descriptor, level)

    if descriptor == SinkKind.STDOUT.value:
        return SinkDescriptor(kind=SinkKind.STDOUT, raw=descriptor)

    if descriptor == SinkKind.STDERR.value:
        return SinkDescriptor(kind=SinkKind.STDERR, raw=descriptor)

    if descriptor.startswith(MONGODB_PREFIX):
        collection = descriptor[len(MONGODB_PREFIX):]
        if not collection:
            raise InvalidConfigurationError(
                f"Cannot set logger: MongoDB collection name for {_describe(level)} is empty",
                level=level,
                value=descriptor,
            )
        return SinkDescriptor(kind=SinkKind.MONGODB, raw=descriptor, collection=collection)

    if descriptor.startswith(FLUENTD_PREFIX):
        host, sep, port_text = descriptor[len(FLUENTD_PREFIX):].partition(":")
        if not sep or not host:
            raise InvalidConfigurationError(
                f"Cannot set logger: {_describe(descriptor)} for {_describe(level)} "
                "must be fluentd:<host>:<port>",
                level=level,
                value=descriptor,
            )
        try:
            port = int(port_text)
        except ValueError:
            port = -1
        if not 0 < port < 65536:
            raise InvalidConfigurationError(
                f"Cannot set logger: {_describe(port_text)} is not a valid fluentd port "
                f"for {_describe(level)}",
                level=level,
                value=descriptor,
            )
        return SinkDescriptor(kind=SinkKind.FLUENTD, raw=descriptor, host=host, port=port)

    raise _invalid_descriptor(descriptor, level)


def decode_level(level: str, value: Any) -> LevelRoute | None:
    """Decode the configuration value of one level.

    Returns ``None`` for falsy values (the level gets no sinks).
    """
    if not value:
        return None

    if isinstance(value, str):
        return LevelRoute(level=level, descriptors=(parse_descriptor(value, level),))

    if isinstance(value, (list, tuple)):
        return LevelRoute(
            level=level,
            descriptors=tuple(parse_descriptor(item, level) for item in value),
        )

    raise InvalidConfigurationError(
        f"Cannot set logger: {_describe(value)} is not valid option for {_describe(level)}",
        level=level,
        value=value,
    )


def build_routing_plan(config: Mapping[str, Any] | None) -> RoutingPlan:
    """Decode a whole level configuration into a ``RoutingPlan``.

    Levels whose value is falsy are left out of the plan.  The first
    invalid level aborts decoding.
    """
    if config is None:
        return RoutingPlan()
    if not isinstance(config, Mapping):
        raise InvalidConfigurationError(
            f"Cannot set logger: configuration must be a mapping of levels, got {_describe(config)}",
            value=config,
        )

    routes: dict[str, LevelRoute] = {}
    for level, value in config.items():
        route = decode_level(str(level), value)
        if route is not None:
            routes[route.level] = route
    return RoutingPlan(routes=routes)
