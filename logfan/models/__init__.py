"""logfan data models — all Pydantic v2, all frozen (immutable)."""

from logfan.models.routing import (
    InvalidConfigurationError,
    LevelRoute,
    RoutingPlan,
    SinkDescriptor,
    SinkKind,
    build_routing_plan,
    decode_level,
    parse_descriptor,
)

__all__ = [
    "InvalidConfigurationError",
    "LevelRoute",
    "RoutingPlan",
    "SinkDescriptor",
    "SinkKind",
    "build_routing_plan",
    "decode_level",
    "parse_descriptor",
]
