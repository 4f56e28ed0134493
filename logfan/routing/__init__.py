"""logfan level routing — delivers each message to every sink of its level.

A level configuration maps level names to sink descriptors.  It is
resolved once into a ``LevelDispatcher`` whose ``emit`` fans a formatted
message out to the console, MongoDB, or fluentd sinks configured for that
level and aggregates their outcomes into one future.
"""

from logfan.routing.dispatcher import LevelDispatcher, create_dispatcher
from logfan.routing.formatting import format_message
from logfan.routing.resolver import SinkBackends, resolve_routes
from logfan.routing.sinks import BaseSink, SinkDeliveryError

__all__ = [
    "BaseSink",
    "LevelDispatcher",
    "SinkBackends",
    "SinkDeliveryError",
    "create_dispatcher",
    "format_message",
    "resolve_routes",
]
