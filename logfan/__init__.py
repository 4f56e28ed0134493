"""logfan: level-keyed log routing with concurrent sink fan-out.

A level configuration such as::

    {"info": "stdout", "error": ["stderr", "mongodb:errors", "fluentd:collector:24224"]}

is resolved once into a ``LevelDispatcher``.  ``emit(level, message, args)``
formats the message and delivers it to every sink of that level at once,
returning a single future that fails if any sink fails.
"""

__version__ = "0.1.0"

from logfan.models.routing import InvalidConfigurationError
from logfan.routing.dispatcher import LevelDispatcher, create_dispatcher
from logfan.routing.resolver import SinkBackends
from logfan.routing.sinks import SinkDeliveryError

__all__ = [
    "InvalidConfigurationError",
    "LevelDispatcher",
    "SinkBackends",
    "SinkDeliveryError",
    "__version__",
    "create_dispatcher",
]
