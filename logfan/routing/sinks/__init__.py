"""Sink protocol for logfan level routing.

All sinks implement the ``BaseSink`` protocol: a ``sink_name`` property
and an asynchronous ``log(message, args)`` method.  The dispatcher awaits
``log`` on every sink configured for the emitted level.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


class SinkDeliveryError(RuntimeError):
    """Raised by a sink when one message could not be delivered.

    The backend exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, *, sink_name: str, level: str) -> None:
        super().__init__(message)
        self.sink_name = sink_name
        self.level = level


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every logfan sink must implement.

    Attributes
    ----------
    sink_name : str
        A human-readable identifier for this sink instance
        (e.g. ``"stdout"``, ``"mongodb:audit"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the name of this sink."""
        ...

    async def log(self, message: str, args: Sequence[Any] = ()) -> None:
        """Format *message* with *args* and deliver it.

        Delivery failures are raised as ``SinkDeliveryError``; they reach
        the caller through the dispatcher's completion future.
        """
        ...
