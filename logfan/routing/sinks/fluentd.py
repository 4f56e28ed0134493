"""Fluentd sink — forwards messages to a remote fluentd collector.

Delivery goes through a ``CollectorSender``, which wraps a blocking
``fluent.sender.FluentSender`` and runs each emit in a worker thread.
Transport errors the underlying sender records are published on the
``CollectorSender`` error channel; every ``FluentdSink`` registers a
handler there for its whole lifetime that drops connection-reset and
connection-refused errors.  Any other error fails the ``log`` call.
"""

from __future__ import annotations

import asyncio
import errno
import logging
from collections.abc import Callable, Sequence
from typing import Any

from fluent.sender import FluentSender

from logfan.routing.formatting import format_message
from logfan.routing.sinks import SinkDeliveryError

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[BaseException], bool]
"""Returns ``True`` when it has dealt with the error."""

_SUPPRESSED_ERRNOS = frozenset({errno.ECONNRESET, errno.ECONNREFUSED})


class CollectorSenderError(RuntimeError):
    """Raised when the sender reports an error no handler accepted."""


def is_disconnect_error(error: BaseException) -> bool:
    """Return ``True`` for connection-reset and connection-refused errors."""
    if isinstance(error, (ConnectionResetError, ConnectionRefusedError)):
        return True
    return isinstance(error, OSError) and error.errno in _SUPPRESSED_ERRNOS


class CollectorSender:
    """Async front for a fluent-logger sender with an error channel.

    ``FluentSender`` never raises on transport failure; it returns
    ``False`` and records the exception in a thread-local ``last_error``.
    The emit therefore runs, and ``last_error`` is read and cleared, in
    the same worker thread.  The recorded error is then offered to each
    registered handler in registration order.
    """

    def __init__(self, sender: FluentSender | Any) -> None:
        self._sender = sender
        self._error_handlers: list[ErrorHandler] = []

    @property
    def tag(self) -> str:
        return getattr(self._sender, "tag", "")

    def add_error_handler(self, handler: ErrorHandler) -> None:
        """Register *handler* on the error channel for the sender's lifetime."""
        self._error_handlers.append(handler)

    def _emit_blocking(self, label: str, data: dict[str, Any]) -> BaseException | None:
        sent = self._sender.emit(label, data)
        error = self._sender.last_error
        if error is not None:
            self._sender.clear_last_error()
            return error
        if not sent:
            return CollectorSenderError(f"sender {self.tag!r} is closed")
        return None

    def _publish_error(self, error: BaseException) -> bool:
        return any(handler(error) for handler in list(self._error_handlers))

    async def emit(self, label: str, data: dict[str, Any]) -> None:
        """Emit one record, raising errors no handler accepted."""
        error = await asyncio.to_thread(self._emit_blocking, label, data)
        if error is None or self._publish_error(error):
            return
        raise CollectorSenderError(str(error)) from error

    def close(self) -> None:
        self._sender.close()


SenderFactory = Callable[[str, str, int], CollectorSender]


def create_fluent_sender(
    service_id: str, host: str, port: int, timeout: float = 3.0
) -> CollectorSender:
    """Open a ``FluentSender`` tagged with *service_id*.

    The connection itself is established lazily on the first emit.
    """
    return CollectorSender(FluentSender(service_id, host=host, port=port, timeout=timeout))


def _suppress_disconnects(error: BaseException) -> bool:
    """Error handler that drops collector disconnects."""
    return is_disconnect_error(error)


class FluentdSink:
    """Emits formatted messages to fluentd, tagged with the level.

    Parameters
    ----------
    level:
        Used as the fluentd label for every record.
    host, port:
        Address of the collector; only used for identification here, the
        *sender* is already bound to it.
    sender:
        The ``CollectorSender`` this sink holds for its lifetime.
    """

    def __init__(self, level: str, host: str, port: int, sender: CollectorSender) -> None:
        self._level = level
        self._host = host
        self._port = port
        self._sender = sender
        self._sender.add_error_handler(_suppress_disconnects)

    @property
    def sink_name(self) -> str:
        return f"fluentd:{self._host}:{self._port}"

    @property
    def sender(self) -> CollectorSender:
        return self._sender

    async def log(self, message: str, args: Sequence[Any] = ()) -> None:
        formatted = format_message(message, *args)
        try:
            await self._sender.emit(self._level, {"message": formatted})
        except CollectorSenderError as exc:
            raise SinkDeliveryError(
                f"fluentd emit to {self._host}:{self._port} failed: {exc}",
                sink_name=self.sink_name,
                level=self._level,
            ) from (exc.__cause__ or exc)
        logger.debug("FluentdSink: emitted %s record to %s", self._level, self.sink_name)

    def close(self) -> None:
        """Close the underlying sender; later emits fail."""
        self._sender.close()
