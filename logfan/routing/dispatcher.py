"""LevelDispatcher — fans one message out to every sink of its level.

The dispatcher is built once from a level configuration and is immutable
afterwards.  ``emit(level, message, args)`` starts ``log`` on every sink
configured for *level* at once and returns a single future:

* no sinks for *level* -> the future is already resolved;
* all sinks succeed -> the future resolves with ``None``;
* any sink fails -> the future fails with that sink's exception as soon as
  it happens.  The remaining sinks keep running to completion in the
  background; their failures are logged, not raised.

Cancelling the returned future does not cancel the sink operations.
``drain()`` waits for those background deliveries; ``aclose()`` drains and
then closes every sink that holds a backend connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from logfan.routing.resolver import SinkBackends, resolve_routes
from logfan.routing.sinks import BaseSink

logger = logging.getLogger(__name__)


class LevelDispatcher:
    """Routes formatted messages to the sinks configured for their level.

    Parameters
    ----------
    routes:
        Level -> sinks, in delivery order.  Levels mapped to an empty
        sequence are dropped.  Use ``from_config`` to build from a level
        configuration.

    Usage
    -----
    >>> dispatcher = LevelDispatcher.from_config({"info": ["stdout", "stderr"]})
    >>> await dispatcher.emit("info", "hi %s", ["x"])  # doctest: +SKIP
    """

    def __init__(self, routes: Mapping[str, Sequence[BaseSink]]) -> None:
        self._routes: Mapping[str, tuple[BaseSink, ...]] = MappingProxyType(
            {level: tuple(sinks) for level, sinks in routes.items() if sinks}
        )
        self._inflight: set[asyncio.Task[None]] = set()
        logger.info(
            "LevelDispatcher ready: %d level(s) configured (%s)",
            len(self._routes),
            ", ".join(self._routes) or "none",
        )

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any] | None, backends: SinkBackends | None = None
    ) -> LevelDispatcher:
        """Resolve *config* against *backends* and build a dispatcher.

        Raises
        ------
        InvalidConfigurationError
            If the configuration is malformed; no dispatcher is created.
        """
        return cls(resolve_routes(config, backends))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def levels(self) -> list[str]:
        """Return the configured levels."""
        return list(self._routes)

    def sinks_for(self, level: str) -> tuple[BaseSink, ...]:
        """Return the sinks configured for *level* (empty if none)."""
        return self._routes.get(level, ())

    # ------------------------------------------------------------------
    # Emit
    # ------------------------------------------------------------------

    def _start(self, sink: BaseSink, level: str, message: str, args: Sequence[Any]) -> asyncio.Task[None]:
        task = asyncio.ensure_future(sink.log(message, args))
        self._inflight.add(task)

        def _finished(done: asyncio.Task[None]) -> None:
            self._inflight.discard(done)
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                logger.warning("Sink %s failed for level %s: %s", sink.sink_name, level, exc)

        task.add_done_callback(_finished)
        return task

    def emit(
        self, level: str, message: str, args: Sequence[Any] | None = None
    ) -> asyncio.Future[None]:
        """Deliver *message* to every sink configured for *level*.

        A bare ``str`` in *args* is a single argument.  Delivery failures
        are reported through the returned future.

        Raises
        ------
        RuntimeError
            If no event loop is running in the calling thread.
        """
        loop = asyncio.get_running_loop()
        sinks = self._routes.get(level)

        if not sinks:
            done = loop.create_future()
            done.set_result(None)
            return done

        args = [args] if isinstance(args, str) else list(args or ())
        try:
            tasks = [self._start(sink, level, message, args) for sink in sinks]
        except Exception as exc:  # noqa: BLE001
            failed = loop.create_future()
            failed.set_exception(exc)
            return failed

        # The gather stays private: cancelling ``result`` leaves the sinks running.
        gathered = asyncio.gather(*tasks)
        result = loop.create_future()

        def _settle(fut: asyncio.Future[list[None]]) -> None:
            if fut.cancelled():
                if not result.done():
                    result.cancel()
                return
            exc = fut.exception()
            if result.done():
                return
            if exc is not None:
                result.set_exception(exc)
            else:
                result.set_result(None)

        gathered.add_done_callback(_settle)
        return result

    __call__ = emit

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def drain(self) -> None:
        """Wait until every sink operation started by ``emit`` has finished.

        Failures of drained operations are already logged; they are not
        raised here.
        """
        while self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def aclose(self) -> None:
        """Drain in-flight deliveries, then close sinks that own a connection."""
        await self.drain()
        closed: set[int] = set()
        for sinks in self._routes.values():
            for sink in sinks:
                close = getattr(sink, "close", None)
                if close is None or id(sink) in closed:
                    continue
                closed.add(id(sink))
                close()
        logger.debug("LevelDispatcher closed (%d sink(s))", len(closed))

    def __repr__(self) -> str:
        return f"LevelDispatcher(levels={self.levels!r})"


def create_dispatcher(
    config: Mapping[str, Any] | None, backends: SinkBackends | None = None
) -> LevelDispatcher:
    """Build a ``LevelDispatcher`` from a level configuration."""
    return LevelDispatcher.from_config(config, backends)
