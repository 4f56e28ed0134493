"""Console sinks — write ``"<level>: <message>"`` lines to stdout or stderr."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any, TextIO

from logfan.routing.formatting import format_message


class ConsoleSink:
    """Writes formatted messages to a standard stream.

    The stream is looked up on ``sys`` at write time so that redirected
    streams are honoured.  Writing never fails.
    """

    stream_name = "stdout"

    def __init__(self, level: str) -> None:
        self._level = level

    @property
    def sink_name(self) -> str:
        return self.stream_name

    @property
    def level(self) -> str:
        return self._level

    def _stream(self) -> TextIO:
        return getattr(sys, self.stream_name)

    async def log(self, message: str, args: Sequence[Any] = ()) -> None:
        formatted = format_message(message, *args)
        print(f"{self._level}: {formatted}", file=self._stream())


class StdoutSink(ConsoleSink):
    stream_name = "stdout"


class StderrSink(ConsoleSink):
    stream_name = "stderr"
