"""Adversarial tests — malformed configurations and hostile sinks.

These tests verify that:
1. Every malformed level value is rejected at construction, never at emit
2. Configuration errors never leave a partially built dispatcher behind
3. Sinks that throw various exception types surface through the future
4. A collector that refuses connections never fails unrelated emits
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import pytest

from logfan.models.routing import InvalidConfigurationError
from logfan.routing.dispatcher import LevelDispatcher, create_dispatcher

# ---------------------------------------------------------------------------
# Test sinks
# ---------------------------------------------------------------------------


class ExplodingSink:
    """A sink that always throws."""

    def __init__(self, name: str = "exploding-sink", exc_type: type = RuntimeError):
        self._name = name
        self._exc_type = exc_type

    @property
    def sink_name(self) -> str:
        return self._name

    async def log(self, message: str, args: Sequence[Any] = ()) -> None:
        raise self._exc_type(f"{self._name} exploded!")


class CountingSink:
    def __init__(self) -> None:
        self.count = 0

    @property
    def sink_name(self) -> str:
        return "counting"

    async def log(self, message: str, args: Sequence[Any] = ()) -> None:
        self.count += 1


# ---------------------------------------------------------------------------
# Malformed configuration
# ---------------------------------------------------------------------------


MALFORMED_CONFIGS = [
    {"warn": "mongodb:"},
    {"error": "unknownsink"},
    {"info": {"stdout": True}},
    {"info": 12},
    {"info": True},
    {"info": ["stdout", ["stderr"]]},
    {"info": ["stdout", ""]},
    {"info": ["stdout", 3]},
    {"info": "fluentd:host"},
    {"info": "fluentd:host:port"},
    {"info": "mongodb"},
    {"info": "stdout:"},
    {"info": "file:/var/log/app.log"},
]


@pytest.mark.parametrize("config", MALFORMED_CONFIGS)
def test_malformed_config_rejected(config, backends):
    with pytest.raises(InvalidConfigurationError):
        create_dispatcher(config, backends)


def test_falsy_level_next_to_bad_level_still_rejected(backends):
    with pytest.raises(InvalidConfigurationError):
        create_dispatcher({"debug": "", "error": "unknownsink"}, backends)


def test_bad_level_after_good_levels_opens_no_senders(backends, fluent_senders):
    with pytest.raises(InvalidConfigurationError):
        create_dispatcher(
            {"info": "fluentd:a:24224", "warn": "fluentd:b:24224", "error": {"x": 1}},
            backends,
        )
    assert fluent_senders == []


@pytest.mark.parametrize("level", ["", "0", "constructor", "__proto__", "hasOwnProperty"])
def test_odd_level_names_are_plain_keys(level):
    dispatcher = create_dispatcher({level: "stdout"})
    assert dispatcher.levels == [level]
    assert dispatcher.sinks_for("other") == ()


# ---------------------------------------------------------------------------
# Hostile sinks
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("exc_type", [RuntimeError, ValueError, KeyError, OSError, TimeoutError])
def test_any_exception_type_surfaces_through_future(exc_type):
    dispatcher = LevelDispatcher({"error": [ExplodingSink(exc_type=exc_type)]})

    async def _run():
        future = dispatcher.emit("error", "m")
        with pytest.raises(exc_type):
            await future

    asyncio.run(_run())


def test_failure_on_one_level_leaves_other_levels_working():
    counting = CountingSink()
    dispatcher = LevelDispatcher({"error": [ExplodingSink()], "info": [counting]})

    async def _run():
        results = await asyncio.gather(
            dispatcher.emit("error", "a"),
            dispatcher.emit("info", "b"),
            dispatcher.emit("info", "c"),
            return_exceptions=True,
        )
        return results

    results = asyncio.run(_run())
    assert isinstance(results[0], RuntimeError)
    assert results[1:] == [None, None]
    assert counting.count == 2


def test_refusing_collector_never_fails_emits(backends, fluent_senders, database):
    dispatcher = create_dispatcher(
        {"error": ["fluentd:down:24224", "mongodb:errors"], "info": "mongodb:info"},
        backends,
    )
    refusing = fluent_senders[0]

    async def _run():
        for i in range(5):
            refusing.next_errors.append(ConnectionRefusedError("refused"))
            await dispatcher.emit("error", "failure %d", [i])
            await dispatcher.emit("info", "still fine %d", [i])

    asyncio.run(_run())
    assert refusing.emitted == []
    assert len(database["errors"].inserted) == 5
    assert len(database["info"].inserted) == 5
