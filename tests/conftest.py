"""Shared test fixtures for logfan."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from logfan.routing.resolver import SinkBackends
from logfan.routing.sinks.fluentd import CollectorSender

# ---------------------------------------------------------------------------
# Backend fakes
# ---------------------------------------------------------------------------


class FakeCollection:
    """Stands in for a pymongo async collection."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.inserted: list[dict[str, Any]] = []
        self.fail_with: BaseException | None = None
        self.delay = 0.0

    async def insert_one(self, document: dict[str, Any]) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        self.inserted.append(document)


class FakeMongoClient:
    """Stands in for ``pymongo.AsyncMongoClient``; records ``close``."""

    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeDatabase:
    """Stands in for a pymongo async database: ``db[name]`` -> collection."""

    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.client = FakeMongoClient()

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


class FakeFluentSender:
    """Stands in for ``fluent.sender.FluentSender``.

    ``next_errors`` are recorded as ``last_error`` one per emit, the way
    the real sender records transport failures instead of raising.
    """

    def __init__(self, tag: str, host: str = "localhost", port: int = 24224) -> None:
        self.tag = tag
        self.host = host
        self.port = port
        self.emitted: list[tuple[str, dict[str, Any]]] = []
        self.next_errors: list[BaseException] = []
        self.last_error: BaseException | None = None
        self.closed = False

    def emit(self, label: str, data: dict[str, Any]) -> bool:
        if self.closed:
            return False
        if self.next_errors:
            self.last_error = self.next_errors.pop(0)
            return False
        self.emitted.append((label, data))
        return True

    def clear_last_error(self) -> None:
        self.last_error = None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def database() -> FakeDatabase:
    """Provide an empty fake MongoDB database."""
    return FakeDatabase()


@pytest.fixture
def fluent_senders() -> list[FakeFluentSender]:
    """Collects every fake fluent sender created by ``sender_factory``."""
    return []


@pytest.fixture
def sender_factory(
    fluent_senders: list[FakeFluentSender],
) -> Callable[[str, str, int], CollectorSender]:
    """Factory fixture: build ``CollectorSender`` objects over fake senders."""

    def _factory(service_id: str, host: str, port: int) -> CollectorSender:
        fake = FakeFluentSender(service_id, host, port)
        fluent_senders.append(fake)
        return CollectorSender(fake)

    return _factory


@pytest.fixture
def backends(
    database: FakeDatabase,
    sender_factory: Callable[[str, str, int], CollectorSender],
) -> SinkBackends:
    """Provide ``SinkBackends`` wired to the fake database and senders."""
    return SinkBackends(database=database, sender_factory=sender_factory, service_id="test-svc")


@pytest.fixture
def make_fluent_sender() -> Callable[..., FakeFluentSender]:
    """Factory fixture: build a bare ``FakeFluentSender``."""
    return FakeFluentSender


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo ``logging.basicConfig(force=True)`` from CLI tests between tests."""
    import logging

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
