"""MongoDB sink — inserts one record per message into a named collection.

Record layout::

    {"level": "<level>", "message": "<formatted>", "date": <UTC datetime>}

The database handle is shared and owned by the caller (normally a
``pymongo.AsyncMongoClient`` database); the sink never opens or closes it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from logfan.models.routing import InvalidConfigurationError
from logfan.routing.formatting import format_message
from logfan.routing.sinks import SinkDeliveryError

if TYPE_CHECKING:
    from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)


class MongoSink:
    """Persists formatted messages to a MongoDB collection.

    Parameters
    ----------
    level:
        The level this sink was configured for; stored on every record.
    collection:
        Name of the target collection.  Must not be empty.
    database:
        Shared async database handle exposing ``database[name].insert_one``.
    """

    def __init__(self, level: str, collection: str, database: AsyncDatabase | Any) -> None:
        if not collection:
            raise InvalidConfigurationError(
                f"Cannot set logger: MongoDB collection name for {level!r} is empty",
                level=level,
                value=collection,
            )
        self._level = level
        self._collection_name = collection
        self._collection = database[collection]

    @property
    def sink_name(self) -> str:
        return f"mongodb:{self._collection_name}"

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def build_record(self, formatted: str) -> dict[str, Any]:
        return {
            "level": self._level,
            "message": formatted,
            "date": datetime.now(timezone.utc),
        }

    async def log(self, message: str, args: Sequence[Any] = ()) -> None:
        record = self.build_record(format_message(message, *args))
        try:
            await self._collection.insert_one(record)
        except PyMongoError as exc:
            raise SinkDeliveryError(
                f"MongoDB insert into {self._collection_name!r} failed: {exc}",
                sink_name=self.sink_name,
                level=self._level,
            ) from exc
        logger.debug("MongoSink: inserted %s record into %s", self._level, self._collection_name)
