"""Use-case: append one message to a topic."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

from streams_api.core.exceptions import InvalidRequest, ObjectStoreError, StorageWriteFailed
from streams_api.domain import codec
from streams_api.domain.models.message import Message, check_finite
from streams_api.domain.services.offset_allocator import OffsetAllocator
from streams_api.infra.base import ObjectStore

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class Producer:
    """
    Allocate, stamp, encode, write. Returns only once the body is stored.

    A write failure after allocation leaves a permanent hole in the topic's
    offset sequence; the counter is never rolled back because other workers
    may already hold higher offsets.
    """

    def __init__(
        self,
        allocator: OffsetAllocator,
        store: ObjectStore,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._allocator = allocator
        self._store = store
        self._clock = clock

    async def produce(self, topic: str, payload: Any) -> Message:
        # Checked before allocation so a rejected payload never consumes an offset
        try:
            check_finite(payload)
        except ValueError as exc:
            raise InvalidRequest(str(exc)) from exc

        # AllocationFailed propagates untouched: nothing was written yet
        offset = await self._allocator.allocate(topic)

        message = Message(offset=offset, payload=payload, timestamp=self._clock())
        storage_key = codec.key(topic, offset)
        try:
            await self._store.put(storage_key, codec.encode(message))
        except ObjectStoreError as exc:
            logger.error(
                "Failed to write message; offset is orphaned",
                extra={"topic": topic, "offset": offset, "key": storage_key, "error": str(exc)},
            )
            raise StorageWriteFailed(topic, offset, str(exc)) from exc

        logger.info("Message produced", extra={"topic": topic, "offset": offset, "key": storage_key})
        return message
