"""Use-case: read a bounded, offset-ordered range of a topic."""
from __future__ import annotations

import asyncio
import logging
from operator import attrgetter
from typing import List, Optional, Sequence

from streams_api.core.exceptions import (
    InvalidRequest,
    MalformedMessage,
    ObjectStoreError,
    StorageReadFailed,
)
from streams_api.domain import codec
from streams_api.domain.models.message import ConsumeBatch, Message
from streams_api.infra.base import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_READS = 10
DEFAULT_MAX_LIMIT = 100
DEFAULT_LIMIT = 10


class Consumer:
    """
    List keys from the requested offset, fetch their bodies with bounded
    concurrency, then restore offset order with a single sort.

    Cursors are held by callers; nothing is remembered between calls.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        max_concurrent_reads: int = DEFAULT_MAX_CONCURRENT_READS,
        max_limit: int = DEFAULT_MAX_LIMIT,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        if max_concurrent_reads < 1:
            raise ValueError("max_concurrent_reads must be >= 1")
        if max_limit < 1:
            raise ValueError("max_limit must be >= 1")
        self._store = store
        self.max_concurrent_reads = max_concurrent_reads
        self.max_limit = max_limit
        self.default_limit = min(default_limit, max_limit)

    def clamp_limit(self, limit: int) -> int:
        if limit < 1:
            raise InvalidRequest(f"limit must be >= 1, got {limit}")
        return min(limit, self.max_limit)

    async def consume(self, topic: str, start_offset: int = 1, limit: Optional[int] = None) -> ConsumeBatch:
        if start_offset < 1 or start_offset > codec.MAX_OFFSET:
            raise InvalidRequest(f"offset must be in [1, {codec.MAX_OFFSET}], got {start_offset}")
        limit = self.clamp_limit(self.default_limit if limit is None else limit)

        prefix = codec.topic_prefix(topic)
        start_after = codec.key(topic, start_offset - 1) if start_offset > 1 else None
        try:
            keys = await self._store.list(prefix, start_after=start_after, max_results=limit)
        except ObjectStoreError as exc:
            logger.error("Failed to list messages", extra={"topic": topic, "prefix": prefix, "error": str(exc)})
            raise StorageReadFailed(str(exc)) from exc

        if not keys:
            return ConsumeBatch(messages=[], next_offset=start_offset)

        messages = await self._fetch_all(keys)
        # Completion order is arbitrary; this sort is what orders the batch.
        messages.sort(key=attrgetter("offset"))

        # Every fetch failing is treated like an empty listing: the cursor stays.
        next_offset = messages[-1].offset + 1 if messages else start_offset

        logger.info(
            "Messages consumed",
            extra={"topic": topic, "listed": len(keys), "count": len(messages), "next_offset": next_offset},
        )
        return ConsumeBatch(messages=messages, next_offset=next_offset)

    async def _fetch_all(self, keys: Sequence[str]) -> List[Message]:
        pool = asyncio.Semaphore(self.max_concurrent_reads)

        async def fetch(storage_key: str) -> Optional[Message]:
            try:
                async with pool:
                    data = await self._store.get(storage_key)
                return self._decode(storage_key, data)
            except Exception as exc:
                # Any failed fetch is dropped from the batch; cancellation still propagates
                logger.warning(
                    "Dropping unreadable message",
                    extra={"key": storage_key, "error": repr(exc), "error_type": type(exc).__name__},
                )
                return None

        out: List[Message] = []
        for done in asyncio.as_completed([fetch(k) for k in keys]):
            message = await done
            if message is not None:
                out.append(message)
        return out

    @staticmethod
    def _decode(storage_key: str, data: bytes) -> Message:
        message = codec.decode(data, storage_key=storage_key)
        try:
            expected = codec.offset_of(storage_key)
        except ValueError as exc:
            raise MalformedMessage(str(exc), key=storage_key) from exc
        if message.offset != expected:
            raise MalformedMessage(
                f"offset {message.offset} stored under key for offset {expected}",
                key=storage_key,
            )
        return message
