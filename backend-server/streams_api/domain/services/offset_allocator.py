"""Per-topic offset allocation on top of the counter service."""
from __future__ import annotations

import logging

from streams_api.core.exceptions import AllocationFailed, CounterError
from streams_api.infra.base import CounterService

logger = logging.getLogger(__name__)


class OffsetAllocator:
    """Stateless: every call is one atomic increment-and-get on the counter."""

    def __init__(self, counter: CounterService) -> None:
        self._counter = counter

    async def allocate(self, topic: str) -> int:
        """Return a fresh offset for *topic*; the first one is 1."""
        try:
            offset = await self._counter.increment_and_get(topic)
        except CounterError as exc:
            logger.error("Failed to increment offset", extra={"topic": topic, "error": str(exc)})
            raise AllocationFailed(topic, str(exc)) from exc

        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 1:
            logger.error("Counter returned an invalid offset", extra={"topic": topic, "value": repr(offset)})
            raise AllocationFailed(topic, f"counter returned invalid offset {offset!r}")
        return offset
