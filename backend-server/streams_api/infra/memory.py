"""
In-process collaborators for development and tests.

Both use an asyncio.Lock, so they are safe for many coroutines in one event
loop but NOT across processes or threads.
"""
from __future__ import annotations

import asyncio
import bisect
from collections import defaultdict
from typing import Dict, List

from streams_api.core.exceptions import ObjectNotFound


class InMemoryCounterService:
    def __init__(self) -> None:
        self._counters: Dict[str, int] = defaultdict(int)
        self._lock = asyncio.Lock()

    async def increment_and_get(self, name: str) -> int:
        async with self._lock:
            self._counters[name] += 1
            return self._counters[name]

    def current(self, name: str) -> int:
        return self._counters.get(name, 0)


class InMemoryObjectStore:
    """Sorted key index plus a dict of bodies."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self._keys: List[str] = []
        self._lock = asyncio.Lock()

    async def put(self, key: str, data: bytes) -> None:
        async with self._lock:
            if key not in self._blobs:
                bisect.insort(self._keys, key)
            self._blobs[key] = bytes(data)

    async def get(self, key: str) -> bytes:
        async with self._lock:
            try:
                return self._blobs[key]
            except KeyError:
                raise ObjectNotFound(key) from None

    async def list(self, prefix: str, start_after: str | None = None, max_results: int = 1000) -> List[str]:
        if max_results <= 0:
            return []
        async with self._lock:
            if start_after and start_after >= prefix:
                i = bisect.bisect_right(self._keys, start_after)  # exclusive
            else:
                i = bisect.bisect_left(self._keys, prefix)
            out: List[str] = []
            while i < len(self._keys) and len(out) < max_results:
                k = self._keys[i]
                if not k.startswith(prefix):
                    break
                out.append(k)
                i += 1
            return out

    def __len__(self) -> int:
        return len(self._blobs)
