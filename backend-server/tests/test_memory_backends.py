"""
Tests for the in-process collaborators.
"""

import asyncio

import pytest

from streams_api.core.exceptions import ObjectNotFound
from streams_api.infra.base import CounterService, ObjectStore
from streams_api.infra.memory import InMemoryCounterService, InMemoryObjectStore


class TestInMemoryObjectStore:
    """Test InMemoryObjectStore."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryObjectStore(), ObjectStore)
        assert isinstance(InMemoryCounterService(), CounterService)

    @pytest.mark.asyncio
    async def test_list_semantics(self, memory_store):
        for k in ("a/3", "a/1", "a/2", "b/1", "a0"):
            await memory_store.put(k, b"x")

        assert await memory_store.list("a/") == ["a/1", "a/2", "a/3"]
        assert await memory_store.list("a/", start_after="a/1") == ["a/2", "a/3"]
        assert await memory_store.list("a/", start_after="a/15", max_results=1) == ["a/2"]
        assert await memory_store.list("a/", start_after="0") == ["a/1", "a/2", "a/3"]
        assert await memory_store.list("a/", start_after="a/3") == []
        assert await memory_store.list("a/", max_results=0) == []

    @pytest.mark.asyncio
    async def test_overwrite_keeps_single_key(self, memory_store):
        await memory_store.put("k", b"1")
        await memory_store.put("k", b"2")
        assert await memory_store.get("k") == b"2"
        assert await memory_store.list("") == ["k"]

    @pytest.mark.asyncio
    async def test_missing(self, memory_store):
        with pytest.raises(ObjectNotFound):
            await memory_store.get("nope")


class TestInMemoryCounterService:
    """Test InMemoryCounterService."""

    @pytest.mark.asyncio
    async def test_concurrent_increments(self, counter):
        values = await asyncio.gather(*(counter.increment_and_get("t") for _ in range(100)))
        assert sorted(values) == list(range(1, 101))
        assert counter.current("t") == 100
        assert counter.current("other") == 0
