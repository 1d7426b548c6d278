"""Shared fixtures: in-memory collaborators and a fault-injecting store."""

import asyncio
import random

import pytest
from fastapi.testclient import TestClient

from streams_api.core.config import Settings
from streams_api.core.exceptions import CounterError, ObjectStoreError
from streams_api.infra.memory import InMemoryCounterService, InMemoryObjectStore


class FlakyObjectStore:
    """Wraps an InMemoryObjectStore and misbehaves on chosen keys."""

    def __init__(self, inner: InMemoryObjectStore) -> None:
        self.inner = inner
        self.corrupt: set[str] = set()
        self.fail_get: set[str] = set()
        # key -> arbitrary exception, for failures outside the store contract
        self.raise_on_get: dict[str, Exception] = {}
        self.fail_put = False
        self.fail_list = False
        self.max_delay = 0.0
        self.in_flight = 0
        self.peak_in_flight = 0
        self.get_calls = 0
        self.last_list = None

    async def put(self, key, data):
        if self.fail_put:
            raise ObjectStoreError(f"put {key}: injected")
        await self.inner.put(key, data)

    async def get(self, key):
        self.get_calls += 1
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.max_delay:
                await asyncio.sleep(random.uniform(0, self.max_delay))
            if key in self.fail_get:
                raise ObjectStoreError(f"get {key}: injected")
            if key in self.raise_on_get:
                raise self.raise_on_get[key]
            data = await self.inner.get(key)
            if key in self.corrupt:
                return b"{not json"
            return data
        finally:
            self.in_flight -= 1

    async def list(self, prefix, start_after=None, max_results=1000):
        if self.fail_list:
            raise ObjectStoreError("list: injected")
        self.last_list = (prefix, start_after, max_results)
        return await self.inner.list(prefix, start_after=start_after, max_results=max_results)


class FailingCounter:
    async def increment_and_get(self, name):
        raise CounterError("counter unavailable")


@pytest.fixture
def counter():
    return InMemoryCounterService()


@pytest.fixture
def memory_store():
    return InMemoryObjectStore()


@pytest.fixture
def flaky_store(memory_store):
    return FlakyObjectStore(memory_store)


@pytest.fixture
def memory_settings():
    return Settings(storage_backend="memory", log_format="console", _env_file=None)


@pytest.fixture
def client(memory_settings):
    from server import create_app

    with TestClient(create_app(memory_settings)) as c:
        yield c


@pytest.fixture
def failing_counter():
    return FailingCounter()
