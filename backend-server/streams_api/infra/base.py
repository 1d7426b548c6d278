"""
Collaborator ports used by the produce/consume core.

Any object satisfying these structural Protocols can back the service. The
built-in adapters are:
  - InMemoryCounterService / InMemoryObjectStore (asyncio.Lock, dev + tests)
  - DynamoCounterService / S3ObjectStore         (aioboto3)

Adapters report failures as CounterError / ObjectStoreError so the core never
depends on a vendor exception type.
"""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class CounterService(Protocol):
    async def increment_and_get(self, name: str) -> int:
        """
        Atomically add one to counter *name* and return the new value.

        A counter that does not exist yet starts at 0, so the first call
        returns 1. Never returns the pre-increment value.
        """
        ...


@runtime_checkable
class ObjectStore(Protocol):
    async def put(self, key: str, data: bytes) -> None:
        ...

    async def get(self, key: str) -> bytes:
        """Raises ObjectNotFound if *key* does not exist."""
        ...

    async def list(
        self,
        prefix: str,
        start_after: str | None = None,
        max_results: int = 1000,
    ) -> Sequence[str]:
        """
        Keys under *prefix* in ascending lexicographic order, strictly greater
        than *start_after* when given, at most *max_results* of them.
        """
        ...
