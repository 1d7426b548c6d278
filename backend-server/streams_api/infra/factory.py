"""Build the collaborator pair selected by settings."""
from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Tuple

from streams_api.core.config import Settings
from streams_api.infra.base import CounterService, ObjectStore
from streams_api.infra.memory import InMemoryCounterService, InMemoryObjectStore

logger = logging.getLogger(__name__)


async def open_backends(settings: Settings, stack: AsyncExitStack) -> Tuple[CounterService, ObjectStore]:
    """
    Return ``(counter, store)``. AWS clients are entered on *stack* so they
    live (and pool connections) until the stack is closed.
    """
    if settings.storage_backend == "memory":
        return InMemoryCounterService(), InMemoryObjectStore()

    import aioboto3

    from streams_api.infra.aws.dynamodb import DynamoCounterService
    from streams_api.infra.aws.s3 import S3ObjectStore

    session = aioboto3.Session(region_name=settings.aws_region)
    s3 = await stack.enter_async_context(
        session.client("s3", endpoint_url=settings.s3_endpoint_url)
    )
    ddb = await stack.enter_async_context(
        session.client("dynamodb", endpoint_url=settings.dynamodb_endpoint_url)
    )
    counter = DynamoCounterService(ddb, settings.counters_table)
    store = S3ObjectStore(s3, settings.bucket_name, region=settings.aws_region)

    if settings.create_resources:
        await store.ensure_bucket()
        await counter.ensure_table()

    return counter, store
