"""Object store adapter over an aioboto3 S3 client."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List

import aiohttp
from botocore.exceptions import BotoCoreError, ClientError

from streams_api.core.exceptions import ObjectNotFound, ObjectStoreError

logger = logging.getLogger(__name__)

_NOT_FOUND = {"NoSuchKey", "404", "NotFound"}
_NO_BUCKET = {"NoSuchBucket", "404", "NotFound"}

# Transport errors raised by the aiohttp-backed client, including while the
# body is streamed after get_object has returned.
_TRANSPORT_ERRORS = (BotoCoreError, aiohttp.ClientError, asyncio.TimeoutError)


def _code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class S3ObjectStore:
    """
    Thin async wrapper around put_object / get_object / list_objects_v2.

    The client is opened once by the app lifespan and shared by every request,
    so its connection pool is reused across calls.
    """

    def __init__(self, client: Any, bucket: str, region: str | None = None) -> None:
        self._s3 = client
        self.bucket = bucket
        self.region = region

    async def put(self, key: str, data: bytes) -> None:
        try:
            await self._s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/json",
            )
        except (ClientError, *_TRANSPORT_ERRORS) as exc:
            raise ObjectStoreError(f"put {key}: {exc!r}") from exc

    async def get(self, key: str) -> bytes:
        try:
            resp = await self._s3.get_object(Bucket=self.bucket, Key=key)
            async with resp["Body"] as stream:
                return await stream.read()
        except ClientError as exc:
            if _code(exc) in _NOT_FOUND:
                raise ObjectNotFound(key) from exc
            raise ObjectStoreError(f"get {key}: {exc!r}") from exc
        except _TRANSPORT_ERRORS as exc:
            raise ObjectStoreError(f"get {key}: {exc!r}") from exc

    async def list(self, prefix: str, start_after: str | None = None, max_results: int = 1000) -> List[str]:
        kw = dict(Bucket=self.bucket, Prefix=prefix, MaxKeys=max_results)
        if start_after:
            kw["StartAfter"] = start_after
        try:
            resp = await self._s3.list_objects_v2(**kw)
        except (ClientError, *_TRANSPORT_ERRORS) as exc:
            raise ObjectStoreError(f"list {prefix}: {exc!r}") from exc
        return [obj["Key"] for obj in resp.get("Contents", []) if obj.get("Key")]

    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet; other errors propagate."""
        try:
            await self._s3.head_bucket(Bucket=self.bucket)
            return
        except ClientError as exc:
            if _code(exc) not in _NO_BUCKET:
                raise

        kw: dict = {"Bucket": self.bucket}
        # us-east-1 is the default location and rejects an explicit constraint
        if self.region and self.region != "us-east-1":
            kw["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        await self._s3.create_bucket(**kw)
        logger.info("Created bucket", extra={"bucket": self.bucket, "region": self.region})
