"""Counter service adapter over an aioboto3 DynamoDB client."""
from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from streams_api.core.exceptions import CounterError

logger = logging.getLogger(__name__)

PARTITION_KEY = "pk"
COUNTER_ATTR = "current_offset"


class DynamoCounterService:
    """
    One item per counter: ``{pk: <name>, current_offset: N}``.

    The increment is a single conditional-free UpdateItem, so it is atomic
    across any number of independent workers.
    """

    def __init__(self, client: Any, table: str) -> None:
        self._ddb = client
        self.table = table

    async def increment_and_get(self, name: str) -> int:
        try:
            resp = await self._ddb.update_item(
                TableName=self.table,
                Key={PARTITION_KEY: {"S": name}},
                UpdateExpression=f"SET {COUNTER_ATTR} = if_not_exists({COUNTER_ATTR}, :zero) + :inc",
                ExpressionAttributeValues={":zero": {"N": "0"}, ":inc": {"N": "1"}},
                ReturnValues="UPDATED_NEW",
            )
        except (ClientError, BotoCoreError) as exc:
            raise CounterError(f"increment {name}: {exc}") from exc

        raw = (resp.get("Attributes") or {}).get(COUNTER_ATTR, {}).get("N")
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise CounterError(f"increment {name}: no {COUNTER_ATTR} in response") from None

    async def ensure_table(self) -> None:
        """Create the counters table (on-demand billing) if it does not exist yet."""
        try:
            await self._ddb.describe_table(TableName=self.table)
            return
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                raise
        await self._ddb.create_table(
            TableName=self.table,
            KeySchema=[{"AttributeName": PARTITION_KEY, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": PARTITION_KEY, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        waiter = self._ddb.get_waiter("table_exists")
        await waiter.wait(TableName=self.table)
        logger.info("Created counters table", extra={"table": self.table})
