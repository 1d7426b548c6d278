# streams_api/api/topics.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from streams_api.api.dependencies import get_consumer, get_producer, valid_topic
from streams_api.domain.services.consumer import Consumer
from streams_api.domain.services.producer import Producer
from streams_api.models.messages import ConsumeResponse, ProduceRequest, ProduceResponse

router = APIRouter(prefix="/topics", tags=["topics"])


@router.post("/{topic}/produce", response_model=ProduceResponse)
async def produce(
    body: ProduceRequest,
    topic: str = Depends(valid_topic),
    producer: Producer = Depends(get_producer),
):
    """
    Append `body.payload` to *topic*. Returns only after the message is stored.
    """
    message = await producer.produce(topic, body.payload)
    return ProduceResponse(topic=topic, offset=message.offset)


@router.get("/{topic}/consume", response_model=ConsumeResponse)
async def consume(
    topic: str = Depends(valid_topic),
    offset: int = Query(1, ge=1, description="First offset to read"),
    limit: Optional[int] = Query(None, ge=1, description="Max messages; values above the cap are clamped"),
    consumer: Consumer = Depends(get_consumer),
):
    """
    Read up to *limit* messages from *offset*. An empty read returns the same
    offset as `next_offset`.
    """
    batch = await consumer.consume(topic, start_offset=offset, limit=limit)
    return ConsumeResponse(messages=batch.messages, next_offset=batch.next_offset)
