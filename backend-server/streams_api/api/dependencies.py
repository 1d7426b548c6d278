"""Global reusable FastAPI dependencies (services, path validation)."""
import re

from fastapi import Path, Request

from streams_api.core.exceptions import InvalidRequest
from streams_api.domain.services.consumer import Consumer
from streams_api.domain.services.producer import Producer

TOPIC_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")
TOPIC_MAX_LEN = 249


def get_producer(request: Request) -> Producer:
    """Producer built once in the app lifespan."""
    return request.app.state.producer


def get_consumer(request: Request) -> Consumer:
    """Consumer built once in the app lifespan."""
    return request.app.state.consumer


def valid_topic(topic: str = Path(..., description="Topic name")) -> str:
    """Reject names that would escape the topic's key prefix."""
    if not topic or len(topic) > TOPIC_MAX_LEN or not TOPIC_PATTERN.match(topic):
        raise InvalidRequest(f"invalid topic name {topic!r}")
    return topic
