"""On-store message representation and the storage key scheme.

Keys are ``topics/{topic}/{offset:020d}.json``. Zero-padding to a fixed width
makes lexicographic key order equal to numeric offset order, which is what
lets the consumer range-list a topic without a secondary index.
"""
from __future__ import annotations

from pydantic import ValidationError

from streams_api.core.exceptions import MalformedMessage
from streams_api.domain.models.message import Message

KEY_ROOT = "topics"
KEY_SUFFIX = ".json"
OFFSET_WIDTH = 20
MAX_OFFSET = 10**OFFSET_WIDTH - 1


def topic_prefix(topic: str) -> str:
    """Listing prefix shared by every message of *topic*."""
    return f"{KEY_ROOT}/{topic}/"


def key(topic: str, offset: int) -> str:
    """Storage key of *offset* in *topic*."""
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise TypeError(f"offset must be an int, got {type(offset).__name__}")
    if not 0 <= offset <= MAX_OFFSET:
        raise ValueError(f"offset {offset} outside [0, 10^{OFFSET_WIDTH})")
    return f"{topic_prefix(topic)}{offset:0{OFFSET_WIDTH}d}{KEY_SUFFIX}"


def offset_of(storage_key: str) -> int:
    """Inverse of :func:`key` for the offset part."""
    name = storage_key.rsplit("/", 1)[-1]
    if not name.endswith(KEY_SUFFIX):
        raise ValueError(f"not a message key: {storage_key!r}")
    digits = name[: -len(KEY_SUFFIX)]
    if len(digits) != OFFSET_WIDTH or not digits.isdigit():
        raise ValueError(f"not a message key: {storage_key!r}")
    return int(digits)


def encode(message: Message) -> bytes:
    return message.model_dump_json().encode("utf-8")


def decode(data: bytes, *, storage_key: str | None = None) -> Message:
    """Parse stored bytes; any structural problem raises MalformedMessage."""
    try:
        return Message.model_validate_json(data)
    except (ValidationError, ValueError) as exc:
        raise MalformedMessage(str(exc), key=storage_key) from exc
