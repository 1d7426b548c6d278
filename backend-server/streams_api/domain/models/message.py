"""Durable message record stored one-object-per-offset."""
from __future__ import annotations

import math
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def check_finite(value: Any) -> Any:
    """Reject NaN/Infinity anywhere in a JSON value; they cannot be stored losslessly."""
    stack = [value]
    while stack:
        v = stack.pop()
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError(f"payload contains non-finite number {v!r}")
        if isinstance(v, dict):
            stack.extend(v.values())
        elif isinstance(v, (list, tuple)):
            stack.extend(v)
    return value


class Message(BaseModel):
    """Immutable view of a produced message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    offset: int = Field(..., ge=1, strict=True, examples=[42])
    payload: Any = Field(..., description="Arbitrary JSON value supplied by the producer")
    timestamp: int = Field(
        ..., ge=0, strict=True,
        description="Server-assigned write time, milliseconds since epoch",
    )

    @field_validator("payload")
    def _finite_payload(cls, v):
        return check_finite(v)


class ConsumeBatch(BaseModel):
    """Messages ascending by offset plus the cursor for the next read."""

    messages: List[Message] = Field(default_factory=list)
    next_offset: int = Field(..., ge=1)
