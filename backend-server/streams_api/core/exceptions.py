"""Error taxonomy of the stream service and its RFC 7807 *Problem Details* shape."""
from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetail(BaseModel):
    """Data model that serialises to RFC 7807 JSON.

    Attributes
    ----------
    type : str
        A URI reference that identifies the problem type.
    title : str
        A short human-readable summary of the problem type.
    status : int
        The HTTP status code.
    detail : str | None
        A human-readable explanation specific to this occurrence.
    instance : str
        A URI reference that identifies the specific occurrence.

    Extension members (``offset``, ``offset_consumed``, ``retryable`` ...) are
    carried as extra fields.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={"required": ["type", "title", "status"]},
    )

    type: str = Field(..., examples=["/errors/allocation-failed"])
    title: str
    status: int = Field(..., ge=400, le=599)
    detail: Optional[str] = None
    instance: str = Field(default_factory=lambda: f"urn:uuid:{uuid4()}")


class StreamsError(Exception):
    """Base class for errors raised by the produce/consume core."""

    status_code: int = 500
    title: str = "Internal Server Error"
    type_: str = "about:blank"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.title)
        self.detail = detail

    def extensions(self) -> Dict[str, Any]:
        return {}

    def to_problem(self) -> ProblemDetail:
        return ProblemDetail(
            type=self.type_,
            title=self.title,
            status=self.status_code,
            detail=self.detail,
            **self.extensions(),
        )


class InvalidRequest(StreamsError):
    """Missing or malformed client input. Not retryable without correction."""

    status_code = 400
    title = "Bad Request"
    type_ = "/errors/invalid-request"


class AllocationFailed(StreamsError):
    """The counter could not hand out an offset. Nothing was written."""

    status_code = 503
    title = "Offset Allocation Failed"
    type_ = "/errors/allocation-failed"

    def __init__(self, topic: str, detail: str | None = None) -> None:
        super().__init__(detail)
        self.topic = topic

    def extensions(self) -> Dict[str, Any]:
        return {"topic": self.topic, "offset_consumed": False, "retryable": True}


class StorageWriteFailed(StreamsError):
    """The body was not persisted after its offset had been allocated.

    The offset is orphaned for good; a retry must be a fresh produce call.
    """

    status_code = 500
    title = "Message Not Persisted"
    type_ = "/errors/storage-write-failed"

    def __init__(self, topic: str, offset: int, detail: str | None = None) -> None:
        super().__init__(detail)
        self.topic = topic
        self.offset = offset

    def extensions(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "offset": self.offset,
            "offset_consumed": True,
            "retryable": True,
        }


class StorageReadFailed(StreamsError):
    """Object store read or listing failed."""

    status_code = 502
    title = "Storage Read Failed"
    type_ = "/errors/storage-read-failed"

    def __init__(self, detail: str | None = None, *, key: str | None = None) -> None:
        super().__init__(detail)
        self.key = key


class MalformedMessage(StreamsError):
    """Stored bytes are not a well-formed message record."""

    status_code = 500
    title = "Malformed Message"
    type_ = "/errors/malformed-message"

    def __init__(self, detail: str | None = None, *, key: str | None = None) -> None:
        super().__init__(detail)
        self.key = key


class CounterError(Exception):
    """Raised by counter adapters when increment-and-get fails."""


class ObjectStoreError(Exception):
    """Raised by object store adapters for any I/O failure."""


class ObjectNotFound(ObjectStoreError):
    """The requested key does not exist."""
