from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from streams_api.domain.models.message import Message, check_finite


class ProduceRequest(BaseModel):
    # `payload` must be present; any JSON value (null included) is accepted
    model_config = ConfigDict(extra="ignore")

    payload: Any = Field(...)

    @field_validator("payload")
    def _finite_payload(cls, v):
        # NaN / Infinity would be acknowledged and then persisted as null
        return check_finite(v)


class ProduceResponse(BaseModel):
    topic: str
    offset: int


class ConsumeResponse(BaseModel):
    messages: List[Message]
    next_offset: int


class HealthStatus(BaseModel):
    status: str = "ok"
