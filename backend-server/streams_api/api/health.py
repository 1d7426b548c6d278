from __future__ import annotations
from fastapi import APIRouter
from streams_api.models.messages import HealthStatus

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthStatus)
def health():
    # Liveness only; does not touch the counter or the object store
    return HealthStatus(status="ok")
