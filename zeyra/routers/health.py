"""Health and readiness endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from zeyra.database import get_db
from zeyra.services.unit_repository import MaternityUnitRepository
from zeyra.services.watermark import SyncWatermarkStore

router = APIRouter(tags=["health"])


class SyncAttemptStatus(BaseModel):
    """Most recent incremental sync attempt."""

    status: str
    attempted_at: datetime
    succeeded_through: datetime | None = None
    record_count: int
    error_detail: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    maternity_units: int
    last_sync: SyncAttemptStatus | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """
    Health check endpoint with sync status.

    Returns the tracked unit count and the latest sync attempt.
    """
    unit_count = await MaternityUnitRepository(db).count()
    attempt = await SyncWatermarkStore(db).latest_attempt()

    last_sync = None
    if attempt is not None:
        last_sync = SyncAttemptStatus(
            status=attempt.status,
            attempted_at=attempt.attempted_at,
            succeeded_through=attempt.succeeded_through,
            record_count=attempt.record_count,
            error_detail=attempt.error_detail,
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        maternity_units=unit_count,
        last_sync=last_sync,
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}
