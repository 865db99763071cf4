"""HTTP trigger for the CQC maternity sync job."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from zeyra.config import get_settings
from zeyra.database import get_db
from zeyra.rate_limit import limiter
from zeyra.schemas.sync import SyncRequest, SyncResult
from zeyra.services.cqc_client import CQCClient
from zeyra.services.cqc_sync import CQCSyncService

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["sync"])


def require_authorization(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject trigger calls that carry no Authorization header."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization")


def get_cqc_client() -> CQCClient:
    """Build the CQC client from settings; raises ConfigurationError without a key."""
    return CQCClient(api_key=settings.cqc_api_key)


async def _read_sync_request(request: Request) -> SyncRequest:
    """Decode the trigger body; a missing or invalid body means defaults."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    return SyncRequest.from_payload(payload)


@router.post(
    "/sync-cqc-maternity",
    response_model=SyncResult,
    dependencies=[Depends(require_authorization)],
)
@limiter.limit(settings.sync_rate_limit)
async def trigger_cqc_sync(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    cqc_client: Annotated[CQCClient, Depends(get_cqc_client)],
) -> JSONResponse:
    """
    Run one CQC sync invocation.

    Body: ``{"mode": "batch" | "incremental", "page": 1, "perPage": 50}``.

    - batch: syncs one listing page, the caller walks ``nextPage`` until
      ``isComplete``
    - incremental: syncs units changed since the last successful run

    A call without an Authorization header is rejected with 401.
    Responds 200 when the pass had no errors and 207 when some locations
    failed. Missing configuration or an unexpected failure responds 500.
    """
    sync_request = await _read_sync_request(request)
    logger.info(
        f"CQC sync triggered: mode={sync_request.mode}, "
        f"page={sync_request.page}, perPage={sync_request.per_page}"
    )

    service = CQCSyncService(db, cqc_client)
    try:
        if sync_request.mode == "incremental":
            result = await service.sync_incremental()
        else:
            result = await service.sync_batch(sync_request.page, sync_request.per_page)
    except Exception as e:
        logger.error(f"CQC sync handler error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e), "errors": [str(e)]})

    return JSONResponse(
        status_code=result.http_status,
        content=result.model_dump(mode="json", by_alias=True),
    )
