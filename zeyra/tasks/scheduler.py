"""Background scheduler for the daily incremental CQC sync."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from zeyra.config import get_settings
from zeyra.database import async_session_maker
from zeyra.services.cqc_client import CQCClient
from zeyra.services.cqc_sync import CQCSyncService

logger = logging.getLogger(__name__)
settings = get_settings()

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


async def incremental_sync_job() -> None:
    """Background job running one incremental CQC sync."""
    logger.info("Starting scheduled incremental CQC sync")
    try:
        async with async_session_maker() as db:
            service = CQCSyncService(db, CQCClient(api_key=settings.cqc_api_key))
            result = await service.sync_incremental()

        if result.success:
            logger.info(
                f"Incremental sync complete: {result.upserted_in_batch} units updated "
                f"({result.changed_ids_from_cqc} changed upstream)"
            )
        else:
            logger.warning(
                f"Incremental sync finished with {len(result.errors)} errors: {result.errors[:5]}"
            )
    except Exception as e:
        logger.error(f"Incremental sync failed: {e}", exc_info=True)


def setup_scheduler() -> AsyncIOScheduler | None:
    """Set up and start the scheduler, unless incremental sync is disabled."""
    global scheduler

    if not settings.incremental_sync_enabled:
        logger.info("Scheduled incremental sync is disabled")
        return None
    if not settings.cqc_api_key:
        logger.warning("CQC_API_KEY is not set; scheduled incremental sync not started")
        return None

    scheduler = AsyncIOScheduler()

    # Daily, one run at a time within this process
    scheduler.add_job(
        incremental_sync_job,
        trigger=CronTrigger(
            hour=settings.incremental_sync_hour,
            minute=settings.incremental_sync_minute,
            timezone="UTC",
        ),
        id="cqc_incremental_sync",
        name="Incremental CQC maternity sync",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started")

    return scheduler


def shutdown_scheduler() -> None:
    """Shut down the scheduler gracefully."""
    global scheduler

    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
        scheduler = None
