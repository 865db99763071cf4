"""Append-only watermark log for incremental CQC syncs."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zeyra.config import get_settings
from zeyra.exceptions import StorageError
from zeyra.models import SyncMetadata, SyncStatus

logger = logging.getLogger(__name__)
settings = get_settings()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SyncWatermarkStore:
    """
    Reads and appends sync_metadata rows.

    Only inserts are issued. The resume point is the latest
    ``succeeded_through`` among rows whose status is exactly ``success``;
    a crash mid-run leaves no row, which resumes like a failed run.
    """

    def __init__(
        self,
        db: AsyncSession,
        default_lookback: timedelta = timedelta(hours=settings.incremental_lookback_hours),
    ):
        self.db = db
        self.default_lookback = default_lookback

    async def latest_successful_watermark(self, now: datetime | None = None) -> datetime:
        """Get the resume point, or ``now - default_lookback`` if none exists."""
        try:
            result = await self.db.execute(
                select(SyncMetadata.succeeded_through)
                .where(
                    SyncMetadata.status == SyncStatus.SUCCESS.value,
                    SyncMetadata.succeeded_through.is_not(None),
                )
                .order_by(SyncMetadata.succeeded_through.desc())
                .limit(1)
            )
            succeeded_through = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to get sync metadata: {e}") from e

        if succeeded_through is None:
            return (now or datetime.now(UTC)) - self.default_lookback
        return _as_utc(succeeded_through)

    async def record_success(
        self,
        succeeded_through: datetime,
        status: SyncStatus,
        count: int,
    ) -> None:
        """Append an attempt that consumed the window ending at succeeded_through."""
        if status == SyncStatus.FAILED:
            raise ValueError("record_success cannot store a failed attempt")

        await self._append(
            SyncMetadata(
                succeeded_through=succeeded_through,
                status=status.value,
                record_count=count,
                error_detail=None,
            )
        )

    async def record_failure(self, status: SyncStatus, error_detail: str) -> None:
        """Append a failed attempt; succeeded_through is always NULL."""
        await self._append(
            SyncMetadata(
                succeeded_through=None,
                status=status.value,
                record_count=0,
                error_detail=error_detail,
            )
        )

    async def latest_attempt(self) -> SyncMetadata | None:
        result = await self.db.execute(
            select(SyncMetadata).order_by(SyncMetadata.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def _append(self, entry: SyncMetadata) -> None:
        entry.attempted_at = datetime.now(UTC)
        try:
            self.db.add(entry)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to insert sync metadata: {e}") from e

        logger.info(
            f"Recorded sync attempt: status={entry.status}, "
            f"succeeded_through={entry.succeeded_through}, count={entry.record_count}"
        )
