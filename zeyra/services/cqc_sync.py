"""CQC maternity sync: paged full backfill and watermark-driven incremental sync."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from zeyra.config import get_settings
from zeyra.exceptions import StorageError
from zeyra.models import SyncStatus
from zeyra.schemas.sync import SyncResult, SyncWindow, clamp_per_page
from zeyra.services.cqc_client import CQCClient, format_cqc_timestamp
from zeyra.services.throttle import RequestThrottle
from zeyra.services.transform import transform_location
from zeyra.services.unit_repository import MaternityUnitRepository
from zeyra.services.watermark import SyncWatermarkStore

logger = logging.getLogger(__name__)
settings = get_settings()


def _truncate_to_second(value: datetime) -> datetime:
    return value.replace(microsecond=0)


class CQCSyncService:
    """
    Drives the CQC client and writes maternity units through to storage.

    Features:
    - Batch mode: one page of the maternity location listing per call,
      the caller walks pages using ``next_page``
    - Incremental mode: changes feed over ``[watermark, now)``, limited to
      units already tracked locally
    - Per-location failures are collected in ``errors`` and never abort a pass
    """

    def __init__(
        self,
        db: AsyncSession,
        cqc_client: CQCClient,
        throttle: RequestThrottle | None = None,
        watermark_store: SyncWatermarkStore | None = None,
        repository: MaternityUnitRepository | None = None,
    ):
        self.db = db
        self.cqc_client = cqc_client
        self.throttle = throttle or RequestThrottle.from_milliseconds(
            settings.cqc_request_delay_ms
        )
        self.watermarks = watermark_store or SyncWatermarkStore(db)
        self.units = repository or MaternityUnitRepository(db)

    async def _fetch_and_transform(
        self, location_ids: list[str], result: SyncResult
    ) -> list[dict[str, Any]]:
        """Fetch each location's detail in turn; failures go to result.errors."""
        records: list[dict[str, Any]] = []

        for location_id in location_ids:
            try:
                await self.throttle.wait()
                detail = await self.cqc_client.get_location(location_id)
                if not isinstance(detail, dict):
                    raise ValueError(
                        f"unexpected detail payload ({type(detail).__name__})"
                    )
                if not detail.get("locationId"):
                    detail = {**detail, "locationId": location_id}

                records.append(transform_location(detail))
                result.processed_in_batch += 1
            except Exception as e:
                error_msg = f"Error fetching location {location_id}: {e}"
                logger.error(error_msg)
                result.errors.append(error_msg)

        return records

    async def _upsert(self, records: list[dict[str, Any]], result: SyncResult) -> None:
        """Upsert the accumulated batch; a storage failure is reported, not raised."""
        if not records:
            return

        logger.info(f"Upserting {len(records)} records to database...")
        try:
            ids = await self.units.upsert_units(records)
        except StorageError as e:
            error_msg = f"Database upsert error: {e}"
            logger.error(error_msg)
            result.errors.append(error_msg)
            return

        result.upserted_in_batch = len(ids)
        logger.info(f"Successfully upserted {result.upserted_in_batch} records")

    async def sync_batch(self, page: int = 1, per_page: int = 50) -> SyncResult:
        """
        Sync one page of the maternity location listing.

        Args:
            page: 1-based page of the listing endpoint
            per_page: Page size, clamped to [1, max_per_page]

        Returns:
            SyncResult with pagination cursor (next_page / is_complete)
        """
        page = max(page, 1)
        per_page = clamp_per_page(per_page)
        result = SyncResult(
            mode="batch",
            page=page,
            per_page=per_page,
            total_pages=0,
            total_locations=0,
        )

        try:
            logger.info(f"Starting batch sync for page {page} (perPage: {per_page})...")

            await self.throttle.wait()
            listing = await self.cqc_client.list_locations(
                page=page,
                per_page=per_page,
                regulated_activity=settings.maternity_activity,
            )

            total_pages = int(listing.get("totalPages") or 0)
            result.total_pages = total_pages
            result.total_locations = int(listing.get("total") or 0)

            location_ids = [
                loc["locationId"]
                for loc in listing.get("locations") or []
                if isinstance(loc, dict) and loc.get("locationId")
            ]
            logger.info(
                f"Page {page}/{total_pages}: Found {len(location_ids)} locations to process"
            )

            records = await self._fetch_and_transform(location_ids, result)
            await self._upsert(records, result)

            if page < total_pages:
                result.next_page = page + 1
                result.is_complete = False
            else:
                result.next_page = None
                result.is_complete = True

            result.success = not result.errors
            logger.info(
                f"Batch {page} complete. Processed: {result.processed_in_batch}, "
                f"Upserted: {result.upserted_in_batch}, Errors: {len(result.errors)}"
            )

        except Exception as e:
            error_msg = f"Fatal batch error: {e}"
            logger.error(error_msg, exc_info=True)
            result.errors.append(error_msg)
            result.success = False

        return result

    async def _collect_changed_ids(self, start: datetime, end: datetime) -> list[str]:
        """Walk every page of the changes feed for the window."""
        changed_ids: list[str] = []
        page = 1
        total_pages = 1

        while page <= total_pages:
            await self.throttle.wait()
            response = await self.cqc_client.list_changes(
                start=start,
                end=end,
                page=page,
                per_page=settings.changes_per_page,
            )
            changed_ids.extend(response.get("changes") or [])
            total_pages = int(response.get("totalPages") or 0)
            logger.info(
                f"Fetched changes page {page}/{total_pages}, IDs so far: {len(changed_ids)}"
            )
            page += 1

        return changed_ids

    async def _finish_window(self, end: datetime, status: SyncStatus, count: int) -> None:
        try:
            await self.watermarks.record_success(end, status, count)
        except StorageError as e:
            logger.error(f"Failed to insert sync metadata: {e}")

    async def sync_incremental(self, now: datetime | None = None) -> SyncResult:
        """
        Sync units changed since the last successful watermark.

        The watermark advances to the window end whenever the upsert phase
        was reached, even with per-location errors. A failure before that
        point records a ``failed`` attempt so the next run retries the same
        window.

        Args:
            now: Window end override (defaults to the current time)

        Returns:
            SyncResult with the window and change counters
        """
        result = SyncResult(
            mode="incremental",
            changed_ids_from_cqc=0,
            matched_maternity_units=0,
        )

        try:
            logger.info("Starting incremental sync...")

            # Step 1: resolve the window
            end = _truncate_to_second(now or datetime.now(UTC))
            start = _truncate_to_second(await self.watermarks.latest_successful_watermark(now=end))
            result.sync_window = SyncWindow(
                start=format_cqc_timestamp(start),
                end=format_cqc_timestamp(end),
            )
            logger.info(f"Sync window: {result.sync_window.start} to {result.sync_window.end}")

            # Step 2: everything the regulator changed in the window
            changed_ids = await self._collect_changed_ids(start, end)
            result.changed_ids_from_cqc = len(changed_ids)
            logger.info(f"Total changed location IDs from CQC: {len(changed_ids)}")

            if not changed_ids:
                logger.info("No changes found. Updating sync timestamp.")
                result.success = True
                result.is_complete = True
                await self._finish_window(end, SyncStatus.SUCCESS, 0)
                return result

            # Step 3: the feed covers every location; keep the ones we track
            tracked_ids = await self.units.existing_location_ids(changed_ids)
            result.matched_maternity_units = len(tracked_ids)
            logger.info(f"Filtered to {len(tracked_ids)} maternity units that changed")

            if not tracked_ids:
                logger.info("No maternity unit changes. Updating sync timestamp.")
                result.success = True
                result.is_complete = True
                await self._finish_window(end, SyncStatus.SUCCESS, 0)
                return result

        except Exception as e:
            error_msg = f"Fatal incremental sync error: {e}"
            logger.error(error_msg, exc_info=True)
            result.errors.append(error_msg)
            # A failed statement can leave the transaction aborted
            await self.db.rollback()
            try:
                await self.watermarks.record_failure(SyncStatus.FAILED, error_msg)
            except StorageError as store_error:
                logger.error(f"Failed to insert sync metadata: {store_error}")
            return result

        # Steps 4-5: fetch, transform, upsert (failures contained)
        records = await self._fetch_and_transform(tracked_ids, result)
        await self._upsert(records, result)

        # Step 6: the window is consumed once the upsert has been attempted
        status = SyncStatus.SUCCESS if not result.errors else SyncStatus.COMPLETED_WITH_ERRORS
        await self._finish_window(end, status, result.upserted_in_batch)

        result.success = not result.errors
        result.is_complete = True
        logger.info(
            f"Incremental sync complete. Updated: {result.upserted_in_batch}, "
            f"Errors: {len(result.errors)}"
        )
        return result
