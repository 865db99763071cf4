"""Storage access for maternity_units."""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zeyra.exceptions import StorageError
from zeyra.models import MaternityUnit

logger = logging.getLogger(__name__)

# Keep IN (...) parameter lists well below driver limits
LOOKUP_CHUNK_SIZE = 500


class MaternityUnitRepository:
    """Keyed upsert and key-set lookup on maternity_units."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(MaternityUnit)
        return postgresql.insert(MaternityUnit)

    async def upsert_units(self, records: Sequence[dict[str, Any]]) -> list[int]:
        """
        Insert or update units keyed on cqc_location_id in one statement.

        Returns:
            Ids of the affected rows
        """
        if not records:
            return []

        # A statement may touch each key only once; the last payload wins.
        rows = list({record["cqc_location_id"]: record for record in records}.values())

        stmt = self._insert().values(rows)
        update_columns = {
            key: stmt.excluded[key] for key in rows[0] if key != "cqc_location_id"
        }
        stmt = stmt.on_conflict_do_update(
            index_elements=["cqc_location_id"],
            set_=update_columns,
        ).returning(MaternityUnit.id)

        try:
            result = await self.db.execute(stmt)
            ids = list(result.scalars().all())
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(str(e)) from e

        logger.info(f"Upserted {len(ids)} maternity units")
        return ids

    async def existing_location_ids(self, location_ids: Iterable[str]) -> list[str]:
        """Return the subset of location ids that already have a row."""
        unique_ids = list(dict.fromkeys(location_ids))
        found: list[str] = []

        try:
            for i in range(0, len(unique_ids), LOOKUP_CHUNK_SIZE):
                chunk = unique_ids[i:i + LOOKUP_CHUNK_SIZE]
                result = await self.db.execute(
                    select(MaternityUnit.cqc_location_id).where(
                        MaternityUnit.cqc_location_id.in_(chunk)
                    )
                )
                found.extend(result.scalars().all())
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Failed to check existing units: {e}") from e

        return found

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(MaternityUnit.id)))
        return result.scalar() or 0
