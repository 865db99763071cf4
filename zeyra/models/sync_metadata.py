"""SyncMetadata model: append-only log of incremental sync attempts."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from zeyra.database import Base


class SyncStatus(str, enum.Enum):
    """Outcome of one sync attempt."""

    SUCCESS = "success"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    FAILED = "failed"


class SyncMetadata(Base):
    """
    One row per incremental sync invocation. Rows are never updated.

    ``succeeded_through`` is the end of the window that was consumed, and is
    NULL for failed attempts so that they can never become the resume point.
    """

    __tablename__ = "sync_metadata"

    id: Mapped[int] = mapped_column(primary_key=True)
    attempted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    succeeded_through: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    record_count: Mapped[int] = mapped_column(Integer, server_default="0", nullable=False)
    error_detail: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("idx_sync_metadata_status_through", status, succeeded_through.desc()),
    )

    def __repr__(self) -> str:
        return f"<SyncMetadata {self.status}: {self.succeeded_through}>"
