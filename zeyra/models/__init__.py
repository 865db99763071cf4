"""Database models."""

from zeyra.models.maternity_unit import MaternityUnit
from zeyra.models.sync_metadata import SyncMetadata, SyncStatus

__all__ = [
    "MaternityUnit",
    "SyncMetadata",
    "SyncStatus",
]
