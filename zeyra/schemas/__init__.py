"""Pydantic schemas for API request/response validation."""

from zeyra.schemas.account import AccountDeletionResponse
from zeyra.schemas.sync import SyncRequest, SyncResult, SyncWindow

__all__ = [
    "AccountDeletionResponse",
    "SyncRequest",
    "SyncResult",
    "SyncWindow",
]
