"""Pydantic schemas for the CQC sync trigger."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from zeyra.config import get_settings

settings = get_settings()

SyncMode = Literal["batch", "incremental"]


def clamp_per_page(value: int | None) -> int:
    """Falsy values fall back to the default; everything else lands in [1, max]."""
    if not value:
        return settings.default_per_page
    return max(1, min(value, settings.max_per_page))


class SyncRequest(BaseModel):
    """Body of a sync trigger request. Unknown modes run a batch."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    mode: SyncMode = "batch"
    page: int = 1
    per_page: int = Field(default=settings.default_per_page)

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> str:
        return "incremental" if value == "incremental" else "batch"

    @field_validator("page", mode="before")
    @classmethod
    def _normalize_page(cls, value: Any) -> int:
        try:
            page = int(value or 1)
        except (TypeError, ValueError):
            return 1
        return max(page, 1)

    @field_validator("per_page", mode="before")
    @classmethod
    def _normalize_per_page(cls, value: Any) -> int:
        try:
            return clamp_per_page(int(value or 0))
        except (TypeError, ValueError):
            return settings.default_per_page

    @classmethod
    def from_payload(cls, payload: Any) -> "SyncRequest":
        """Build a request from a decoded JSON body, ignoring non-object bodies."""
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)


class SyncWindow(BaseModel):
    """Time window consumed by an incremental run."""

    start: str
    end: str


class SyncResult(BaseModel):
    """Outcome of one batch or incremental sync invocation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = False
    mode: SyncMode
    page: int | None = None
    per_page: int | None = None
    total_pages: int | None = None
    total_locations: int | None = None
    processed_in_batch: int = 0
    upserted_in_batch: int = 0
    errors: list[str] = Field(default_factory=list)
    next_page: int | None = None
    is_complete: bool = False

    # Incremental only
    changed_ids_from_cqc: int | None = Field(default=None, alias="changedIdsFromCQC")
    matched_maternity_units: int | None = None
    sync_window: SyncWindow | None = None

    @property
    def http_status(self) -> int:
        """200 when fully successful, 207 (multi-status) otherwise."""
        return 200 if self.success else 207
