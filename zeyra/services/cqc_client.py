"""Client for the CQC public API (locations, location detail, changes feed)."""

import logging
from datetime import datetime
from typing import Any

import httpx

from zeyra.config import get_settings
from zeyra.exceptions import ConfigurationError, TransportError, UpstreamError

logger = logging.getLogger(__name__)
settings = get_settings()

CQC_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_cqc_timestamp(value: datetime) -> str:
    """Format a datetime the way the changes feed expects (second precision, Z)."""
    return value.strftime(CQC_TIMESTAMP_FORMAT)


class CQCClient:
    """
    Client for the Care Quality Commission public API.

    Every request carries the subscription key header. Non-2xx answers are
    raised as UpstreamError and network failures as TransportError; the
    client never retries or sleeps on its own, pacing is the caller's job
    (see RequestThrottle).
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = settings.cqc_base_url,
        timeout: float = settings.cqc_timeout_seconds,
    ):
        if not api_key:
            raise ConfigurationError("Missing required CQC API key (CQC_API_KEY)")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.headers: dict[str, str] = {
            "Ocp-Apim-Subscription-Key": api_key,
            "Accept": "application/json",
        }

    async def fetch(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a CQC endpoint and return the decoded JSON body."""
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self.headers, params=params)
                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = e.response.reason_phrase or e.response.text[:200]
            raise UpstreamError(status, message) from e

        except httpx.RequestError as e:
            raise TransportError(f"Request to {url} failed: {e!r}") from e

    async def list_locations(
        self,
        page: int = 1,
        per_page: int = 50,
        regulated_activity: str = settings.maternity_activity,
    ) -> dict[str, Any]:
        """
        Fetch one page of locations offering a regulated activity.

        Returns:
            Listing body with ``total``, ``page``, ``perPage``, ``totalPages``
            and ``locations`` (each carrying ``locationId``).
        """
        params = {
            "regulatedActivity": regulated_activity,
            "perPage": per_page,
            "page": page,
        }
        logger.info(f"Fetching CQC locations: page={page}, perPage={per_page}")
        return await self.fetch("/locations", params)

    async def get_location(self, location_id: str) -> dict[str, Any]:
        """Fetch the full detail payload for one location."""
        return await self.fetch(f"/locations/{location_id}")

    async def list_changes(
        self,
        start: datetime,
        end: datetime,
        page: int = 1,
        per_page: int = settings.changes_per_page,
    ) -> dict[str, Any]:
        """
        Fetch one page of the location changes feed for a time window.

        Returns:
            Changes body with ``totalPages`` and ``changes`` (location ids).
        """
        params = {
            "startTimestamp": format_cqc_timestamp(start),
            "endTimestamp": format_cqc_timestamp(end),
            "perPage": per_page,
            "page": page,
        }
        return await self.fetch("/changes/location", params)
