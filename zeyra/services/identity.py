"""Supabase Auth client used by the account deletion endpoint."""

import logging
from typing import Any

import httpx

from zeyra.exceptions import ConfigurationError, IdentityProviderError, TransportError

logger = logging.getLogger(__name__)


class SupabaseAuthClient:
    """Verifies a user's access token and deletes users via the admin API."""

    def __init__(
        self,
        url: str | None,
        anon_key: str | None,
        service_role_key: str | None,
        timeout: float = 15.0,
    ):
        if not url or not anon_key or not service_role_key:
            raise ConfigurationError("Supabase environment variables are missing.")

        self.base_url = url.rstrip("/")
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self.timeout = timeout

    async def _request(self, method: str, path: str, headers: dict[str, str]) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, url, headers=headers)
        except httpx.RequestError as e:
            raise TransportError(f"Request to {url} failed: {e!r}") from e

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            return body.get("msg") or body.get("message") or body.get("error_description") or fallback
        return fallback

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """Resolve the user that owns an access token."""
        response = await self._request(
            "GET",
            "/auth/v1/user",
            {
                "apikey": self.anon_key,
                "Authorization": f"Bearer {access_token}",
            },
        )
        if response.status_code != 200:
            raise IdentityProviderError(
                response.status_code,
                self._error_message(response, "Could not verify authenticated user."),
            )

        user = response.json()
        if not isinstance(user, dict) or not user.get("id"):
            raise IdentityProviderError(None, "Could not verify authenticated user.")
        return user

    async def delete_user(self, user_id: str) -> None:
        """Delete a user with the service role key."""
        response = await self._request(
            "DELETE",
            f"/auth/v1/admin/users/{user_id}",
            {
                "apikey": self.service_role_key,
                "Authorization": f"Bearer {self.service_role_key}",
            },
        )
        if response.status_code not in (200, 204):
            raise IdentityProviderError(
                response.status_code,
                self._error_message(response, f"Delete failed with status {response.status_code}"),
            )
        logger.info(f"Deleted auth user {user_id}")
