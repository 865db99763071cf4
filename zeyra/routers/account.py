"""Account deletion endpoint (forwards to Supabase Auth)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from zeyra.config import get_settings
from zeyra.exceptions import ConfigurationError, IdentityProviderError
from zeyra.schemas.account import AccountDeletionResponse
from zeyra.services.identity import SupabaseAuthClient

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/account", tags=["account"])

BEARER_PREFIX = "Bearer "


def get_auth_client() -> SupabaseAuthClient | None:
    """Build the auth client, or None when Supabase is not configured."""
    try:
        return SupabaseAuthClient(
            url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            service_role_key=settings.supabase_service_role_key,
        )
    except ConfigurationError:
        return None


def _respond(status_code: int, success: bool, code: str, **fields) -> JSONResponse:
    payload = AccountDeletionResponse(success=success, code=code, **fields)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(by_alias=True, exclude_none=True),
    )


@router.post("/delete", response_model=AccountDeletionResponse)
async def delete_account(
    request: Request,
    auth_client: Annotated[SupabaseAuthClient | None, Depends(get_auth_client)],
    authorization: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """
    Delete the calling user's account.

    The caller's access token is verified with Supabase Auth, then the user
    is removed with the service role key. An optional body of
    ``{"confirmDeletion": false}`` aborts the request.
    """
    if not authorization:
        return _respond(
            401, False, "missing_authorization", message="Authorization header is required."
        )

    access_token = authorization.removeprefix(BEARER_PREFIX)

    if auth_client is None:
        return _respond(
            500, False, "missing_env", message="Supabase environment variables are missing."
        )

    # Body is optional; missing or invalid JSON does not block deletion.
    try:
        body = await request.json()
    except ValueError:
        body = {}

    if isinstance(body, dict) and body.get("confirmDeletion") is False:
        return _respond(
            400, False, "confirmation_required", message="confirmDeletion must be true."
        )

    try:
        try:
            user = await auth_client.get_user(access_token)
        except IdentityProviderError as e:
            return _respond(401, False, "invalid_token", message=e.message)

        try:
            await auth_client.delete_user(user["id"])
        except IdentityProviderError as e:
            logger.error(f"Account deletion failed for {user['id']}: {e.message}")
            return _respond(500, False, "delete_failed", message=e.message)

    except Exception as e:
        logger.error(f"Account deletion error: {e}", exc_info=True)
        return _respond(500, False, "unexpected_error", message=str(e))

    return _respond(200, True, "deleted", user_id=user["id"])
