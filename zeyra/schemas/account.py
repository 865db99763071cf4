"""Pydantic schemas for account deletion."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AccountDeletionResponse(BaseModel):
    """Outcome of an account deletion request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    code: str
    message: str | None = None
    user_id: str | None = None
