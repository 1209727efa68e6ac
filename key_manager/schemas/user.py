"""Schemas for user registration and the admin user listing."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from key_manager.models.api_key import KeyStatus
from key_manager.schemas.base import CamelModel


class UserRegisterRequest(CamelModel):
    """
    Request schema for registering a user.

    Fields are optional here so that missing values reach the issuer and are
    reported as a 400 ValidationError rather than a schema error.
    """
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)


class UserRegisterResponse(CamelModel):
    message: str
    api_key: str
    expires: datetime


class UserWithKeyResponse(CamelModel):
    """One row of GET /admin/users."""
    user_id: int
    first_name: str
    last_name: str
    email: str
    key_token: str
    start: datetime
    expiry: datetime
    status: KeyStatus
