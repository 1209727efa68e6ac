"""Schemas for administrator registration and login."""
from typing import Optional

from pydantic import Field

from key_manager.schemas.base import CamelModel


class AdminCredentialsRequest(CamelModel):
    """Email/password body shared by admin register and login."""
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class AdminRegisterResponse(CamelModel):
    message: str
    id: int
    email: str


class AdminLoginResponse(CamelModel):
    credential: str
    token: str  # Same value as credential
    token_type: str = "bearer"
    expires_in: int
    message: str
