"""Schemas for API key validation."""
from datetime import datetime
from typing import Optional

from key_manager.models.api_key import KeyStatus
from key_manager.schemas.base import CamelModel


class ValidateKeyRequest(CamelModel):
    api_key_to_validate: Optional[str] = None


class KeyValidationResponse(CamelModel):
    """Validation verdict; status and expires are only set where relevant."""
    valid: bool
    message: str
    verdict: str
    status: Optional[KeyStatus] = None
    expires: Optional[datetime] = None
