"""Database models."""
from key_manager.models.admin import Admin
from key_manager.models.api_key import APIKey, KeyStatus
from key_manager.models.user import User

__all__ = [
    "Admin",
    "APIKey",
    "KeyStatus",
    "User",
]
