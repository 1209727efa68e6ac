"""
Protected listing of users joined to their API keys.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from key_manager.core.context import AppContext
from key_manager.core.errors import ErrorKind, Result
from key_manager.models.api_key import APIKey, KeyStatus
from key_manager.models.user import User
from key_manager.utils.datetime_utils import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserWithKey:
    user_id: int
    first_name: str
    last_name: str
    email: str
    key_token: str
    start: datetime
    expiry: datetime
    status: KeyStatus


class UserListingService:
    """Read-only view over users and their keys for administrators."""

    def __init__(self, context: AppContext):
        self.context = context

    def list_users_with_keys(self) -> Result[List[UserWithKey]]:
        """Return one row per user with its key fields, ordered by user id."""
        query = (
            select(
                User.id,
                User.first_name,
                User.last_name,
                User.email,
                APIKey.key_value,
                APIKey.start_date,
                APIKey.expires_at,
                APIKey.status,
            )
            .join(APIKey, User.api_key_id == APIKey.id)
            .order_by(User.id)
        )

        try:
            with self.context.session_factory() as session:
                rows = session.execute(query).all()
        except SQLAlchemyError as e:
            logger.error(f"Storage error while listing users: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Failed to retrieve users")

        items = [
            UserWithKey(
                user_id=row.id,
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                key_token=row.key_value,
                start=ensure_utc(row.start_date),
                expiry=ensure_utc(row.expires_at),
                status=KeyStatus(row.status),
            )
            for row in rows
        ]
        logger.info(f"Listed {len(items)} users with keys")
        return Result.success(items)
