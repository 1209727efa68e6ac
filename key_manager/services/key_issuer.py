"""
API key issuance for newly registered users.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from key_manager.core.context import AppContext
from key_manager.core.database import is_unique_violation
from key_manager.core.errors import ErrorKind, Result, missing_fields
from key_manager.models.api_key import APIKey, KeyStatus
from key_manager.models.user import User
from key_manager.utils.datetime_utils import mask_token

logger = logging.getLogger(__name__)

# 16 random bytes -> 32 lowercase hex characters
TOKEN_BYTES = 16


def generate_api_key(prefix: str) -> str:
    """Generate a prefixed random API key with 128 bits of entropy."""
    return f"{prefix}{secrets.token_hex(TOKEN_BYTES)}"


@dataclass(frozen=True)
class IssuedKey:
    token: str
    start: datetime
    expires_at: datetime
    user_id: int


class KeyIssuer:
    """Creates a user together with its API key."""

    def __init__(self, context: AppContext):
        self.context = context

    def issue(self, first_name: str, last_name: str, email: str) -> Result[IssuedKey]:
        """
        Register a user and issue their API key in one transaction.

        The key row is flushed first to obtain its id, then the user row that
        references it. Both are committed together or not at all.

        Args:
            first_name: User's first name
            last_name: User's last name
            email: User's email, unique among users

        Returns:
            Result with the IssuedKey, or a ValidationError, DuplicateEmail
            or StorageError failure
        """
        missing = missing_fields(firstName=first_name, lastName=last_name, email=email)
        if missing:
            return Result.failure(
                ErrorKind.VALIDATION_ERROR,
                f"All fields (firstName, lastName, email) are required. Missing: {', '.join(missing)}",
            )

        first_name, last_name, email = first_name.strip(), last_name.strip(), email.strip()
        token = generate_api_key(self.context.key_prefix)
        start = self.context.now()
        expires_at = start + self.context.key_validity

        try:
            with self.context.unit_of_work() as uow:
                api_key = APIKey(
                    key_value=token,
                    start_date=start,
                    expires_at=expires_at,
                    status=KeyStatus.ACTIVE,
                )
                uow.session.add(api_key)
                uow.session.flush()

                user = User(
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    api_key_id=api_key.id,
                )
                uow.session.add(user)
                uow.session.flush()
                user_id = user.id

                uow.commit()
        except IntegrityError as e:
            if is_unique_violation(e, "email"):
                logger.warning(f"User registration rejected, email already registered: {email}")
                return Result.failure(ErrorKind.DUPLICATE_EMAIL, "Email is already registered.")
            logger.error(f"Integrity error while issuing API key for {email}: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Failed to register user and create API key.")
        except SQLAlchemyError as e:
            logger.error(f"Storage error while issuing API key for {email}: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Failed to register user and create API key.")

        logger.info(
            f"Issued API key {mask_token(token, self.context.key_prefix)} "
            f"for user id={user_id}, expires {expires_at.isoformat()}"
        )
        return Result.success(IssuedKey(token=token, start=start, expires_at=expires_at, user_id=user_id))
