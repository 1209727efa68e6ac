"""
API key validation.

Validity is decided on every call from the stored status and expiry. Reads
never write back: a key past its expiry keeps status Active in storage.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from key_manager.core.context import AppContext
from key_manager.core.errors import ErrorKind, Result
from key_manager.models.api_key import APIKey, KeyStatus
from key_manager.utils.datetime_utils import ensure_utc, mask_token

logger = logging.getLogger(__name__)


class KeyVerdict(str, enum.Enum):
    """Outcome of validating a key."""
    VALID = "Valid"
    KEY_NOT_FOUND = "KeyNotFound"
    KEY_STATUS_INVALID = "KeyStatusInvalid"
    KEY_EXPIRED = "KeyExpired"


@dataclass(frozen=True)
class KeyValidation:
    valid: bool
    verdict: KeyVerdict
    message: str
    status: Optional[KeyStatus] = None
    expires_at: Optional[datetime] = None


class KeyValidator:
    """Checks presented tokens against stored keys."""

    def __init__(self, context: AppContext):
        self.context = context

    def validate(self, token: Optional[str]) -> Result[KeyValidation]:
        """
        Validate an API key token.

        Checks run in order and the first match wins: unknown token, status
        other than Active, past expiry. Anything else is valid.

        Returns:
            Result with a KeyValidation verdict, or ValidationError (blank
            token) / StorageError (lookup failed)
        """
        if token is None or not str(token).strip():
            return Result.failure(ErrorKind.VALIDATION_ERROR, "API key is required")

        try:
            with self.context.session_factory() as session:
                row = session.execute(
                    select(APIKey.status, APIKey.expires_at).where(APIKey.key_value == token)
                ).first()
        except SQLAlchemyError as e:
            logger.error(f"Storage error while validating API key: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Failed to validate API key against the database")

        masked = mask_token(token, self.context.key_prefix)

        if row is None:
            logger.warning(f"API key not found: {masked}")
            return Result.success(
                KeyValidation(valid=False, verdict=KeyVerdict.KEY_NOT_FOUND, message="API key not found")
            )

        status = KeyStatus(row.status)
        expires_at = ensure_utc(row.expires_at)

        if status != KeyStatus.ACTIVE:
            logger.warning(f"API key {masked} rejected with status {status.value}")
            return Result.success(
                KeyValidation(
                    valid=False,
                    verdict=KeyVerdict.KEY_STATUS_INVALID,
                    message=f"API key {status.value.lower()}. Access denied.",
                    status=status,
                )
            )

        if self.context.now() > expires_at:
            logger.warning(f"API key {masked} expired at {expires_at.isoformat()}")
            return Result.success(
                KeyValidation(
                    valid=False,
                    verdict=KeyVerdict.KEY_EXPIRED,
                    message="API key expired",
                    status=status,
                    expires_at=expires_at,
                )
            )

        logger.debug(f"API key {masked} is valid")
        return Result.success(
            KeyValidation(
                valid=True,
                verdict=KeyVerdict.VALID,
                message="API key is valid and active",
                status=status,
                expires_at=expires_at,
            )
        )
