"""
Administrator registration, login and bearer credential verification.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from key_manager.core.context import AppContext
from key_manager.core.database import is_unique_violation
from key_manager.core.errors import ErrorKind, Result, missing_fields
from key_manager.core.security import dummy_password_hash, hash_password, verify_password
from key_manager.models.admin import Admin

logger = logging.getLogger(__name__)

# Same text for unknown email and wrong password
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."
MISSING_CREDENTIAL_MESSAGE = "Access denied: credential not provided"
INVALID_CREDENTIAL_MESSAGE = "Invalid credential"


@dataclass(frozen=True)
class AdminAccount:
    id: int
    email: str


@dataclass(frozen=True)
class AdminIdentity:
    """Verified claims carried by an admin credential."""
    id: int
    email: str
    expires_at: datetime


@dataclass(frozen=True)
class IssuedCredential:
    credential: str
    token_type: str
    expires_in: int
    expires_at: datetime


class AdminIdentityService:
    """Operator accounts and their signed, short-lived credentials."""

    def __init__(self, context: AppContext):
        self.context = context

    # ==================== REGISTRATION ====================

    def register(self, email: Optional[str], password: Optional[str]) -> Result[AdminAccount]:
        """Store a new administrator with a bcrypt hash of the password."""
        if missing_fields(email=email, password=password):
            return Result.failure(ErrorKind.VALIDATION_ERROR, "Email and password are required.")

        email = email.strip()
        password_hash = hash_password(password, rounds=self.context.bcrypt_rounds)

        try:
            with self.context.unit_of_work() as uow:
                admin = Admin(email=email, password_hash=password_hash)
                uow.session.add(admin)
                uow.session.flush()
                account = AdminAccount(id=admin.id, email=admin.email)
                uow.commit()
        except IntegrityError as e:
            if is_unique_violation(e, "email"):
                logger.warning(f"Admin registration rejected, email already registered: {email}")
                return Result.failure(ErrorKind.DUPLICATE_EMAIL, "Email is already registered.")
            logger.error(f"Integrity error registering admin {email}: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Failed to register admin.")
        except SQLAlchemyError as e:
            logger.error(f"Storage error registering admin {email}: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Failed to register admin.")

        logger.info(f"Admin registered: id={account.id}, email={email}")
        return Result.success(account)

    # ==================== LOGIN ====================

    def authenticate(self, email: Optional[str], password: Optional[str]) -> Result[IssuedCredential]:
        """
        Check an email/password pair and issue a signed credential.

        An unknown email and a wrong password fail identically, and both pay
        for one bcrypt comparison.
        """
        if missing_fields(email=email, password=password):
            return Result.failure(ErrorKind.VALIDATION_ERROR, "Email and password are required.")

        email = email.strip()
        try:
            with self.context.session_factory() as session:
                admin = session.execute(select(Admin).where(Admin.email == email)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Storage error during admin login for {email}: {e}", exc_info=True)
            return Result.failure(ErrorKind.STORAGE_ERROR, "Login failed.")

        if admin is None:
            verify_password(password, dummy_password_hash(self.context.bcrypt_rounds))
            logger.warning(f"Admin login failed for {email}: unknown account")
            return Result.failure(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        if not verify_password(password, admin.password_hash):
            logger.warning(f"Admin login failed for {email}: password mismatch")
            return Result.failure(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        credential = self._issue_credential(admin.id, admin.email)
        logger.info(f"Admin logged in: id={admin.id}")
        return Result.success(credential)

    def _issue_credential(self, admin_id: int, email: str) -> IssuedCredential:
        issued_at = self.context.now()
        expires_at = issued_at + self.context.credential_ttl
        payload = {
            "sub": str(admin_id),
            "id": admin_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self.context.signing_secret, algorithm=self.context.jwt_algorithm)
        return IssuedCredential(
            credential=token,
            token_type="bearer",
            expires_in=int(self.context.credential_ttl.total_seconds()),
            expires_at=expires_at,
        )

    # ==================== VERIFICATION ====================

    def verify(self, credential: Optional[str]) -> Result[AdminIdentity]:
        """
        Check the signature and expiry of a bearer credential.

        Expiry is compared against the context clock rather than inside PyJWT,
        so issuance and verification agree on the current time.
        """
        if credential is None or not credential.strip():
            return Result.failure(ErrorKind.MISSING_CREDENTIAL, MISSING_CREDENTIAL_MESSAGE)

        try:
            claims = jwt.decode(
                credential.strip(),
                self.context.signing_secret,
                algorithms=[self.context.jwt_algorithm],
                options={"require": ["exp", "sub"], "verify_exp": False, "verify_iat": False},
            )
            identity = AdminIdentity(
                id=int(claims["sub"]),
                email=str(claims.get("email", "")),
                expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
            )
        except jwt.PyJWTError as e:
            logger.warning(f"Rejected admin credential: {type(e).__name__}")
            return Result.failure(ErrorKind.INVALID_CREDENTIAL, INVALID_CREDENTIAL_MESSAGE)
        except (TypeError, ValueError):
            logger.warning("Rejected admin credential: malformed claims")
            return Result.failure(ErrorKind.INVALID_CREDENTIAL, INVALID_CREDENTIAL_MESSAGE)

        if self.context.now() >= identity.expires_at:
            logger.warning(f"Rejected expired admin credential for admin id={identity.id}")
            return Result.failure(ErrorKind.INVALID_CREDENTIAL, INVALID_CREDENTIAL_MESSAGE)

        return Result.success(identity)
