"""
Password hashing with bcrypt.
"""
import logging
from functools import lru_cache

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash password using bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against hash. Malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Stored password hash is not a valid bcrypt hash: {e}")
        return False


@lru_cache(maxsize=8)
def dummy_password_hash(rounds: int = 12) -> str:
    """
    Hash checked when the account does not exist, so a lookup miss costs the
    same bcrypt work as a wrong password.
    """
    return hash_password("not-a-real-password", rounds=rounds)
