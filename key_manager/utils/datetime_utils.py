"""Time and masking helpers shared by the services."""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime read from the store to aware UTC.

    SQLite drops tzinfo on DateTime(timezone=True) columns, so naive values
    are taken to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def mask_token(token: Optional[str], prefix: str = "", visible: int = 4) -> str:
    """Mask a secret for logging: keep the fixed prefix and a few characters."""
    if not token:
        return "<empty>"
    keep = len(prefix) + visible if prefix and token.startswith(prefix) else visible
    return f"{token[:keep]}..."
