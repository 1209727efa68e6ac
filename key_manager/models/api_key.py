"""API key database model."""
import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship

from key_manager.core.database import Base


class KeyStatus(str, enum.Enum):
    """Lifecycle status of an issued key."""
    ACTIVE = "Active"
    REVOKED = "Revoked"
    EXPIRED = "Expired"


class APIKey(Base):
    """Issued API key. Owned by exactly one user."""
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    key_value = Column(String(64), unique=True, nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    # Stored as the literal values ("Active", "Revoked", "Expired"); anything else
    # is rejected on write (CHECK constraint where the backend has no native enum)
    status = Column(
        Enum(
            KeyStatus,
            name="key_status",
            values_callable=lambda statuses: [s.value for s in statuses],
            create_constraint=True,
        ),
        nullable=False,
        default=KeyStatus.ACTIVE,
    )

    user = relationship("User", back_populates="api_key", uselist=False)
