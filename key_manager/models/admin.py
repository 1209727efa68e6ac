"""Administrator database model."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from key_manager.core.database import Base


class Admin(Base):
    """Operator account used to inspect users and keys."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)  # bcrypt hash, never the raw password
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
