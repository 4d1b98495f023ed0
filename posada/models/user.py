"""ORM model for application users."""

from sqlalchemy import Boolean, Column, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from posada.models.base import Base, UTCDateTime, utcnow


class User(Base):
    """User account; soft-deleted users are treated as nonexistent by authentication."""

    __tablename__ = "users"

    username = Column(String(255), primary_key=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password_changed_at = Column(UTCDateTime, nullable=False, default=utcnow)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    role_id = Column(Uuid, ForeignKey("roles.internal_id"), nullable=False, index=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(UTCDateTime, nullable=True)

    role = relationship("Role", lazy="joined")
