"""ORM model for refresh sessions."""

from sqlalchemy import Boolean, Column, ForeignKey, String, Text, Uuid

from posada.models.base import Base, UTCDateTime, utcnow


class Session(Base):
    """
    Server-side record binding one refresh token, keyed by the token's id.

    Created only at login; the only mutation is blocking. Rows are never deleted.
    """

    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True)
    username = Column(String(255), ForeignKey("users.username"), nullable=False, index=True)
    refresh_token = Column(Text, nullable=False)
    user_agent = Column(String(512), nullable=False, default="")
    client_ip = Column(String(64), nullable=False, default="")
    is_blocked = Column(Boolean, nullable=False, default=False)
    blocked_at = Column(UTCDateTime, nullable=True)
    expired_at = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
