"""ORM model for roles (the names compared by authorization)."""

import uuid

from sqlalchemy import Column, String, Text, Uuid

from posada.models.base import Base, UTCDateTime, utcnow

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLE_ROOT = "root"


class Role(Base):
    """
    Role assigned to every user.

    internal_id is the private key used by foreign keys; external_id is the
    identifier exposed over the API.
    """

    __tablename__ = "roles"

    internal_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id = Column(String(32), nullable=False, unique=True, index=True)
    name = Column(String(64), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)
