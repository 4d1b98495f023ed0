"""SQLAlchemy ORM models."""

from posada.models.base import Base
from posada.models.role import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ROOT, Role
from posada.models.session import Session
from posada.models.user import User

__all__ = [
    "Base",
    "ROLE_ADMIN",
    "ROLE_CUSTOMER",
    "ROLE_ROOT",
    "Role",
    "Session",
    "User",
]
