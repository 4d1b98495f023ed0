"""Request/response schemas for user endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from posada.core.security import PASSWORD_MIN_LEN
from posada.schemas.common import ALPHANUM_PATTERN, AlphaNum
from posada.schemas.role import RoleResponse


class CreateUserRequest(BaseModel):
    username: AlphaNum
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, pattern=ALPHANUM_PATTERN)
    full_name: str = Field(..., min_length=1)
    email: EmailStr


class UpdateUserRequest(BaseModel):
    """Fields to change on the caller's account; blank or missing fields are kept."""

    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, pattern=ALPHANUM_PATTERN
    )
    full_name: str | None = None
    email: EmailStr | None = None


class UserResponse(BaseModel):
    """User as returned to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    username: str
    full_name: str
    email: str
    password_changed_at: datetime
    created_at: datetime
    role: RoleResponse
