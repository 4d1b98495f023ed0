"""Request/response schemas for login, token renewal and sessions."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from posada.core.security import PASSWORD_MIN_LEN
from posada.schemas.common import ALPHANUM_PATTERN, AlphaNum
from posada.schemas.users import UserResponse


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: AlphaNum
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, pattern=ALPHANUM_PATTERN)


class LoginResponse(BaseModel):
    """Access and refresh tokens issued at login plus the session they are bound to."""

    session_id: uuid.UUID
    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    user: UserResponse


class RenewAccessTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class RenewAccessTokenResponse(BaseModel):
    access_token: str
    access_token_expires_at: datetime


class SessionResponse(BaseModel):
    """Session state for administrators; the refresh token itself is not echoed."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    user_agent: str
    client_ip: str
    is_blocked: bool
    blocked_at: datetime | None
    expired_at: datetime
    created_at: datetime
