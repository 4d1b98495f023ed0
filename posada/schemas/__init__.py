"""Pydantic request/response schemas."""

from posada.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RenewAccessTokenRequest,
    RenewAccessTokenResponse,
    SessionResponse,
)
from posada.schemas.common import ListRequest
from posada.schemas.errors import ErrorItem, ErrorResponse
from posada.schemas.health import HealthResponse
from posada.schemas.role import CreateRoleRequest, RoleResponse, UpdateRoleRequest
from posada.schemas.users import CreateUserRequest, UpdateUserRequest, UserResponse

__all__ = [
    "CreateRoleRequest",
    "CreateUserRequest",
    "ErrorItem",
    "ErrorResponse",
    "HealthResponse",
    "ListRequest",
    "LoginRequest",
    "LoginResponse",
    "RenewAccessTokenRequest",
    "RenewAccessTokenResponse",
    "RoleResponse",
    "SessionResponse",
    "UpdateRoleRequest",
    "UpdateUserRequest",
    "UserResponse",
]
