"""User endpoints: registration, login, and the authenticated user routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request

from posada.api.v1.auth import (
    get_clock,
    get_config,
    get_current_payload,
    get_store,
    get_token_maker,
)
from posada.core.config import Config
from posada.core.errors import AppError, InternalError, NoRowError
from posada.core.security import PasswordTooLongError, hash_password
from posada.core.tokens import Clock, Maker, Payload
from posada.models import ROLE_ADMIN, ROLE_CUSTOMER, User
from posada.schemas.auth import LoginRequest, LoginResponse
from posada.schemas.common import ALPHANUM_PATTERN, ListRequest
from posada.schemas.users import CreateUserRequest, UpdateUserRequest, UserResponse
from posada.services.auth import login_user
from posada.services.store import CreateUserParams, Store, UpdateUserParams

logger = logging.getLogger(__name__)

router = APIRouter()
self_router = APIRouter()
admin_router = APIRouter()
root_router = APIRouter()

UsernamePath = Annotated[str, Path(pattern=ALPHANUM_PATTERN)]


def _hash(password: str) -> str:
    try:
        return hash_password(password)
    except PasswordTooLongError as e:
        raise InternalError(str(e)) from e


def _load_user(store: Store, username: str) -> User:
    try:
        return store.get_user(username)
    except NoRowError:
        raise
    except AppError as e:
        raise InternalError() from e


@router.post("", response_model=UserResponse)
def create_user(
    body: CreateUserRequest,
    store: Annotated[Store, Depends(get_store)],
    config: Annotated[Config, Depends(get_config)],
) -> UserResponse:
    """Register a user with the configured default role."""
    hashed_password = _hash(body.password)
    role = store.get_role_by_name(config.default_role)
    user = store.create_user(
        CreateUserParams(
            username=body.username,
            hashed_password=hashed_password,
            full_name=body.full_name,
            email=body.email,
            role_id=role.internal_id,
        )
    )
    logger.info("User created", extra={"username": user.username, "role": role.name})
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    store: Annotated[Store, Depends(get_store)],
    maker: Annotated[Maker, Depends(get_token_maker)],
    config: Annotated[Config, Depends(get_config)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns access and refresh tokens.
    Include the access token in the Authorization header as: bearer <access_token>
    """
    result = login_user(
        store,
        maker,
        config,
        clock,
        username=body.username,
        password=body.password,
        user_agent=request.headers.get("user-agent", ""),
        client_ip=request.client.host if request.client else "",
    )
    return LoginResponse(
        session_id=result.session.id,
        access_token=result.access_token,
        access_token_expires_at=result.access_payload.expired_at,
        refresh_token=result.refresh_token,
        refresh_token_expires_at=result.refresh_payload.expired_at,
        user=UserResponse.model_validate(result.user),
    )


@self_router.get("/users/info", response_model=UserResponse)
def get_user_info(
    payload: Annotated[Payload, Depends(get_current_payload)],
    store: Annotated[Store, Depends(get_store)],
) -> UserResponse:
    """Return the authenticated caller."""
    return UserResponse.model_validate(_load_user(store, payload.username))


@self_router.put("/users", response_model=UserResponse)
def update_user(
    body: UpdateUserRequest,
    payload: Annotated[Payload, Depends(get_current_payload)],
    store: Annotated[Store, Depends(get_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> UserResponse:
    """Update the caller's full name, email and/or password."""
    hashed_password = None
    password_changed_at = None
    if body.password and body.password.strip():
        hashed_password = _hash(body.password)
        password_changed_at = clock()

    params = UpdateUserParams(
        username=payload.username,
        hashed_password=hashed_password,
        password_changed_at=password_changed_at,
        full_name=body.full_name if body.full_name and body.full_name.strip() else None,
        email=body.email or None,
    )
    try:
        user = store.update_user(params)
    except NoRowError:
        raise
    except AppError as e:
        raise InternalError() from e
    return UserResponse.model_validate(user)


@admin_router.get("/users/{username}", response_model=UserResponse)
def get_user(
    username: UsernamePath,
    store: Annotated[Store, Depends(get_store)],
) -> UserResponse:
    return UserResponse.model_validate(_load_user(store, username))


@admin_router.delete("/users/{username}", response_model=UserResponse)
def delete_user(
    username: UsernamePath,
    store: Annotated[Store, Depends(get_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> UserResponse:
    """Soft-delete a user; their tokens stop authenticating immediately."""
    try:
        user = store.delete_user(username, clock())
    except NoRowError:
        raise
    except AppError as e:
        raise InternalError() from e
    logger.info("User deleted", extra={"username": username})
    return UserResponse.model_validate(user)


def _list_users(store: Store, role_name: str, body: ListRequest) -> list[UserResponse]:
    try:
        users = store.list_users_by_role(role_name, body.limit, body.offset)
    except AppError as e:
        raise InternalError() from e
    if not users:
        raise NoRowError(f"no {role_name} users were found")
    return [UserResponse.model_validate(u) for u in users]


@admin_router.post("/users/all/customer", response_model=list[UserResponse])
def list_customers(
    body: ListRequest,
    store: Annotated[Store, Depends(get_store)],
) -> list[UserResponse]:
    return _list_users(store, ROLE_CUSTOMER, body)


@root_router.post("/users/all/admin", response_model=list[UserResponse])
def list_admins(
    body: ListRequest,
    store: Annotated[Store, Depends(get_store)],
) -> list[UserResponse]:
    return _list_users(store, ROLE_ADMIN, body)
