"""Auth dependencies: app-state accessors, bearer authentication and role gating."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from posada.core.config import Config
from posada.core.database import get_db
from posada.core.errors import (
    AppError,
    AuthHeaderMalformedError,
    AuthHeaderMissingError,
    AuthSchemeUnsupportedError,
    ForbiddenRoleError,
    VerifyTokenError,
)
from posada.core.tokens import Clock, InvalidTokenError, Maker, Payload
from posada.services.store import SQLStore, Store

logger = logging.getLogger(__name__)


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_token_maker(request: Request) -> Maker:
    return request.app.state.token_maker


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_store(db: Annotated[Session, Depends(get_db)]) -> Store:
    """Dependency: store bound to the request's DB session."""
    return SQLStore(db)


def authenticate(
    request: Request,
    config: Annotated[Config, Depends(get_config)],
    maker: Annotated[Maker, Depends(get_token_maker)],
    store: Annotated[Store, Depends(get_store)],
) -> Payload:
    """
    Dependency: require a valid "<scheme> <token>" header for an existing, non-deleted user.

    On success the verified payload is attached to request.state under the
    configured payload key and also returned.
    """
    header = request.headers.get(config.authorization_header_key, "").strip()
    if not header:
        raise AuthHeaderMissingError()

    fields = header.split()
    if len(fields) < 2:
        raise AuthHeaderMalformedError()

    scheme = fields[0].lower()
    if scheme != config.authorization_type_bearer:
        raise AuthSchemeUnsupportedError(scheme)

    try:
        payload = maker.verify_token(fields[1])
    except InvalidTokenError as e:
        raise VerifyTokenError(e.message) from e

    try:
        user = store.get_user(payload.username)
    except AppError as e:
        raise VerifyTokenError(e.message) from e

    if user.is_deleted:
        raise VerifyTokenError("token is invalid. User does not exist")

    setattr(request.state, config.authorization_payload_key, payload)
    return payload


def get_current_payload(
    request: Request,
    config: Annotated[Config, Depends(get_config)],
) -> Payload:
    """Dependency: payload attached by authenticate. Raises 401 when it is missing."""
    payload = getattr(request.state, config.authorization_payload_key, None)
    if not isinstance(payload, Payload):
        raise VerifyTokenError("authentication data is required")
    return payload


def require_role(role: str) -> Callable[..., Payload]:
    """Dependency factory: let the request through only when the token's role is role."""

    def dependency(
        request: Request,
        config: Annotated[Config, Depends(get_config)],
    ) -> Payload:
        payload = getattr(request.state, config.authorization_payload_key, None)
        if not isinstance(payload, Payload) or payload.role.name != role:
            logger.info(
                "Role check failed",
                extra={"required_role": role, "path": request.url.path},
            )
            raise ForbiddenRoleError(role)
        return payload

    dependency.__name__ = f"require_{role}"
    return dependency
