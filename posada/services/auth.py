"""Login and access-token renewal: the refresh-session lifecycle."""

import logging
from dataclasses import dataclass
from datetime import datetime

from posada.core.config import Config
from posada.core.errors import (
    AppError,
    BlockedSessionError,
    ExpiredSessionError,
    InternalError,
    NoRowError,
    PasswordMismatchError,
    SessionError,
    TokenCreationError,
    VerifyTokenError,
    WrongSessionTokenError,
    WrongUserSessionError,
)
from posada.core.security import verify_password
from posada.core.tokens import Clock, InvalidTokenError, Maker, Payload
from posada.models import Session, User
from posada.services.store import CreateSessionParams, Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    session: Session
    user: User
    access_token: str
    access_payload: Payload
    refresh_token: str
    refresh_payload: Payload


@dataclass(frozen=True)
class RenewResult:
    access_token: str
    access_payload: Payload


def _issue(maker: Maker, username: str, role, duration) -> tuple[str, Payload]:
    try:
        return maker.create_token(username, role, duration)
    except Exception as e:
        raise TokenCreationError() from e


def login_user(
    store: Store,
    maker: Maker,
    config: Config,
    clock: Clock,
    username: str,
    password: str,
    user_agent: str,
    client_ip: str,
) -> LoginResult:
    """
    Check credentials, issue access and refresh tokens and persist the session.

    The refresh token's id becomes the session id, so the token alone locates
    its session at renewal time.
    """
    try:
        user = store.get_user(username)
    except NoRowError:
        raise
    except AppError as e:
        raise InternalError() from e
    if user.is_deleted:
        raise NoRowError()

    if not verify_password(password, user.hashed_password):
        raise PasswordMismatchError()

    access_token, access_payload = _issue(
        maker, user.username, user.role, config.access_token_duration
    )
    refresh_token, refresh_payload = _issue(
        maker, user.username, user.role, config.refresh_token_duration
    )

    try:
        session = store.create_session(
            CreateSessionParams(
                id=refresh_payload.id,
                username=user.username,
                refresh_token=refresh_token,
                user_agent=user_agent,
                client_ip=client_ip,
                is_blocked=False,
                expired_at=refresh_payload.expired_at,
                created_at=clock(),
            )
        )
    except AppError as e:
        raise SessionError() from e

    logger.info(
        "Login succeeded",
        extra={"username": user.username, "session_id": str(session.id)},
    )
    return LoginResult(
        session=session,
        user=user,
        access_token=access_token,
        access_payload=access_payload,
        refresh_token=refresh_token,
        refresh_payload=refresh_payload,
    )


def renew_access_token(
    store: Store,
    maker: Maker,
    config: Config,
    clock: Clock,
    refresh_token: str,
) -> RenewResult:
    """
    Exchange a refresh token for a new access token.

    The referenced session must exist, be unblocked, belong to the token's user,
    hold exactly this token and not be expired. The session is only read, and
    the refresh token is not rotated.
    """
    try:
        payload = maker.verify_token(refresh_token)
    except InvalidTokenError as e:
        raise VerifyTokenError(e.message) from e

    try:
        session = store.get_session(payload.id)
    except NoRowError:
        raise
    except AppError as e:
        raise SessionError() from e

    check_session(session, payload, refresh_token, clock())

    access_token, access_payload = _issue(
        maker, payload.username, payload.role, config.access_token_duration
    )
    logger.info(
        "Access token renewed",
        extra={"username": payload.username, "session_id": str(session.id)},
    )
    return RenewResult(access_token=access_token, access_payload=access_payload)


def check_session(
    session: Session, payload: Payload, refresh_token: str, now: datetime
) -> None:
    """Raise the first failing session check, in a fixed order."""
    if session.is_blocked:
        raise BlockedSessionError()
    if session.username != payload.username:
        raise WrongUserSessionError()
    if session.refresh_token != refresh_token:
        raise WrongSessionTokenError()
    if not now < session.expired_at:
        raise ExpiredSessionError()
