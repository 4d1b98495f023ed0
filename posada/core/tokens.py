"""Bearer token issuance and verification (HS256 JWT signed with the symmetric key)."""

import math
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import jwt
from pydantic import BaseModel, ConfigDict, ValidationError

from posada.core.config import MIN_SYMMETRIC_KEY_LEN

JWT_ALGORITHM = "HS256"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def _whole_seconds(duration: timedelta) -> timedelta:
    """Round duration up to whole seconds so the window never collapses to zero."""
    return timedelta(seconds=math.ceil(duration.total_seconds()))


class InvalidKeyError(ValueError):
    """Raised when the symmetric key cannot be used to sign tokens."""


class InvalidTokenError(Exception):
    """Token signature, structure or claims are not valid."""

    def __init__(self, message: str = "token is invalid") -> None:
        super().__init__(message)
        self.message = message


class ExpiredTokenError(InvalidTokenError):
    """Token authenticated correctly but its validity window has passed."""

    def __init__(self, message: str = "token has expired") -> None:
        super().__init__(message)


class RoleClaim(BaseModel):
    """Role snapshot embedded in a token."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    name: str
    external_id: str


class Payload(BaseModel):
    """Claims carried by access and refresh tokens alike."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    username: str
    role: RoleClaim
    issued_at: datetime
    expired_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expired_at


class Maker(Protocol):
    """Capability interface for issuing and verifying tokens."""

    def create_token(
        self, username: str, role: Any, duration: timedelta
    ) -> tuple[str, Payload]: ...

    def verify_token(self, token: str) -> Payload: ...


class JWTMaker:
    """
    Symmetric token maker. Tokens are self-contained: verification needs no store lookup.

    The key is read-only after construction and the clock is injectable so
    validity windows can be tested against a fixed instant.
    """

    def __init__(self, symmetric_key: str, clock: Clock = utcnow) -> None:
        if not symmetric_key or len(symmetric_key) < MIN_SYMMETRIC_KEY_LEN:
            raise InvalidKeyError(
                f"invalid key size: must be at least {MIN_SYMMETRIC_KEY_LEN} characters"
            )
        self._key = symmetric_key
        self._clock = clock

    def create_token(
        self, username: str, role: Any, duration: timedelta
    ) -> tuple[str, Payload]:
        """Issue a token for username with an embedded role snapshot, valid for duration."""
        # JWT timestamps have one-second resolution; keep the payload identical to what decodes.
        now = self._clock().replace(microsecond=0)
        duration = _whole_seconds(duration)
        payload = Payload(
            id=uuid.uuid4(),
            username=username,
            role=RoleClaim.model_validate(role),
            issued_at=now,
            expired_at=now + duration,
        )
        claims: dict[str, Any] = {
            "jti": str(payload.id),
            "sub": payload.username,
            "role": payload.role.model_dump(),
            "iat": payload.issued_at,
            "exp": payload.expired_at,
        }
        token = jwt.encode(claims, self._key, algorithm=JWT_ALGORITHM)
        return token, payload

    def verify_token(self, token: str) -> Payload:
        """
        Authenticate token and return its payload.
        Raises InvalidTokenError on a bad signature or shape, ExpiredTokenError once expired.
        """
        try:
            claims = jwt.decode(
                token,
                self._key,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["jti", "sub", "role", "iat", "exp"],
                },
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e

        try:
            payload = Payload(
                id=claims["jti"],
                username=claims["sub"],
                role=claims["role"],
                issued_at=datetime.fromtimestamp(claims["iat"], UTC),
                expired_at=datetime.fromtimestamp(claims["exp"], UTC),
            )
        except (ValidationError, TypeError, ValueError, OverflowError) as e:
            raise InvalidTokenError() from e

        if payload.is_expired(self._clock()):
            raise ExpiredTokenError()
        return payload
