"""Error taxonomy: every failure the API reports, each with a fixed HTTP status."""

from fastapi import status


class AppError(Exception):
    """Base for classified failures; the response mapper turns these into bodies."""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "an error occurs"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NoRowError(AppError):
    kind = "no_row"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "no row was returned"


class UniqueViolationError(AppError):
    kind = "unique_violation"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "identifier must be unique"


class PasswordMismatchError(AppError):
    kind = "password_mismatch"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "password mismatch"


class VerifyTokenError(AppError):
    kind = "verify_token"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "token could not be verified"


class AuthHeaderMissingError(AppError):
    kind = "auth_header_missing"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "authorization header is not provided"


class AuthHeaderMalformedError(AppError):
    kind = "auth_header_malformed"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "invalid authorization header format"


class AuthSchemeUnsupportedError(AppError):
    kind = "auth_scheme_unsupported"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f"unsupported authorization type {scheme}")


class BlockedSessionError(AppError):
    kind = "blocked_session"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "blocked session"


class WrongUserSessionError(AppError):
    kind = "wrong_user_session"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "incorrect session user"


class WrongSessionTokenError(AppError):
    kind = "wrong_session_token"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "mismatched session token"


class ExpiredSessionError(AppError):
    kind = "expired_session"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "expired session"


class SessionError(AppError):
    kind = "session"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "session could not be processed"


class TokenCreationError(AppError):
    kind = "token_creation"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "token could not be created"


class ForbiddenRoleError(AppError):
    kind = "forbidden_role"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Only {role} is allowed to perform this action")


class InternalError(AppError):
    kind = "internal"


class StoreError(InternalError):
    """Unexpected persistence failure (connection, driver, constraint other than unique)."""

    default_message = "store operation failed"
