"""
Persistence contract used by the handlers and its SQLAlchemy implementation.

Driver errors never leave this module: missing rows become NoRowError, unique
constraint violations (SQLSTATE 23505) become UniqueViolationError and any other
database failure becomes StoreError.
"""

import logging
import secrets
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from posada.core.errors import NoRowError, StoreError, UniqueViolationError
from posada.models import Role, Session, User

logger = logging.getLogger(__name__)

PG_UNIQUE_VIOLATION = "23505"
ROLE_EXTERNAL_ID_PREFIX = "URE"


@dataclass(frozen=True)
class CreateSessionParams:
    id: uuid.UUID
    username: str
    refresh_token: str
    user_agent: str
    client_ip: str
    is_blocked: bool
    expired_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class CreateUserParams:
    username: str
    hashed_password: str
    full_name: str
    email: str
    role_id: uuid.UUID


@dataclass(frozen=True)
class UpdateUserParams:
    """None means "keep the current value"."""

    username: str
    hashed_password: str | None = None
    password_changed_at: datetime | None = None
    full_name: str | None = None
    email: str | None = None


class Store(Protocol):
    """Operations the API depends on. Tests substitute a mock for this interface."""

    def get_user(self, username: str) -> User: ...

    def create_user(self, params: CreateUserParams) -> User: ...

    def update_user(self, params: UpdateUserParams) -> User: ...

    def delete_user(self, username: str, deleted_at: datetime) -> User: ...

    def list_users_by_role(self, role_name: str, limit: int, offset: int) -> list[User]: ...

    def get_role_by_name(self, name: str) -> Role: ...

    def get_role(self, external_id: str) -> Role: ...

    def list_roles(self, limit: int, offset: int) -> list[Role]: ...

    def create_role(self, name: str, description: str) -> Role: ...

    def update_role(
        self,
        external_id: str,
        name: str | None,
        description: str | None,
        updated_at: datetime,
    ) -> Role: ...

    def delete_role(self, external_id: str) -> Role: ...

    def create_session(self, params: CreateSessionParams) -> Session: ...

    def get_session(self, session_id: uuid.UUID) -> Session: ...

    def block_session(self, session_id: uuid.UUID, blocked_at: datetime) -> Session: ...


def _is_unique_violation(e: IntegrityError) -> bool:
    orig = e.orig
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    # SQLite reports the violation only in its message.
    return "UNIQUE constraint failed" in str(orig)


def new_role_external_id() -> str:
    return f"{ROLE_EXTERNAL_ID_PREFIX}{secrets.token_hex(4).upper()}"


class SQLStore:
    """Store backed by one SQLAlchemy session (one per request)."""

    def __init__(self, db: DBSession) -> None:
        self.db = db

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except NoResultFound as e:
            self.db.rollback()
            raise NoRowError() from e
        except IntegrityError as e:
            self.db.rollback()
            if _is_unique_violation(e):
                raise UniqueViolationError() from e
            logger.error("Store integrity error", extra={"operation": operation})
            raise StoreError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Store operation failed",
                extra={"operation": operation, "error": str(e)[:500]},
            )
            raise StoreError() from e

    # users

    def _user(self, username: str) -> User:
        return self.db.execute(
            select(User).where(User.username == username)
        ).unique().scalar_one()

    def get_user(self, username: str) -> User:
        with self._errors("get_user"):
            return self._user(username)

    def create_user(self, params: CreateUserParams) -> User:
        with self._errors("create_user"):
            user = User(
                username=params.username,
                hashed_password=params.hashed_password,
                full_name=params.full_name,
                email=params.email,
                role_id=params.role_id,
            )
            self.db.add(user)
            self.db.commit()
            return self._user(params.username)

    def update_user(self, params: UpdateUserParams) -> User:
        with self._errors("update_user"):
            user = self._user(params.username)
            if params.hashed_password is not None:
                user.hashed_password = params.hashed_password
            if params.password_changed_at is not None:
                user.password_changed_at = params.password_changed_at
            if params.full_name is not None:
                user.full_name = params.full_name
            if params.email is not None:
                user.email = params.email
            self.db.commit()
            return user

    def delete_user(self, username: str, deleted_at: datetime) -> User:
        """Soft-delete: the row stays, flagged as deleted."""
        with self._errors("delete_user"):
            user = self._user(username)
            user.is_deleted = True
            user.deleted_at = deleted_at
            self.db.commit()
            return user

    def list_users_by_role(self, role_name: str, limit: int, offset: int) -> list[User]:
        with self._errors("list_users_by_role"):
            stmt = (
                select(User)
                .join(User.role)
                .where(Role.name == role_name, User.is_deleted.is_(False))
                .order_by(User.created_at, User.username)
                .limit(limit)
                .offset(offset)
            )
            return list(self.db.execute(stmt).unique().scalars().all())

    # roles

    def get_role_by_name(self, name: str) -> Role:
        with self._errors("get_role_by_name"):
            return self.db.execute(select(Role).where(Role.name == name)).scalar_one()

    def get_role(self, external_id: str) -> Role:
        with self._errors("get_role"):
            return self.db.execute(
                select(Role).where(Role.external_id == external_id)
            ).scalar_one()

    def list_roles(self, limit: int, offset: int) -> list[Role]:
        with self._errors("list_roles"):
            stmt = select(Role).order_by(Role.created_at, Role.name).limit(limit).offset(offset)
            return list(self.db.execute(stmt).scalars().all())

    def create_role(self, name: str, description: str) -> Role:
        with self._errors("create_role"):
            role = Role(
                name=name,
                description=description,
                external_id=new_role_external_id(),
            )
            self.db.add(role)
            self.db.commit()
            return role

    def update_role(
        self,
        external_id: str,
        name: str | None,
        description: str | None,
        updated_at: datetime,
    ) -> Role:
        with self._errors("update_role"):
            role = self.db.execute(
                select(Role).where(Role.external_id == external_id)
            ).scalar_one()
            if name is not None:
                role.name = name
            if description is not None:
                role.description = description
            role.updated_at = updated_at
            self.db.commit()
            return role

    def delete_role(self, external_id: str) -> Role:
        with self._errors("delete_role"):
            role = self.db.execute(
                select(Role).where(Role.external_id == external_id)
            ).scalar_one()
            self.db.delete(role)
            self.db.commit()
            return role

    # sessions

    def create_session(self, params: CreateSessionParams) -> Session:
        with self._errors("create_session"):
            session = Session(
                id=params.id,
                username=params.username,
                refresh_token=params.refresh_token,
                user_agent=params.user_agent,
                client_ip=params.client_ip,
                is_blocked=params.is_blocked,
                expired_at=params.expired_at,
                created_at=params.created_at,
            )
            self.db.add(session)
            self.db.commit()
            return session

    def get_session(self, session_id: uuid.UUID) -> Session:
        with self._errors("get_session"):
            return self.db.execute(
                select(Session).where(Session.id == session_id)
            ).scalar_one()

    def block_session(self, session_id: uuid.UUID, blocked_at: datetime) -> Session:
        with self._errors("block_session"):
            session = self.db.execute(
                select(Session).where(Session.id == session_id)
            ).scalar_one()
            session.is_blocked = True
            session.blocked_at = blocked_at
            self.db.commit()
            return session
