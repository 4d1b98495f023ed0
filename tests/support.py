"""Shared builders for the test modules: config, fixed clock, rows, and app wiring."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from posada.api.v1.auth import get_store
from posada.core.config import Config
from posada.core.database import create_session_factory
from posada.core.security import hash_password
from posada.core.tokens import JWTMaker
from posada.main import create_app
from posada.models import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ROOT, Base, Role, Session, User

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)
ACCESS_DURATION = timedelta(minutes=15)
REFRESH_DURATION = timedelta(hours=24)
SYMMETRIC_KEY = "12345678901234567890123456789012"
TEST_BCRYPT_ROUNDS = 4


def fixed_clock(instant: datetime = T0):
    return lambda: instant


def make_config(**overrides: object) -> Config:
    values: dict[str, object] = {
        "name": "test",
        "db_driver": "sqlite",
        "db_source": "sqlite://",
        "migration_url": "alembic",
        "http_server_address": "127.0.0.1:8080",
        "token_symmetric_key": SYMMETRIC_KEY,
        "access_token_duration": ACCESS_DURATION,
        "refresh_token_duration": REFRESH_DURATION,
        "default_role": ROLE_CUSTOMER,
        "authorization_header_key": "authorization",
        "authorization_type_bearer": "bearer",
        "authorization_payload_key": "authorization_payload",
    }
    values.update(overrides)
    return Config.model_validate(values)


def make_role(name: str = ROLE_ADMIN, external_id: str = "URE101") -> Role:
    return Role(
        internal_id=uuid.uuid4(),
        external_id=external_id,
        name=name,
        description=f"{name} role",
        created_at=T0,
        updated_at=T0,
    )


def make_user(
    username: str = "alice",
    password: str = "lexy84",
    role: Role | None = None,
    is_deleted: bool = False,
) -> User:
    role = role or make_role()
    return User(
        username=username,
        hashed_password=hash_password(password, rounds=TEST_BCRYPT_ROUNDS),
        full_name=f"{username.title()} Example",
        email=f"{username}@example.com",
        password_changed_at=T0,
        created_at=T0,
        role_id=role.internal_id,
        role=role,
        is_deleted=is_deleted,
        deleted_at=T0 if is_deleted else None,
    )


def make_session(user: User, refresh_token: str, session_id: uuid.UUID | None = None) -> Session:
    return Session(
        id=session_id or uuid.uuid4(),
        username=user.username,
        refresh_token=refresh_token,
        user_agent="testclient",
        client_ip="127.0.0.1",
        is_blocked=False,
        blocked_at=None,
        expired_at=T0 + REFRESH_DURATION,
        created_at=T0,
    )


def mocked_client(store: MagicMock, clock=None) -> tuple[TestClient, JWTMaker]:
    """App whose store is the given mock; returns the client and the app's token maker."""
    clock = clock or fixed_clock()
    maker = JWTMaker(SYMMETRIC_KEY, clock=clock)
    app = create_app(
        make_config(),
        token_maker=maker,
        clock=clock,
        session_factory=MagicMock(),
    )
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app), maker


def bearer(maker: JWTMaker, user: User, duration: timedelta = ACCESS_DURATION) -> dict[str, str]:
    token, _ = maker.create_token(user.username, user.role, duration)
    return {"authorization": f"bearer {token}"}


def sqlite_engine() -> Engine:
    """In-memory SQLite shared across threads, with the schema and built-in roles."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    db = create_session_factory(engine)()
    try:
        for i, name in enumerate((ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ROOT), start=101):
            db.add(
                Role(
                    name=name,
                    description=f"{name} role",
                    external_id=f"URE{i}",
                    created_at=T0,
                    updated_at=T0,
                )
            )
        db.commit()
    finally:
        db.close()
    return engine


def sqlite_client(engine: Engine, clock=None) -> tuple[TestClient, JWTMaker]:
    """App wired to a real SQLStore over the given SQLite engine."""
    clock = clock or fixed_clock()
    maker = JWTMaker(SYMMETRIC_KEY, clock=clock)
    app = create_app(
        make_config(),
        token_maker=maker,
        clock=clock,
        session_factory=create_session_factory(engine),
    )
    return TestClient(app), maker


def error_messages(response) -> list[str]:
    return [item["msg"] for item in response.json()["errors"]]
