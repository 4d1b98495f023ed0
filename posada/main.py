"""FastAPI application factory. No business logic; only wiring and middleware."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from posada.api.errors import register_exception_handlers
from posada.api.v1 import router as v1_router
from posada.core.config import Config, get_config
from posada.core.database import create_db_engine, create_session_factory
from posada.core.tokens import Clock, JWTMaker, Maker, utcnow

API_V1_PREFIX = "/api/v1"


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def create_app(
    config: Config | None = None,
    token_maker: Maker | None = None,
    clock: Clock = utcnow,
    session_factory: sessionmaker[Session] | None = None,
) -> FastAPI:
    """
    Build the API. Config, token maker and clock are constructed once and stay
    read-only on app.state for the life of the process.

    Run with: uvicorn --factory posada.main:create_app
    """
    config = config or get_config()
    if token_maker is None:
        token_maker = JWTMaker(config.token_symmetric_key, clock=clock)
    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(config.db_source))

    app = FastAPI(
        title="Posada API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.config = config
    app.state.token_maker = token_maker
    app.state.clock = clock
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_split(config.access_control_allow_origin),
        allow_credentials=True,
        allow_methods=_split(config.access_control_allow_methods),
        allow_headers=_split(config.access_control_allow_headers),
    )
    register_exception_handlers(app)
    app.include_router(v1_router, prefix=API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Posada API"}

    return app
