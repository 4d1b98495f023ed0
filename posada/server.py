"""
Process bootstrap: load config, check the database, migrate, build the token maker, serve.

  python -m posada

Any failure before the server starts is fatal and exits non-zero.
"""

import logging
import sys

import uvicorn
from alembic import command
from alembic.config import Config as AlembicConfig
from dotenv import load_dotenv

from posada.core.config import Config, ConfigError, get_settings, load_config
from posada.core.database import check_db_connected, create_db_engine, create_session_factory
from posada.core.tokens import InvalidKeyError, JWTMaker
from posada.main import create_app

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def run_migrations(config: Config) -> None:
    """Upgrade the database to the latest alembic revision."""
    alembic_cfg = AlembicConfig()
    alembic_cfg.set_main_option("script_location", config.migration_url)
    alembic_cfg.set_main_option("sqlalchemy.url", config.db_source)
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migration completed")


def main() -> int:
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    try:
        config = load_config(settings.POSADA_CONFIG_PATH, settings.POSADA_ENV)
    except ConfigError as e:
        logger.error("Cannot load config: %s", e.message)
        return 1

    engine = create_db_engine(config.db_source)
    session_factory = create_session_factory(engine)
    db = session_factory()
    try:
        if not check_db_connected(db):
            logger.error("Could not connect to the database")
            return 1
    finally:
        db.close()

    try:
        run_migrations(config)
    except Exception as e:
        logger.exception("Failed to run migrations: %s", e)
        return 1

    try:
        token_maker = JWTMaker(config.token_symmetric_key)
    except InvalidKeyError as e:
        logger.error("Cannot create token maker: %s", e)
        return 1

    app = create_app(config, token_maker=token_maker, session_factory=session_factory)
    logger.info(
        "Starting server",
        extra={"environment": config.name, "address": config.http_server_address},
    )
    uvicorn.run(app, host=config.server_host, port=config.server_port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
