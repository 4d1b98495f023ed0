"""Liveness route for load balancers; reports whether the database answers."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from posada.api.v1.auth import get_config
from posada.core.config import Config
from posada.core.database import check_db_connected, get_db
from posada.schemas.health import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    config: Annotated[Config, Depends(get_config)],
) -> HealthResponse:
    database = "up" if check_db_connected(db) else "down"
    if database == "down":
        logger.warning("Health check: database unreachable", extra={"env": config.name})
    return HealthResponse(
        version=request.app.version,
        environment=config.name,
        database=database,
    )
