"""Session administration: block a refresh session so it can no longer renew tokens."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends

from posada.api.v1.auth import get_clock, get_store
from posada.core.tokens import Clock
from posada.schemas.auth import SessionResponse
from posada.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{session_id}/block", response_model=SessionResponse)
def block_session(
    session_id: uuid.UUID,
    store: Annotated[Store, Depends(get_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> SessionResponse:
    """Block the session; the next renewal with its refresh token fails."""
    session = store.block_session(session_id, clock())
    logger.info(
        "Session blocked",
        extra={"session_id": str(session.id), "username": session.username},
    )
    return SessionResponse.model_validate(session)
