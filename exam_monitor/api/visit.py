from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from exam_monitor.dependencies import get_registry
from exam_monitor.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["visit"])


@router.api_route("/visit", methods=["GET", "POST"], response_class=PlainTextResponse)
async def record_visit(
    session_id: str = Query(default="", alias="id"),
    registry: SessionRegistry = Depends(get_registry),
):
    """Record a page load for a session that has not connected yet."""
    session_id = session_id or "unknown"
    if registry.record_visit(session_id):
        logger.info("Session %s visited the page", session_id)
    else:
        logger.debug("Visit from session %s ignored, already connected", session_id)
    return "Visit recorded"
