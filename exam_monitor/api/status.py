from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from exam_monitor.dependencies import get_registry, get_sweeper
from exam_monitor.schemas.status import StatusRead
from exam_monitor.services.registry import SessionRegistry
from exam_monitor.services.sweeper import LivenessSweeper

_static_dir = Path(__file__).resolve().parent.parent / "static"

router = APIRouter(tags=["status"])


@router.get("/")
async def status_page():
    return FileResponse(str(_static_dir / "index.html"))


@router.get("/api/status", response_model=StatusRead)
async def get_status(
    registry: SessionRegistry = Depends(get_registry),
    sweeper: LivenessSweeper = Depends(get_sweeper),
):
    return StatusRead(
        live_connections=registry.connection_count,
        pending_visits=registry.visit_count,
        sweep_interval_ms=round(sweeper.interval * 1000),
        visit_expiry_ms=round(sweeper.visit_expiry * 1000),
        sweeper_running=sweeper.running,
    )
