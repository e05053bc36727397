"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from exam_monitor.api.status import router as status_router
from exam_monitor.api.visit import router as visit_router
from exam_monitor.api.websocket import router as websocket_router

api_router = APIRouter()
api_router.include_router(status_router)
api_router.include_router(visit_router)
api_router.include_router(websocket_router)
