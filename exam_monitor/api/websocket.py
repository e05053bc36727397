from __future__ import annotations

from fastapi import APIRouter, Depends, WebSocket

from exam_monitor.dependencies import get_connection_handler
from exam_monitor.services.handler import ConnectionHandler

router = APIRouter(tags=["websocket"])


@router.websocket("/")
@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    handler: ConnectionHandler = Depends(get_connection_handler),
):
    # Session id travels as ?id=...; the handler rejects connections without one.
    await handler.handle(websocket)
